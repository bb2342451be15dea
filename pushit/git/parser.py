"""Parsers for `git status --short` and `git diff --numstat` output."""

from dataclasses import dataclass
from enum import Enum


class FileStatusKind(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"


STATUS_CODES = {
    'A': FileStatusKind.ADDED,
    'M': FileStatusKind.MODIFIED,
    'D': FileStatusKind.DELETED,
    'R': FileStatusKind.RENAMED,
    'C': FileStatusKind.COPIED,
}

UNTRACKED = '?'
RENAME_SEPARATOR = ' -> '


@dataclass(frozen=True)
class FileStatus:
    """One changed path. old_path is set only for renames and copies."""
    path: str
    status: FileStatusKind
    old_path: str | None = None

    @property
    def code(self) -> str:
        return self.status.value[0].upper()


@dataclass(frozen=True)
class FileDiffStats:
    path: str
    insertions: int
    deletions: int

    @property
    def total_changes(self) -> int:
        return self.insertions + self.deletions


def parse_status(raw: str) -> list[FileStatus]:
    """Parse two-column short status output into FileStatus records."""
    if not raw.strip():
        return []

    statuses = []
    for line in raw.split('\n'):
        if not line.strip():
            continue
        statuses.append(_parse_status_line(line))
    return statuses


def _parse_status_line(line: str) -> FileStatus:
    index_code = line[0]
    worktree_code = line[1] if len(line) > 1 else ' '
    path = line[2:].lstrip()

    if index_code == UNTRACKED:
        return FileStatus(path=path, status=FileStatusKind.ADDED)

    code = index_code if index_code != ' ' else worktree_code
    status = STATUS_CODES.get(code, FileStatusKind.MODIFIED)

    if status in (FileStatusKind.RENAMED, FileStatusKind.COPIED):
        old_path, sep, new_path = path.partition(RENAME_SEPARATOR)
        if sep:
            return FileStatus(path=new_path, status=status, old_path=old_path)
        # Malformed rename without "old -> new": keep the path, drop the rename
        return FileStatus(path=path, status=FileStatusKind.MODIFIED)

    return FileStatus(path=path, status=status)


def parse_diff_stats(raw: str) -> list[FileDiffStats]:
    """Parse `insertions<TAB>deletions<TAB>path` lines.

    Binary files report `-` for both counts, which maps to 0. Only the first
    two tabs split fields; the path keeps any tabs of its own.
    """
    if not raw.strip():
        return []

    stats = []
    for line in raw.split('\n'):
        parts = line.split('\t', 2)
        if len(parts) < 3:
            continue
        try:
            insertions = _parse_count(parts[0])
            deletions = _parse_count(parts[1])
        except ValueError:
            continue
        stats.append(FileDiffStats(path=parts[2], insertions=insertions, deletions=deletions))
    return stats


def _parse_count(field: str) -> int:
    if field == '-':
        return 0
    count = int(field)
    if count < 0:
        raise ValueError(f"negative count: {field}")
    return count
