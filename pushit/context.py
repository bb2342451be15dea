"""Context Aggregator - Build one immutable snapshot of the pending changes."""

import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Mapping

from pushit.git.diff_processor import truncate_diff
from pushit.git.parser import FileDiffStats, FileStatus, parse_status
from pushit.git.repository import GitRepository

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n... (truncated)"

BINARY_EXTENSIONS = frozenset({
    '.png', '.jpg', '.jpeg', '.gif', '.webp', '.ico', '.svg',
    '.woff', '.woff2', '.ttf', '.eot', '.otf',
    '.pdf', '.zip', '.tar', '.gz', '.rar',
    '.mp3', '.mp4', '.wav', '.avi', '.mov',
    '.exe', '.dll', '.so', '.dylib',
    '.lock', '.lockb',
})

# First match wins: feat/123-login, feat/PROJ-123-login, issue-123, #123, feature-123
ISSUE_PATTERNS = [
    re.compile(r'/(\d+)-'),
    re.compile(r'/([A-Z]+-\d+)'),
    re.compile(r'issue-(\d+)', re.IGNORECASE),
    re.compile(r'#(\d+)'),
    re.compile(r'-(\d+)$'),
]


class ProjectKind(str, Enum):
    NODE = "node"
    BUN = "bun"
    RUST = "rust"
    PYTHON = "python"
    GO = "go"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProjectInfo:
    kind: ProjectKind = ProjectKind.UNKNOWN
    name: str | None = None
    version: str | None = None


@dataclass(frozen=True)
class ContextConfig:
    """Limits applied while building the snapshot."""
    max_diff_chars: int = 30_000
    history_count: int = 20
    include_file_contents: bool = True
    max_file_size: int = 50 * 1024
    max_lines_per_file: int = 500


@dataclass(frozen=True)
class RepositorySnapshot:
    """Everything the prompt needs, gathered once per run."""
    branch: str
    diff: str
    status: str
    changed_files: tuple[str, ...] = ()
    commit_history: tuple[str, ...] = ()
    project: ProjectInfo = field(default_factory=ProjectInfo)
    linked_issue: str | None = None
    file_contents: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    file_stats: tuple[FileDiffStats, ...] = ()

    @property
    def file_statuses(self) -> list[FileStatus]:
        return parse_status(self.status)

    @property
    def is_empty(self) -> bool:
        return not self.changed_files


def extract_issue_from_branch(branch: str) -> str | None:
    for pattern in ISSUE_PATTERNS:
        match = pattern.search(branch)
        if match:
            return match.group(1)
    return None


# ---------------------------------------------------------------------------
# Project detection
# ---------------------------------------------------------------------------

# Manifest name -> whether its body is needed (lockfiles only need to exist)
MANIFEST_PROBES = {
    'bun.lockb': False,
    'bun.lock': False,
    'package.json': True,
    'Cargo.toml': True,
    'pyproject.toml': False,
    'setup.py': False,
    'go.mod': True,
}

Probes = Mapping[str, str | None]


def _probe_manifest(path: Path, read_body: bool) -> str | None:
    """Return the file body ("" when not read), or None when absent or unreadable."""
    try:
        if not path.is_file():
            return None
        return path.read_text(encoding='utf-8') if read_body else ""
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("probe %s failed: %s", path, e)
        return None


def _package_json(probes: Probes) -> dict | None:
    body = probes.get('package.json')
    if body is None:
        return None
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _string_field(data: dict, key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def _resolve_bun(probes: Probes) -> ProjectInfo | None:
    if probes.get('bun.lockb') is None and probes.get('bun.lock') is None:
        return None
    pkg = _package_json(probes) or {}
    return ProjectInfo(ProjectKind.BUN, _string_field(pkg, 'name'), _string_field(pkg, 'version'))


def _resolve_node(probes: Probes) -> ProjectInfo | None:
    pkg = _package_json(probes)
    if pkg is None:
        return None
    return ProjectInfo(ProjectKind.NODE, _string_field(pkg, 'name'), _string_field(pkg, 'version'))


def _resolve_rust(probes: Probes) -> ProjectInfo | None:
    body = probes.get('Cargo.toml')
    if body is None:
        return None
    name = re.search(r'name\s*=\s*"([^"]+)"', body)
    version = re.search(r'version\s*=\s*"([^"]+)"', body)
    return ProjectInfo(
        ProjectKind.RUST,
        name.group(1) if name else None,
        version.group(1) if version else None,
    )


def _resolve_python(probes: Probes) -> ProjectInfo | None:
    if probes.get('pyproject.toml') is None and probes.get('setup.py') is None:
        return None
    return ProjectInfo(ProjectKind.PYTHON)


def _resolve_go(probes: Probes) -> ProjectInfo | None:
    body = probes.get('go.mod')
    if body is None:
        return None
    module = re.search(r'module\s+(\S+)', body)
    return ProjectInfo(ProjectKind.GO, module.group(1) if module else None)


# Priority order: bun > node > rust > python > go
PROJECT_RESOLVERS: list[Callable[[Probes], ProjectInfo | None]] = [
    _resolve_bun,
    _resolve_node,
    _resolve_rust,
    _resolve_python,
    _resolve_go,
]


def resolve_project(probes: Probes) -> ProjectInfo:
    for resolver in PROJECT_RESOLVERS:
        info = resolver(probes)
        if info is not None:
            return info
    return ProjectInfo()


async def detect_project_type(root: Path) -> ProjectInfo:
    """Probe every manifest concurrently, then resolve by fixed priority."""
    names = list(MANIFEST_PROBES)
    bodies = await asyncio.gather(*(
        asyncio.to_thread(_probe_manifest, root / name, MANIFEST_PROBES[name])
        for name in names
    ))
    return resolve_project(dict(zip(names, bodies)))


# ---------------------------------------------------------------------------
# File contents
# ---------------------------------------------------------------------------

def is_binary_path(path: str) -> bool:
    return Path(path).suffix.lower() in BINARY_EXTENSIONS


def _read_limited(path: Path, max_size: int, max_lines: int) -> str | None:
    try:
        if path.stat().st_size > max_size:
            return None
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError):
        # Deleted, unreadable or not text: leave it out
        return None

    lines = text.split('\n')
    if len(lines) > max_lines:
        return '\n'.join(lines[:max_lines]) + TRUNCATION_MARKER
    return text


async def read_file_contents(
    paths: list[str] | tuple[str, ...],
    root: Path,
    config: ContextConfig | None = None,
) -> dict[str, str]:
    """Read changed files as text, skipping binaries and oversized files."""
    config = config or ContextConfig()
    candidates = [p for p in paths if not is_binary_path(p)]
    bodies = await asyncio.gather(*(
        asyncio.to_thread(_read_limited, root / p, config.max_file_size, config.max_lines_per_file)
        for p in candidates
    ))
    return {path: body for path, body in zip(candidates, bodies) if body is not None}


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

async def build_snapshot(
    repo: GitRepository,
    config: ContextConfig | None = None,
    root: Path | None = None,
) -> RepositorySnapshot:
    """Query git and the project root concurrently and assemble the snapshot.

    Dry-run behavior comes from repo.options.
    """
    config = config or ContextConfig()
    root = root or repo.executor.cwd or Path.cwd()

    branch, changed_files, status, diff, history, stats, project = await asyncio.gather(
        repo.get_branch_name(),
        repo.get_changed_files(),
        repo.get_status(),
        repo.get_staged_diff(),
        repo.get_commit_history(config.history_count),
        repo.get_diff_stats(),
        detect_project_type(root),
    )

    contents: dict[str, str] = {}
    if config.include_file_contents and changed_files:
        contents = await read_file_contents(changed_files, root, config)

    budgeted = truncate_diff(diff, config.max_diff_chars)
    if len(budgeted) < len(diff):
        logger.debug("diff truncated from %d to %d chars", len(diff), len(budgeted))

    return RepositorySnapshot(
        branch=branch,
        linked_issue=extract_issue_from_branch(branch),
        diff=budgeted,
        status=status,
        changed_files=tuple(changed_files),
        file_contents=MappingProxyType(contents),
        commit_history=tuple(history),
        project=project,
        file_stats=tuple(stats),
    )
