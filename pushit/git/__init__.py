"""Git Operations Package"""

from pushit.git.executor import GitExecutor, GitResult, GitError, SubprocessFailure
from pushit.git.repository import GitRepository, GitOptions, CommandResult
from pushit.git.parser import FileStatus, FileStatusKind, FileDiffStats, parse_status, parse_diff_stats
from pushit.git.diff_processor import split_diff_sections, truncate_diff

__all__ = [
    "GitExecutor",
    "GitResult",
    "GitError",
    "SubprocessFailure",
    "GitRepository",
    "GitOptions",
    "CommandResult",
    "FileStatus",
    "FileStatusKind",
    "FileDiffStats",
    "parse_status",
    "parse_diff_stats",
    "split_diff_sections",
    "truncate_diff",
]
