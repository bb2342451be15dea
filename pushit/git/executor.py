"""Git Executor - Run git as a subprocess and capture its output."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Raised when git is unavailable or the directory is not a repository."""
    pass


class SubprocessFailure(GitError):
    """Raised when a checked git command exits non-zero."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Git command failed: git {' '.join(args)}\n{stderr}")


@dataclass(frozen=True)
class GitResult:
    """Captured outcome of one git invocation."""
    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0


class GitExecutor:
    """Spawns git with a fresh pair of pipes per call."""

    def __init__(self, cwd: Path | None = None):
        self.cwd = cwd

    async def run(self, *args: str, check: bool = False) -> GitResult:
        """Run `git <args>` and return trimmed stdout/stderr.

        Only trailing whitespace is removed: the first column of
        `git status --short` output is significant.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                'git', *args,
                cwd=self.cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

        stdout_bytes, stderr_bytes = await proc.communicate()
        returncode = proc.returncode if proc.returncode is not None else 1
        result = GitResult(
            stdout=stdout_bytes.decode('utf-8', errors='replace').rstrip(),
            stderr=stderr_bytes.decode('utf-8', errors='replace').rstrip(),
            returncode=returncode,
        )
        logger.debug("git %s -> rc=%d", ' '.join(args), returncode)

        if check and not result.success:
            raise SubprocessFailure(args, returncode, result.stderr)
        return result
