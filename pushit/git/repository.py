"""Git Repository - Read and mutate the working tree through git."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from pushit.git.executor import GitExecutor
from pushit.git.parser import FileDiffStats, parse_diff_stats

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"


@dataclass(frozen=True)
class GitOptions:
    """Per-run options threaded into every git call.

    In dry-run mode mutating calls do nothing and report success, while
    read queries cover staged, unstaged and untracked changes so the result
    reflects what would be committed.
    """
    dry_run: bool = False


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a mutating git operation."""
    success: bool
    error: str | None = None


_DRY_RUN_OK = CommandResult(success=True)


class GitRepository:
    """Git commands for one working tree."""

    def __init__(self, executor: GitExecutor | None = None, options: GitOptions | None = None):
        self.executor = executor or GitExecutor()
        self.options = options or GitOptions()

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run

    async def _run(self, *args: str, check: bool = False):
        return await self.executor.run(*args, check=check)

    # -- read-only queries ---------------------------------------------------

    async def is_repo(self) -> bool:
        result = await self._run('rev-parse', '--is-inside-work-tree')
        return result.success and result.stdout == 'true'

    async def get_root(self) -> Path:
        """Top-level directory of the working tree."""
        result = await self._run('rev-parse', '--show-toplevel', check=True)
        return Path(result.stdout)

    async def has_changes(self) -> bool:
        staged, unstaged, untracked = await asyncio.gather(
            self._run('diff', '--cached', '--quiet'),
            self._run('diff', '--quiet'),
            self._run('ls-files', '--others', '--exclude-standard'),
        )
        return not staged.success or not unstaged.success or bool(untracked.stdout)

    async def get_staged_diff(self) -> str:
        if self.dry_run:
            staged, unstaged = await asyncio.gather(
                self._run('diff', '--cached', check=True),
                self._run('diff', check=True),
            )
            return '\n'.join(part for part in (staged.stdout, unstaged.stdout) if part)
        result = await self._run('diff', '--cached', check=True)
        return result.stdout

    async def get_changed_files(self) -> list[str]:
        if self.dry_run:
            results = await asyncio.gather(
                self._run('diff', '--cached', '--name-only'),
                self._run('diff', '--name-only'),
                self._run('ls-files', '--others', '--exclude-standard'),
            )
            outputs = [r.stdout for r in results]
        else:
            result = await self._run('diff', '--cached', '--name-only')
            outputs = [result.stdout]

        seen: dict[str, None] = {}
        for output in outputs:
            for path in output.split('\n'):
                if path:
                    seen.setdefault(path, None)
        return list(seen)

    async def get_diff_stats(self) -> list[FileDiffStats]:
        if self.dry_run:
            staged, unstaged = await asyncio.gather(
                self._run('diff', '--cached', '--numstat'),
                self._run('diff', '--numstat'),
            )
            combined = '\n'.join(part for part in (staged.stdout, unstaged.stdout) if part)
            return parse_diff_stats(combined)
        result = await self._run('diff', '--cached', '--numstat')
        return parse_diff_stats(result.stdout)

    async def get_status(self) -> str:
        result = await self._run('status', '--short')
        return result.stdout

    async def get_branch_name(self) -> str:
        result = await self._run('branch', '--show-current')
        return result.stdout.strip() or DEFAULT_BRANCH

    async def get_commit_history(self, count: int = 20) -> list[str]:
        result = await self._run('log', f'-{count}', '--pretty=format:%s', '--no-merges')
        if not result.success or not result.stdout:
            return []
        return [line for line in result.stdout.split('\n') if line]

    async def has_remote(self) -> bool:
        result = await self._run('remote')
        return bool(result.stdout)

    # -- mutating operations -------------------------------------------------

    async def _mutate(self, *args: str) -> CommandResult:
        if self.dry_run:
            logger.debug("dry run: skipping git %s", ' '.join(args))
            return _DRY_RUN_OK
        result = await self._run(*args)
        if result.success:
            return CommandResult(success=True)
        return CommandResult(success=False, error=result.stderr or result.stdout)

    async def stage_all(self) -> CommandResult:
        return await self._mutate('add', '-A')

    async def commit(self, message: str) -> CommandResult:
        return await self._mutate('commit', '-m', message)

    async def unstage(self) -> CommandResult:
        return await self._mutate('reset')

    async def push(self) -> CommandResult:
        """Push, retrying with --set-upstream when the branch has no upstream yet."""
        result = await self._mutate('push')
        if result.success:
            return result

        branch = await self.get_branch_name()
        logger.debug("push failed, retrying with upstream origin/%s", branch)
        return await self._mutate('push', '--set-upstream', 'origin', branch)
