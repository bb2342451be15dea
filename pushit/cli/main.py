"""CLI Main Entry Point"""

import asyncio
import logging
import sys
import time

from pushit.config import Config, ConfigError, load_config, resolve_settings
from pushit.context import RepositorySnapshot, build_snapshot
from pushit.git import GitError, GitExecutor, GitOptions, GitRepository
from pushit.llm import LLMClient, LLMError, get_client, sanitize_message
from pushit.prompts import PromptBuilder, PromptConfig
from pushit.output import (
    ARROW, Spinner, bold, dim, info, print_box, print_error, print_success, print_warning,
)

from pushit.cli.args import parse_args
from pushit.cli.commands import display_config, run_setup, run_install_completion
from pushit.cli.utils import CANCEL, COMMIT_PUSH, EDIT, REGENERATE, choose_action, edit_message

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _handle_subcommands(args):
    """Handle subcommands that exit early.

    Returns:
        tuple: (exit_code, should_exit) - exit_code if should_exit is True
    """
    if args.install_completion:
        return run_install_completion(), True
    if args.display_config:
        return display_config(), True
    if args.setup:
        return run_setup(), True
    return 0, False


def _apply_overrides(args, config: Config) -> None:
    """Precedence: CLI args > environment variables > config file"""
    config.apply_env()
    if args.provider:
        config.provider = args.provider
    if args.model:
        config.model = args.model
    if args.no_files:
        config.include_file_contents = False
    if args.no_push:
        config.push = False


def _display_file_list(snapshot: RepositorySnapshot, max_shown: int) -> None:
    """Show the changed files with status letter and line counts, collapsing long lists."""
    if snapshot.is_empty:
        return
    statuses = {s.path: s for s in snapshot.file_statuses}
    stats = {s.path: s for s in snapshot.file_stats}

    print(bold("Changes:"))
    shown = snapshot.changed_files[:max_shown]
    for path in shown:
        status = statuses.get(path)
        code = status.code if status else 'M'
        label = f"{status.old_path} {ARROW} {path}" if status and status.old_path else path
        stat = stats.get(path)
        counts = f" (+{stat.insertions} -{stat.deletions})" if stat else ""
        print(dim(f"  {code} {label}{counts}"))

    remaining = len(snapshot.changed_files) - len(shown)
    if remaining > 0:
        print(dim(f"  ... and {remaining} more files"))


def _print_verbose_stats(args, prompt, snapshot, timings):
    """Print verbose timing and size statistics."""
    if not args.verbose:
        return
    print(dim(f"  Prompt: ~{len(prompt)//4} tokens ({len(prompt)} chars), diff {len(snapshot.diff)} chars"))
    lines = sum(stat.total_changes for stat in snapshot.file_stats)
    print(dim(f"  Files: {len(snapshot.changed_files)}, {lines} lines changed"))
    print(dim(f"  Project: {snapshot.project.kind.value}"
              f"{', issue #' + snapshot.linked_issue if snapshot.linked_issue else ''}"))
    print(dim(f"  Timings: git={timings.get('git', 0):.2f}s, prompt={timings.get('prompt', 0):.2f}s, "
              f"generate={timings.get('generate', 0):.2f}s"))


async def _generate(client: LLMClient, prompt: str, timings: dict) -> str:
    """Run generation off the event loop with a spinner."""
    t0 = time.time()
    with Spinner(f"Generating commit message with {info(client.name)}..."):
        result = await asyncio.to_thread(client.generate_message, prompt)
    timings['generate'] = time.time() - t0
    return result.message


async def _commit_and_push(repo: GitRepository, message: str, push: bool) -> int:
    committed = await repo.commit(message)
    if not committed.success:
        print_error(f"Failed to commit: {committed.error}")
        return 1
    print_success("Commit created successfully!")

    if push:
        with Spinner("Pushing to remote..."):
            pushed = await repo.push()
        if pushed.success:
            print_success("Changes pushed successfully!")
        else:
            # The commit stays; only the push is reported
            print_warning(f"Failed to push: {pushed.error or 'remote may not be configured'}")

    if repo.dry_run:
        print(dim("Dry run: the repository was not changed."))
    return 0


def _select_message(message: str, can_push: bool) -> tuple[str, str]:
    """Show the message and loop through edits until the user picks an action."""
    while True:
        print_box(message)
        action = choose_action(can_push)
        if action != EDIT:
            return action, message
        edited = edit_message(message)
        if edited:
            message = sanitize_message(edited) or message


async def _commit_flow(args, config: Config, client: LLMClient) -> int:
    """Main stage -> snapshot -> generate -> commit flow.

    Returns:
        int: Exit code
    """
    options = GitOptions(dry_run=args.dry_run)
    timings = {}

    probe = GitRepository(options=options)
    if not await probe.is_repo():
        print_error("Not a git repository")
        return 1
    repo = GitRepository(GitExecutor(cwd=await probe.get_root()), options)

    if not await repo.has_changes():
        print(info("No changes to commit"))
        return 0

    t0 = time.time()
    staged = await repo.stage_all()
    if not staged.success:
        print_error(f"Failed to stage changes: {staged.error}")
        return 1
    timings['git'] = time.time() - t0

    try:
        return await _staged_flow(args, config, client, repo, timings)
    except (KeyboardInterrupt, asyncio.CancelledError):
        # Ctrl-C before a commit leaves the index as it was found
        await repo.unstage()
        raise


async def _staged_flow(args, config: Config, client: LLMClient, repo: GitRepository, timings: dict) -> int:
    """Snapshot, generate and commit once everything is staged."""
    is_pipe = not sys.stdout.isatty()
    is_interactive = sys.stdin.isatty() and not is_pipe

    t0 = time.time()
    try:
        with Spinner("Analyzing changes..."):
            snapshot = await build_snapshot(repo, config.context_config())
    except GitError as e:
        await repo.unstage()
        print_error(str(e))
        return 1
    timings['git'] += time.time() - t0
    logger.debug("snapshot: %d files on %s, diff %d chars", len(snapshot.changed_files), snapshot.branch, len(snapshot.diff))

    if not is_pipe:
        _display_file_list(snapshot, config.max_file_display)

    t0 = time.time()
    prompt = PromptBuilder().build(snapshot, PromptConfig(max_prompt_chars=config.max_prompt_chars))
    timings['prompt'] = time.time() - t0
    can_push = config.push and await repo.has_remote()

    # Generation + selection loop (supports regeneration)
    while True:
        try:
            message = await _generate(client, prompt, timings)
        except LLMError as e:
            await repo.unstage()
            print_error(str(e))
            return 1

        if not is_pipe:
            _print_verbose_stats(args, prompt, snapshot, timings)

        # Pipe or non-interactive: output the message and leave the tree as found
        if not is_interactive:
            if is_pipe:
                print(message)
            else:
                print_box(message)
            await repo.unstage()
            return 0

        action, message = _select_message(message, can_push)
        if action == REGENERATE:
            continue
        if action == CANCEL:
            await repo.unstage()
            print(dim("Commit cancelled."))
            return 0
        return await _commit_and_push(repo, message, push=action == COMMIT_PUSH)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    _configure_logging(args.verbose)

    # Handle subcommands that exit early
    exit_code, should_exit = _handle_subcommands(args)
    if should_exit:
        return exit_code

    config = load_config()
    _apply_overrides(args, config)

    try:
        settings = resolve_settings(config)
        client = get_client(config.provider, settings, timeout=config.timeout)
    except (ConfigError, LLMError) as e:
        print_error(str(e))
        return 1

    try:
        return asyncio.run(_commit_flow(args, config, client))
    except GitError as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        print()
        print(dim("Cancelled."))
        return 130
