"""
Integration tests for GitExecutor and GitRepository against real temporary repositories.

Run with:
    pytest tests/test_git.py -v
"""

import shutil
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from pushit.context import ProjectKind, build_snapshot
from pushit.git import (
    GitError, GitExecutor, GitOptions, GitRepository, SubprocessFailure,
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(cwd: Path, *args: str) -> str:
    """Run git synchronously for test setup."""
    result = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True)
    return result.stdout.strip()


def repo_state(path: Path) -> tuple:
    """Everything a dry run must leave untouched."""
    head = subprocess.run(["git", "rev-parse", "HEAD"], cwd=path, capture_output=True, text=True).stdout
    return (
        git(path, "status", "--porcelain", "--untracked-files=all"),
        git(path, "ls-files", "--stage"),
        head,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Keep user and system git config out of the tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    return tmp_path


@pytest.fixture
def git_repo(git_env):
    path = git_env / "repo"
    path.mkdir()
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    git(path, "config", "user.email", "dev@example.com")
    git(path, "config", "user.name", "Dev")
    git(path, "config", "commit.gpgsign", "false")
    return path


@pytest.fixture
def committed_repo(git_repo):
    (git_repo / "README.md").write_text("# demo\n")
    git(git_repo, "add", "-A")
    git(git_repo, "commit", "-q", "-m", "chore: initial commit")
    return git_repo


def make_repo(path: Path, dry_run: bool = False) -> GitRepository:
    return GitRepository(GitExecutor(cwd=path), GitOptions(dry_run=dry_run))


# ---------------------------------------------------------------------------
# GitExecutor
# ---------------------------------------------------------------------------

class TestGitExecutor:

    async def test_missing_git_binary(self, tmp_path):
        with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError):
            with pytest.raises(GitError, match="not installed"):
                await GitExecutor(cwd=tmp_path).run("status")

    @requires_git
    async def test_captures_and_trims_output(self, committed_repo):
        result = await GitExecutor(cwd=committed_repo).run("log", "--pretty=format:%s")
        assert result.success
        assert result.stdout == "chore: initial commit"

    @requires_git
    async def test_failure_without_check(self, git_env):
        plain = git_env / "plain"
        plain.mkdir()
        result = await GitExecutor(cwd=plain).run("rev-parse", "--show-toplevel")
        assert not result.success
        assert result.stderr

    @requires_git
    async def test_failure_with_check_raises(self, git_env):
        plain = git_env / "plain"
        plain.mkdir()
        with pytest.raises(SubprocessFailure) as exc_info:
            await GitExecutor(cwd=plain).run("rev-parse", "--show-toplevel", check=True)
        assert exc_info.value.returncode != 0
        assert exc_info.value.args_list == ["rev-parse", "--show-toplevel"]


# ---------------------------------------------------------------------------
# Read-only queries
# ---------------------------------------------------------------------------

@requires_git
class TestRepositoryQueries:

    async def test_is_repo(self, git_repo, git_env):
        plain = git_env / "plain"
        plain.mkdir()
        assert await make_repo(git_repo).is_repo() is True
        assert await make_repo(plain).is_repo() is False

    async def test_get_root_from_subdirectory(self, git_repo):
        sub = git_repo / "pkg" / "mod"
        sub.mkdir(parents=True)
        root = await make_repo(sub).get_root()
        assert root.resolve() == git_repo.resolve()

    async def test_has_changes(self, committed_repo):
        repo = make_repo(committed_repo)
        assert await repo.has_changes() is False
        (committed_repo / "new.txt").write_text("hello\n")
        assert await repo.has_changes() is True

    async def test_staged_queries(self, committed_repo):
        (committed_repo / "README.md").write_text("# demo\nmore\n")
        (committed_repo / "app.py").write_text("a = 1\nb = 2\nc = 3\n")
        git(committed_repo, "add", "-A")
        repo = make_repo(committed_repo)

        assert set(await repo.get_changed_files()) == {"README.md", "app.py"}
        diff = await repo.get_staged_diff()
        assert "diff --git a/app.py b/app.py" in diff
        assert "+c = 3" in diff
        stats = {s.path: (s.insertions, s.deletions) for s in await repo.get_diff_stats()}
        assert stats == {"README.md": (1, 0), "app.py": (3, 0)}

    async def test_status_keeps_leading_column(self, committed_repo):
        (committed_repo / "README.md").write_text("changed\n")
        status = await make_repo(committed_repo).get_status()
        assert status.startswith(" M README.md")

    async def test_branch_name(self, committed_repo):
        git(committed_repo, "checkout", "-q", "-b", "feat/99-search")
        assert await make_repo(committed_repo).get_branch_name() == "feat/99-search"

    async def test_detached_head_falls_back_to_main(self, committed_repo):
        git(committed_repo, "checkout", "-q", "--detach")
        assert await make_repo(committed_repo).get_branch_name() == "main"

    async def test_commit_history_newest_first(self, committed_repo):
        (committed_repo / "a.txt").write_text("a")
        git(committed_repo, "add", "-A")
        git(committed_repo, "commit", "-q", "-m", "feat: add a")
        history = await make_repo(committed_repo).get_commit_history(count=5)
        assert history == ["feat: add a", "chore: initial commit"]

    async def test_commit_history_respects_count(self, committed_repo):
        for name in ("x", "y", "z"):
            (committed_repo / name).write_text(name)
            git(committed_repo, "add", "-A")
            git(committed_repo, "commit", "-q", "-m", f"test: {name}")
        assert len(await make_repo(committed_repo).get_commit_history(count=2)) == 2

    async def test_empty_repo_has_no_history(self, git_repo):
        assert await make_repo(git_repo).get_commit_history() == []

    async def test_has_remote(self, committed_repo, git_env):
        repo = make_repo(committed_repo)
        assert await repo.has_remote() is False
        git(committed_repo, "remote", "add", "origin", str(git_env / "remote.git"))
        assert await repo.has_remote() is True


# ---------------------------------------------------------------------------
# Mutating operations
# ---------------------------------------------------------------------------

@requires_git
class TestRepositoryMutations:

    async def test_stage_commit_cycle(self, committed_repo):
        (committed_repo / "feature.py").write_text("def f():\n    return 1\n")
        repo = make_repo(committed_repo)

        assert (await repo.stage_all()).success
        assert await repo.get_changed_files() == ["feature.py"]

        result = await repo.commit("feat(core): add f \"quoted\" $HOME")
        assert result.success
        assert git(committed_repo, "log", "-1", "--pretty=format:%s") == 'feat(core): add f "quoted" $HOME'
        assert await repo.has_changes() is False

    async def test_unstage_restores_index(self, committed_repo):
        (committed_repo / "feature.py").write_text("x = 1\n")
        repo = make_repo(committed_repo)
        await repo.stage_all()

        assert (await repo.unstage()).success
        assert await repo.get_changed_files() == []
        assert (committed_repo / "feature.py").exists()

    async def test_commit_failure_reports_error(self, committed_repo):
        result = await make_repo(committed_repo).commit("chore: nothing staged")
        assert result.success is False
        assert result.error

    async def test_push_sets_upstream(self, committed_repo, git_env):
        remote = git_env / "remote.git"
        git(git_env, "init", "-q", "--bare", str(remote))
        git(committed_repo, "remote", "add", "origin", str(remote))

        result = await make_repo(committed_repo).push()

        assert result.success
        assert git(remote, "rev-parse", "main") == git(committed_repo, "rev-parse", "HEAD")
        assert git(committed_repo, "rev-parse", "--abbrev-ref", "main@{upstream}") == "origin/main"

    async def test_push_failure(self, committed_repo, git_env):
        git(committed_repo, "remote", "add", "origin", str(git_env / "missing.git"))
        result = await make_repo(committed_repo).push()
        assert result.success is False
        assert result.error


# ---------------------------------------------------------------------------
# Dry run
# ---------------------------------------------------------------------------

@requires_git
class TestDryRun:

    @pytest.fixture
    def dirty_repo(self, committed_repo):
        (committed_repo / "README.md").write_text("# demo\nunstaged edit\n")
        (committed_repo / "staged.txt").write_text("staged\n")
        git(committed_repo, "add", "staged.txt")
        (committed_repo / "staged.txt").write_text("staged\nand edited\n")
        (committed_repo / "untracked.txt").write_text("brand new\n")
        return committed_repo

    async def test_mutations_leave_repository_untouched(self, dirty_repo):
        repo = make_repo(dirty_repo, dry_run=True)
        before = repo_state(dirty_repo)

        assert (await repo.stage_all()).success
        assert (await repo.commit("feat: should not exist")).success
        assert (await repo.push()).success
        assert (await repo.unstage()).success

        assert repo_state(dirty_repo) == before

    async def test_changed_files_union_without_duplicates(self, dirty_repo):
        files = await make_repo(dirty_repo, dry_run=True).get_changed_files()
        assert files == ["staged.txt", "README.md", "untracked.txt"]

    async def test_diff_covers_staged_and_unstaged(self, dirty_repo):
        repo = make_repo(dirty_repo, dry_run=True)
        diff = await repo.get_staged_diff()
        assert "+unstaged edit" in diff
        assert "+staged" in diff
        assert "+and edited" in diff

        normal = await make_repo(dirty_repo).get_staged_diff()
        assert "+unstaged edit" not in normal

    async def test_dry_run_snapshot(self, dirty_repo):
        (dirty_repo / "pyproject.toml").write_text("[project]\nname = 'demo'\n")
        snapshot = await build_snapshot(make_repo(dirty_repo, dry_run=True))

        assert snapshot.branch == "main"
        assert "untracked.txt" in snapshot.changed_files
        assert snapshot.file_contents["untracked.txt"] == "brand new\n"
        assert snapshot.commit_history == ("chore: initial commit",)
        assert snapshot.project.kind == ProjectKind.PYTHON
        assert len(snapshot.changed_files) == len(set(snapshot.changed_files))
