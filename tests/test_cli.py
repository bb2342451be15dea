"""
Tests for the CLI flow: argument parsing, overrides and the stage -> generate -> commit loop.

Run with:
    pytest tests/test_cli.py -v
"""

import shutil
import subprocess
from types import SimpleNamespace

import pytest

import pushit.cli.main as cli_main
from pushit.cli.args import parse_args
from pushit.cli.main import _apply_overrides, _commit_flow, main
from pushit.cli.utils import CANCEL, COMMIT, REGENERATE
from pushit.config import Config
from pushit.llm import LLMClient, LLMError, LLMResponse

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(cwd, *args):
    result = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True)
    return result.stdout.strip()


class ScriptedClient(LLMClient):
    """Returns queued replies; an exception in the queue is raised instead."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = 0

    def generate(self, prompt: str) -> LLMResponse:
        self.calls += 1
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return LLMResponse(content=reply)

    @property
    def name(self) -> str:
        return "scripted"


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("PUSHIT_PROVIDER", "PUSHIT_MODEL", "PUSHIT_API_URL", "PUSHIT_TIMEOUT",
                 "OPENROUTER_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def work_repo(tmp_path, monkeypatch):
    """A repository with one commit and one pending change, used as cwd."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))

    path = tmp_path / "repo"
    path.mkdir()
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    git(path, "config", "user.email", "dev@example.com")
    git(path, "config", "user.name", "Dev")
    git(path, "config", "commit.gpgsign", "false")
    (path / "app.py").write_text("print('v1')\n")
    git(path, "add", "-A")
    git(path, "commit", "-q", "-m", "chore: initial commit")

    (path / "app.py").write_text("print('v2')\n")
    (path / "extra.py").write_text("x = 1\n")
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def interactive(monkeypatch):
    """Pretend stdin and stdout are terminals."""
    tty = SimpleNamespace(isatty=lambda: True)
    monkeypatch.setattr(cli_main, "sys", SimpleNamespace(stdout=tty, stdin=tty))


def choices(monkeypatch, *actions):
    queue = list(actions)
    monkeypatch.setattr(cli_main, "choose_action", lambda can_push: queue.pop(0))


# ---------------------------------------------------------------------------
# Argument parsing and overrides
# ---------------------------------------------------------------------------

class TestParseArgs:

    def test_defaults(self):
        args = parse_args([])
        assert args.dry_run is False
        assert args.provider is None
        assert args.model is None
        assert args.no_push is False

    def test_flags(self):
        args = parse_args(["--dry-run", "-p", "claude", "-m", "claude-x", "--no-files", "--no-push", "--verbose"])
        assert args.dry_run and args.no_files and args.no_push and args.verbose
        assert args.provider == "claude"
        assert args.model == "claude-x"

    def test_rejects_unknown_provider(self):
        with pytest.raises(SystemExit):
            parse_args(["-p", "ollama"])


class TestApplyOverrides:

    def test_cli_beats_env_beats_file(self, monkeypatch, clean_env):
        monkeypatch.setenv("PUSHIT_MODEL", "env-model")
        monkeypatch.setenv("PUSHIT_PROVIDER", "claude")
        config = Config(model="file-model")

        _apply_overrides(parse_args(["-m", "cli-model"]), config)

        assert config.model == "cli-model"
        assert config.provider == "claude"

    def test_flag_switches(self, clean_env):
        config = Config()
        _apply_overrides(parse_args(["--no-files", "--no-push"]), config)
        assert config.include_file_contents is False
        assert config.push is False


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------

class TestMain:

    def test_missing_api_key(self, monkeypatch, capsys, clean_env):
        monkeypatch.setattr(cli_main, "load_config", Config)
        assert main([]) == 1
        assert "OPENROUTER_API_KEY" in capsys.readouterr().err

    def test_not_a_repository(self, tmp_path, monkeypatch, capsys, clean_env):
        if shutil.which("git") is None:
            pytest.skip("git is not installed")
        plain = tmp_path / "plain"
        plain.mkdir()
        monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-test")
        monkeypatch.setattr(cli_main, "load_config", Config)
        monkeypatch.chdir(plain)

        assert main([]) == 1
        assert "Not a git repository" in capsys.readouterr().err

    def test_display_config(self, tmp_path, monkeypatch, capsys, clean_env):
        monkeypatch.setattr("pushit.cli.commands.load_config", Config)
        monkeypatch.setattr("pushit.cli.commands.get_config_path", lambda: None)
        assert main(["--display-config"]) == 0
        out = capsys.readouterr().out
        assert "Current Configuration" in out
        assert "OPENROUTER_API_KEY" in out


# ---------------------------------------------------------------------------
# Commit flow
# ---------------------------------------------------------------------------

@requires_git
class TestCommitFlow:

    async def test_pipe_prints_message_and_restores_index(self, work_repo, capsys):
        head = git(work_repo, "rev-parse", "HEAD")
        client = ScriptedClient("```\nfeat(app): print v2.\n```")

        assert await _commit_flow(parse_args([]), Config(), client) == 0

        assert capsys.readouterr().out.strip() == "feat(app): print v2"
        assert git(work_repo, "diff", "--cached", "--name-only") == ""
        assert git(work_repo, "rev-parse", "HEAD") == head

    async def test_prompt_reflects_pending_changes(self, work_repo):
        prompts = []

        class Recording(ScriptedClient):
            def generate(self, prompt):
                prompts.append(prompt)
                return super().generate(prompt)

        await _commit_flow(parse_args([]), Config(), Recording("fix: x"))

        assert "extra.py" in prompts[0]
        assert "+print('v2')" in prompts[0]
        assert "chore: initial commit" in prompts[0]

    async def test_generation_failure_unstages(self, work_repo, capsys):
        client = ScriptedClient(LLMError("API error (500): boom"))

        assert await _commit_flow(parse_args([]), Config(), client) == 1

        assert "boom" in capsys.readouterr().err
        assert git(work_repo, "diff", "--cached", "--name-only") == ""

    async def test_interrupt_during_generation_unstages(self, work_repo):
        head = git(work_repo, "rev-parse", "HEAD")

        with pytest.raises(KeyboardInterrupt):
            await _commit_flow(parse_args([]), Config(), ScriptedClient(KeyboardInterrupt()))

        assert git(work_repo, "diff", "--cached", "--name-only") == ""
        assert git(work_repo, "rev-parse", "HEAD") == head

    async def test_verbose_reports_line_totals(self, work_repo, monkeypatch, interactive, capsys):
        choices(monkeypatch, CANCEL)

        assert await _commit_flow(parse_args(["--verbose"]), Config(), ScriptedClient("feat: x")) == 0

        assert "Files: 2, 3 lines changed" in capsys.readouterr().out

    async def test_no_changes(self, work_repo, capsys):
        git(work_repo, "checkout", "--", "app.py")
        (work_repo / "extra.py").unlink()

        assert await _commit_flow(parse_args([]), Config(), ScriptedClient("feat: x")) == 0
        assert "No changes to commit" in capsys.readouterr().out

    async def test_interactive_commit(self, work_repo, monkeypatch, interactive):
        choices(monkeypatch, COMMIT)

        assert await _commit_flow(parse_args([]), Config(), ScriptedClient("feat: ship v2")) == 0

        assert git(work_repo, "log", "-1", "--pretty=format:%s") == "feat: ship v2"
        assert git(work_repo, "status", "--porcelain") == ""

    async def test_regenerate_then_commit(self, work_repo, monkeypatch, interactive):
        choices(monkeypatch, REGENERATE, COMMIT)
        client = ScriptedClient("feat: first try", "feat: second try")

        assert await _commit_flow(parse_args([]), Config(), client) == 0

        assert client.calls == 2
        assert git(work_repo, "log", "-1", "--pretty=format:%s") == "feat: second try"

    async def test_cancel_unstages(self, work_repo, monkeypatch, interactive):
        choices(monkeypatch, CANCEL)
        head = git(work_repo, "rev-parse", "HEAD")

        assert await _commit_flow(parse_args([]), Config(), ScriptedClient("feat: nope")) == 0

        assert git(work_repo, "rev-parse", "HEAD") == head
        assert git(work_repo, "diff", "--cached", "--name-only") == ""

    async def test_dry_run_commit_changes_nothing(self, work_repo, monkeypatch, interactive, capsys):
        choices(monkeypatch, COMMIT)
        head = git(work_repo, "rev-parse", "HEAD")
        status = git(work_repo, "status", "--porcelain")

        assert await _commit_flow(parse_args(["--dry-run"]), Config(), ScriptedClient("feat: pretend")) == 0

        assert git(work_repo, "rev-parse", "HEAD") == head
        assert git(work_repo, "status", "--porcelain") == status
        assert "Dry run" in capsys.readouterr().out
