"""
Tests for adapter protocol, registry, mock, shell and git adapters.
"""

import shutil
from pathlib import Path

import pytest

from dotbackup.adapters import create_default_registry
from dotbackup.adapters.base import Adapter, ExecutionContext
from dotbackup.adapters.mock import MockAdapter
from dotbackup.adapters.registry import AdapterRegistry
from dotbackup.adapters.shell.command import ShellCommandAdapter
from dotbackup.adapters.vcs.git import GitAdapter
from dotbackup.core.models.action import Action, Receipt

# ── Protocol Tests ───────────────────────────────────────────────────


class TestExecutionContext:
    def test_cwd_defaults_to_working_dir(self):
        ctx = ExecutionContext(action=Action(id="t", adapter="shell"), working_dir="/repo")
        assert ctx.cwd == "/repo"

    def test_cwd_from_action_param(self):
        ctx = ExecutionContext(
            action=Action(id="t", adapter="shell", params={"cwd": "/elsewhere"}),
            working_dir="/repo",
        )
        assert ctx.cwd == "/elsewhere"

    def test_param_reads_action_params(self):
        ctx = ExecutionContext(action=Action.git("g", "push", Path("/repo"), remote="backup"))
        assert ctx.param("remote") == "backup"
        assert ctx.param("branch", "main") == "main"


class TestAdapterReceiptHelpers:
    def test_helpers_stamp_adapter_and_action(self):
        adapter = MockAdapter(adapter_name="shell")
        ctx = ExecutionContext(action=Action(id="zip:ssh", adapter="shell"))
        assert adapter.ok(ctx, "done").action_id == "zip:ssh"
        failed = adapter.fail(ctx, "boom", metadata={"missing": True})
        assert failed.failed
        assert failed.adapter == "shell"
        assert failed.metadata == {"missing": True}
        assert adapter.skip(ctx, "nothing").status == "skipped"

    def test_repr(self):
        assert repr(GitAdapter()) == "<GitAdapter name='git'>"


# ── Mock Adapter Tests ───────────────────────────────────────────────


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter(adapter_name="test-mock")
        ctx = ExecutionContext(action=Action(id="op-1", adapter="test-mock"))
        receipt = mock.execute(ctx)
        assert receipt.ok
        assert receipt.metadata == {"mock": True}
        assert mock.call_count == 1

    def test_set_output(self):
        mock = MockAdapter()
        mock.set_output("op-1", "custom")
        receipt = mock.execute(ExecutionContext(action=Action(id="op-1", adapter="mock")))
        assert receipt.output == "custom"

    def test_set_failure(self):
        mock = MockAdapter()
        mock.set_failure("op-fail", error="Intentional failure")
        receipt = mock.execute(ExecutionContext(action=Action(id="op-fail", adapter="mock")))
        assert receipt.failed
        assert receipt.error == "Intentional failure"

    def test_prefix_response(self):
        mock = MockAdapter()
        mock.set_failure("git_repos:*", "no git")
        receipt = mock.execute(
            ExecutionContext(action=Action(id="git_repos:api:status", adapter="mock"))
        )
        assert receipt.failed

    def test_exact_beats_prefix(self):
        mock = MockAdapter()
        mock.set_failure("du:*")
        mock.set_output("du:/x", "4\t/x")
        receipt = mock.execute(ExecutionContext(action=Action(id="du:/x", adapter="mock")))
        assert receipt.ok

    def test_called_ids_and_reset(self):
        mock = MockAdapter()
        for action_id in ("a", "b"):
            mock.execute(ExecutionContext(action=Action(id=action_id, adapter="mock")))
        assert mock.called_ids == ["a", "b"]
        mock.reset()
        assert mock.call_count == 0

    def test_unavailable(self):
        assert MockAdapter(available=False).is_available() is False


# ── Registry Tests ───────────────────────────────────────────────────


class _RaisingAdapter(Adapter):
    @property
    def name(self) -> str:
        return "boom"

    def is_available(self) -> bool:
        raise RuntimeError("probe crashed")

    def validate(self, context):
        return True, ""

    def execute(self, context):
        raise RuntimeError("kaput")


class TestAdapterRegistry:
    def test_register_and_get(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="shell")
        registry.register(mock)
        assert registry.get("shell") is mock
        assert registry.list_adapters() == ["shell"]

    def test_unregister(self):
        registry = AdapterRegistry()
        registry.register(MockAdapter(adapter_name="shell"))
        registry.unregister("shell")
        assert registry.get("shell") is None

    def test_missing_adapter(self):
        receipt = AdapterRegistry().execute_action(Action(id="x", adapter="nope"))
        assert receipt.failed
        assert "No adapter registered" in receipt.error

    def test_execute_routes_to_adapter(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="shell")
        registry.register(mock)
        receipt = registry.execute_action(Action(id="x", adapter="shell"))
        assert receipt.ok
        assert mock.called_ids == ["x"]

    def test_validation_failure(self):
        registry = AdapterRegistry()
        registry.register(ShellCommandAdapter())
        receipt = registry.execute_action(Action(id="x", adapter="shell"))
        assert receipt.failed
        assert "Validation failed" in receipt.error

    def test_adapter_exception_captured(self):
        registry = AdapterRegistry()
        registry.register(_RaisingAdapter())
        receipt = registry.execute_action(Action(id="x", adapter="boom"))
        assert receipt.failed
        assert "Unexpected error: kaput" in receipt.error

    def test_adapter_status(self):
        registry = AdapterRegistry()
        registry.register(MockAdapter(adapter_name="shell"))
        registry.register(_RaisingAdapter())
        status = registry.adapter_status()
        assert status["shell"]["available"] is True
        assert status["boom"]["available"] is False

    def test_default_registry(self):
        registry = create_default_registry()
        assert sorted(registry.list_adapters()) == ["git", "shell"]


# ── Shell Adapter Tests ──────────────────────────────────────────────


def _shell_ctx(params: dict, working_dir: str = ".") -> ExecutionContext:
    return ExecutionContext(
        action=Action(id="cmd", adapter="shell", params=params),
        working_dir=working_dir,
    )


class TestShellCommandAdapter:
    def test_validate_missing_argv(self):
        ok, msg = ShellCommandAdapter().validate(_shell_ctx({}))
        assert not ok
        assert "argv" in msg

    def test_validate_argv_must_be_list(self):
        ok, _ = ShellCommandAdapter().validate(_shell_ctx({"argv": "echo hi"}))
        assert not ok

    def test_validate_missing_cwd(self, tmp_path: Path):
        ok, msg = ShellCommandAdapter().validate(
            _shell_ctx({"argv": ["true"], "cwd": str(tmp_path / "gone")})
        )
        assert not ok
        assert "does not exist" in msg

    def test_echo(self, tmp_path: Path):
        receipt = ShellCommandAdapter().execute(
            _shell_ctx({"argv": ["echo", "hello"]}, str(tmp_path))
        )
        assert receipt.ok
        assert receipt.output == "hello"
        assert receipt.metadata["return_code"] == 0

    def test_nonzero_exit(self, tmp_path: Path):
        receipt = ShellCommandAdapter().execute(_shell_ctx({"argv": ["false"]}, str(tmp_path)))
        assert receipt.failed
        assert receipt.metadata["return_code"] != 0

    def test_missing_binary(self, tmp_path: Path):
        receipt = ShellCommandAdapter().execute(
            _shell_ctx({"argv": ["definitely-not-a-real-tool-xyz"]}, str(tmp_path))
        )
        assert receipt.failed
        assert receipt.metadata["missing"] is True
        assert "Command not found" in receipt.error

    def test_runs_in_cwd(self, tmp_path: Path):
        receipt = ShellCommandAdapter().execute(
            _shell_ctx({"argv": ["pwd"], "cwd": str(tmp_path)})
        )
        assert receipt.ok
        assert Path(receipt.output).resolve() == tmp_path.resolve()


# ── Git Adapter Tests ────────────────────────────────────────────────


def _git_ctx(params: dict) -> ExecutionContext:
    return ExecutionContext(action=Action(id="g", adapter="git", params=params))


class TestGitAdapterValidation:
    def test_missing_operation(self):
        ok, msg = GitAdapter().validate(_git_ctx({}))
        assert not ok
        assert "operation" in msg

    def test_unknown_operation(self):
        ok, msg = GitAdapter().validate(_git_ctx({"operation": "rebase"}))
        assert not ok
        assert "Unknown operation" in msg

    def test_commit_needs_message(self):
        ok, msg = GitAdapter().validate(_git_ctx({"operation": "commit"}))
        assert not ok
        assert "message" in msg

    @pytest.mark.parametrize("op", ["status", "add", "push", "unpushed", "head", "remote-url"])
    def test_valid_operations(self, op):
        ok, _ = GitAdapter().validate(_git_ctx({"operation": op}))
        assert ok


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestGitAdapterOnRepo:
    def test_remote_url_missing_remote_fails(self, tmp_path: Path):
        GitAdapter()._git(["init", "-q"], str(tmp_path))
        receipt = GitAdapter().execute(
            _git_ctx({"operation": "remote-url", "cwd": str(tmp_path)})
        )
        assert receipt.failed
        assert receipt.error.startswith("Git error:")

    def test_receipt_never_raises_outside_repo(self, tmp_path: Path):
        receipt = GitAdapter().execute(_git_ctx({"operation": "head", "cwd": str(tmp_path)}))
        assert isinstance(receipt, Receipt)
        assert receipt.failed

    def test_missing_repository_dir(self, tmp_path: Path):
        receipt = GitAdapter().execute(
            _git_ctx({"operation": "status", "cwd": str(tmp_path / "gone")})
        )
        assert receipt.failed
        assert receipt.error.startswith(("Repository not found", "Git error:"))


def _init_repo(path: Path) -> Path:
    adapter = GitAdapter()
    adapter._git(["init", "-q"], str(path))
    adapter._git(["config", "user.name", "Backup Test"], str(path))
    adapter._git(["config", "user.email", "backup@example.com"], str(path))
    adapter._git(["config", "commit.gpgsign", "false"], str(path))
    return path


def _run_git(operation: str, repo: Path, **params) -> Receipt:
    return GitAdapter().execute(_git_ctx({"operation": operation, "cwd": str(repo), **params}))


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestGitAdapterWorkflow:
    def test_status_clean_on_fresh_repo(self, tmp_path: Path):
        repo = _init_repo(tmp_path)
        receipt = _run_git("status", repo)
        assert receipt.ok
        assert receipt.metadata["dirty"] is False
        assert receipt.metadata["changes"] == 0
        assert receipt.metadata["branch"] != "HEAD"

    def test_status_sees_untracked_file_before_first_commit(self, tmp_path: Path):
        repo = _init_repo(tmp_path)
        (repo / "notes.txt").write_text("draft")
        receipt = _run_git("status", repo)
        assert receipt.ok
        assert receipt.metadata["dirty"] is True
        assert receipt.metadata["changes"] == 1

    def test_commit_with_nothing_staged_is_skipped(self, tmp_path: Path):
        repo = _init_repo(tmp_path)
        receipt = _run_git("commit", repo, message="backup")
        assert receipt.status == "skipped"
        assert receipt.output == "Nothing to commit"

    def test_add_commit_head(self, tmp_path: Path):
        repo = _init_repo(tmp_path)
        (repo / "Brewfile").write_text('brew "git"\n')

        assert _run_git("add", repo).ok
        commit = _run_git("commit", repo, message="backup: pre-reset backup")
        assert commit.ok
        assert commit.metadata["message"] == "backup: pre-reset backup"

        head = _run_git("head", repo)
        assert head.ok
        assert head.output == GitAdapter()._git(["rev-parse", "--short", "HEAD"], str(repo)).strip()
        assert _run_git("status", repo).metadata["dirty"] is False

    def test_unpushed_without_upstream_is_zero(self, tmp_path: Path):
        repo = _init_repo(tmp_path)
        (repo / "a.txt").write_text("a")
        _run_git("add", repo)
        _run_git("commit", repo, message="first")
        receipt = _run_git("unpushed", repo)
        assert receipt.ok
        assert receipt.metadata["unpushed"] == 0
