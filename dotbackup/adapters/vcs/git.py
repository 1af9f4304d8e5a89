"""
Git adapter — the handful of git operations a backup run needs.

Used twice per run: read-only checks on every repo under the code
directory, then add/commit/push on the dotfiles repo. Talks to the git
CLI through subprocess.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Callable

from dotbackup.adapters.base import Adapter, ExecutionContext
from dotbackup.core.models.action import Receipt

logger = logging.getLogger(__name__)

VALID_OPERATIONS = frozenset({
    "status", "add", "commit", "push", "unpushed", "head", "remote-url",
})

PUSH_TIMEOUT = 120


class GitError(RuntimeError):
    """A git command exited non-zero."""


class GitAdapter(Adapter):
    """Git operations against the repo in ``cwd``.

    Action params:
        operation (str): One of VALID_OPERATIONS.
        cwd (str): Repository directory.
        message (str): Commit message ('commit').
        remote (str): Remote name ('push', 'unpushed', 'remote-url'; default origin).
        branch (str): Branch to push ('push'; default: git's own choice).
    """

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.param("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"
        if operation not in VALID_OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(VALID_OPERATIONS))}"
        if operation == "commit" and not context.param("message"):
            return False, "Missing required param: 'message' for commit operation"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operations: dict[str, Callable[[ExecutionContext], Receipt]] = {
            "status": self._status,
            "add": self._add,
            "commit": self._commit,
            "push": self._push,
            "unpushed": self._unpushed,
            "head": self._head,
            "remote-url": self._remote_url,
        }
        try:
            return operations[context.param("operation")](context)
        except FileNotFoundError:
            if not self.is_available():
                return self.fail(context, "git is not installed", metadata={"missing": True})
            return self.fail(context, f"Repository not found: {context.cwd}")
        except subprocess.TimeoutExpired as e:
            return self.fail(context, f"git timed out after {e.timeout}s")
        except (GitError, OSError) as e:
            return self.fail(context, f"Git error: {e}")

    # ── Read-only ───────────────────────────────────────────────

    def _status(self, ctx: ExecutionContext) -> Receipt:
        """Current branch and number of changed paths (untracked included)."""
        changes = _nonblank(self._git(["status", "--porcelain"], ctx.cwd))
        branch = self._branch(ctx.cwd)
        return self.ok(
            ctx,
            f"{branch}: {len(changes)} change(s)",
            metadata={"branch": branch, "dirty": bool(changes), "changes": len(changes)},
        )

    def _unpushed(self, ctx: ExecutionContext) -> Receipt:
        """Commits on HEAD missing from ``<remote>/<branch>``.

        No upstream branch counts as zero unpushed, not as an error.
        """
        remote = ctx.param("remote", "origin")
        branch = self._branch(ctx.cwd)
        log = subprocess.run(
            ["git", "log", f"{remote}/{branch}..HEAD", "--oneline"],
            cwd=ctx.cwd,
            capture_output=True,
            text=True,
            timeout=30,
        )
        count = len(_nonblank(log.stdout)) if log.returncode == 0 else 0
        if log.returncode != 0:
            logger.debug("%s has no upstream %s/%s", ctx.cwd, remote, branch)
        return self.ok(ctx, str(count), metadata={"branch": branch, "unpushed": count})

    def _head(self, ctx: ExecutionContext) -> Receipt:
        return self.ok(ctx, self._git(["rev-parse", "--short", "HEAD"], ctx.cwd).strip())

    def _remote_url(self, ctx: ExecutionContext) -> Receipt:
        remote = ctx.param("remote", "origin")
        return self.ok(ctx, self._git(["remote", "get-url", remote], ctx.cwd).strip())

    # ── Writes ──────────────────────────────────────────────────

    def _add(self, ctx: ExecutionContext) -> Receipt:
        return self.ok(ctx, self._git(["add", "-A"], ctx.cwd))

    def _commit(self, ctx: ExecutionContext) -> Receipt:
        """Commit the index; skipped when nothing is staged."""
        staged = subprocess.run(
            ["git", "diff", "--cached", "--quiet"],
            cwd=ctx.cwd,
            capture_output=True,
            timeout=30,
        )
        if staged.returncode == 0:
            return self.skip(ctx, "Nothing to commit")

        message = ctx.param("message")
        output = self._git(["commit", "-m", message], ctx.cwd)
        return self.ok(ctx, output, metadata={"message": message})

    def _push(self, ctx: ExecutionContext) -> Receipt:
        args = ["push", ctx.param("remote", "origin")]
        if ctx.param("branch"):
            args.append(ctx.param("branch"))
        output = self._git(args, ctx.cwd, timeout=ctx.param("timeout", PUSH_TIMEOUT))
        return self.ok(ctx, output)

    # ── Helpers ─────────────────────────────────────────────────

    def _branch(self, cwd: str) -> str:
        """Checked-out branch, unborn ones included; "HEAD" when detached."""
        proc = subprocess.run(
            ["git", "symbolic-ref", "--short", "-q", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=30,
        )
        return proc.stdout.strip() if proc.returncode == 0 else "HEAD"

    def _git(self, args: list[str], cwd: str, timeout: int = 30) -> str:
        """Run git and return stdout, raising GitError on a non-zero exit."""
        proc = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        if proc.returncode != 0:
            raise GitError(proc.stderr.strip() or f"git {args[0]} failed")
        return proc.stdout


def _nonblank(text: str) -> list[str]:
    return [line for line in text.splitlines() if line.strip()]
