"""
Git repo verification — make sure nothing is only on this machine.

Walks every git repository directly under the code directory and looks
for uncommitted changes and commits not on the remote branch. If any
repo needs attention the operator decides whether the run continues;
declining raises ``RunAborted`` and stops the whole run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from dotbackup.core.models.item import ItemKey, ItemResult
from dotbackup.core.services.backup_common import BackupContext, RunAborted
from dotbackup.core.services.console import is_affirmative

logger = logging.getLogger(__name__)


@dataclass
class RepoStatus:
    """Commit hygiene of one repository."""

    name: str
    path: Path
    uncommitted: bool = False
    unpushed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.uncommitted and self.unpushed == 0 and not self.errors

    @property
    def issues(self) -> list[str]:
        found = []
        if self.uncommitted:
            found.append("uncommitted changes")
        if self.unpushed:
            found.append(f"{self.unpushed} unpushed commit(s)")
        found += [f"could not inspect: {e}" for e in self.errors]
        return found


def find_repos(code_dir: Path) -> list[Path]:
    """Immediate subdirectories of *code_dir* that are git repositories."""
    if not code_dir.is_dir():
        return []
    return sorted(
        p for p in code_dir.iterdir()
        if p.is_dir() and (p / ".git").is_dir()
    )


def inspect_repo(ctx: BackupContext, repo: Path, check_unpushed: bool = True) -> RepoStatus:
    """Read dirty state (and optionally unpushed count) of a repo."""
    status = RepoStatus(name=repo.name, path=repo)

    receipt = ctx.git(f"git_repos:{repo.name}:status", "status", repo)
    if receipt.ok:
        status.uncommitted = bool(receipt.metadata.get("dirty"))
    else:
        status.errors.append(receipt.error or "git status failed")

    if check_unpushed:
        receipt = ctx.git(
            f"git_repos:{repo.name}:unpushed",
            "unpushed",
            repo,
            remote=ctx.settings.git_remote,
        )
        if receipt.ok:
            status.unpushed = int(receipt.metadata.get("unpushed", 0))
        else:
            status.errors.append(receipt.error or "git log failed")

    if status.errors:
        logger.debug("Problems inspecting %s: %s", repo, status.errors)
    return status


def verify_git_repos(ctx: BackupContext) -> ItemResult:
    """Report repos with local-only work and let the operator gate the run.

    Raises:
        RunAborted: The operator chose not to continue.
    """
    ctx.console.header("Verifying Git repos")

    code_dir = ctx.code_dir
    if not code_dir.is_dir():
        ctx.console.warn(f"{ctx.settings.code_dir} not found")
        return ItemResult.skip(ItemKey.GIT_REPOS, f"{code_dir} not found")

    if not ctx.has_tool("git"):
        ctx.console.warn("git not installed, skipping")
        return ItemResult.skip(ItemKey.GIT_REPOS, "git not installed")

    statuses = [inspect_repo(ctx, repo) for repo in find_repos(code_dir)]
    for status in statuses:
        if status.clean:
            ctx.console.ok(f"{status.name} — clean")
        else:
            ctx.console.warn(f"{status.name} — {', '.join(status.issues)}")

    needs_attention = [s.name for s in statuses if not s.clean]
    if not needs_attention:
        ctx.console.ok("All repos are clean and pushed")
        return ItemResult.success(
            ItemKey.GIT_REPOS,
            "All repos clean and pushed",
            count=len(statuses),
        )

    answer = ctx.console.ask(
        "Some repos have uncommitted or unpushed work. Continue anyway? [Y/n]:"
    )
    if not is_affirmative(answer):
        ctx.console.warn("Please push your changes first, then run backup again.")
        raise RunAborted(f"{len(needs_attention)} repo(s) need attention")

    return ItemResult.success(
        ItemKey.GIT_REPOS,
        f"{len(needs_attention)} repo(s) need attention",
        count=len(statuses),
        details={"needs_attention": needs_attention},
    )
