"""
Manifest writer — Phase 4, record the run and commit it.

Builds one BackupManifest from the final selection and the dispatch
results, writes it into the dotfiles repo, stages everything, commits
when there is something to commit, and offers to push.

``saved``/``verified`` record the operator's selection (what was
attempted). The handler's real outcome sits next to it in ``status``.
"""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from dotbackup.core.models.item import BackupItem, ItemKey
from dotbackup.core.models.manifest import BackupManifest, MachineInfo
from dotbackup.core.persistence.manifest_file import manifest_filename, save_manifest
from dotbackup.core.services.backup_common import BackupContext
from dotbackup.core.services.console import is_affirmative
from dotbackup.core.services.dispatcher import DispatchReport

logger = logging.getLogger(__name__)

# Fixed fields written into specific item entries.
_ITEM_EXTRAS: dict[ItemKey, dict[str, Any]] = {
    ItemKey.SSH_KEYS: {"location": "icloud", "encrypted": True},
    ItemKey.PERSONAL_FILES: {"location": "icloud"},
    ItemKey.CREDENTIALS: {"location": "icloud"},
}


@dataclass
class CommitResult:
    """What happened to the dotfiles working tree after the run."""

    changes: int = 0
    committed: bool = False
    pushed: bool = False
    sha: str | None = None
    error: str | None = None
    push_error: str | None = None

    def to_dict(self) -> dict:
        return {
            "changes": self.changes,
            "committed": self.committed,
            "pushed": self.pushed,
            "sha": self.sha,
            "error": self.error,
            "push_error": self.push_error,
        }


# ═══════════════════════════════════════════════════════════════════
#  Gathering
# ═══════════════════════════════════════════════════════════════════


def _probe(ctx: BackupContext, action_id: str, argv: list[str]) -> str | None:
    receipt = ctx.run(action_id, argv)
    if receipt.ok and receipt.output.strip():
        return receipt.output.strip()
    return None


def collect_machine_info(ctx: BackupContext) -> MachineInfo:
    """Host name, macOS version and CPU; ``"unknown"`` where a probe fails."""
    hostname = (
        _probe(ctx, "machine:hostname", ["scutil", "--get", "ComputerName"])
        or platform.node()
        or "unknown"
    )
    return MachineInfo(
        hostname=hostname,
        macos_version=_probe(ctx, "machine:macos_version", ["sw_vers", "-productVersion"]) or "unknown",
        chip=_probe(ctx, "machine:chip", ["sysctl", "-n", "machdep.cpu.brand_string"]) or "unknown",
    )


def count_formulae(ctx: BackupContext) -> int:
    if not ctx.has_tool("brew"):
        return 0
    receipt = ctx.run("manifest:brew:formula", ["brew", "list", "--formula"])
    return len(receipt.lines) if receipt.ok else 0


def resolve_dotfiles_repo(ctx: BackupContext) -> str:
    """Configured repo URL, else the remote URL of the dotfiles checkout."""
    if ctx.settings.dotfiles_repo:
        return ctx.settings.dotfiles_repo
    receipt = ctx.git(
        "manifest:git:remote-url",
        "remote-url",
        ctx.dotfiles_dir,
        remote=ctx.settings.git_remote,
    )
    return receipt.output.strip() if receipt.ok else ""


# ═══════════════════════════════════════════════════════════════════
#  Building and writing
# ═══════════════════════════════════════════════════════════════════


def build_manifest(
    items: Iterable[BackupItem],
    report: DispatchReport,
    machine: MachineInfo,
    icloud_backup_dir: str = "",
    dotfiles_repo: str = "",
    formulae_count: int = 0,
    created_at: str | None = None,
) -> BackupManifest:
    """Assemble the manifest document for a run.

    Every item gets an entry, selected or not, in fixed order.
    """
    entries: dict[str, dict[str, Any]] = {}
    for item in items:
        result = report.get(item.key)
        flag = "verified" if item.key is ItemKey.GIT_REPOS else "saved"

        entry: dict[str, Any] = {flag: item.selected}
        if item.key is ItemKey.BREWFILE:
            entry["formulae_count"] = formulae_count
        entry.update(_ITEM_EXTRAS.get(item.key, {}))

        if result is None:
            entry["status"] = "not_run" if item.selected else "not_selected"
        else:
            entry["status"] = result.status
            if result.count is not None:
                entry["count"] = result.count
            if result.failed:
                entry["error"] = result.error

        entries[item.key.value] = entry

    kwargs: dict[str, Any] = {}
    if created_at is not None:
        kwargs["created_at"] = created_at

    return BackupManifest(
        machine=machine,
        backup_items=entries,
        icloud_backup_dir=icloud_backup_dir,
        dotfiles_repo=dotfiles_repo,
        **kwargs,
    )


def write_manifest(ctx: BackupContext, manifest: BackupManifest) -> Path:
    """Write the manifest to ``<dotfiles>/<manifest_dir>/backup-YYYYMMDD.json``."""
    path = ctx.manifest_dir / manifest_filename(ctx.today)
    save_manifest(manifest, path)
    ctx.console.ok(f"Manifest created: {ctx.settings.manifest_dir}/{path.name}")
    return path


# ═══════════════════════════════════════════════════════════════════
#  Commit and push
# ═══════════════════════════════════════════════════════════════════


def commit_message(ctx: BackupContext, machine: MachineInfo) -> str:
    return (
        f"backup: pre-reset backup {ctx.date_stamp}\n"
        "\n"
        "Automated backup before macOS factory reset.\n"
        f"Machine: {machine.describe()}"
    )


def commit_and_push(ctx: BackupContext, machine: MachineInfo) -> CommitResult:
    """Stage all changes, commit if any, and offer to push.

    Nothing staged is a no-op. A failed push leaves the local commit.
    """
    dotfiles = ctx.dotfiles_dir
    result = CommitResult()

    added = ctx.git("manifest:git:add", "add", dotfiles)
    if not added.ok:
        result.error = added.error
        ctx.console.fail(f"git add failed: {added.error}")
        return result

    status = ctx.git("manifest:git:status", "status", dotfiles)
    if not status.ok:
        result.error = status.error
        ctx.console.fail(f"git status failed: {status.error}")
        return result

    result.changes = int(status.metadata.get("changes", 0))
    if result.changes == 0:
        ctx.console.info("No changes to commit")
        return result

    committed = ctx.git(
        "manifest:git:commit",
        "commit",
        dotfiles,
        message=commit_message(ctx, machine),
    )
    if committed.status == "skipped":
        ctx.console.info("No changes to commit")
        return result
    if not committed.ok:
        result.error = committed.error
        ctx.console.fail(f"git commit failed: {committed.error}")
        return result

    result.committed = True
    ctx.console.ok(f"Changes committed ({result.changes} files)")

    if not is_affirmative(ctx.console.ask("Push to GitHub? [Y/n]:")):
        return result

    pushed = ctx.git(
        "manifest:git:push",
        "push",
        dotfiles,
        remote=ctx.settings.git_remote,
        branch=ctx.settings.git_branch,
    )
    if not pushed.ok:
        result.push_error = pushed.error
        logger.warning("Push failed: %s", pushed.error)
        ctx.console.fail(f"Push failed: {pushed.error}")
        return result

    result.pushed = True
    head = ctx.git("manifest:git:head", "head", dotfiles)
    result.sha = head.output.strip() if head.ok else None
    ctx.console.ok(f"Pushed to GitHub ({result.sha or '?'})")
    return result
