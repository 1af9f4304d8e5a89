"""
Backup use case — the four-phase workflow, start to finish.

    preconditions → inventory → selection → execution → manifest & commit

Control only moves forward. The run ends early, successfully, when the
operator selects nothing or declines to proceed, and ends early with
``ABORTED`` when they stop at the git verification gate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable

from dotbackup.core.models.item import BackupItem
from dotbackup.core.models.manifest import BackupManifest
from dotbackup.core.services.backup_common import BackupContext, RunAborted
from dotbackup.core.services.catalog import default_items
from dotbackup.core.services.dispatcher import DispatchReport, dispatch
from dotbackup.core.services.inventory import InventoryReport, scan_inventory
from dotbackup.core.services.manifest import (
    CommitResult,
    build_manifest,
    collect_machine_info,
    commit_and_push,
    count_formulae,
    resolve_dotfiles_repo,
    write_manifest,
)
from dotbackup.core.services.selection import Phase, SelectionState, apply_command, confirm

logger = logging.getLogger(__name__)


class PreconditionError(Exception):
    """The run cannot start (e.g. the dotfiles repo is missing)."""


class Outcome(str, Enum):
    COMPLETED = "completed"
    EMPTY = "empty"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


@dataclass
class BackupRunResult:
    """Everything a finished (or stopped) run produced."""

    outcome: Outcome
    items: tuple[BackupItem, ...] = ()
    inventory: InventoryReport | None = None
    report: DispatchReport = field(default_factory=DispatchReport)
    manifest: BackupManifest | None = None
    manifest_path: Path | None = None
    commit: CommitResult | None = None
    backup_dest: Path | None = None
    error: str | None = None

    @property
    def exit_code(self) -> int:
        return 1 if self.outcome is Outcome.ABORTED or self.error else 0

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "selected": [i.key.value for i in self.items if i.selected],
            "report": self.report.to_dict(),
            "manifest_path": str(self.manifest_path) if self.manifest_path else None,
            "commit": self.commit.to_dict() if self.commit else None,
            "error": self.error,
        }


def check_preconditions(ctx: BackupContext) -> None:
    """Fail before any phase when the dotfiles repo is absent.

    Raises:
        PreconditionError: The dotfiles directory does not exist.
    """
    if not ctx.dotfiles_dir.is_dir():
        raise PreconditionError(f"Dotfiles directory not found at {ctx.dotfiles_dir}")


def select_items(ctx: BackupContext, items: Iterable[BackupItem]) -> SelectionState:
    """Run the menu loop until the selection is settled."""
    state = SelectionState.initial(items)
    while state.phase is Phase.DISPLAYING:
        state = apply_command(state, ctx.console.menu(state))

    if state.phase is Phase.EMPTY:
        return state

    ctx.console.ok(f"{state.selected_count} item(s) selected for backup.")
    return confirm(state, ctx.console.ask("Proceed with backup? [Y/n]:"))


def run_backup(
    ctx: BackupContext,
    items: Iterable[BackupItem] | None = None,
) -> BackupRunResult:
    """Execute the whole backup workflow.

    Args:
        ctx: Run context (settings, registry, console).
        items: Initial items; defaults to the catalog with the
            configured initial selection.

    Raises:
        PreconditionError: Before any phase, when the dotfiles repo is missing.
    """
    check_preconditions(ctx)
    if items is None:
        items = default_items(ctx.settings.selected)

    # ── Phase 1: Inventory ──────────────────────────────────────
    inventory = scan_inventory(ctx)
    ctx.console.inventory(inventory)

    # ── Phase 2: Selection ──────────────────────────────────────
    ctx.console.header("Phase 2: Select Backup Items")
    state = select_items(ctx, items)
    result = BackupRunResult(outcome=Outcome.COMPLETED, items=state.items, inventory=inventory)

    if state.phase is Phase.EMPTY:
        ctx.console.warn("No items selected. Nothing to back up.")
        result.outcome = Outcome.EMPTY
        return result
    if state.phase is Phase.CANCELLED:
        ctx.console.warn("Backup cancelled.")
        result.outcome = Outcome.CANCELLED
        return result

    logger.info("Selected: %s", ", ".join(k.value for k in state.selected_keys))

    # ── Phase 3: Execution ──────────────────────────────────────
    ctx.console.header("Phase 3: Executing Backups")
    try:
        result.report = dispatch(state.items, ctx)
    except RunAborted as e:
        result.outcome = Outcome.ABORTED
        result.error = str(e)
        return result

    # ── Phase 4: Manifest & commit ──────────────────────────────
    ctx.console.header("Phase 4: Creating manifest & committing")
    machine = collect_machine_info(ctx)
    result.backup_dest = ctx.backup_dest
    result.manifest = build_manifest(
        state.items,
        result.report,
        machine,
        icloud_backup_dir=str(ctx.backup_dest),
        dotfiles_repo=resolve_dotfiles_repo(ctx),
        formulae_count=count_formulae(ctx),
    )
    try:
        result.manifest_path = write_manifest(ctx, result.manifest)
    except OSError as e:
        logger.debug("Cannot write manifest", exc_info=True)
        result.error = f"Manifest not written: {e}"
        ctx.console.fail(result.error)
    result.commit = commit_and_push(ctx, machine)

    logger.info(
        "Backup %s: %d ok, %d failed, %d skipped",
        result.report.status,
        result.report.succeeded,
        result.report.failed,
        result.report.skipped,
    )
    return result
