"""
Backup common — the run context and helpers shared by every phase.

``BackupContext`` carries settings, the adapter registry, the console,
and the clock/home directory for one run. Handlers receive it as their
only argument.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterable

from dotbackup.adapters.registry import AdapterRegistry
from dotbackup.core.config.loader import expand_home
from dotbackup.core.models.action import Action, Receipt
from dotbackup.core.models.settings import BackupSettings
from dotbackup.core.services.console import Console

logger = logging.getLogger(__name__)


class RunAborted(Exception):
    """The operator stopped the run after execution had started."""


@dataclass
class BackupContext:
    """Everything a phase or handler needs for one backup run."""

    settings: BackupSettings
    registry: AdapterRegistry
    console: Console
    home: Path = field(default_factory=Path.home)
    today: date = field(default_factory=date.today)
    which: Callable[[str], str | None] = shutil.which

    # ── Locations ────────────────────────────────────────────────

    def path(self, raw: str) -> Path:
        """Resolve a settings path (``~`` means this run's home)."""
        return expand_home(raw, self.home)

    @property
    def dotfiles_dir(self) -> Path:
        return self.path(self.settings.dotfiles_dir)

    @property
    def icloud_dir(self) -> Path:
        return self.path(self.settings.icloud_dir)

    @property
    def code_dir(self) -> Path:
        return self.path(self.settings.code_dir)

    @property
    def manifest_dir(self) -> Path:
        return self.dotfiles_dir / self.settings.manifest_dir

    @property
    def date_stamp(self) -> str:
        return self.today.strftime("%Y%m%d")

    @property
    def backup_dest(self) -> Path:
        """Dated backup directory inside iCloud Drive."""
        return self.icloud_dir / f"{self.settings.backup_prefix}{self.date_stamp}"

    def icloud_available(self) -> bool:
        return self.icloud_dir.is_dir()

    def has_tool(self, program: str) -> bool:
        return self.which(program) is not None

    # ── Tool invocation ──────────────────────────────────────────

    def run(
        self,
        action_id: str,
        argv: Iterable[Any],
        cwd: Path | None = None,
        **params: Any,
    ) -> Receipt:
        """Run a command through the shell adapter."""
        return self.registry.execute_action(Action.shell(action_id, argv, cwd, **params))

    def git(self, action_id: str, operation: str, cwd: Path, **params: Any) -> Receipt:
        """Run a git operation through the git adapter."""
        return self.registry.execute_action(Action.git(action_id, operation, cwd, **params))


# ═══════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════


def human_size(num_bytes: int) -> str:
    """Format a byte count the way ``du -h`` users expect."""
    if num_bytes >= 1024 ** 3:
        return f"{num_bytes / 1024 ** 3:.1f} GB"
    if num_bytes >= 1024 ** 2:
        return f"{num_bytes / 1024 ** 2:.1f} MB"
    if num_bytes >= 1024:
        return f"{num_bytes / 1024:.0f} KB"
    return f"{num_bytes} B"


def dir_size_bytes(ctx: BackupContext, path: Path) -> int:
    """Disk usage of *path* via ``du -sk``; 0 when missing or unreadable."""
    if not path.is_dir():
        return 0
    receipt = ctx.run(f"du:{path}", ["du", "-sk", path])
    if not receipt.ok or not receipt.output:
        return 0
    try:
        return int(receipt.output.split()[0]) * 1024
    except (ValueError, IndexError):
        logger.debug("Unparseable du output for %s: %r", path, receipt.output)
        return 0


def dir_has_entries(path: Path) -> bool:
    """True for an existing directory with at least one entry."""
    if not path.is_dir():
        return False
    try:
        return any(path.iterdir())
    except OSError:
        return False


def copy_file(src: Path, dst: Path) -> None:
    """Copy a file, creating the destination's parent directories."""
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
