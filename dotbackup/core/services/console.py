"""
Console — the operator-facing seam of the backup workflow.

Core services never import click. They report progress and ask
questions through this interface; ``dotbackup.ui.cli.console`` provides
the terminal implementation and tests provide a scripted one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dotbackup.core.services.inventory import InventoryReport
    from dotbackup.core.services.selection import SelectionState


class Console(ABC):
    """Status output and operator input for one backup run."""

    @abstractmethod
    def header(self, title: str) -> None:
        """Start a new titled section."""

    @abstractmethod
    def ok(self, text: str) -> None:
        """Something succeeded."""

    @abstractmethod
    def warn(self, text: str) -> None:
        """Something was skipped or needs attention."""

    @abstractmethod
    def fail(self, text: str) -> None:
        """Something failed."""

    @abstractmethod
    def info(self, text: str) -> None:
        """Neutral detail (locations, hints)."""

    @abstractmethod
    def inventory(self, report: InventoryReport) -> None:
        """Show the Phase 1 inventory."""

    @abstractmethod
    def menu(self, state: SelectionState) -> str:
        """Show the selection menu and return one raw line of input."""

    @abstractmethod
    def ask(self, question: str) -> str:
        """Ask a free-form question and return the raw answer."""


def is_affirmative(answer: str, default: bool = True) -> bool:
    """Interpret a ``[Y/n]`` (or ``[y/N]``) answer.

    With a yes default only answers starting with ``n``/``N`` are
    negative; anything else, including garbage, counts as yes. With a no
    default only ``y``/``Y`` answers are positive.
    """
    text = answer.strip()
    if not text:
        return default
    if default:
        return text[0] not in ("n", "N")
    return text[0] in ("y", "Y")
