"""
Selection menu — a pure state machine over the backup items.

    DISPLAYING ──(toggle | all | none | invalid)──▶ DISPLAYING
    DISPLAYING ──(submit, ≥1 selected)──▶ CONFIRMING ──▶ PROCEED | CANCELLED
    DISPLAYING ──(submit, 0 selected)──▶ EMPTY

``apply_command`` and ``confirm`` never touch the terminal; the console
renders a state and hands back raw input. Item order is never changed,
only ``selected`` flags.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Union

from dotbackup.core.models.item import BackupItem, ItemKey
from dotbackup.core.services.console import is_affirmative


class Phase(str, Enum):
    DISPLAYING = "displaying"
    CONFIRMING = "confirming"
    PROCEED = "proceed"
    CANCELLED = "cancelled"
    EMPTY = "empty"


# ── Commands ────────────────────────────────────────────────────


@dataclass(frozen=True)
class Toggle:
    index: int  # 1-based, as shown in the menu


@dataclass(frozen=True)
class SelectAll:
    pass


@dataclass(frozen=True)
class SelectNone:
    pass


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class Invalid:
    raw: str


Command = Union[Toggle, SelectAll, SelectNone, Submit, Invalid]


def parse_command(raw: str, item_count: int) -> Command:
    """Parse one line of menu input.

    Valid toggle indices are exactly ``1..item_count``.
    """
    text = raw.strip()
    if text == "":
        return Submit()
    if text in ("a", "A"):
        return SelectAll()
    if text in ("n", "N"):
        return SelectNone()
    if text.isascii() and text.isdigit():
        index = int(text)
        if 1 <= index <= item_count:
            return Toggle(index)
    return Invalid(raw)


# ── State ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class SelectionState:
    """Menu state: the items, the phase, and a notice for the renderer."""

    items: tuple[BackupItem, ...]
    phase: Phase = Phase.DISPLAYING
    notice: str | None = None

    @classmethod
    def initial(cls, items: Iterable[BackupItem]) -> SelectionState:
        return cls(items=tuple(items))

    @property
    def keys(self) -> list[ItemKey]:
        return [item.key for item in self.items]

    @property
    def selected_keys(self) -> list[ItemKey]:
        return [item.key for item in self.items if item.selected]

    @property
    def selected_count(self) -> int:
        return sum(1 for item in self.items if item.selected)

    @property
    def done(self) -> bool:
        return self.phase in (Phase.PROCEED, Phase.CANCELLED, Phase.EMPTY)

    def is_selected(self, key: ItemKey) -> bool:
        return any(item.key == key and item.selected for item in self.items)


def apply_command(state: SelectionState, raw: str) -> SelectionState:
    """Transition a DISPLAYING state on one line of input.

    Any other phase is returned unchanged.
    """
    if state.phase is not Phase.DISPLAYING:
        return state

    command = parse_command(raw, len(state.items))

    if isinstance(command, Toggle):
        items = tuple(
            item.toggled() if i == command.index - 1 else item
            for i, item in enumerate(state.items)
        )
        return replace(state, items=items, notice=None)

    if isinstance(command, SelectAll):
        items = tuple(item.with_selected(True) for item in state.items)
        return replace(state, items=items, notice=None)

    if isinstance(command, SelectNone):
        items = tuple(item.with_selected(False) for item in state.items)
        return replace(state, items=items, notice=None)

    if isinstance(command, Submit):
        phase = Phase.CONFIRMING if state.selected_count else Phase.EMPTY
        return replace(state, phase=phase, notice=None)

    return replace(state, notice="Invalid choice")


def confirm(state: SelectionState, answer: str) -> SelectionState:
    """Resolve the "Proceed with backup?" prompt (default yes)."""
    if state.phase is not Phase.CONFIRMING:
        return state
    phase = Phase.PROCEED if is_affirmative(answer) else Phase.CANCELLED
    return replace(state, phase=phase)
