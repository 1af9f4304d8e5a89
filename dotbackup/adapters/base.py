"""
Adapter base — the contract every tool binding implements.

Backup services build Actions; adapters turn them into process calls
(``brew``, ``rsync``, ``git``, ...) and report back with Receipts.
An adapter that raises is a bug: the registry catches it, but adapters
are expected to turn every failure into a failed Receipt themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from dotbackup.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """An Action plus where to run it."""

    action: Action
    working_dir: str = "."
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def cwd(self) -> str:
        """The action's own ``cwd`` param, else the registry's working dir."""
        return self.action.params.get("cwd") or self.working_dir

    def param(self, key: str, default: Any = None) -> Any:
        return self.action.params.get(key, default)


class Adapter(ABC):
    """Binding for one external tool family.

    Subclasses provide ``name``, ``is_available``, ``validate`` and
    ``execute``, then get registered with the AdapterRegistry.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key ('shell', 'git')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool can be found. Fast, never raises."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check params before running: ``(True, "")`` or ``(False, why)``."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the action. Failures go in the Receipt."""

    # ── Receipt helpers ─────────────────────────────────────────

    def ok(self, context: ExecutionContext, output: str = "", **kwargs: Any) -> Receipt:
        return Receipt.success(self.name, context.action.id, output, **kwargs)

    def fail(self, context: ExecutionContext, error: str, **kwargs: Any) -> Receipt:
        return Receipt.failure(self.name, context.action.id, error, **kwargs)

    def skip(self, context: ExecutionContext, reason: str, **kwargs: Any) -> Receipt:
        return Receipt.skip(self.name, context.action.id, reason, **kwargs)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
