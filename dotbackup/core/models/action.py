"""
Action and Receipt — how services ask for a tool to run.

A handler never calls ``brew`` or ``git`` itself. It builds an Action,
hands it to the adapter registry, and reads the Receipt that comes back.
Tool failures arrive as ``status="failed"`` receipts, not exceptions.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Iterable, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """One tool invocation.

    ``id`` names the step (``"brewfile:dump"``, ``"git_repos:api:status"``)
    and shows up in debug logs; mocks key their canned responses on it.
    """

    id: str
    name: str = ""
    adapter: str
    params: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def shell(
        cls,
        action_id: str,
        argv: Iterable[Any],
        cwd: Path | None = None,
        **params: Any,
    ) -> Action:
        """Command for the shell adapter; argv items are stringified."""
        merged: dict[str, Any] = {"argv": [str(a) for a in argv], **params}
        if cwd is not None:
            merged["cwd"] = str(cwd)
        return cls(id=action_id, adapter="shell", params=merged)

    @classmethod
    def git(cls, action_id: str, operation: str, cwd: Path, **params: Any) -> Action:
        """Operation for the git adapter, run inside *cwd*."""
        return cls(
            id=action_id,
            adapter="git",
            params={"operation": operation, "cwd": str(cwd), **params},
        )


class Receipt(BaseModel):
    """What happened when an Action ran."""

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0
    output: str = ""
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def lines(self) -> list[str]:
        """Non-blank output lines (``brew list`` style output)."""
        return [line for line in self.output.splitlines() if line.strip()]

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Nothing to do; *reason* is kept as the output."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
