"""
Mock adapter — canned receipts in place of real tools.

Register one as "shell" and one as "git" and a whole backup run can be
exercised without brew, zip, rsync or a git remote. Responses are keyed
by action id; an id ending in ``*`` matches every id with that prefix.
Unscripted actions succeed with empty output.
"""

from __future__ import annotations

from dotbackup.adapters.base import Adapter, ExecutionContext
from dotbackup.core.models.action import Receipt


class MockAdapter(Adapter):
    """Scriptable stand-in that records every call it receives."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def called_ids(self) -> list[str]:
        """Action ids in the order they were executed."""
        return [ctx.action.id for ctx in self.call_log]

    def is_available(self) -> bool:
        return self._available

    # ── Scripting ───────────────────────────────────────────────

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._responses[action_id] = receipt

    def set_output(self, action_id: str, output: str) -> None:
        """Succeed with *output* (e.g. ``brew list`` lines)."""
        self.set_response(action_id, Receipt.success(self._name, action_id, output))

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        self.set_response(action_id, Receipt.failure(self._name, action_id, error))

    def reset(self) -> None:
        self.call_log.clear()
        self._responses.clear()

    # ── Adapter ─────────────────────────────────────────────────

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        return self._lookup(context.action.id) or self.ok(
            context, self._default_output, metadata={"mock": True}
        )

    def _lookup(self, action_id: str) -> Receipt | None:
        if action_id in self._responses:
            return self._responses[action_id]
        for key, receipt in self._responses.items():
            if key.endswith("*") and action_id.startswith(key[:-1]):
                return receipt
        return None
