"""
Adapter registry — routes each Action to the adapter named in it.

``execute_action`` is the only way backup services run a tool. It
always returns a Receipt: unknown adapters, invalid params and adapters
that blow up all come back as failed receipts, timed and logged.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from dotbackup.adapters.base import Adapter, ExecutionContext
from dotbackup.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)

_MARKERS = {"ok": "✓", "failed": "✗", "skipped": "⊘"}


class AdapterRegistry:
    """Adapters by name, plus the single execution entrypoint."""

    def __init__(self) -> None:
        self._adapters: dict[str, Adapter] = {}

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.debug("Replacing adapter %s", adapter.name)
        self._adapters[adapter.name] = adapter

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Availability of each adapter's tool; a crashing probe counts as unavailable."""
        status = {}
        for name, adapter in self._adapters.items():
            try:
                available = bool(adapter.is_available())
            except Exception:
                logger.debug("Availability probe for %s raised", name, exc_info=True)
                available = False
            status[name] = {"name": name, "available": available, "type": type(adapter).__name__}
        return status

    def execute_action(self, action: Action, working_dir: str = ".") -> Receipt:
        """Validate and run *action*, never raising."""
        started = time.monotonic()
        receipt = self._dispatch(action, working_dir)
        receipt.duration_ms = int((time.monotonic() - started) * 1000)
        logger.debug(
            "%s %s:%s (%d ms)",
            _MARKERS.get(receipt.status, "?"),
            action.adapter,
            action.id,
            receipt.duration_ms,
        )
        return receipt

    def _dispatch(self, action: Action, working_dir: str) -> Receipt:
        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                action.adapter, action.id, f"No adapter registered for '{action.adapter}'"
            )

        context = ExecutionContext(action=action, working_dir=working_dir, params=action.params)

        try:
            valid, reason = adapter.validate(context)
        except Exception as e:
            return Receipt.failure(action.adapter, action.id, f"Validation error: {e}")
        if not valid:
            return Receipt.failure(action.adapter, action.id, f"Validation failed: {reason}")

        try:
            return adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised on %s: %s", action.adapter, action.id, e)
            return Receipt.failure(action.adapter, action.id, f"Unexpected error: {e}")


def create_default_registry() -> AdapterRegistry:
    """Registry wired to the real shell and git adapters."""
    from dotbackup.adapters.shell.command import ShellCommandAdapter
    from dotbackup.adapters.vcs.git import GitAdapter

    registry = AdapterRegistry()
    registry.register(ShellCommandAdapter())
    registry.register(GitAdapter())
    return registry
