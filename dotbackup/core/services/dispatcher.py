"""
Execution dispatcher — run each selected item's handler once, in order.

Best effort: a handler that fails (or raises) is logged and the next one
runs. The single exception is ``RunAborted`` from the git verification
gate, which propagates and ends the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from dotbackup.core.models.item import BackupItem, ItemKey, ItemResult
from dotbackup.core.services.backup_common import BackupContext, RunAborted

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    """Results of one execution phase, keyed in execution order."""

    results: dict[ItemKey, ItemResult] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results.values() if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results.values() if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results.values() if r.skipped)

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    def get(self, key: ItemKey) -> ItemResult | None:
        return self.results.get(key)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "results": {k.value: r.model_dump(mode="json") for k, r in self.results.items()},
        }


def dispatch(items: Iterable[BackupItem], ctx: BackupContext) -> DispatchReport:
    """Invoke the handler of every selected item, synchronously.

    Raises:
        RunAborted: The operator stopped the run at the git gate.
    """
    report = DispatchReport()

    for item in items:
        if not item.selected:
            continue
        if item.handler is None:
            result = ItemResult.failure(item.key, "No handler registered")
        else:
            try:
                result = item.handler(ctx)
            except RunAborted:
                logger.info("Run aborted during %s", item.key.value)
                raise
            except Exception as e:
                logger.debug("Handler for %s raised", item.key.value, exc_info=True)
                result = ItemResult.failure(item.key, f"Unexpected error: {e}")

        if result.failed:
            logger.warning("%s failed: %s", item.key.value, result.error)
            ctx.console.fail(f"{item.label}: {result.error}")

        report.results[item.key] = result

        status_marker = "✓" if result.ok else "✗" if result.failed else "⊘"
        logger.info("%s %s → %s", status_marker, item.key.value, result.status)

    return report
