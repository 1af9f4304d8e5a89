"""
BackupManifest — the persisted record of one backup run.

Serialized to ``<dotfiles>/manifests/backup-YYYYMMDD.json`` and committed
with the rest of the run's changes. Never modified after it is written.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

MANIFEST_SCHEMA_VERSION = "1.0"


def _now_utc() -> str:
    """Current UTC time, second precision, ``Z`` suffix."""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class MachineInfo(BaseModel):
    """Identity of the machine the backup was taken on."""

    hostname: str = "unknown"
    macos_version: str = "unknown"
    chip: str = "unknown"

    def describe(self) -> str:
        return f"{self.hostname} ({self.macos_version}, {self.chip})"


class BackupManifest(BaseModel):
    """Root manifest document.

    ``backup_items`` maps each item key to a free-form entry. Every entry
    has ``saved`` (``verified`` for git repos) reflecting the final
    selection, plus ``status`` carrying the handler's actual outcome.
    """

    schema_version: str = MANIFEST_SCHEMA_VERSION
    created_at: str = Field(default_factory=_now_utc)
    machine: MachineInfo = Field(default_factory=MachineInfo)
    backup_items: dict[str, dict[str, Any]] = Field(default_factory=dict)
    icloud_backup_dir: str = ""
    dotfiles_repo: str = ""

    def saved_keys(self) -> list[str]:
        """Keys whose entry is marked saved or verified."""
        return [
            key
            for key, entry in self.backup_items.items()
            if entry.get("saved") or entry.get("verified")
        ]
