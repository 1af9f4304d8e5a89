"""
Domain models — Pydantic types and records for the backup workflow.

All models are re-exported here for convenient access:

    from dotbackup.core.models import BackupItem, ItemKey, ItemResult, BackupManifest
"""

from dotbackup.core.models.action import Action, Receipt
from dotbackup.core.models.item import (
    DEFAULT_SELECTED,
    ITEM_LABELS,
    BackupItem,
    ItemKey,
    ItemResult,
)
from dotbackup.core.models.manifest import BackupManifest, MachineInfo
from dotbackup.core.models.settings import BackupSettings, FileMapping, PrefDomain

__all__ = [
    # action.py
    "Action",
    # item.py
    "BackupItem",
    # manifest.py
    "BackupManifest",
    # settings.py
    "BackupSettings",
    "DEFAULT_SELECTED",
    "FileMapping",
    "ITEM_LABELS",
    "ItemKey",
    "ItemResult",
    "MachineInfo",
    "PrefDomain",
    "Receipt",
]
