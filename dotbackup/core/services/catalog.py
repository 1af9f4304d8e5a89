"""
Item catalog — binds every ItemKey to its label and handler.

The mapping is checked at import time: adding an ItemKey without a
handler fails loudly instead of surfacing as a lookup miss mid-run.
"""

from __future__ import annotations

from typing import Mapping

from dotbackup.core.models.item import (
    DEFAULT_SELECTED,
    ITEM_LABELS,
    BackupItem,
    Handler,
    ItemKey,
)
from dotbackup.core.services.backup_icloud import (
    backup_credentials,
    backup_personal_files,
    backup_ssh_keys,
)
from dotbackup.core.services.backup_repo import (
    backup_app_prefs,
    backup_brewfile,
    backup_claude,
    backup_configs,
)
from dotbackup.core.services.git_verify import verify_git_repos

HANDLERS: dict[ItemKey, Handler] = {
    ItemKey.BREWFILE: backup_brewfile,
    ItemKey.CONFIGS: backup_configs,
    ItemKey.SSH_KEYS: backup_ssh_keys,
    ItemKey.PERSONAL_FILES: backup_personal_files,
    ItemKey.GIT_REPOS: verify_git_repos,
    ItemKey.CLAUDE: backup_claude,
    ItemKey.APP_PREFS: backup_app_prefs,
    ItemKey.CREDENTIALS: backup_credentials,
}

_missing = [k.value for k in ItemKey if k not in HANDLERS or k not in ITEM_LABELS]
if _missing:
    raise RuntimeError(f"Backup items without a handler or label: {', '.join(_missing)}")


def default_items(selected: Mapping[str, bool] | None = None) -> tuple[BackupItem, ...]:
    """The eight backup items in fixed order.

    Args:
        selected: Optional per-key overrides of the initial selection
            (``BackupSettings.selected``).
    """
    overrides = selected or {}
    return tuple(
        BackupItem(
            key=key,
            label=ITEM_LABELS[key],
            selected=overrides.get(key.value, key in DEFAULT_SELECTED),
            handler=HANDLERS[key],
        )
        for key in ItemKey
    )
