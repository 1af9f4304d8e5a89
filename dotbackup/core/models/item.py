"""
Backup items — the fixed, ordered set of things a run can back up.

The list of items never changes at runtime. The selection menu only
flips ``selected``; the dispatcher walks the same order to run handlers.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Literal

from pydantic import BaseModel, Field


class ItemKey(str, Enum):
    """Stable identifier of a backup item, in display/execution order."""

    BREWFILE = "brewfile"
    CONFIGS = "configs"
    SSH_KEYS = "ssh_keys"
    PERSONAL_FILES = "personal_files"
    GIT_REPOS = "git_repos"
    CLAUDE = "claude"
    APP_PREFS = "app_prefs"
    CREDENTIALS = "credentials"


ITEM_LABELS: dict[ItemKey, str] = {
    ItemKey.BREWFILE: "Homebrew packages → Brewfile",
    ItemKey.CONFIGS: "Dotfile configs → git commit",
    ItemKey.SSH_KEYS: "SSH keys → encrypted zip to iCloud",
    ItemKey.PERSONAL_FILES: "Personal files → rsync to iCloud",
    ItemKey.GIT_REPOS: "Git repos → verify all pushed",
    ItemKey.CLAUDE: "Claude configs → git commit",
    ItemKey.APP_PREFS: "App preferences → export to dotfiles",
    ItemKey.CREDENTIALS: "Credentials (kube/docker) → iCloud",
}

# Credentials are opt-in; everything else starts selected.
DEFAULT_SELECTED: frozenset[ItemKey] = frozenset(ItemKey) - {ItemKey.CREDENTIALS}


ResultStatus = Literal["ok", "skipped", "failed"]


class ItemResult(BaseModel):
    """Outcome of running one item's handler.

    ``skipped`` means a dependency was missing (tool not installed,
    nothing to back up); ``failed`` means the handler tried and a tool
    or file operation went wrong.
    """

    key: str
    status: ResultStatus = "ok"
    message: str = ""
    error: str | None = None
    location: str | None = None
    count: int | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def success(cls, key: ItemKey | str, message: str = "", **kwargs: Any) -> ItemResult:
        return cls(key=_key_str(key), status="ok", message=message, **kwargs)

    @classmethod
    def skip(cls, key: ItemKey | str, reason: str = "", **kwargs: Any) -> ItemResult:
        return cls(key=_key_str(key), status="skipped", message=reason, **kwargs)

    @classmethod
    def failure(cls, key: ItemKey | str, error: str, **kwargs: Any) -> ItemResult:
        return cls(key=_key_str(key), status="failed", error=error, **kwargs)


def _key_str(key: ItemKey | str) -> str:
    return key.value if isinstance(key, ItemKey) else str(key)


Handler = Callable[..., ItemResult]


@dataclass(frozen=True)
class BackupItem:
    """A named, user-toggleable unit of work."""

    key: ItemKey
    label: str
    selected: bool = False
    handler: Handler | None = field(default=None, compare=False, repr=False)

    def with_selected(self, selected: bool) -> BackupItem:
        """Copy of this item with a new selection state."""
        return replace(self, selected=selected)

    def toggled(self) -> BackupItem:
        return replace(self, selected=not self.selected)
