"""
BackupSettings — where things live and what gets copied.

Loaded from an optional ``dotbackup.yml``; every field has a default that
matches a stock dotfiles layout, so the file is only needed to deviate.
Paths may start with ``~`` and are resolved against the operator's home
directory at run time, not at load time.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from dotbackup.core.models.item import ItemKey


class FileMapping(BaseModel):
    """A live file and where its copy lives inside the dotfiles repo."""

    source: str
    target: str


class PrefDomain(BaseModel):
    """A ``defaults`` domain exported into the dotfiles repo."""

    domain: str
    target: str
    label: str = ""


def _default_config_files() -> list[FileMapping]:
    pairs = [
        ("~/.zshrc", "zsh/.zshrc"),
        ("~/.gitconfig", "git/.gitconfig"),
        ("~/.tmux.conf", "tmux/.tmux.conf"),
        ("~/.config/starship.toml", "starship/starship.toml"),
        ("~/.config/wezterm/wezterm.lua", "wezterm/wezterm.lua"),
        ("~/.config/nvim/init.lua", "nvim/init.lua"),
        ("~/.config/nvim/lazy-lock.json", "nvim/lazy-lock.json"),
        ("~/.config/atuin/config.toml", "atuin/config.toml"),
        ("~/.config/btop/btop.conf", "btop/btop.conf"),
        ("~/.config/mise/config.toml", "mise/config.toml"),
        ("~/.config/zed/settings.json", "zed/settings.json"),
        ("~/.ssh/config", "ssh/config"),
    ]
    return [FileMapping(source=s, target=t) for s, t in pairs]


def _default_app_prefs() -> list[PrefDomain]:
    return [
        PrefDomain(
            domain="com.googlecode.iterm2",
            target="iterm2/com.googlecode.iterm2.plist",
            label="iTerm2",
        ),
    ]


def _default_credentials() -> list[FileMapping]:
    return [
        FileMapping(source="~/.kube/config", target="kube-config"),
        FileMapping(source="~/.docker/config.json", target="docker-config.json"),
    ]


class BackupSettings(BaseModel):
    """Root settings model — loaded from dotbackup.yml."""

    # ── Locations ────────────────────────────────────────────────
    dotfiles_dir: str = "~/.dotfiles"
    icloud_dir: str = "~/Library/Mobile Documents/com~apple~CloudDocs"
    code_dir: str = "~/Code"
    manifest_dir: str = "manifests"
    backup_prefix: str = "mac-backup-"

    # ── Git ──────────────────────────────────────────────────────
    dotfiles_repo: str = ""  # empty: read from the remote URL
    git_remote: str = "origin"
    git_branch: str = "main"

    # ── What gets copied ─────────────────────────────────────────
    config_files: list[FileMapping] = Field(default_factory=_default_config_files)
    personal_dirs: list[str] = Field(
        default_factory=lambda: ["~/Documents", "~/Music", "~/Desktop"]
    )
    extra_dirs: list[str] = Field(default_factory=lambda: ["~/Downloads"])
    app_prefs: list[PrefDomain] = Field(default_factory=_default_app_prefs)
    credentials: list[FileMapping] = Field(default_factory=_default_credentials)

    # ── Initial menu state ───────────────────────────────────────
    selected: dict[str, bool] = Field(default_factory=dict)

    @field_validator("selected")
    @classmethod
    def _known_item_keys(cls, value: dict[str, bool]) -> dict[str, bool]:
        valid = {k.value for k in ItemKey}
        unknown = sorted(set(value) - valid)
        if unknown:
            raise ValueError(
                f"Unknown backup item(s): {', '.join(unknown)}. "
                f"Valid: {', '.join(k.value for k in ItemKey)}"
            )
        return value
