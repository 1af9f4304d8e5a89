"""
Configuration loader — reads dotbackup.yml into BackupSettings.

The file is optional. Lookup order:

    --config PATH  >  $DOTBACKUP_CONFIG  >  <dotfiles>/dotbackup.yml

where ``<dotfiles>`` is ``$DOTFILES_DIR`` or ``~/.dotfiles``. When no
file is found the built-in defaults are used. ``$DOTFILES_DIR`` also
sets the default ``dotfiles_dir``; an explicit value in the file wins.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

import yaml

from dotbackup.core.models.settings import BackupSettings

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "dotbackup.yml"
ENV_CONFIG = "DOTBACKUP_CONFIG"
ENV_DOTFILES_DIR = "DOTFILES_DIR"
DEFAULT_DOTFILES_DIR = "~/.dotfiles"


class ConfigError(Exception):
    """Raised when the backup configuration is invalid or unreadable."""


def expand_home(raw: str, home: Path | None = None) -> Path:
    """Resolve a leading ``~`` against *home* (default: the real home)."""
    home = home or Path.home()
    if raw == "~":
        return home
    if raw.startswith("~/"):
        return home / raw[2:]
    return Path(raw)


def find_config_file(
    explicit: Path | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Path | None:
    """Locate the settings file, or None to use defaults.

    An explicit path (CLI flag or env var) that does not exist is still
    returned so that loading reports it as missing.
    """
    env = os.environ if environ is None else environ

    if explicit is not None:
        return explicit

    env_path = env.get(ENV_CONFIG)
    if env_path:
        return expand_home(env_path, home)

    dotfiles = expand_home(env.get(ENV_DOTFILES_DIR) or DEFAULT_DOTFILES_DIR, home)
    candidate = dotfiles / CONFIG_FILENAME
    if candidate.is_file():
        return candidate

    return None


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> BackupSettings:
    """Load and validate backup settings.

    Args:
        path: Explicit path to dotbackup.yml. If None, searches as above.
        environ: Environment mapping (default: ``os.environ``).
        home: Home directory used to expand ``~`` while searching.

    Returns:
        Validated BackupSettings.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    env = os.environ if environ is None else environ
    path = find_config_file(path, env, home)

    data: dict = {}
    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")

        logger.debug("Loading settings from %s", path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e

        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Expected a YAML mapping in {path}, got {type(loaded).__name__}")
        data = loaded
    else:
        logger.debug("No %s found, using defaults", CONFIG_FILENAME)

    if "dotfiles_dir" not in data and env.get(ENV_DOTFILES_DIR):
        data = {**data, "dotfiles_dir": env[ENV_DOTFILES_DIR]}

    try:
        settings = BackupSettings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid backup configuration: {e}") from e

    logger.info("Dotfiles repo: %s", settings.dotfiles_dir)
    return settings
