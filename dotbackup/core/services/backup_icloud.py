"""
Backup handlers that write into the dated iCloud Drive directory.

SSH keys (password-protected zip), personal folders (rsync) and
credential files land in ``<icloud>/mac-backup-YYYYMMDD/``. None of
these go into git. Every handler skips with a warning when iCloud Drive
is not present.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotbackup.core.models.item import ItemKey, ItemResult
from dotbackup.core.services.backup_common import (
    BackupContext,
    copy_file,
    dir_has_entries,
    dir_size_bytes,
    human_size,
)

logger = logging.getLogger(__name__)

SSH_DIR = "~/.ssh"
SSH_ARCHIVE_NAME = "ssh-keys-encrypted.zip"


def _require_icloud(ctx: BackupContext, key: ItemKey) -> ItemResult | None:
    if ctx.icloud_available():
        return None
    ctx.console.warn("iCloud Drive not accessible, skipping")
    return ItemResult.skip(key, f"iCloud Drive not found at {ctx.icloud_dir}")


# ═══════════════════════════════════════════════════════════════════
#  SSH keys
# ═══════════════════════════════════════════════════════════════════


def ssh_key_files(ssh_dir: Path) -> list[Path]:
    """Key pairs (``id_*``) plus ``known_hosts``."""
    if not ssh_dir.is_dir():
        return []
    files = sorted(p for p in ssh_dir.glob("id_*") if p.is_file())
    known_hosts = ssh_dir / "known_hosts"
    if known_hosts.is_file():
        files.append(known_hosts)
    return files


def backup_ssh_keys(ctx: BackupContext) -> ItemResult:
    """Zip SSH keys with a password into the iCloud backup directory.

    ``zip -e`` asks for the password on the terminal, so the command
    runs attached to it rather than captured.
    """
    ctx.console.header("Backing up SSH keys")

    ssh_dir = ctx.path(SSH_DIR)
    key_files = ssh_key_files(ssh_dir)
    if not key_files:
        ctx.console.warn("No SSH keys found to back up")
        return ItemResult.skip(ItemKey.SSH_KEYS, "No SSH keys found")

    skipped = _require_icloud(ctx, ItemKey.SSH_KEYS)
    if skipped:
        return skipped

    if not ctx.has_tool("zip"):
        ctx.console.warn("zip not installed, skipping")
        return ItemResult.skip(ItemKey.SSH_KEYS, "zip not installed")

    dest = ctx.backup_dest
    dest.mkdir(parents=True, exist_ok=True)
    archive = dest / SSH_ARCHIVE_NAME

    ctx.console.warn("SSH keys will be encrypted with a password.")
    ctx.console.warn("Remember this password — you'll need it to restore.")

    receipt = ctx.run(
        "ssh_keys:zip",
        ["zip", "-e", archive, *[p.name for p in key_files]],
        cwd=ssh_dir,
        interactive=True,
    )
    if not receipt.ok:
        return ItemResult.failure(
            ItemKey.SSH_KEYS,
            f"Failed to create encrypted SSH key backup: {receipt.error}",
        )

    ctx.console.ok("SSH keys encrypted and saved to iCloud")
    ctx.console.info(f"Location: {archive}")
    return ItemResult.success(
        ItemKey.SSH_KEYS,
        f"{len(key_files)} files",
        location=str(archive),
        count=len(key_files),
        details={"encrypted": True},
    )


# ═══════════════════════════════════════════════════════════════════
#  Personal files
# ═══════════════════════════════════════════════════════════════════


def backup_personal_files(ctx: BackupContext) -> ItemResult:
    """Incrementally sync personal folders into the iCloud backup directory."""
    ctx.console.header("Backing up personal files to iCloud")

    dirs = [ctx.path(d) for d in ctx.settings.personal_dirs]
    dirs = [d for d in dirs if dir_has_entries(d)]
    if not dirs:
        ctx.console.warn("No personal files to back up")
        return ItemResult.skip(ItemKey.PERSONAL_FILES, "No personal files")

    skipped = _require_icloud(ctx, ItemKey.PERSONAL_FILES)
    if skipped:
        return skipped

    if not ctx.has_tool("rsync"):
        ctx.console.warn("rsync not installed, skipping")
        return ItemResult.skip(ItemKey.PERSONAL_FILES, "rsync not installed")

    dest = ctx.backup_dest
    dest.mkdir(parents=True, exist_ok=True)

    synced: list[str] = []
    errors: list[str] = []
    for src in dirs:
        size = human_size(dir_size_bytes(ctx, src))
        ctx.console.info(f"Syncing {src.name} ({size})...")
        receipt = ctx.run(
            f"personal_files:{src.name}",
            ["rsync", "-a", f"{src}/", f"{dest / src.name}/"],
            timeout=None,
        )
        if receipt.ok:
            ctx.console.ok(f"{src.name} ({size})")
            synced.append(src.name)
        else:
            ctx.console.fail(f"{src.name}: {receipt.error}")
            errors.append(f"{src.name}: {receipt.error}")

    if errors:
        return ItemResult.failure(
            ItemKey.PERSONAL_FILES,
            "; ".join(errors),
            location=str(dest),
            count=len(synced),
            details={"synced": synced},
        )

    ctx.console.ok("Personal files synced to iCloud")
    ctx.console.info(f"Location: {dest}/")
    return ItemResult.success(
        ItemKey.PERSONAL_FILES,
        f"{len(synced)} folders",
        location=str(dest),
        count=len(synced),
        details={"synced": synced},
    )


# ═══════════════════════════════════════════════════════════════════
#  Credentials
# ═══════════════════════════════════════════════════════════════════


def backup_credentials(ctx: BackupContext) -> ItemResult:
    """Copy kube/docker config files into the iCloud backup directory."""
    ctx.console.header("Backing up credentials to iCloud")

    skipped = _require_icloud(ctx, ItemKey.CREDENTIALS)
    if skipped:
        return skipped

    target_dir = ctx.backup_dest / "credentials"
    copied = 0
    errors: list[str] = []
    for mapping in ctx.settings.credentials:
        src = ctx.path(mapping.source)
        if not src.is_file():
            continue
        try:
            copy_file(src, target_dir / mapping.target)
        except OSError as e:
            logger.warning("Cannot copy %s: %s", src, e)
            ctx.console.fail(f"{mapping.target}: {e}")
            errors.append(f"{mapping.target}: {e}")
            continue
        ctx.console.ok(mapping.target)
        copied += 1

    if errors:
        return ItemResult.failure(ItemKey.CREDENTIALS, "; ".join(errors), count=copied)

    if copied == 0:
        ctx.console.info("No credential files found to back up")
        return ItemResult.skip(ItemKey.CREDENTIALS, "No credential files found")

    ctx.console.ok(f"{copied} credential file(s) copied to iCloud")
    ctx.console.info(f"Location: {target_dir}/")
    return ItemResult.success(
        ItemKey.CREDENTIALS,
        f"{copied} files",
        location=str(target_dir),
        count=copied,
    )
