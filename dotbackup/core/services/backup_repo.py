"""
Backup handlers that write into the dotfiles repository.

Brewfile, dotfile configs, Claude configs and app preferences all land
in the dotfiles working tree and are committed by the manifest phase.
Each handler prints its own progress and returns an ``ItemResult``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from dotbackup.core.models.item import ItemKey, ItemResult
from dotbackup.core.services.backup_common import BackupContext, copy_file

logger = logging.getLogger(__name__)

_BREWFILE_ENTRY_RE = re.compile(r"^(brew|cask|tap)\b")

CLAUDE_CODE_DIR = "~/.claude"
CLAUDE_DESKTOP_DIR = "~/Library/Application Support/Claude"
CLAUDE_CODE_FILES = ("settings.json", "settings.local.json")


# ═══════════════════════════════════════════════════════════════════
#  Brewfile
# ═══════════════════════════════════════════════════════════════════


def count_brewfile_entries(brewfile: Path) -> int:
    """Number of ``brew``/``cask``/``tap`` lines in a Brewfile."""
    if not brewfile.is_file():
        return 0
    return sum(
        1 for line in brewfile.read_text(encoding="utf-8").splitlines()
        if _BREWFILE_ENTRY_RE.match(line)
    )


def backup_brewfile(ctx: BackupContext) -> ItemResult:
    """Dump installed Homebrew packages into ``<dotfiles>/Brewfile``."""
    ctx.console.header("Backing up Homebrew packages")

    if not ctx.has_tool("brew"):
        ctx.console.warn("Homebrew not installed, skipping")
        return ItemResult.skip(ItemKey.BREWFILE, "Homebrew not installed")

    brewfile = ctx.dotfiles_dir / "Brewfile"
    receipt = ctx.run(
        "brewfile:dump",
        ["brew", "bundle", "dump", "--force", "--describe", f"--file={brewfile}"],
        cwd=ctx.dotfiles_dir,
    )
    if not receipt.ok:
        return ItemResult.failure(ItemKey.BREWFILE, f"brew bundle dump failed: {receipt.error}")

    count = count_brewfile_entries(brewfile)
    ctx.console.ok(f"Brewfile updated with {count} entries")
    return ItemResult.success(
        ItemKey.BREWFILE,
        f"{count} entries",
        location=str(brewfile),
        count=count,
    )


# ═══════════════════════════════════════════════════════════════════
#  Dotfile configs
# ═══════════════════════════════════════════════════════════════════


def backup_configs(ctx: BackupContext) -> ItemResult:
    """Copy live config files back into their dotfiles repo paths."""
    ctx.console.header("Backing up dotfile configs")

    copied = 0
    errors: list[str] = []
    for mapping in ctx.settings.config_files:
        src = ctx.path(mapping.source)
        if not src.is_file():
            continue
        try:
            copy_file(src, ctx.dotfiles_dir / mapping.target)
        except OSError as e:
            logger.warning("Cannot copy %s: %s", src, e)
            ctx.console.fail(f"{mapping.target}: {e}")
            errors.append(f"{mapping.target}: {e}")
            continue
        ctx.console.ok(mapping.target)
        copied += 1

    ctx.console.ok(f"{copied} config files copied into dotfiles repo")
    if errors:
        return ItemResult.failure(ItemKey.CONFIGS, "; ".join(errors), count=copied)
    return ItemResult.success(
        ItemKey.CONFIGS,
        f"{copied} files",
        location=str(ctx.dotfiles_dir),
        count=copied,
    )


# ═══════════════════════════════════════════════════════════════════
#  Claude
# ═══════════════════════════════════════════════════════════════════


def friendly_project_name(encoded: str) -> str:
    """Turn ``-Users-me-Code-dotfiles`` into ``dotfiles``.

    Claude Code stores per-project data under the project path with
    slashes replaced by dashes.
    """
    name = re.sub(r"^-Users-[^-]*-Code-", "", encoded)
    return re.sub(r"^-Users-[^-]*-", "", name)


def backup_claude(ctx: BackupContext) -> ItemResult:
    """Copy Claude Code / Claude Desktop settings and project memory."""
    ctx.console.header("Backing up Claude configs")

    target_root = ctx.dotfiles_dir / "claude"
    code_dir = ctx.path(CLAUDE_CODE_DIR)
    desktop_dir = ctx.path(CLAUDE_DESKTOP_DIR)

    copies: list[tuple[Path, Path, str]] = []

    for name in CLAUDE_CODE_FILES:
        src = code_dir / name
        if src.is_file():
            copies.append((src, target_root / "claude-code" / name, f"Claude Code {name}"))

    if desktop_dir.is_dir():
        for src in sorted(desktop_dir.glob("*.json")):
            if src.is_file():
                copies.append(
                    (src, target_root / "claude-desktop" / src.name, f"Claude Desktop {src.name}")
                )

    projects_dir = code_dir / "projects"
    if projects_dir.is_dir():
        for project in sorted(p for p in projects_dir.iterdir() if p.is_dir()):
            memory = project / "memory" / "MEMORY.md"
            if memory.is_file():
                friendly = friendly_project_name(project.name)
                copies.append(
                    (memory, target_root / "project-memory" / friendly / "MEMORY.md",
                     f"Project memory: {friendly}")
                )

    copied = 0
    errors: list[str] = []
    for src, dst, label in copies:
        try:
            copy_file(src, dst)
        except OSError as e:
            logger.warning("Cannot copy %s: %s", src, e)
            ctx.console.fail(f"{label}: {e}")
            errors.append(f"{label}: {e}")
            continue
        ctx.console.ok(label)
        copied += 1

    ctx.console.ok(f"{copied} Claude config files saved")
    if errors:
        return ItemResult.failure(ItemKey.CLAUDE, "; ".join(errors), count=copied)
    return ItemResult.success(
        ItemKey.CLAUDE,
        f"{copied} files",
        location=str(target_root),
        count=copied,
    )


# ═══════════════════════════════════════════════════════════════════
#  App preferences
# ═══════════════════════════════════════════════════════════════════


def backup_app_prefs(ctx: BackupContext) -> ItemResult:
    """Export ``defaults`` domains for configured apps into the repo."""
    ctx.console.header("Backing up app preferences")

    if not ctx.has_tool("defaults"):
        ctx.console.warn("defaults not available, skipping")
        return ItemResult.skip(ItemKey.APP_PREFS, "defaults not available")

    exported = 0
    errors: list[str] = []
    for pref in ctx.settings.app_prefs:
        label = pref.label or pref.domain
        probe = ctx.run(f"app_prefs:{pref.domain}:read", ["defaults", "read", pref.domain])
        if not probe.ok:
            logger.debug("No preferences for %s", pref.domain)
            continue

        target = ctx.dotfiles_dir / pref.target
        target.parent.mkdir(parents=True, exist_ok=True)
        receipt = ctx.run(
            f"app_prefs:{pref.domain}:export",
            ["defaults", "export", pref.domain, target],
        )
        if receipt.ok:
            ctx.console.ok(f"{label} preferences exported")
            exported += 1
        else:
            ctx.console.fail(f"{label}: {receipt.error}")
            errors.append(f"{label}: {receipt.error}")

    ctx.console.ok(f"{exported} app preference(s) exported")
    if errors:
        return ItemResult.failure(ItemKey.APP_PREFS, "; ".join(errors), count=exported)
    return ItemResult.success(ItemKey.APP_PREFS, f"{exported} exported", count=exported)
