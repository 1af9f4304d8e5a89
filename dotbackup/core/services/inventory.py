"""
Inventory scanner — Phase 1, a read-only look at what there is to save.

Each probe fills one section with human-readable lines. A probe that
raises degrades to a "not available" line; the scan always completes.
Nothing here writes anywhere, and nothing downstream consumes the
result except for display.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Literal

from dotbackup.core.services.backup_common import BackupContext, dir_size_bytes, human_size
from dotbackup.core.services.backup_icloud import SSH_DIR
from dotbackup.core.services.backup_repo import CLAUDE_CODE_DIR, CLAUDE_DESKTOP_DIR
from dotbackup.core.services.git_verify import find_repos, inspect_repo

logger = logging.getLogger(__name__)

LineLevel = Literal["ok", "warn", "info"]


@dataclass
class InventoryLine:
    level: LineLevel
    text: str
    hint: str = ""


@dataclass
class InventorySection:
    """One titled block of the inventory."""

    title: str
    lines: list[InventoryLine] = field(default_factory=list)

    def ok(self, text: str, hint: str = "") -> None:
        self.lines.append(InventoryLine("ok", text, hint))

    def warn(self, text: str, hint: str = "") -> None:
        self.lines.append(InventoryLine("warn", text, hint))

    def info(self, text: str, hint: str = "") -> None:
        self.lines.append(InventoryLine("info", text, hint))

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "lines": [
                {"level": ln.level, "text": ln.text, **({"hint": ln.hint} if ln.hint else {})}
                for ln in self.lines
            ],
        }


@dataclass
class InventoryReport:
    sections: list[InventorySection] = field(default_factory=list)

    def section(self, title: str) -> InventorySection | None:
        for s in self.sections:
            if s.title == title:
                return s
        return None

    def to_dict(self) -> dict:
        return {"sections": [s.to_dict() for s in self.sections]}


# ═══════════════════════════════════════════════════════════════════
#  Probes
# ═══════════════════════════════════════════════════════════════════


def _probe_homebrew(ctx: BackupContext, section: InventorySection) -> None:
    if not ctx.has_tool("brew"):
        section.warn("Homebrew not installed")
        return

    formulae = ctx.run("inventory:brew:formula", ["brew", "list", "--formula"])
    casks = ctx.run("inventory:brew:cask", ["brew", "list", "--cask"])
    taps = ctx.run("inventory:brew:tap", ["brew", "tap"])
    if not (formulae.ok and casks.ok and taps.ok):
        section.warn("Homebrew installed, package list not available")
        return
    section.ok(
        f"{len(formulae.lines)} formulae, {len(casks.lines)} casks, {len(taps.lines)} taps"
    )


def _probe_configs(ctx: BackupContext, section: InventorySection) -> None:
    mappings = ctx.settings.config_files
    found = sum(1 for m in mappings if ctx.path(m.source).is_file())
    tracked = 0
    if ctx.dotfiles_dir.is_dir():
        tracked = sum(1 for m in mappings if (ctx.dotfiles_dir / m.target).is_file())
    section.ok(f"{found} configs found ({tracked} tracked in repo)")


def _probe_ssh(ctx: BackupContext, section: InventorySection) -> None:
    ssh_dir = ctx.path(SSH_DIR)
    keys = []
    if ssh_dir.is_dir():
        keys = sorted(
            p for p in ssh_dir.glob("id_*") if p.is_file() and p.suffix != ".pub"
        )
    if not keys:
        section.warn("No SSH keys found")
        return

    section.ok(f"{len(keys)} key pair(s)")
    for pub in sorted(ssh_dir.glob("id_*.pub")):
        fields = pub.read_text(encoding="utf-8", errors="replace").split()
        comment = fields[2] if len(fields) > 2 else ""
        section.info(f"  {pub.name}: {comment}")


def _probe_git_repos(ctx: BackupContext, section: InventorySection) -> None:
    if not ctx.code_dir.is_dir():
        section.warn(f"{ctx.settings.code_dir}/ directory not found")
        return

    repos = find_repos(ctx.code_dir)
    dirty = 0
    if repos and ctx.has_tool("git"):
        dirty = sum(
            1 for repo in repos
            if inspect_repo(ctx, repo, check_unpushed=False).uncommitted
        )
    section.ok(f"{len(repos)} repos in {ctx.settings.code_dir}/")
    if dirty:
        section.warn(f"{dirty} repo(s) have uncommitted changes")


def _probe_personal_files(ctx: BackupContext, section: InventorySection) -> None:
    for raw in ctx.settings.personal_dirs:
        path = ctx.path(raw)
        size = dir_size_bytes(ctx, path)
        if size > 0:
            section.ok(f"{path.name}: {human_size(size)}")
    for raw in ctx.settings.extra_dirs:
        path = ctx.path(raw)
        size = dir_size_bytes(ctx, path)
        if size > 0:
            section.info(f"{path.name}: {human_size(size)}", hint="(usually skipped)")
    if not section.lines:
        section.info("No personal files found")


def _probe_icloud(ctx: BackupContext, section: InventorySection) -> None:
    if not ctx.icloud_available():
        section.warn("iCloud Drive not accessible")
        return
    section.ok(f"Available at: {ctx.settings.icloud_dir}/")
    section.ok(f"Current size: {human_size(dir_size_bytes(ctx, ctx.icloud_dir))}")


def _probe_claude(ctx: BackupContext, section: InventorySection) -> None:
    code_dir = ctx.path(CLAUDE_CODE_DIR)
    desktop_dir = ctx.path(CLAUDE_DESKTOP_DIR)
    if code_dir.is_dir():
        section.ok(f"Claude Code config: {human_size(dir_size_bytes(ctx, code_dir))}")
    if desktop_dir.is_dir():
        section.ok(f"Claude Desktop data: {human_size(dir_size_bytes(ctx, desktop_dir))}")
    if not section.lines:
        section.info("No Claude data found")


PROBES: list[tuple[str, Callable[[BackupContext, InventorySection], None]]] = [
    ("Homebrew", _probe_homebrew),
    ("Dotfile Configs", _probe_configs),
    ("SSH Keys", _probe_ssh),
    ("Git Repos", _probe_git_repos),
    ("Personal Files", _probe_personal_files),
    ("iCloud Drive", _probe_icloud),
    ("Claude", _probe_claude),
]


def scan_inventory(ctx: BackupContext) -> InventoryReport:
    """Run every probe and collect the sections, in display order."""
    report = InventoryReport()
    for title, probe in PROBES:
        section = InventorySection(title=title)
        try:
            probe(ctx, section)
        except Exception as e:
            logger.debug("Inventory probe %s failed", title, exc_info=True)
            section.lines = [InventoryLine("warn", f"Not available ({e})")]
        report.sections.append(section)
    return report
