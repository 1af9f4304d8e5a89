"""
Rendering — turn workflow state into styled terminal lines.

Pure functions: they return strings and never read input or print, so
the menu, inventory and summary can be checked without a terminal.
"""

from __future__ import annotations

import click

from dotbackup.core.models.item import ItemKey
from dotbackup.core.models.manifest import BackupManifest
from dotbackup.core.services.inventory import InventoryLine, InventoryReport
from dotbackup.core.services.selection import SelectionState
from dotbackup.core.use_cases.backup import BackupRunResult

RULE = "━" * 58

_MARKERS = {
    "ok": ("✓", "green"),
    "warn": ("⚠", "yellow"),
    "fail": ("✗", "red"),
    "info": ("ℹ", "cyan"),
}

BANNER = [
    "╔═══════════════════════════════════════════════════════════╗",
    "║                                                           ║",
    "║   macOS Pre-Reset Backup                                  ║",
    "║   Inventory & Selective Backup Tool                       ║",
    "║                                                           ║",
    "╚═══════════════════════════════════════════════════════════╝",
]

COMPLETE_BANNER = [
    "╔═══════════════════════════════════════════════════════════╗",
    "║                                                           ║",
    "║   ✓ Backup Complete!                                      ║",
    "║                                                           ║",
    "╚═══════════════════════════════════════════════════════════╝",
]


def render_header(title: str) -> list[str]:
    return [
        "",
        click.style(RULE, fg="blue"),
        click.style(f"  {title}", fg="blue", bold=True),
        click.style(RULE, fg="blue"),
    ]


def render_status(level: str, text: str) -> str:
    marker, color = _MARKERS[level]
    return f"  {click.style(marker, fg=color)} {text}"


def _render_inventory_line(line: InventoryLine) -> str:
    text = line.text
    if line.hint:
        text = f"{text} {click.style(line.hint, dim=True)}"
    return render_status(line.level, text)


def render_inventory(report: InventoryReport) -> list[str]:
    lines = [click.style(b, fg="blue") for b in BANNER]
    lines += render_header("Phase 1: System Inventory")
    for section in report.sections:
        lines.append("")
        lines.append(click.style(f"  {section.title}:", bold=True))
        lines += [_render_inventory_line(ln) for ln in section.lines]
    lines.append("")
    return lines


# ── Selection menu ──────────────────────────────────────────────


def render_menu(state: SelectionState) -> list[str]:
    """One line per item, in fixed order, plus any notice."""
    lines = []
    for number, item in enumerate(state.items, start=1):
        if item.selected:
            box = click.style("[x]", fg="green")
        else:
            box = click.style("[ ]", dim=True)
        lines.append(f"  {box} {click.style(f'{number}.', bold=True)} {item.label}")
    if state.notice:
        lines.append(click.style(f"  {state.notice}", fg="red"))
    lines.append("")
    return lines


def menu_prompt(item_count: int) -> str:
    return click.style(
        f"  Toggle [1-{item_count}], a=all, n=none, Enter=proceed: ",
        fg="cyan",
    )


# ── Summary ─────────────────────────────────────────────────────

_GITHUB_ITEMS = {
    ItemKey.BREWFILE: "Brewfile",
    ItemKey.CONFIGS: "Dotfile configs",
    ItemKey.CLAUDE: "Claude configs",
    ItemKey.APP_PREFS: "App preferences",
}

_ICLOUD_ITEMS = {
    ItemKey.SSH_KEYS: "SSH keys (encrypted)",
    ItemKey.PERSONAL_FILES: "Personal files",
    ItemKey.CREDENTIALS: "Credentials",
}


def render_summary(result: BackupRunResult) -> list[str]:
    """Final report: where each selected item went, then the reset checklist."""
    selected = {item.key for item in result.items if item.selected}
    backup_dest = str(result.backup_dest or "")
    dotfiles_repo = result.manifest.dotfiles_repo if result.manifest else ""

    def mark(key: ItemKey, label: str) -> str:
        item_result = result.report.get(key)
        status = item_result.status if item_result else "ok"
        if status == "failed":
            return f"    {click.style('✗', fg='red')} {label} (failed)"
        if status == "skipped":
            return f"    {click.style('⊘', fg='yellow')} {label} (skipped)"
        return f"    ✓ {label}"

    lines = [""]
    lines += [click.style(b, fg="green") for b in COMPLETE_BANNER]
    lines.append("")

    lines.append(click.style("  Saved to GitHub:", bold=True))
    lines += [mark(k, label) for k, label in _GITHUB_ITEMS.items() if k in selected]
    if result.manifest_path:
        lines.append("    ✓ Backup manifest")
    else:
        lines.append(f"    {click.style('✗', fg='red')} Backup manifest (not written)")

    lines.append("")
    lines.append(click.style("  Saved to iCloud:", bold=True))
    lines += [mark(k, label) for k, label in _ICLOUD_ITEMS.items() if k in selected]

    lines.append("")
    lines.append(click.style("  Verified:", bold=True))
    if ItemKey.GIT_REPOS in selected:
        lines.append(mark(ItemKey.GIT_REPOS, "Git repos pushed"))

    repo = dotfiles_repo or "your dotfiles repo"
    lines += [
        "",
        click.style("  📋 Before factory reset, verify:", fg="yellow"),
        f'    1. iCloud sync is complete: ls "{backup_dest}"',
        f"    2. GitHub has latest: {repo}",
        "    3. Sign out of iCloud LAST (after verifying sync)",
        "",
        click.style("  📋 After fresh install:", fg="yellow"),
        "    1. Sign into iCloud first",
        "    2. Wait for iCloud Drive to sync",
        "    3. Install Xcode CLT: xcode-select --install",
        "    4. Install Homebrew (https://brew.sh)",
        f"    5. Clone dotfiles: git clone {repo} ~/.dotfiles",
        "    6. Run restore: cd ~/.dotfiles && ./install.sh",
        "",
    ]
    return lines


# ── Manifests ───────────────────────────────────────────────────


def render_manifest(manifest: BackupManifest) -> list[str]:
    lines = [
        click.style(f"📋 Backup {manifest.created_at}", fg="cyan", bold=True),
        f"   Machine: {manifest.machine.describe()}",
    ]
    if manifest.icloud_backup_dir:
        lines.append(f"   iCloud:  {manifest.icloud_backup_dir}")
    if manifest.dotfiles_repo:
        lines.append(f"   Repo:    {manifest.dotfiles_repo}")
    lines.append("")
    for key, entry in manifest.backup_items.items():
        flag = entry.get("saved", entry.get("verified", False))
        box = click.style("[x]", fg="green") if flag else click.style("[ ]", dim=True)
        status = entry.get("status", "")
        suffix = f"  ({status})" if status and status not in ("ok", "not_selected") else ""
        lines.append(f"   {box} {key}{suffix}")
    return lines
