"""
CLI commands for past backup manifests.

Thin wrappers over ``dotbackup.core.persistence.manifest_file``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click


def _manifest_dir(ctx: click.Context) -> Path:
    """Resolve the manifest directory from the loaded settings."""
    from dotbackup.core.config.loader import expand_home

    settings = ctx.obj["settings"]
    return expand_home(settings.dotfiles_dir) / settings.manifest_dir


@click.group()
@click.pass_context
def manifests(ctx: click.Context) -> None:
    """Backup manifests — list and inspect previous runs."""
    from dotbackup.main import load_settings_or_exit

    ctx.obj["settings"] = load_settings_or_exit(ctx)


@manifests.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_manifests_cmd(ctx: click.Context, as_json: bool) -> None:
    """List manifests, oldest first."""
    from dotbackup.core.persistence.manifest_file import list_manifests, load_manifest, manifest_date

    directory = _manifest_dir(ctx)
    rows = []
    for path in list_manifests(directory):
        manifest = load_manifest(path)
        rows.append({
            "date": manifest_date(path),
            "path": str(path),
            "created_at": manifest.created_at if manifest else None,
            "hostname": manifest.machine.hostname if manifest else None,
            "saved": manifest.saved_keys() if manifest else [],
            "valid": manifest is not None,
        })

    if as_json:
        click.echo(json.dumps({"manifests": rows}, indent=2))
        return

    if not rows:
        click.secho(f"No manifests found in {directory}", fg="yellow")
        return

    click.secho(f"📋 Manifests ({len(rows)}):", fg="cyan", bold=True)
    for row in rows:
        if not row["valid"]:
            click.echo(f"   {row['date']}  " + click.style("(unreadable)", fg="red"))
            continue
        click.echo(f"   {row['date']}  {row['hostname']}  {len(row['saved'])} item(s)")
    click.echo()


@manifests.command()
@click.argument("day")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show(ctx: click.Context, day: str, as_json: bool) -> None:
    """Show the manifest for DAY (YYYYMMDD or YYYY-MM-DD)."""
    from dotbackup.core.persistence.manifest_file import load_manifest
    from dotbackup.ui.cli.render import render_manifest

    stamp = day.replace("-", "")
    if not (len(stamp) == 8 and stamp.isdigit()):
        click.secho(f"❌ Invalid date: {day} (expected YYYYMMDD)", fg="red")
        sys.exit(1)

    path = _manifest_dir(ctx) / f"backup-{stamp}.json"
    manifest = load_manifest(path)
    if manifest is None:
        click.secho(f"❌ No readable manifest at {path}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(manifest.model_dump(mode="json"), indent=2))
        return

    for line in render_manifest(manifest):
        click.echo(line)
    click.echo()
