"""
dotbackup — CLI entrypoint.

Usage:
    dotbackup                  # interactive backup (same as `dotbackup run`)
    dotbackup inventory
    dotbackup items
    dotbackup manifests list
    python -m dotbackup.main --help
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from dotbackup import __version__
from dotbackup.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="dotbackup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to dotbackup.yml (default: $DOTBACKUP_CONFIG or <dotfiles>/dotbackup.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """dotbackup — inventory, select and back up a Mac before a factory reset."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(debug, verbose, quiet, os.environ),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
        quiet_third_party=not debug,
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


def load_settings_or_exit(ctx: click.Context):
    """Load settings for a command, exiting 1 on a configuration error."""
    from dotbackup.core.config.loader import ConfigError, load_settings

    try:
        return load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _build_context(settings, console):
    """Run context wired to the real tools."""
    from dotbackup.adapters.registry import create_default_registry
    from dotbackup.core.services.backup_common import BackupContext

    return BackupContext(
        settings=settings,
        registry=create_default_registry(),
        console=console,
    )


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Run the interactive backup (inventory → select → back up → commit)."""
    from dotbackup.core.use_cases.backup import Outcome, PreconditionError, run_backup
    from dotbackup.ui.cli.console import ClickConsole
    from dotbackup.ui.cli.render import render_summary

    settings = load_settings_or_exit(ctx)
    context = _build_context(settings, ClickConsole())

    try:
        result = run_backup(context)
    except PreconditionError as e:
        click.secho(f"Error: {e}", fg="red")
        click.echo("Set DOTFILES_DIR environment variable or clone your dotfiles first.")
        sys.exit(1)

    if result.outcome is Outcome.COMPLETED and not ctx.obj.get("quiet"):
        for line in render_summary(result):
            click.echo(line)

    if result.exit_code:
        sys.exit(result.exit_code)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def inventory(ctx: click.Context, as_json: bool) -> None:
    """Show what there is to back up (read-only)."""
    from dotbackup.core.services.inventory import scan_inventory
    from dotbackup.ui.cli.console import ClickConsole

    settings = load_settings_or_exit(ctx)
    console = ClickConsole(redraw=False)
    report = scan_inventory(_build_context(settings, console))

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    console.inventory(report)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def items(ctx: click.Context, as_json: bool) -> None:
    """List the backup items and their initial selection."""
    from dotbackup.core.services.catalog import default_items

    settings = load_settings_or_exit(ctx)
    catalog = default_items(settings.selected)

    if as_json:
        click.echo(json.dumps(
            [{"key": i.key.value, "label": i.label, "selected": i.selected} for i in catalog],
            indent=2,
        ))
        return

    click.secho(f"📦 Backup items ({len(catalog)}):", fg="cyan", bold=True)
    for number, item in enumerate(catalog, start=1):
        box = click.style("[x]", fg="green") if item.selected else click.style("[ ]", dim=True)
        click.echo(f"   {box} {number}. {item.key.value:15s} {item.label}")
    click.echo()


# ── Sub-groups ──────────────────────────────────────────────────

from dotbackup.ui.cli.manifests import manifests  # noqa: E402

cli.add_command(manifests)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
