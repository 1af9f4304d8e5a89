"""
ClickConsole — the terminal implementation of ``Console``.

Prints through click so colors are stripped when output is not a
terminal, and redraws the selection menu in place when it is.
"""

from __future__ import annotations

import sys

import click

from dotbackup.core.services.console import Console
from dotbackup.core.services.inventory import InventoryReport
from dotbackup.core.services.selection import SelectionState
from dotbackup.ui.cli.render import (
    menu_prompt,
    render_header,
    render_inventory,
    render_menu,
    render_status,
)

# Cursor up one line, then clear it.
_ERASE_LINE = "\033[A\033[2K"


class ClickConsole(Console):
    """Console backed by click.echo / click.prompt."""

    def __init__(self, redraw: bool | None = None) -> None:
        self._redraw = sys.stdout.isatty() if redraw is None else redraw
        self._menu_height = 0

    def _echo_lines(self, lines: list[str]) -> None:
        for line in lines:
            click.echo(line)

    def header(self, title: str) -> None:
        self._menu_height = 0
        self._echo_lines(render_header(title))

    def ok(self, text: str) -> None:
        click.echo(render_status("ok", text))

    def warn(self, text: str) -> None:
        click.echo(render_status("warn", text))

    def fail(self, text: str) -> None:
        click.echo(render_status("fail", text))

    def info(self, text: str) -> None:
        click.echo(render_status("info", text))

    def inventory(self, report: InventoryReport) -> None:
        self._echo_lines(render_inventory(report))

    def menu(self, state: SelectionState) -> str:
        if self._menu_height == 0:
            click.echo("")
            click.secho("  Toggle items with their number. Press Enter to proceed.", dim=True)
            click.echo("")
        elif self._redraw:
            click.echo(_ERASE_LINE * self._menu_height, nl=False)

        lines = render_menu(state)
        self._echo_lines(lines)
        raw = click.prompt(
            menu_prompt(len(state.items)),
            default="",
            show_default=False,
            prompt_suffix="",
        )
        self._menu_height = len(lines) + 1
        return raw

    def ask(self, question: str) -> str:
        self._menu_height = 0
        click.echo("")
        return click.prompt(
            click.style(f"  {question}", fg="yellow"),
            default="",
            show_default=False,
            prompt_suffix=" ",
        )
