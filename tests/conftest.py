"""
Shared test fixtures and configuration.
"""

from datetime import date
from pathlib import Path

import pytest

from dotbackup.adapters.mock import MockAdapter
from dotbackup.adapters.registry import AdapterRegistry
from dotbackup.core.models.settings import BackupSettings
from dotbackup.core.services.backup_common import BackupContext
from dotbackup.core.services.console import Console

TODAY = date(2026, 3, 14)


class ScriptedConsole(Console):
    """Console that records output and replays canned input.

    ``menu_inputs`` feed the selection menu one line at a time;
    ``answers`` feed ``ask``. An unanswered question gets "" (the default).
    """

    def __init__(self, menu_inputs=(), answers=()):
        self.menu_inputs = list(menu_inputs)
        self.answers = list(answers)
        self.events: list[tuple[str, str]] = []
        self.menus = []
        self.questions: list[str] = []
        self.reports = []

    def header(self, title):
        self.events.append(("header", title))

    def ok(self, text):
        self.events.append(("ok", text))

    def warn(self, text):
        self.events.append(("warn", text))

    def fail(self, text):
        self.events.append(("fail", text))

    def info(self, text):
        self.events.append(("info", text))

    def inventory(self, report):
        self.reports.append(report)

    def menu(self, state):
        self.menus.append(state)
        if not self.menu_inputs:
            raise AssertionError("menu shown more times than scripted")
        return self.menu_inputs.pop(0)

    def ask(self, question):
        self.questions.append(question)
        return self.answers.pop(0) if self.answers else ""

    def texts(self, level: str | None = None) -> list[str]:
        return [text for lvl, text in self.events if level is None or lvl == level]


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """A fake home directory with an (empty) dotfiles checkout."""
    home_dir = tmp_path / "home"
    (home_dir / ".dotfiles").mkdir(parents=True)
    return home_dir


@pytest.fixture
def icloud(home: Path) -> Path:
    """iCloud Drive present under the fake home."""
    path = home / "Library" / "Mobile Documents" / "com~apple~CloudDocs"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def shell() -> MockAdapter:
    return MockAdapter(adapter_name="shell")


@pytest.fixture
def git() -> MockAdapter:
    return MockAdapter(adapter_name="git")


@pytest.fixture
def registry(shell: MockAdapter, git: MockAdapter) -> AdapterRegistry:
    reg = AdapterRegistry()
    reg.register(shell)
    reg.register(git)
    return reg


@pytest.fixture
def console() -> ScriptedConsole:
    return ScriptedConsole()


@pytest.fixture
def settings() -> BackupSettings:
    return BackupSettings()


@pytest.fixture
def ctx(settings, registry, console, home) -> BackupContext:
    """Run context where every tool is "installed" and mocked."""
    return BackupContext(
        settings=settings,
        registry=registry,
        console=console,
        home=home,
        today=TODAY,
        which=lambda name: f"/usr/bin/{name}",
    )
