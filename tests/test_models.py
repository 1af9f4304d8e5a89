"""
Tests for domain models — items, results, receipts, manifest, settings.
"""

import re

import pytest
from pydantic import ValidationError

from dotbackup.core.models import (
    DEFAULT_SELECTED,
    ITEM_LABELS,
    Action,
    BackupItem,
    BackupManifest,
    BackupSettings,
    ItemKey,
    ItemResult,
    MachineInfo,
    Receipt,
)
from dotbackup.core.services.catalog import HANDLERS, default_items


class TestItemKey:
    def test_fixed_order(self):
        assert [k.value for k in ItemKey] == [
            "brewfile",
            "configs",
            "ssh_keys",
            "personal_files",
            "git_repos",
            "claude",
            "app_prefs",
            "credentials",
        ]

    def test_every_key_has_label(self):
        assert set(ITEM_LABELS) == set(ItemKey)

    def test_credentials_opt_in(self):
        assert ItemKey.CREDENTIALS not in DEFAULT_SELECTED
        assert len(DEFAULT_SELECTED) == 7


class TestBackupItem:
    def test_toggled_returns_copy(self):
        item = BackupItem(key=ItemKey.CONFIGS, label="Configs", selected=True)
        flipped = item.toggled()
        assert flipped.selected is False
        assert item.selected is True
        assert flipped.key == item.key

    def test_with_selected(self):
        item = BackupItem(key=ItemKey.CONFIGS, label="Configs")
        assert item.with_selected(True).selected is True

    def test_frozen(self):
        item = BackupItem(key=ItemKey.CONFIGS, label="Configs")
        with pytest.raises(AttributeError):
            item.selected = True  # type: ignore[misc]

    def test_equality_ignores_handler(self):
        a = BackupItem(key=ItemKey.CONFIGS, label="x", handler=lambda ctx: None)
        b = BackupItem(key=ItemKey.CONFIGS, label="x")
        assert a == b


class TestItemResult:
    def test_success(self):
        r = ItemResult.success(ItemKey.BREWFILE, "42 entries", count=42)
        assert r.ok
        assert r.key == "brewfile"
        assert r.count == 42

    def test_skip(self):
        r = ItemResult.skip(ItemKey.SSH_KEYS, "No SSH keys found")
        assert r.skipped
        assert not r.ok
        assert r.message == "No SSH keys found"

    def test_failure(self):
        r = ItemResult.failure("configs", "disk full")
        assert r.failed
        assert r.error == "disk full"


class TestAction:
    def test_shell_stringifies_argv(self, tmp_path):
        action = Action.shell("du:x", ["du", "-sk", tmp_path], cwd=tmp_path, timeout=10)
        assert action.adapter == "shell"
        assert action.params["argv"] == ["du", "-sk", str(tmp_path)]
        assert action.params["cwd"] == str(tmp_path)
        assert action.params["timeout"] == 10

    def test_shell_without_cwd(self):
        action = Action.shell("brewfile:dump", ("brew", "bundle", "dump"))
        assert "cwd" not in action.params

    def test_git(self, tmp_path):
        action = Action.git("dotfiles:commit", "commit", tmp_path, message="Backup")
        assert action.adapter == "git"
        assert action.params == {
            "operation": "commit",
            "cwd": str(tmp_path),
            "message": "Backup",
        }


class TestReceipt:
    def test_lines_skip_blank(self):
        r = Receipt.success(adapter="shell", action_id="x", output="a\n\n  \nb\n")
        assert r.lines == ["a", "b"]

    def test_skip_carries_reason(self):
        r = Receipt.skip(adapter="git", action_id="c", reason="Nothing to commit")
        assert r.status == "skipped"
        assert not r.ok
        assert not r.failed
        assert r.output == "Nothing to commit"


class TestManifestModel:
    def test_created_at_format(self):
        manifest = BackupManifest()
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", manifest.created_at)

    def test_defaults(self):
        manifest = BackupManifest()
        assert manifest.schema_version == "1.0"
        assert manifest.machine.hostname == "unknown"
        assert manifest.backup_items == {}

    def test_saved_keys(self):
        manifest = BackupManifest(backup_items={
            "brewfile": {"saved": True},
            "configs": {"saved": False},
            "git_repos": {"verified": True},
        })
        assert manifest.saved_keys() == ["brewfile", "git_repos"]

    def test_machine_describe(self):
        info = MachineInfo(hostname="mbp", macos_version="15.3", chip="Apple M3")
        assert info.describe() == "mbp (15.3, Apple M3)"


class TestSettings:
    def test_defaults(self):
        s = BackupSettings()
        assert s.dotfiles_dir == "~/.dotfiles"
        assert len(s.config_files) == 12
        assert s.config_files[0].source == "~/.zshrc"
        assert s.config_files[0].target == "zsh/.zshrc"
        assert s.personal_dirs == ["~/Documents", "~/Music", "~/Desktop"]
        assert [c.target for c in s.credentials] == ["kube-config", "docker-config.json"]

    def test_unknown_selected_key_rejected(self):
        with pytest.raises(ValidationError, match="Unknown backup item"):
            BackupSettings(selected={"photos": True})

    def test_known_selected_key(self):
        s = BackupSettings(selected={"credentials": True})
        assert s.selected == {"credentials": True}


class TestCatalog:
    def test_every_key_has_handler(self):
        assert set(HANDLERS) == set(ItemKey)

    def test_default_items(self):
        items = default_items()
        assert [i.key for i in items] == list(ItemKey)
        assert [i.key for i in items if not i.selected] == [ItemKey.CREDENTIALS]
        assert all(i.handler is HANDLERS[i.key] for i in items)

    def test_overrides(self):
        items = default_items({"credentials": True, "brewfile": False})
        selected = {i.key: i.selected for i in items}
        assert selected[ItemKey.CREDENTIALS] is True
        assert selected[ItemKey.BREWFILE] is False
        assert selected[ItemKey.CONFIGS] is True
