"""
Tests for the execution dispatcher — ordering, isolation, abort.
"""

import pytest

from dotbackup.core.models.item import ITEM_LABELS, BackupItem, ItemKey, ItemResult
from dotbackup.core.services.backup_common import RunAborted
from dotbackup.core.services.dispatcher import DispatchReport, dispatch


def _item(key: ItemKey, handler, selected: bool = True) -> BackupItem:
    return BackupItem(key=key, label=ITEM_LABELS[key], selected=selected, handler=handler)


class _Recorder:
    """Handler factory that records call order."""

    def __init__(self):
        self.calls: list[ItemKey] = []

    def ok(self, key: ItemKey):
        def handler(ctx):
            self.calls.append(key)
            return ItemResult.success(key, "done")
        return handler

    def fail(self, key: ItemKey, error: str = "tool broke"):
        def handler(ctx):
            self.calls.append(key)
            return ItemResult.failure(key, error)
        return handler

    def raises(self, key: ItemKey, exc: Exception):
        def handler(ctx):
            self.calls.append(key)
            raise exc
        return handler


class TestDispatch:
    def test_runs_selected_in_order(self, ctx):
        rec = _Recorder()
        items = [
            _item(ItemKey.BREWFILE, rec.ok(ItemKey.BREWFILE)),
            _item(ItemKey.CONFIGS, rec.ok(ItemKey.CONFIGS), selected=False),
            _item(ItemKey.CLAUDE, rec.ok(ItemKey.CLAUDE)),
        ]
        report = dispatch(items, ctx)
        assert rec.calls == [ItemKey.BREWFILE, ItemKey.CLAUDE]
        assert list(report.results) == [ItemKey.BREWFILE, ItemKey.CLAUDE]
        assert report.status == "ok"

    def test_failure_does_not_stop_run(self, ctx, console):
        rec = _Recorder()
        items = [
            _item(ItemKey.BREWFILE, rec.fail(ItemKey.BREWFILE, "brew exploded")),
            _item(ItemKey.CONFIGS, rec.ok(ItemKey.CONFIGS)),
        ]
        report = dispatch(items, ctx)
        assert rec.calls == [ItemKey.BREWFILE, ItemKey.CONFIGS]
        assert report.failed == 1
        assert report.succeeded == 1
        assert report.status == "partial"
        assert f"{ITEM_LABELS[ItemKey.BREWFILE]}: brew exploded" in console.texts("fail")

    def test_raising_handler_becomes_failure(self, ctx):
        rec = _Recorder()
        items = [
            _item(ItemKey.CONFIGS, rec.raises(ItemKey.CONFIGS, OSError("disk gone"))),
            _item(ItemKey.CLAUDE, rec.ok(ItemKey.CLAUDE)),
        ]
        report = dispatch(items, ctx)
        result = report.get(ItemKey.CONFIGS)
        assert result.failed
        assert result.error == "Unexpected error: disk gone"
        assert report.get(ItemKey.CLAUDE).ok

    def test_run_aborted_propagates(self, ctx):
        rec = _Recorder()
        items = [
            _item(ItemKey.GIT_REPOS, rec.raises(ItemKey.GIT_REPOS, RunAborted("stop"))),
            _item(ItemKey.CLAUDE, rec.ok(ItemKey.CLAUDE)),
        ]
        with pytest.raises(RunAborted):
            dispatch(items, ctx)
        assert rec.calls == [ItemKey.GIT_REPOS]

    def test_missing_handler(self, ctx):
        report = dispatch([_item(ItemKey.CONFIGS, None)], ctx)
        assert report.get(ItemKey.CONFIGS).error == "No handler registered"

    def test_nothing_selected(self, ctx):
        rec = _Recorder()
        report = dispatch([_item(ItemKey.CONFIGS, rec.ok(ItemKey.CONFIGS), selected=False)], ctx)
        assert report.total == 0
        assert rec.calls == []


class TestDispatchReport:
    def test_all_failed(self):
        report = DispatchReport(results={
            ItemKey.BREWFILE: ItemResult.failure(ItemKey.BREWFILE, "x"),
            ItemKey.CONFIGS: ItemResult.skip(ItemKey.CONFIGS, "y"),
        })
        assert report.status == "failed"
        assert report.skipped == 1

    def test_to_dict(self):
        report = DispatchReport(results={
            ItemKey.CONFIGS: ItemResult.success(ItemKey.CONFIGS, "3 files", count=3),
        })
        data = report.to_dict()
        assert data["status"] == "ok"
        assert data["total"] == 1
        assert data["results"]["configs"]["count"] == 3
