from types import ModuleType
from unittest.mock import MagicMock

import pytest

from modtracker.exceptions import DeclarationSyntaxError
from modtracker.reloader import Reloader, ReloadReport


@pytest.fixture
def modules():
    return {name: ModuleType(name) for name in ("app", "app.a", "app.b")}


def make_tracker(*results):
    tracker = MagicMock()
    tracker.check.side_effect = list(results)
    return tracker


def test_reloads_in_tracker_order(modules):
    calls = []

    def fake_reload(module):
        calls.append(module.__name__)
        return module

    reloader = Reloader(make_tracker(["app.a", "app.b"]), modules, reload=fake_reload)
    report = reloader.reload_changed()

    assert calls == ["app.a", "app.b"]
    assert report.reloaded == ["app.a", "app.b"]
    assert report.changed


def test_nothing_changed(modules):
    reload = MagicMock()

    report = Reloader(make_tracker(None), modules, reload=reload).reload_changed()

    assert report == ReloadReport()
    assert not report.changed
    reload.assert_not_called()


def test_modules_never_imported_are_skipped(modules):
    report = Reloader(make_tracker(["app.a", "app.new"]), modules, reload=lambda m: m).reload_changed()

    assert report.reloaded == ["app.a"]
    assert report.skipped == ["app.new"]


def test_failed_reload_does_not_stop_the_rest(modules):
    def fake_reload(module):
        if module.__name__ == "app.a":
            raise ImportError("boom")
        return module

    report = Reloader(make_tracker(["app.a", "app.b"]), modules, reload=fake_reload).reload_changed()

    assert report.failed == {"app.a": "ImportError: boom"}
    assert report.reloaded == ["app.b"]


def test_replaces_module_object(modules):
    replacement = ModuleType("app.a")

    Reloader(make_tracker(["app.a"]), modules, reload=lambda m: replacement).reload_changed()

    assert modules["app.a"] is replacement


def test_tracker_errors_propagate(modules, tmp_path):
    tracker = make_tracker(DeclarationSyntaxError(tmp_path / "a.py", "invalid syntax", 1))

    with pytest.raises(DeclarationSyntaxError):
        Reloader(tracker, modules).reload_changed()


def test_reloads_real_module(app_tree, monkeypatch):
    import sys

    from modtracker.tracker import ModuleTracker

    monkeypatch.syspath_prepend(str(app_tree.root))
    for name in ("app", "app.a", "app.b"):
        monkeypatch.delitem(sys.modules, name, raising=False)

    import app.b

    assert app.b.a.VALUE == 1
    reloader = Reloader(ModuleTracker(app_tree.root))

    app_tree.write("app/a.py", "VALUE = 2\n")
    report = reloader.reload_changed()

    assert report.reloaded == ["app.a", "app.b"]
    assert sys.modules["app.b"].a.VALUE == 2

    for name in ("app", "app.a", "app.b"):
        sys.modules.pop(name, None)
