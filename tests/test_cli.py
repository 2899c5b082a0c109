"""Tests for the modtracker command line."""

import json
import logging

import pytest
import structlog

from modtracker.cli.main import build_parser, main


@pytest.fixture(autouse=True)
def project(app_tree, monkeypatch):
    """Run every command from the directory holding the source root."""
    monkeypatch.chdir(app_tree.root.parent)
    yield app_tree
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])

    assert exc.value.code == 1
    assert "usage: modtracker" in capsys.readouterr().out


def test_parser_options():
    args = build_parser().parse_args(["watch", "src", "lib", "-i", "0.5", "--max-checks", "3"])

    assert args.dirs == ["src", "lib"]
    assert args.interval == 0.5
    assert args.max_checks == 3


def test_order(capsys):
    main(["order", "src"])

    assert capsys.readouterr().out.split() == ["app", "app.a", "app.b"]


def test_order_defaults_to_configured_dirs(capsys):
    main(["order"])

    assert capsys.readouterr().out.split() == ["app", "app.a", "app.b"]


def test_check_creates_then_compares_snapshot(project, capsys):
    main(["check", "src"])
    out = capsys.readouterr().out
    assert "Snapshot created" in out
    assert (project.root.parent / ".modtracker" / "snapshot.json").exists()

    main(["check", "src"])
    assert capsys.readouterr().out.strip() == "No changes."

    project.touch("app/a.py")
    main(["check", "src"])
    assert capsys.readouterr().out.split() == ["app.a", "app.b"]

    main(["check", "src", "-q"])
    assert capsys.readouterr().out == ""


def test_check_custom_snapshot_path(project, capsys):
    main(["check", "src", "--snapshot", "state.json"])

    data = json.loads((project.root.parent / "state.json").read_text(encoding="utf-8"))
    assert str(project.path("app/a.py")) in data["timestamps"]


def test_watch_reports_reload_order(project, monkeypatch, capsys):
    ticks = []

    def fake_sleep(seconds):
        ticks.append(seconds)
        if len(ticks) == 1:
            project.touch("app/a.py")

    monkeypatch.setattr("modtracker.cli.main.time.sleep", fake_sleep)

    main(["watch", "src", "-i", "0.25", "--max-checks", "2"])

    out = capsys.readouterr().out
    assert ticks == [0.25, 0.25]
    assert "Reload: app.a, app.b" in out
    assert out.count("Reload:") == 1


def test_watch_keeps_going_after_errors(project, monkeypatch, capsys):
    ticks = []

    def fake_sleep(seconds):
        ticks.append(seconds)
        if len(ticks) == 1:
            project.write("app/a.py", "def broken(:\n")
        elif len(ticks) == 2:
            project.write("app/a.py", "VALUE = 3\n")

    monkeypatch.setattr("modtracker.cli.main.time.sleep", fake_sleep)

    main(["watch", "src", "--max-checks", "2", "-q"])

    captured = capsys.readouterr()
    assert "Error:" in captured.err
    assert "Reload: app.a, app.b" in captured.out


def test_command_error_exits(project, capsys):
    project.write("app/c.py", "import (\n")

    with pytest.raises(SystemExit) as exc:
        main(["order", "src"])

    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().err


def test_missing_dir_exits(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["order", "does-not-exist"])

    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().err


def test_invalid_config_exits(project, capsys):
    config_dir = project.root.parent / ".modtracker"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("watch:\n  interval: -1\n")

    with pytest.raises(SystemExit) as exc:
        main(["order", "src"])

    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().err
