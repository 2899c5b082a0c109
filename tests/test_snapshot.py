import json

import pytest

from modtracker.exceptions import SnapshotError
from modtracker.models.snapshot import SNAPSHOT_VERSION, SnapshotFile, load_snapshot, save_snapshot
from modtracker.tracker import ModuleTracker


def test_save_writes_json(tmp_path):
    a = tmp_path / "src" / "a.py"
    output = tmp_path / "state" / "snapshot.json"

    save_snapshot({a: 123}, [tmp_path / "src"], output)

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["version"] == SNAPSHOT_VERSION
    assert data["dirs"] == [str(tmp_path / "src")]
    assert data["timestamps"] == {str(a): 123}


def test_saved_snapshot_seeds_a_tracker(app_tree, tmp_path):
    output = tmp_path / "snapshot.json"
    first = ModuleTracker(app_tree.root)
    save_snapshot(first.snapshot, first.dirs, output)

    loaded = load_snapshot(output)
    second = ModuleTracker(app_tree.root, initial_snapshot=loaded)

    assert loaded == dict(first.snapshot)
    assert second.check() is None

    app_tree.touch("app/a.py")
    assert second.check() == ["app.a", "app.b"]


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        '{"timestamps": {"a.py": "yesterday"}}',
        "[]",
    ],
)
def test_invalid_snapshot_file(tmp_path, content):
    path = tmp_path / "snapshot.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(SnapshotError):
        load_snapshot(path)


def test_snapshot_model_defaults():
    snapshot = SnapshotFile()

    assert snapshot.timestamps == {}
    assert snapshot.dirs == []
