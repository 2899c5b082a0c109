"""Persisted file timestamp snapshots."""

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from pydantic import BaseModel, Field, ValidationError

from ..exceptions import SnapshotError

SNAPSHOT_VERSION = "1"


class SnapshotFile(BaseModel):
    """On-disk form of a timestamp snapshot.

    Attributes:
        version: Version of the snapshot format.
        generated_at: When the snapshot was written.
        dirs: Source directories the snapshot was taken from.
        timestamps: Modification time in nanoseconds, keyed by absolute path.
    """

    version: str = SNAPSHOT_VERSION
    generated_at: datetime = Field(default_factory=datetime.now)
    dirs: List[str] = Field(default_factory=list)
    timestamps: Dict[str, int] = Field(default_factory=dict)


def save_snapshot(snapshot: Mapping[Path, int], dirs: Sequence[Path], path: Path) -> None:
    """Save a timestamp snapshot to a JSON file.

    Args:
        snapshot: Map from file path to modification time.
        dirs: Directories the snapshot covers.
        path: Where to write the JSON file.
    """
    data = SnapshotFile(
        dirs=[str(d) for d in dirs],
        timestamps={str(f): ts for f, ts in sorted(snapshot.items(), key=lambda item: str(item[0]))},
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(data.model_dump_json(indent=2))


def load_snapshot(path: Path) -> Dict[Path, int]:
    """Load a timestamp snapshot written by :func:`save_snapshot`.

    Args:
        path: Path to the JSON file to load.

    Returns:
        Map from file path to modification time.

    Raises:
        SnapshotError: If the file is not a valid snapshot.
    """
    with path.open("r", encoding="utf-8") as f:
        raw = f.read()
    try:
        data = SnapshotFile.model_validate_json(raw)
    except ValidationError as e:
        raise SnapshotError(f"Invalid snapshot file {path}: {e}") from e
    return {Path(f): ts for f, ts in data.timestamps.items()}
