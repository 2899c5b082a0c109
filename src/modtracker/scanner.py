"""Source directory discovery and file timestamp snapshots."""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from pathspec import PathSpec

from .exceptions import UnreadableRootError

logger = logging.getLogger(__name__)

# Directories to ignore
IGNORE_DIRS = {
    "__pycache__",
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    ".tox",
    ".nox",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    "node_modules",
}


def normalize_dirs(dirs) -> List[Path]:
    """Turn a path or a sequence of paths into resolved directories.

    Args:
        dirs: A single ``str``/``os.PathLike`` or a list/tuple of them.

    Returns:
        Absolute, resolved directory paths in the given order, without
        duplicates.

    Raises:
        TypeError: If ``dirs`` is neither a path nor a sequence of paths.
    """
    if isinstance(dirs, (str, os.PathLike)):
        candidates = [dirs]
    elif isinstance(dirs, (list, tuple)):
        candidates = list(dirs)
    else:
        raise TypeError(f"Expected a path or a sequence of paths, got {type(dirs).__name__}")

    resolved: List[Path] = []
    for candidate in candidates:
        if not isinstance(candidate, (str, os.PathLike)):
            raise TypeError(f"Expected a path, got {type(candidate).__name__}")
        path = Path(candidate).expanduser().resolve()
        if path not in resolved:
            resolved.append(path)
    return resolved


def build_ignore_spec(patterns: Iterable[str]) -> PathSpec:
    """Compile gitignore-style exclude patterns."""
    return PathSpec.from_lines("gitwildmatch", list(patterns))


def find_files_in_dir(root: Path, ignore: PathSpec | None = None) -> List[Path]:
    """Find every regular file under ``root``.

    Raises:
        UnreadableRootError: If ``root`` is missing, not a directory, or
            cannot be listed.
    """
    if not root.exists():
        raise UnreadableRootError(root, "does not exist")
    if not root.is_dir():
        raise UnreadableRootError(root, "not a directory")

    def on_error(error: OSError) -> None:
        if error.filename is not None and Path(error.filename) == root:
            raise UnreadableRootError(root, error.strerror or str(error)) from error
        logger.debug(f"Skipping unreadable directory {error.filename}: {error}")

    files = []
    for current, dirs, names in root.walk(on_error=on_error):
        dirs[:] = sorted(d for d in dirs if d not in IGNORE_DIRS)
        for name in names:
            file_path = current / name
            if ignore is not None and ignore.match_file(file_path.relative_to(root).as_posix()):
                continue
            if file_path.is_file():
                files.append(file_path)
    return files


def find_sources(dirs: Sequence[Path], ignore: PathSpec | None = None) -> List[Path]:
    """Find every regular file in all of ``dirs``."""
    files: List[Path] = []
    for root in dirs:
        files.extend(find_files_in_dir(root, ignore))
    return files


def current_timestamp_map(dirs: Sequence[Path], ignore: PathSpec | None = None) -> Dict[Path, int]:
    """Get the modification time, in nanoseconds, of every source file.

    Args:
        dirs: Resolved source directories.
        ignore: Optional exclude patterns, matched relative to each root.

    Returns:
        Map from file path to ``st_mtime_ns``.
    """
    timestamps = {}
    for file_path in find_sources(dirs, ignore):
        try:
            timestamps[file_path] = file_path.stat().st_mtime_ns
        except FileNotFoundError:
            # Removed between listing and stat
            continue
    return timestamps
