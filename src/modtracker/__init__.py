"""modtracker - find changed Python modules and the order to reload them in."""

__version__ = "0.1.0"

from .exceptions import (
    ConfigError,
    CycleError,
    DeclarationSyntaxError,
    ModtrackerError,
    SnapshotError,
    UnreadableRootError,
)
from .models.graph import DependencyGraph
from .models.snapshot import load_snapshot, save_snapshot
from .reloader import Reloader, ReloadReport
from .tracker import ModuleTracker, tracker_for

__all__ = [
    "ConfigError",
    "CycleError",
    "DeclarationSyntaxError",
    "DependencyGraph",
    "ModtrackerError",
    "ModuleTracker",
    "ReloadReport",
    "Reloader",
    "SnapshotError",
    "UnreadableRootError",
    "load_snapshot",
    "save_snapshot",
    "tracker_for",
]
