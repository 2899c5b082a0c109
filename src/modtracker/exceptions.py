"""Custom exceptions for modtracker."""

from pathlib import Path
from typing import Hashable, List, Optional


class ModtrackerError(Exception):
    """Base exception for modtracker errors."""
    pass


class DeclarationSyntaxError(ModtrackerError):
    """Raised when a tracked source file has a malformed header.

    Attributes:
        path: File that failed to parse.
        lineno: Line of the failure, when known.
        msg: Description of the problem.
    """

    def __init__(self, path: Path, msg: str, lineno: Optional[int] = None):
        self.path = path
        self.msg = msg
        self.lineno = lineno
        location = f"{path}:{lineno}" if lineno else str(path)
        super().__init__(f"{location}: {msg}")


class CycleError(ModtrackerError):
    """Raised when adding a dependency would create a cycle.

    Attributes:
        node: Module whose requirement was being added.
        dependency: The required node that already depends on ``node``.
        path: The dependency chain from ``dependency`` back to ``node``.
    """

    def __init__(self, node: Hashable, dependency: Hashable, path: List[Hashable]):
        self.node = node
        self.dependency = dependency
        self.path = path
        chain = " -> ".join(str(n) for n in [node] + path)
        super().__init__(f"Circular dependency: {chain}")


class UnreadableRootError(ModtrackerError):
    """Raised when a configured source directory cannot be listed."""

    def __init__(self, root: Path, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Cannot read source directory {root}: {reason}")


class ConfigError(ModtrackerError):
    """Raised when configuration cannot be loaded or validated."""
    pass


class SnapshotError(ModtrackerError):
    """Raised when a saved snapshot file cannot be read."""
    pass
