"""Keeps track of which modules have changed and need to be reloaded."""

from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Hashable, Iterable, List, Mapping, Optional

from .analyzer.base import BaseClassifier
from .analyzer.python import PythonClassifier
from .exceptions import ModtrackerError
from .logging import CheckContext, get_logger
from .models.graph import DependencyGraph
from .scanner import build_ignore_spec, current_timestamp_map, normalize_dirs
from .sync.change_detection import newer_declarations
from .sync.incremental import update_dependency_graph

logger = get_logger(__name__)


def affected_modules(changed: Iterable[Hashable], graph: DependencyGraph) -> List[str]:
    """Changed modules plus everything that depends on them, in load order.

    Args:
        changed: Names of modules whose source changed.
        graph: The dependency graph as it was before the change.

    Returns:
        Module names, each after every module it requires.
    """
    affected = set(changed)
    for name in list(affected):
        affected |= graph.transitive_dependents(name)
    return graph.sort_dependencies(affected)


def merge_snapshots(then: Mapping[Path, int], now: Mapping[Path, int]) -> Dict[Path, int]:
    """Snapshot to commit: files present now, never older than before."""
    return {f: max(ts, then.get(f, ts)) for f, ts in now.items()}


class ModuleTracker:
    """Tracks source directories and reports modules to reload.

    Construction scans the directories once and builds the dependency graph
    from every module found; that initial pass is not reported. Each call to
    :meth:`check` then compares the files against the last committed
    snapshot.

    The tracker is not thread-safe: calls to :meth:`check` must not overlap.

    Args:
        dirs: A source directory or a list of them.
        initial_snapshot: Timestamps from a previous run. Files unchanged
            since then are not reported by the first check.
        exclude_patterns: Gitignore-style patterns of files to skip.
        classifier: Reads module headers; defaults to Python sources.

    Raises:
        UnreadableRootError: If a directory cannot be listed.
        DeclarationSyntaxError: If a source file is malformed.
        CycleError: If the modules require each other in a cycle.
    """

    def __init__(
        self,
        dirs,
        initial_snapshot: Optional[Mapping] = None,
        exclude_patterns: Optional[Iterable[str]] = None,
        classifier: Optional[BaseClassifier] = None,
    ):
        self._dirs = normalize_dirs(dirs)
        self._ignore = build_ignore_spec(exclude_patterns) if exclude_patterns else None
        self._classifier = classifier or PythonClassifier()

        if initial_snapshot is None:
            snapshot = current_timestamp_map(self._dirs, self._ignore)
        else:
            snapshot = {Path(f): int(ts) for f, ts in initial_snapshot.items()}

        changes = newer_declarations({}, snapshot, DependencyGraph(), self._dirs, self._classifier)
        self._graph = update_dependency_graph(DependencyGraph(), changes.declarations)
        self._snapshot = snapshot
        logger.debug(
            "tracker.ready",
            dirs=[str(d) for d in self._dirs],
            files=len(snapshot),
            modules=len(changes.declarations),
        )

    @property
    def dirs(self) -> List[Path]:
        return list(self._dirs)

    @property
    def snapshot(self) -> Mapping[Path, int]:
        """The last committed timestamp snapshot (read-only)."""
        return MappingProxyType(self._snapshot)

    @property
    def graph(self) -> DependencyGraph:
        """A copy of the current dependency graph."""
        return self._graph.copy()

    def load_order(self) -> List[str]:
        """Every known module, each after the modules it requires."""
        return self._graph.sort_dependencies(n for n in self._graph.nodes() if isinstance(n, str))

    def check(self) -> Optional[List[str]]:
        """Find the modules to reload since the last successful check.

        Returns:
            Module names in the order they should be reloaded, or None if
            nothing that affects a module changed.

        Raises:
            UnreadableRootError: If a directory cannot be listed.
            DeclarationSyntaxError: If a changed source file is malformed.
            CycleError: If the changed declarations form a cycle.
            OSError: If a changed source file cannot be read.

        On error, the snapshot and graph stay as they were, so the same
        changes are found again once the problem is fixed.
        """
        with CheckContext():
            then = self._snapshot
            affected: List[str] = []
            graph = self._graph
            try:
                now = current_timestamp_map(self._dirs, self._ignore)
                changes = newer_declarations(then, now, self._graph, self._dirs, self._classifier)
                if changes:
                    affected = affected_modules(changes.changed_names, self._graph)
                    graph = update_dependency_graph(self._graph, changes.declarations)
            except (ModtrackerError, OSError) as e:
                logger.warning("check.failed", error=str(e), error_type=type(e).__name__)
                raise

            # Deleted files drop out of the snapshot even when nothing is newer
            self._snapshot = merge_snapshots(then, now)
            self._graph = graph

            if not changes:
                logger.debug("check.unchanged")
                return None

            logger.info(
                "check.complete",
                files=len(changes.classifications),
                changed=sorted(str(n) for n in changes.changed_names),
                affected=affected,
            )
            return affected or None


def tracker_for(
    dirs,
    initial_snapshot: Optional[Mapping] = None,
    exclude_patterns: Optional[Iterable[str]] = None,
) -> Callable[[], Optional[List[str]]]:
    """Return a no-argument function that reports modules to reload.

    Each call returns the modules affected since the previous call, in
    dependency order, or None when nothing changed.
    """
    return ModuleTracker(dirs, initial_snapshot, exclude_patterns).check
