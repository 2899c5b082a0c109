import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Hashable, List, Mapping, Sequence, Set

from ..analyzer.base import BaseClassifier
from ..models.declaration import Declaration, NotADeclaration, PrimaryDeclaration, SecondaryDeclaration
from ..models.graph import DependencyGraph

logger = logging.getLogger(__name__)


@dataclass
class ChangeSet:
    """What a snapshot comparison found.

    Attributes:
        declarations: Fresh primary declarations, in file order.
        changed_names: Modules whose source, fragment or resource changed.
        classifications: Outcome per newer file; resource files map to None.
    """

    declarations: List[PrimaryDeclaration] = field(default_factory=list)
    changed_names: Set[Hashable] = field(default_factory=set)
    classifications: Dict[Path, Declaration | None] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.classifications)


def modified(then: Mapping[Path, int], now: Mapping[Path, int], file_path: Path) -> bool:
    """Compare a file's timestamp in two snapshots; ties are not changes."""
    return now.get(file_path, 0) > then.get(file_path, 0)


def newer_sources(then: Mapping[Path, int], now: Mapping[Path, int]) -> List[Path]:
    """Files in ``now`` that are new or modified since ``then``."""
    return sorted(f for f in now if modified(then, now, f))


def newer_declarations(
    then: Mapping[Path, int],
    now: Mapping[Path, int],
    graph: DependencyGraph,
    dirs: Sequence[Path],
    classifier: BaseClassifier,
) -> ChangeSet:
    """Classify every newer file and collect what changed.

    Non-source files contribute the modules that declared a dependency on
    them in ``graph``. Primary declarations contribute their name and are
    returned for the graph update; secondary declarations contribute only
    their name.

    Args:
        then: Previous timestamp snapshot.
        now: Current timestamp snapshot.
        graph: The dependency graph before this check.
        dirs: Resolved source roots.
        classifier: Reads module headers.

    Returns:
        A ChangeSet; it is falsy when no file is newer.

    Raises:
        DeclarationSyntaxError: If a newer source file is malformed.
    """
    changes = ChangeSet()

    for file_path in newer_sources(then, now):
        if not classifier.is_source_file(file_path):
            changes.classifications[file_path] = None
            changes.changed_names |= graph.immediate_dependents(file_path)
            continue

        decl = classifier.classify_file(file_path, dirs)
        changes.classifications[file_path] = decl
        if isinstance(decl, PrimaryDeclaration):
            changes.declarations.append(decl)
            changes.changed_names.add(decl.name)
        elif isinstance(decl, SecondaryDeclaration):
            changes.changed_names.add(decl.name)
        elif isinstance(decl, NotADeclaration):
            logger.debug(f"No module header in {file_path}")
        else:
            raise TypeError(f"Unexpected classification for {file_path}: {decl!r}")

    return changes
