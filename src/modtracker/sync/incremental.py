"""Incremental dependency graph updates."""

import logging
from typing import Iterable

from ..models.declaration import PrimaryDeclaration
from ..models.graph import DependencyGraph

logger = logging.getLogger(__name__)


def remove_from_dep_graph(graph: DependencyGraph, declarations: Iterable[PrimaryDeclaration]) -> DependencyGraph:
    return graph.remove_key(*(decl.name for decl in declarations))


def add_to_dep_graph(graph: DependencyGraph, declarations: Iterable[PrimaryDeclaration]) -> DependencyGraph:
    for decl in declarations:
        graph.depend(decl.name, *decl.requires)
    return graph


def update_dependency_graph(
    graph: DependencyGraph, declarations: Iterable[PrimaryDeclaration]
) -> DependencyGraph:
    """Replace the edges of every declared module.

    The outgoing edges of all declared modules are removed before any new
    edge is added, so a requirement dropped from the source does not
    survive. Works on a copy: ``graph`` is left untouched, also when a
    cycle aborts the update.

    Args:
        graph: Current dependency graph.
        declarations: Fresh primary declarations.

    Returns:
        The updated graph.

    Raises:
        CycleError: If the new edges would form a cycle.
    """
    declarations = list(declarations)
    updated = graph.copy()
    remove_from_dep_graph(updated, declarations)
    add_to_dep_graph(updated, declarations)
    if declarations:
        logger.debug(
            f"Updated {len(declarations)} module(s); graph has "
            f"{len(updated.nodes())} nodes and {updated.edge_count()} edges"
        )
    return updated
