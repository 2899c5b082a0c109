"""Directed dependency graph between modules and the resources they read."""

import heapq
from typing import Dict, Hashable, Iterable, List, Optional, Set

from ..exceptions import CycleError

Node = Hashable


class DependencyGraph:
    """Adjacency structure for "requires" relationships.

    Nodes are module names and, for non-source resources, file paths.
    An edge ``a -> b`` means "a requires b". The graph keeps a forward map
    and a reverse index so both directions can be walked cheaply.

    Attributes:
        dependencies: Map from node to the nodes it directly requires.
        dependents: Map from node to the nodes that directly require it.
    """

    def __init__(self) -> None:
        self.dependencies: Dict[Node, Set[Node]] = {}
        self.dependents: Dict[Node, Set[Node]] = {}

    def copy(self) -> "DependencyGraph":
        """Return an independent copy of the graph."""
        other = DependencyGraph()
        other.dependencies = {k: set(v) for k, v in self.dependencies.items()}
        other.dependents = {k: set(v) for k, v in self.dependents.items()}
        return other

    def __contains__(self, node: Node) -> bool:
        return node in self.dependencies or node in self.dependents

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyGraph):
            return NotImplemented
        return self.dependencies == other.dependencies and self.dependents == other.dependents

    def __repr__(self) -> str:
        return f"DependencyGraph(nodes={len(self.nodes())}, edges={self.edge_count()})"

    def nodes(self) -> Set[Node]:
        """All nodes, including dependency targets nothing declares yet."""
        return set(self.dependencies) | set(self.dependents)

    def edge_count(self) -> int:
        return sum(len(deps) for deps in self.dependencies.values())

    def immediate_dependencies(self, node: Node) -> Set[Node]:
        return set(self.dependencies.get(node, ()))

    def immediate_dependents(self, node: Node) -> Set[Node]:
        return set(self.dependents.get(node, ()))

    def transitive_dependencies(self, node: Node) -> Set[Node]:
        """Every node that ``node`` requires, directly or indirectly."""
        return _walk(self.dependencies, node)

    def transitive_dependents(self, node: Node) -> Set[Node]:
        """Every node that requires ``node``, directly or indirectly."""
        return _walk(self.dependents, node)

    def depends_on(self, node: Node, other: Node) -> bool:
        """True if ``node`` transitively requires ``other``."""
        return self._path_between(node, other) is not None

    def depend(self, node: Node, *deps: Node) -> "DependencyGraph":
        """Record that ``node`` requires each of ``deps``.

        ``node`` becomes part of the graph even when ``deps`` is empty.

        Raises:
            CycleError: If ``node`` is one of ``deps`` or any dependency
                already requires ``node``. Edges inserted by this call
                before the failing one are kept; callers that need
                all-or-nothing behaviour work on a copy.
        """
        self.dependencies.setdefault(node, set())
        for dep in sorted(deps, key=str):
            if dep == node:
                raise CycleError(node, dep, [dep])
            path = self._path_between(dep, node)
            if path is not None:
                raise CycleError(node, dep, path)
            self.dependencies[node].add(dep)
            self.dependents.setdefault(dep, set()).add(node)
        return self

    def remove_key(self, *nodes: Node) -> "DependencyGraph":
        """Drop the outgoing edges of ``nodes``.

        Edges from other nodes to ``nodes`` are kept: a node that still
        requires one of them keeps that requirement.
        """
        for node in nodes:
            for dep in self.dependencies.pop(node, set()):
                dependents = self.dependents.get(dep)
                if dependents is None:
                    continue
                dependents.discard(node)
                if not dependents:
                    del self.dependents[dep]
        return self

    def sort_dependencies(self, nodes: Iterable[Node]) -> List[Node]:
        """Order ``nodes`` so each one follows everything it requires.

        Only the relative order of the given nodes is computed, but
        requirements are followed transitively through nodes outside the
        set. Independent nodes are ordered by their string form.
        """
        wanted = set(nodes)
        blockers = {n: self.transitive_dependencies(n) & wanted for n in wanted}
        waiting_on: Dict[Node, Set[Node]] = {n: set() for n in wanted}
        for node, deps in blockers.items():
            for dep in deps:
                waiting_on[dep].add(node)

        ready = [_sort_key(n) for n, deps in blockers.items() if not deps]
        heapq.heapify(ready)
        ordered: List[Node] = []
        while ready:
            node = heapq.heappop(ready)[-1]
            ordered.append(node)
            for follower in waiting_on[node]:
                blockers[follower].discard(node)
                if not blockers[follower]:
                    heapq.heappush(ready, _sort_key(follower))
        return ordered

    def _path_between(self, start: Node, goal: Node) -> Optional[List[Node]]:
        """Find a requires-chain from ``start`` to ``goal``, if any."""
        if start == goal:
            return [start]
        parents: Dict[Node, Node] = {start: start}
        stack = [start]
        while stack:
            current = stack.pop()
            for dep in self.dependencies.get(current, ()):
                if dep in parents:
                    continue
                parents[dep] = current
                if dep == goal:
                    path = [dep]
                    while path[-1] != start:
                        path.append(parents[path[-1]])
                    return list(reversed(path))
                stack.append(dep)
        return None


def _sort_key(node: Node) -> tuple:
    # str() alone can collide between a module name and a path
    return (str(node), repr(node), node)


def _walk(edges: Dict[Node, Set[Node]], start: Node) -> Set[Node]:
    seen: Set[Node] = set()
    frontier = list(edges.get(start, ()))
    while frontier:
        current = frontier.pop()
        if current in seen:
            continue
        seen.add(current)
        frontier.extend(edges.get(current, ()))
    seen.discard(start)
    return seen
