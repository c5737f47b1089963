"""Kind-agnostic dependency graph.

Nodes are any hashable handle (``AssetId`` for assets, plain color names for
a palette's color graph). An edge ``a -> b`` means "a refers to b", so ``b``
must be built first. Traversals are iterative and visit nodes in a fixed
order, which makes cycle paths, build order and levels reproducible.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Set, Tuple

from pyrsistent import pmap, pset
from pyrsistent.typing import PMap, PSet

from px_forge.errors import GraphError
from px_forge.types import AssetId


Node = Hashable


def node_key(node: Node) -> Any:
    if isinstance(node, AssetId):
        return node.sort_key()
    return (0, str(node))


def _sorted(nodes: Iterable[Node]) -> List[Node]:
    return sorted(nodes, key=node_key)


@dataclass(frozen=True)
class DependencyGraph:
    """Immutable adjacency map: node -> nodes it depends on."""

    edges: PMap[Node, PSet[Node]] = field(default_factory=pmap)

    @staticmethod
    def from_edges(edges: Mapping[Node, Iterable[Node]]) -> "DependencyGraph":
        adjacency: Dict[Node, Set[Node]] = {node: set(deps) for node, deps in edges.items()}
        for deps in list(adjacency.values()):
            for dep in deps:
                adjacency.setdefault(dep, set())
        return DependencyGraph(pmap({node: pset(deps) for node, deps in adjacency.items()}))

    @property
    def nodes(self) -> List[Node]:
        return _sorted(self.edges.keys())

    def dependencies(self, node: Node) -> List[Node]:
        return _sorted(self.edges.get(node, pset()))

    def dependents(self, node: Node) -> List[Node]:
        return _sorted(n for n, deps in self.edges.items() if node in deps)

    def find_cycle(self, start: Optional[Node] = None) -> Optional[List[Node]]:
        """Depth-first search with an explicit recursion stack.

        Returns the first cycle found as ``[n0, n1, ..., n0]`` (each node once,
        then the start node again), or ``None`` if the reachable graph is
        acyclic. With ``start`` only nodes reachable from it are explored.
        """
        done: Set[Node] = set()
        roots = [start] if start is not None else self.nodes
        for root in roots:
            if root in done:
                continue
            path: List[Node] = [root]
            on_path: Set[Node] = {root}
            stack = [iter(self.dependencies(root))]
            while stack:
                dep = next(stack[-1], None)
                if dep is None:
                    stack.pop()
                    finished = path.pop()
                    on_path.discard(finished)
                    done.add(finished)
                    continue
                if dep in on_path:
                    return path[path.index(dep) :] + [dep]
                if dep in done:
                    continue
                path.append(dep)
                on_path.add(dep)
                stack.append(iter(self.dependencies(dep)))
        return None

    def topological_order(self) -> Tuple[Node, ...]:
        """Dependencies before dependents.

        Raises:
            GraphError: If the graph has a cycle.
        """
        cycle = self.find_cycle()
        if cycle is not None:
            raise GraphError(cycle)
        order: List[Node] = []
        seen: Set[Node] = set()
        for root in self.nodes:
            if root in seen:
                continue
            seen.add(root)
            stack = [(root, iter(self.dependencies(root)))]
            while stack:
                node, deps = stack[-1]
                dep = next(deps, None)
                if dep is None:
                    stack.pop()
                    order.append(node)
                elif dep not in seen:
                    seen.add(dep)
                    stack.append((dep, iter(self.dependencies(dep))))
        return tuple(order)

    def levels(self) -> Tuple[Tuple[Node, ...], ...]:
        """Partition nodes by depth: leaves are 0, others 1 + max of their deps."""
        depth: Dict[Node, int] = {}
        for node in self.topological_order():
            deps = self.edges[node]
            depth[node] = 1 + max((depth[d] for d in deps), default=-1)
        grouped: Dict[int, List[Node]] = {}
        for node, level in depth.items():
            grouped.setdefault(level, []).append(node)
        return tuple(tuple(_sorted(grouped[level])) for level in sorted(grouped))

    def downstream(self, roots: Iterable[Node]) -> List[Node]:
        """Every node that transitively depends on any of ``roots``."""
        reverse: Dict[Node, List[Node]] = {}
        for node, deps in self.edges.items():
            for dep in deps:
                reverse.setdefault(dep, []).append(node)
        found: Set[Node] = set()
        pending = list(roots)
        while pending:
            for parent in reverse.get(pending.pop(), []):
                if parent not in found:
                    found.add(parent)
                    pending.append(parent)
        return _sorted(found)
