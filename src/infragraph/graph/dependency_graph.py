"""Build directed dependency graph from registered resources."""

import networkx as nx
from typing import Dict, Iterable, List, Mapping, Optional, Set
from ..registry.registry import ResourceRegistry
from ..utils.errors import CyclicDependencyError, UnresolvedReferenceError
from ..utils.logging import get_logger

logger = get_logger("graph.dependency_graph")


class DependencyGraph:
    """Directed dependency graph: nodes=resource addresses, edges=dependent -> dependency."""

    def __init__(self):
        self.graph = nx.DiGraph()
        self._order: Dict[str, int] = {}

    def add_node(self, address: str) -> None:
        if address not in self._order:
            self._order[address] = len(self._order)
        self.graph.add_node(address)

    def add_edge(self, dependent: str, dependency: str) -> None:
        self.graph.add_edge(dependent, dependency)
        logger.debug(f"Added dependency edge: {dependent} -> {dependency}")

    @classmethod
    def from_registry(cls, registry: ResourceRegistry) -> "DependencyGraph":
        """
        Build the graph from reference attributes and explicit depends_on.

        Raises:
            UnresolvedReferenceError: If a node points at an undeclared resource
            CyclicDependencyError: If the references form a cycle
        """
        dependency_graph = cls()
        for node in registry.nodes():
            dependency_graph.add_node(node.address)

        for node in registry.nodes():
            for _, ref in node.references():
                if ref.address not in registry:
                    raise UnresolvedReferenceError(node.address, ref.address)
                dependency_graph.add_edge(node.address, ref.address)
            for dep_address in node.depends_on:
                if dep_address not in registry:
                    raise UnresolvedReferenceError(node.address, dep_address)
                dependency_graph.add_edge(node.address, dep_address)

        dependency_graph.check_acyclic()
        logger.info(
            f"Built dependency graph with {dependency_graph.graph.number_of_nodes()} nodes "
            f"and {dependency_graph.graph.number_of_edges()} edges"
        )
        return dependency_graph

    @classmethod
    def from_dependencies(cls, dependencies: Mapping[str, Iterable[str]]) -> "DependencyGraph":
        """
        Build the graph from an address -> dependency addresses mapping.

        Dependencies outside the mapping are ignored (used for recorded state,
        where upstream entries may already be gone).
        """
        dependency_graph = cls()
        for address in dependencies:
            dependency_graph.add_node(address)
        for address, deps in dependencies.items():
            for dep_address in deps:
                if dep_address in dependency_graph._order:
                    dependency_graph.add_edge(address, dep_address)
                else:
                    logger.debug(f"Dependency not found in graph: {dep_address}")
        dependency_graph.check_acyclic()
        return dependency_graph

    def check_acyclic(self) -> None:
        """
        Depth-first traversal with a recursion-stack set.

        Raises:
            CyclicDependencyError: Naming the cycle, e.g. ['a', 'b', 'a']
        """
        visited: Set[str] = set()

        for root in sorted(self.graph.nodes, key=self._order.__getitem__):
            if root in visited:
                continue
            stack = [(root, iter(self._sorted_successors(root)))]
            path = [root]
            on_stack = {root}
            visited.add(root)

            while stack:
                node, children = stack[-1]
                child = next(children, None)
                if child is None:
                    stack.pop()
                    path.pop()
                    on_stack.discard(node)
                    continue
                if child in on_stack:
                    cycle = path[path.index(child):] + [child]
                    raise CyclicDependencyError(cycle)
                if child not in visited:
                    visited.add(child)
                    on_stack.add(child)
                    path.append(child)
                    stack.append((child, iter(self._sorted_successors(child))))

    def _sorted_successors(self, address: str) -> List[str]:
        return sorted(self.graph.successors(address), key=self._order.__getitem__)

    def topological_order(self) -> List[str]:
        """
        Dependencies first, via Kahn's algorithm with ties broken by registration order.

        Repeated calls over unchanged input yield identical order.
        """
        return list(nx.lexicographical_topological_sort(
            self.graph.reverse(copy=False),
            key=self._order.__getitem__
        ))

    def reverse_topological_order(self) -> List[str]:
        """Dependents first (deletion order)."""
        return list(reversed(self.topological_order()))

    def dependencies(self, address: str) -> List[str]:
        """Direct dependencies of a resource."""
        if address not in self.graph:
            return []
        return self._sorted_successors(address)

    def dependents(self, address: str) -> List[str]:
        """Direct dependents of a resource."""
        if address not in self.graph:
            return []
        return sorted(self.graph.predecessors(address), key=self._order.__getitem__)

    def get_upstream_resources(self, address: str) -> Set[str]:
        """All resources the given resource depends on, transitively."""
        if address not in self.graph:
            return set()
        return set(nx.descendants(self.graph, address))

    def get_downstream_resources(self, address: str) -> Set[str]:
        """All resources that depend on the given resource, transitively."""
        if address not in self.graph:
            return set()
        return set(nx.ancestors(self.graph, address))

    def __contains__(self, address: str) -> bool:
        return address in self.graph

    def __len__(self) -> int:
        return self.graph.number_of_nodes()
