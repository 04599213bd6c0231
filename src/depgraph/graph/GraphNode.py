"""GraphNode - Self-referential dependency graph node.

This module provides the single building block of a dependency graph:
- GraphNode: a node that tracks its dependencies and dependents

There is no separate graph container. Any node is an entry handle to its
connected graph; graph-level operations ascend to a canonical root first.

Graphs must be acyclic. Cycles are a caller-maintained invariant: root
discovery can detect them (see depgraph.config ``graph.detect_cycles``),
but traversal and cloning assume a finite chain of dependencies.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Iterator, Sequence

from depgraph.config import get_config
from depgraph.graph.errors import CyclicGraphError, InvalidArgumentError

logger = logging.getLogger(__name__)

NodeId = str | int
NodeIterator = Callable[["GraphNode", "list[GraphNode]"], object]
GetNext = Callable[["GraphNode"], Sequence["GraphNode"]]
Predicate = Callable[["GraphNode"], bool]


def _require_node(value: object, operation: str) -> None:
    if not isinstance(value, GraphNode):
        raise InvalidArgumentError(
            f"{operation}() expects a GraphNode, got {type(value).__name__}"
        )


def _require_callable(value: object, name: str) -> None:
    if not callable(value):
        raise InvalidArgumentError(f"{name} must be callable, got {type(value).__name__}")


class GraphNode:
    """A node in a dependency graph.

    Edges are stored on both endpoints: if B is in A's dependencies then A
    is in B's dependents. Callers extend the node by subclassing and
    overriding clone_without_relationships() to carry their payload.

    Attributes:
        id: Immutable identifier, unique within a connected graph.
    """

    def __init__(self, id: NodeId) -> None:
        self._id = id
        self._dependents: list[GraphNode] = []
        self._dependencies: list[GraphNode] = []

    @property
    def id(self) -> NodeId:
        """Identifier used as the equality key during traversal and cloning."""
        return self._id

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self._id!r}, "
            f"dependencies={len(self._dependencies)}, dependents={len(self._dependents)})"
        )

    # Snapshot access
    def get_dependents(self) -> tuple[GraphNode, ...]:
        """Return a snapshot of the nodes that depend on this node."""
        return tuple(self._dependents)

    def get_dependencies(self) -> tuple[GraphNode, ...]:
        """Return a snapshot of the nodes this node depends on."""
        return tuple(self._dependencies)

    # Iterator access
    def iter_dependents(self) -> Iterator[GraphNode]:
        """Iterate over dependent nodes."""
        yield from self._dependents

    def iter_dependencies(self) -> Iterator[GraphNode]:
        """Iterate over dependency nodes."""
        yield from self._dependencies

    # Count and membership checks (avoid materializing tuples)
    def dependent_count(self) -> int:
        """Return number of dependents."""
        return len(self._dependents)

    def dependency_count(self) -> int:
        """Return number of dependencies."""
        return len(self._dependencies)

    def has_dependent(self, node: GraphNode) -> bool:
        """Check if node directly depends on this node."""
        return node in self._dependents

    def has_dependency(self, node: GraphNode) -> bool:
        """Check if this node directly depends on node."""
        return node in self._dependencies

    @property
    def is_root(self) -> bool:
        """True if this node has no dependencies."""
        return len(self._dependencies) == 0

    def get_root_node(self) -> GraphNode:
        """Follow the first dependency until a node without dependencies.

        The first-edge policy picks one canonical root when several
        dependency-free nodes share a graph.

        Returns:
            The canonical root of the graph containing this node.

        Raises:
            CyclicGraphError: If cycle detection is enabled and the descent
                revisits a node, or the descent exceeds graph.max_root_depth.
        """
        config = get_config()
        if not config.get("graph.detect_cycles", True):
            root_node = self
            while root_node._dependencies:
                root_node = root_node._dependencies[0]
            return root_node

        max_depth = config.get("graph.max_root_depth", 0)
        path: list[NodeId] = [self._id]
        seen: set[NodeId] = {self._id}
        root_node = self
        while root_node._dependencies:
            root_node = root_node._dependencies[0]
            path.append(root_node._id)
            if root_node._id in seen:
                logger.warning("Dependency cycle reached from %r: %s", self._id, path)
                raise CyclicGraphError(f"Dependency cycle detected: {path}", path)
            if max_depth and len(path) - 1 > max_depth:
                logger.warning("Root descent from %r exceeded %d steps", self._id, max_depth)
                raise CyclicGraphError(
                    f"Root descent exceeded max_root_depth={max_depth}", path
                )
            seen.add(root_node._id)

        return root_node

    def add_dependent(self, node: GraphNode) -> None:
        """Make node depend on this node.

        Args:
            node: The dependent to add.
        """
        _require_node(node, "add_dependent")
        node.add_dependency(self)

    def add_dependency(self, node: GraphNode) -> None:
        """Make this node depend on node, linking both sides.

        Adding an existing dependency is a no-op.

        Args:
            node: The dependency to add.
        """
        _require_node(node, "add_dependency")
        if node in self._dependencies:
            return

        node._dependents.append(self)
        self._dependencies.append(node)

    def clone_without_relationships(self) -> GraphNode:
        """Clone the node's information without any dependencies/dependents."""
        return type(self)(self._id)

    def clone_with_relationships(self, predicate: Predicate | None = None) -> GraphNode | None:
        """Clone the graph connected to this node, filtered by predicate.

        If a node is included by the predicate, all nodes on the dependency
        paths between it and the root are included too.

        Args:
            predicate: Optional filter; every node is kept when omitted.

        Returns:
            The clone of this node, or None if this node was filtered out.
        """
        if predicate is not None:
            _require_callable(predicate, "predicate")

        root_node = self.get_root_node()

        ids_to_include: set[NodeId] | None = None
        if predicate is not None:
            ids_to_include = set()

            def include_paths_to_root(node: GraphNode, path: list[GraphNode]) -> None:
                if not predicate(node):
                    return
                node.traverse(
                    lambda ancestor, _path: ids_to_include.add(ancestor.id),
                    lambda ancestor: [
                        dep for dep in ancestor._dependencies if dep.id not in ids_to_include
                    ],
                )

            root_node.traverse(include_paths_to_root)

        # Create every clone first so wiring never sees a missing dependency
        retained: list[GraphNode] = []
        id_to_clone: dict[NodeId, GraphNode] = {}
        for original in root_node.walk():
            if ids_to_include is not None and original.id not in ids_to_include:
                continue
            retained.append(original)
            id_to_clone[original.id] = original.clone_without_relationships()

        for original in retained:
            cloned = id_to_clone[original.id]
            for dependency in original._dependencies:
                cloned_dependency = id_to_clone.get(dependency.id)
                if cloned_dependency is None:
                    logger.debug(
                        "Dropping edge %r -> %r: dependency not in clone",
                        original.id,
                        dependency.id,
                    )
                    continue
                cloned.add_dependency(cloned_dependency)

        logger.debug("Cloned %d nodes from root %r", len(id_to_clone), root_node.id)
        return id_to_clone.get(self._id)

    def _iter_paths(self, get_next: GetNext) -> Iterator[tuple[GraphNode, list[GraphNode]]]:
        """Breadth-first walk over every path starting at this node.

        Paths are ordered current node first, origin last. get_next is
        called for a node only after its (node, path) pair has been consumed.
        """
        queue: deque[list[GraphNode]] = deque([[self]])
        while queue:
            path = queue.popleft()
            node = path[0]
            yield node, path

            for next_node in get_next(node):
                queue.append([next_node, *path])

    def _traverse_paths(self, iterator: NodeIterator, get_next: GetNext) -> None:
        """Traverse all paths, calling iterator on each node visited.

        A node reachable by several paths is visited once per path.

        Args:
            iterator: Called with (node, path) for each visited path.
            get_next: Returns the nodes to visit after a given node.
        """
        for node, path in self._iter_paths(get_next):
            iterator(node, path)

    @staticmethod
    def _visit_once(get_next: GetNext | None) -> GetNext:
        """Wrap get_next so that each node id is scheduled at most once."""
        if get_next is None:
            get_next = lambda node: node.get_dependents()  # noqa: E731

        visited: set[NodeId] = set()

        def get_unvisited(node: GraphNode) -> list[GraphNode]:
            visited.add(node.id)
            nodes_to_visit = []
            for next_node in get_next(node):
                if next_node.id in visited:
                    continue
                visited.add(next_node.id)
                nodes_to_visit.append(next_node)
            return nodes_to_visit

        return get_unvisited

    def traverse(self, iterator: NodeIterator, get_next: GetNext | None = None) -> None:
        """Traverse all connected nodes exactly once, breadth-first.

        Args:
            iterator: Called with (node, path) for each node.
            get_next: Returns the nodes to visit after a given node.
                Defaults to the node's dependents.
        """
        _require_callable(iterator, "iterator")
        if get_next is not None:
            _require_callable(get_next, "get_next")
        self._traverse_paths(iterator, self._visit_once(get_next))

    def walk(self, get_next: GetNext | None = None) -> Iterator[GraphNode]:
        """Iterate over this node and every node reachable through get_next.

        Nodes come in the order traverse() would call its iterator. Arguments
        are checked when walk() is called, iteration itself is lazy.

        Args:
            get_next: Neighbor function, defaults to dependents.

        Returns:
            Iterator of GraphNode instances, each exactly once.
        """
        if get_next is not None:
            _require_callable(get_next, "get_next")
        return (node for node, _path in self._iter_paths(self._visit_once(get_next)))

    def find(self, predicate: Predicate) -> Iterator[GraphNode]:
        """Find all nodes in the connected graph matching predicate.

        The search starts at the root and follows dependents.

        Args:
            predicate: Function that returns True for matching nodes.

        Returns:
            Iterator over matching GraphNode instances.
        """
        _require_callable(predicate, "predicate")
        root_node = self.get_root_node()
        return (node for node in root_node.walk() if predicate(node))
