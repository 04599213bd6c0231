"""Graph module - Core graph data structures.

Exports:
- GraphNode: Self-referential dependency graph node
- NodeId: Type of node identifiers
- GraphError: Base class for graph errors
- InvalidArgumentError: Wrong argument type passed to a node operation
- CyclicGraphError: Dependency cycle found during root discovery
"""

from depgraph.graph.errors import CyclicGraphError, GraphError, InvalidArgumentError
from depgraph.graph.GraphNode import GraphNode, NodeId

__all__ = [
    "GraphNode",
    "NodeId",
    "GraphError",
    "InvalidArgumentError",
    "CyclicGraphError",
]
