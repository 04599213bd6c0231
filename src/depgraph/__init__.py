"""
depgraph - Dependency graph nodes with traversal and filtered cloning

Every node is a handle to its whole connected graph: dependencies and
dependents are kept in sync on both endpoints, and graph-wide operations
start from a canonical root found by following first dependencies.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("depgraph")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from depgraph.config import ConfigLoader, configure, get_config, load_config
from depgraph.graph import CyclicGraphError, GraphError, GraphNode, InvalidArgumentError

__all__ = [
    "__version__",
    "GraphNode",
    "GraphError",
    "InvalidArgumentError",
    "CyclicGraphError",
    "ConfigLoader",
    "configure",
    "get_config",
    "load_config",
]
