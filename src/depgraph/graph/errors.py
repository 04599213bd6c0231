"""Errors - Exceptions raised by graph operations.

- GraphError: Base class for all graph errors
- InvalidArgumentError: A non-node or non-callable argument was passed
- CyclicGraphError: Root discovery found a dependency cycle
"""

from __future__ import annotations


class GraphError(Exception):
    """Base class for errors raised by depgraph."""


class InvalidArgumentError(GraphError, TypeError):
    """An argument had the wrong type; no edge state was changed."""


class CyclicGraphError(GraphError, ValueError):
    """The dependency chain followed during root discovery is not finite.

    Attributes:
        path: Node ids walked before the cycle (or depth cap) was hit.
    """

    def __init__(self, message: str, path: list | None = None) -> None:
        super().__init__(message)
        self.path = list(path or [])


__all__ = ["GraphError", "InvalidArgumentError", "CyclicGraphError"]
