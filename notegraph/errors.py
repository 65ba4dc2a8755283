"""Exception types raised by the notegraph engines."""

from __future__ import annotations


class NotegraphError(RuntimeError):
    """Base class for notegraph failures."""


class AlgorithmNotFoundError(NotegraphError, LookupError):
    """A layout or clustering algorithm name is not registered."""

    def __init__(self, kind: str, name: str, available):
        self.kind = kind
        self.name = name
        self.available = sorted(available)
        super().__init__(
            f"unknown {kind} algorithm {name!r} (available: {', '.join(self.available)})"
        )


class DuplicateNodeError(NotegraphError, ValueError):
    """A node with the same id is already part of the graph."""


class GraphImportError(NotegraphError, ValueError):
    """An import document could not be turned into a GraphData."""


__all__ = [
    "NotegraphError",
    "AlgorithmNotFoundError",
    "DuplicateNodeError",
    "GraphImportError",
]
