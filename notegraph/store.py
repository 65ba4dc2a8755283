"""
GraphDataStore: owner of the current graph.

The store holds exactly one GraphData value. Every mutation builds a new
value and swaps it in under a lock, so readers that already hold a GraphData
never observe a half-applied change. ``version`` increases on every swap and
is what the analytics cache keys on.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any, Optional

from .errors import DuplicateNodeError
from .models import GraphData, GraphLink, GraphNode

logger = logging.getLogger(__name__)


class GraphDataStore:
    def __init__(self, data: Optional[GraphData] = None):
        self._lock = threading.RLock()
        self._data: Optional[GraphData] = data
        self._version = 0

    # ------------------------------------------------------------------ #
    @property
    def version(self) -> int:
        return self._version

    def set_data(self, data: Optional[GraphData]) -> None:
        with self._lock:
            self._data = data
            self._version += 1
        if data is not None:
            logger.debug(
                "graph replaced: %d nodes, %d links", len(data.nodes), len(data.links)
            )

    def get_data(self) -> Optional[GraphData]:
        return self._data

    def _swap(self, data: GraphData) -> GraphData:
        # caller holds the lock
        self._data = data
        self._version += 1
        return data

    # ------------------------------------------------------------------ #
    # Nodes
    # ------------------------------------------------------------------ #

    def add_node(self, node: GraphNode) -> Optional[GraphData]:
        with self._lock:
            if self._data is None:
                return None
            if any(n.id == node.id for n in self._data.nodes):
                raise DuplicateNodeError(f"node {node.id!r} already exists")
            return self._swap(self._data.with_nodes(self._data.nodes + (node,)))

    def remove_node(self, node_id: str) -> Optional[GraphData]:
        """Remove a node and every link touching it."""
        with self._lock:
            if self._data is None:
                return None
            nodes = tuple(n for n in self._data.nodes if n.id != node_id)
            links = tuple(l for l in self._data.links if not l.touches(node_id))
            dropped = len(self._data.links) - len(links)
            if dropped:
                logger.debug("removing node %s cascaded to %d links", node_id, dropped)
            return self._swap(self._data.with_graph(nodes, links))

    def update_node(self, node_id: str, **fields: Any) -> Optional[GraphData]:
        with self._lock:
            if self._data is None:
                return None
            if "id" in fields and fields["id"] != node_id:
                raise ValueError("a node id cannot be changed by update_node")
            nodes = tuple(
                replace(n, **fields) if n.id == node_id else n
                for n in self._data.nodes
            )
            return self._swap(self._data.with_nodes(nodes))

    # ------------------------------------------------------------------ #
    # Links
    # ------------------------------------------------------------------ #

    def add_link(self, link: GraphLink) -> Optional[GraphData]:
        """Append a link. Endpoint existence is the caller's responsibility."""
        with self._lock:
            if self._data is None:
                return None
            return self._swap(self._data.with_links(self._data.links + (link,)))

    def remove_link(self, link_id: str) -> Optional[GraphData]:
        with self._lock:
            if self._data is None:
                return None
            links = tuple(l for l in self._data.links if l.id != link_id)
            return self._swap(self._data.with_links(links))

    def update_link(self, link_id: str, **fields: Any) -> Optional[GraphData]:
        with self._lock:
            if self._data is None:
                return None
            links = tuple(
                replace(l, **fields) if l.id == link_id else l
                for l in self._data.links
            )
            return self._swap(self._data.with_links(links))


__all__ = ["GraphDataStore"]
