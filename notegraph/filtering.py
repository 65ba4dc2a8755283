"""
FilterEngine: derive a reduced view of a graph from a GraphFilter.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from .models import GraphData, GraphFilter, GraphLink, GraphNode, as_utc

logger = logging.getLogger(__name__)


class FilterEngine:
    """
    Applies predicates in a fixed order:

      1. node type allow-list
      2. link type allow-list
      3. min / max connections, counted on the links that survived step 2
      4. creation date range
      5. tag overlap
      6. cluster membership

    then keeps only links whose two endpoints survived, and recomputes the
    summary metadata for the result.
    """

    def apply(self, data: GraphData, flt: GraphFilter) -> GraphData:
        nodes: List[GraphNode] = list(data.nodes)
        links: List[GraphLink] = list(data.links)

        if flt.node_types is not None:
            allowed = set(flt.node_types)
            nodes = [n for n in nodes if n.type in allowed]

        if flt.link_types is not None:
            allowed = set(flt.link_types)
            links = [l for l in links if l.type in allowed]

        if flt.min_connections is not None or flt.max_connections is not None:
            counts: Dict[str, int] = {}
            for link in links:
                counts[link.source] = counts.get(link.source, 0) + 1
                counts[link.target] = counts.get(link.target, 0) + 1

            def _within(node: GraphNode) -> bool:
                c = counts.get(node.id, 0)
                if flt.min_connections is not None and c < flt.min_connections:
                    return False
                if flt.max_connections is not None and c > flt.max_connections:
                    return False
                return True

            nodes = [n for n in nodes if _within(n)]

        if flt.date_range is not None:
            start, end = (as_utc(d) for d in flt.date_range)
            nodes = [
                n for n in nodes
                if n.metadata is not None
                and n.metadata.created_at is not None
                and start <= as_utc(n.metadata.created_at) <= end
            ]

        if flt.tags is not None:
            wanted = set(flt.tags)
            nodes = [n for n in nodes if wanted.intersection(n.tags)]

        if flt.clusters is not None:
            wanted = set(flt.clusters)
            nodes = [n for n in nodes if n.cluster and n.cluster in wanted]

        keep = {n.id for n in nodes}
        links = [l for l in links if l.source in keep and l.target in keep]

        logger.debug(
            "filter kept %d/%d nodes, %d/%d links",
            len(nodes), len(data.nodes), len(links), len(data.links),
        )
        return GraphData.build(nodes, links)


__all__ = ["FilterEngine"]
