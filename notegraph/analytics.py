"""
Analytic layer: centrality, clustering coefficients, communities,
structural bridges, isolates, hubs and summary statistics.

Communities are connected components of the undirected link graph.
Bridges are found structurally (Tarjan, via NetworkX); the older
weight-threshold heuristic is still reported, under ``strong_links``.
Diameter and average path length come from a BFS per node and are
computed per connected component, so a disconnected graph still gets
finite values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import networkx as nx
import numpy as np
import pandas as pd

from .config import EngineConfig
from .convert import adjacency_lists, build_graph, connected_components
from .models import GraphData, GraphLink, GraphNode, GraphStatistics

logger = logging.getLogger(__name__)

STRONG_LINK_WEIGHT = 0.8
HUB_FACTOR = 2.0


# =========================================================================== #
# Data classes
# =========================================================================== #

@dataclass(frozen=True)
class GraphAnalytics:
    """
    Result of :meth:`AnalyticsEngine.compute`.

    ``communities`` holds node ids per connected component; ``bridges``
    and ``strong_links`` hold the input GraphLink values.
    """

    centrality: Dict[str, int] = field(default_factory=dict)
    clustering: Dict[str, float] = field(default_factory=dict)
    communities: List[List[str]] = field(default_factory=list)
    bridges: List[GraphLink] = field(default_factory=list)
    strong_links: List[GraphLink] = field(default_factory=list)
    isolates: List[GraphNode] = field(default_factory=list)
    hubs: List[GraphNode] = field(default_factory=list)
    statistics: GraphStatistics = field(default_factory=GraphStatistics)

    def node_table(self, data: GraphData) -> pd.DataFrame:
        """Per-node metrics as a DataFrame indexed by node id."""
        community_of = {
            nid: idx for idx, members in enumerate(self.communities) for nid in members
        }
        hub_ids = {n.id for n in self.hubs}
        isolate_ids = {n.id for n in self.isolates}
        rows = [
            {
                "id": n.id,
                "label": n.label,
                "type": n.type,
                "degree": self.centrality.get(n.id, 0),
                "clustering": self.clustering.get(n.id, 0.0),
                "community": community_of.get(n.id, -1),
                "is_hub": n.id in hub_ids,
                "is_isolate": n.id in isolate_ids,
            }
            for n in data.nodes
        ]
        columns = ["id", "label", "type", "degree", "clustering", "community", "is_hub", "is_isolate"]
        return pd.DataFrame(rows, columns=columns).set_index("id")

    def to_dict(self) -> Dict:
        return {
            "centrality": dict(self.centrality),
            "clustering": dict(self.clustering),
            "communities": [list(c) for c in self.communities],
            "bridges": [l.to_dict() for l in self.bridges],
            "strongLinks": [l.to_dict() for l in self.strong_links],
            "isolates": [n.to_dict() for n in self.isolates],
            "hubs": [n.to_dict() for n in self.hubs],
            "statistics": self.statistics.to_dict(),
        }


# =========================================================================== #
# Metrics
# =========================================================================== #

def compute_centrality(data: GraphData) -> Dict[str, int]:
    """Degree: incident links in either direction, parallel links counted."""
    degree = {n.id: 0 for n in data.nodes}
    for link in data.links:
        if link.source in degree:
            degree[link.source] += 1
        if link.target in degree:
            degree[link.target] += 1
    return degree


def compute_clustering_coefficients(data: GraphData) -> Dict[str, float]:
    # Same values as nx.clustering(build_graph(data)): parallel links and
    # self-loops collapse to one neighbour.
    adj = adjacency_lists(data)
    neighbor_sets = {nid: set(nbs) - {nid} for nid, nbs in adj.items()}

    out: Dict[str, float] = {}
    for nid, nbs in neighbor_sets.items():
        k = len(nbs)
        if k < 2:
            out[nid] = 0.0
            continue
        members = list(nbs)
        triangles = 0
        for i in range(k):
            others = neighbor_sets[members[i]]
            for j in range(i + 1, k):
                if members[j] in others:
                    triangles += 1
        out[nid] = triangles / (k * (k - 1) / 2.0)
    return out


def find_bridges(data: GraphData) -> List[GraphLink]:
    """
    Links whose removal disconnects their endpoints.

    A pair joined by parallel links is never a bridge. Self-loops never are.
    """
    G = nx.MultiGraph()
    G.add_nodes_from(n.id for n in data.nodes)
    for link in data.links:
        if link.source in G and link.target in G and link.source != link.target:
            G.add_edge(link.source, link.target)

    simple = nx.Graph(G)
    bridge_pairs = set()
    for u, v in nx.bridges(simple):
        if G.number_of_edges(u, v) == 1:
            bridge_pairs.add(frozenset((u, v)))
    return [l for l in data.links if frozenset((l.source, l.target)) in bridge_pairs]


def find_strong_links(data: GraphData, threshold: float = STRONG_LINK_WEIGHT) -> List[GraphLink]:
    return [l for l in data.links if l.weight > threshold]


def find_isolates(data: GraphData, centrality: Dict[str, int]) -> List[GraphNode]:
    return [n for n in data.nodes if centrality.get(n.id, 0) == 0]


def find_hubs(data: GraphData, centrality: Dict[str, int], factor: float = HUB_FACTOR) -> List[GraphNode]:
    if not centrality:
        return []
    mean = float(np.mean(list(centrality.values())))
    return [n for n in data.nodes if centrality.get(n.id, 0) > mean * factor]


def _path_lengths(data: GraphData) -> Tuple[int, float]:
    """
    (diameter, average shortest-path length) over all connected ordered
    pairs, BFS from every node of every component.
    """
    G = build_graph(data)
    diameter = 0
    total = 0
    pairs = 0
    for source, lengths in nx.all_pairs_shortest_path_length(G):
        for target, d in lengths.items():
            if target == source:
                continue
            total += d
            pairs += 1
            if d > diameter:
                diameter = d
    return diameter, (total / pairs if pairs else 0.0)


def compute_statistics(data: GraphData, max_path_nodes: int = 2000) -> GraphStatistics:
    n = len(data.nodes)
    e = len(data.links)
    diameter, apl = 0, 0.0
    if 0 < n <= max_path_nodes:
        diameter, apl = _path_lengths(data)
    elif n > max_path_nodes:
        logger.info(
            "skipping path statistics: %d nodes exceeds max_path_nodes=%d", n, max_path_nodes
        )
    return GraphStatistics(
        node_count=n,
        link_count=e,
        average_degree=(2.0 * e) / n if n > 0 else 0.0,
        density=(2.0 * e) / (n * (n - 1)) if n > 1 else 0.0,
        diameter=diameter,
        average_path_length=apl,
    )


# =========================================================================== #
# Engine
# =========================================================================== #

class AnalyticsEngine:
    """
    Computes GraphAnalytics and caches the result against a caller-supplied
    key (GraphService passes the store version).
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._cache_key: Optional[object] = None
        self._cached: Optional[GraphAnalytics] = None

    def invalidate(self) -> None:
        self._cache_key = None
        self._cached = None

    def cached_for(self, cache_key: object) -> Optional[GraphAnalytics]:
        if self._cached is not None and cache_key == self._cache_key:
            return self._cached
        return None

    def compute(self, data: GraphData, cache_key: Optional[object] = None) -> GraphAnalytics:
        if cache_key is not None and cache_key == self._cache_key and self._cached is not None:
            return self._cached

        centrality = compute_centrality(data)
        result = GraphAnalytics(
            centrality=centrality,
            clustering=compute_clustering_coefficients(data),
            communities=connected_components(data),
            bridges=find_bridges(data),
            strong_links=find_strong_links(data),
            isolates=find_isolates(data, centrality),
            hubs=find_hubs(data, centrality),
            statistics=compute_statistics(data, self.config.max_path_nodes),
        )
        logger.info(
            "analytics: %d nodes, %d communities, %d bridges, %d hubs",
            len(data.nodes), len(result.communities), len(result.bridges), len(result.hubs),
        )

        self._cache_key = cache_key
        self._cached = result
        return result


__all__ = [
    "GraphAnalytics",
    "AnalyticsEngine",
    "compute_centrality",
    "compute_clustering_coefficients",
    "find_bridges",
    "find_strong_links",
    "find_isolates",
    "find_hubs",
    "compute_statistics",
]
