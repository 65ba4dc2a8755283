"""
Conversion from GraphData to NetworkX graphs.
"""

from __future__ import annotations

from typing import Dict, List

import networkx as nx

from .models import GraphData


def build_graph(data: GraphData, *, weighted: bool = False) -> nx.Graph:
    """
    Undirected simple graph over the node ids of ``data``.

    Links with a missing endpoint are skipped. Parallel links collapse into
    one edge; with ``weighted=True`` their weights are summed.
    """
    G = nx.Graph()
    G.add_nodes_from(n.id for n in data.nodes)
    for link in data.links:
        if link.source not in G or link.target not in G:
            continue
        if weighted and G.has_edge(link.source, link.target):
            G[link.source][link.target]["weight"] += link.weight
        else:
            G.add_edge(link.source, link.target, weight=link.weight, link_id=link.id)
    return G


def adjacency_lists(data: GraphData) -> Dict[str, List[str]]:
    """Undirected neighbour lists in link order, dangling links skipped."""
    adj: Dict[str, List[str]] = {n.id: [] for n in data.nodes}
    for link in data.links:
        if link.source in adj and link.target in adj:
            adj[link.source].append(link.target)
            adj[link.target].append(link.source)
    return adj


def connected_components(data: GraphData) -> List[List[str]]:
    """
    Breadth-first flood fill over undirected link adjacency.

    Components come out in the order of their first node in ``data.nodes``;
    members appear in BFS visiting order. Component ids are assigned from
    this order, which ``nx.connected_components`` does not fix.
    """
    adj = adjacency_lists(data)
    visited = set()
    components: List[List[str]] = []
    for node in data.nodes:
        if node.id in visited:
            continue
        component = []
        queue = [node.id]
        visited.add(node.id)
        while queue:
            current = queue.pop(0)
            component.append(current)
            for nb in adj[current]:
                if nb not in visited:
                    visited.add(nb)
                    queue.append(nb)
        components.append(component)
    return components


__all__ = ["build_graph", "adjacency_lists", "connected_components"]
