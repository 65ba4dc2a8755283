"""
2D layout strategies.

Every function here has the same shape::

    layout(data: GraphData, params: dict, rng: numpy.random.Generator) -> GraphData

and is pure: the returned graph shares links and summary metadata with the
input but carries new node values with updated ``position`` fields.

Exports:
    - force_directed_layout
    - circular_layout
    - hierarchical_layout
    - grid_layout
    - radial_layout
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import replace
from typing import Any, Dict, List, Tuple

import numpy as np

from ..models import GraphData, GraphNode
from .quadtree import QuadTree

logger = logging.getLogger(__name__)


# ============================================================================ #
# Helpers
# ============================================================================ #

def _place(data: GraphData, coords: Dict[str, Tuple[float, float]]) -> GraphData:
    nodes = [
        n.moved_to(*coords[n.id]) if n.id in coords else n
        for n in data.nodes
    ]
    return data.with_nodes(nodes)


def _edge_index(data: GraphData, index: Dict[str, int]) -> Tuple[np.ndarray, np.ndarray]:
    src, dst = [], []
    for link in data.links:
        i = index.get(link.source)
        j = index.get(link.target)
        if i is None or j is None or i == j:
            continue
        src.append(i)
        dst.append(j)
    return np.array(src, dtype=int), np.array(dst, dtype=int)


# ============================================================================ #
# Force-directed
# ============================================================================ #

def _repulsion_exact(pos: np.ndarray, magnitude: float) -> np.ndarray:
    delta = pos[:, None, :] - pos[None, :, :]
    d2 = np.einsum("ijk,ijk->ij", delta, delta)
    with np.errstate(divide="ignore", invalid="ignore"):
        d = np.sqrt(d2)
        coef = np.where(d2 > 0, magnitude / (d2 * d), 0.0)
    return np.einsum("ij,ijk->ik", coef, delta)


def _repulsion_barnes_hut(pos: np.ndarray, magnitude: float, theta: float) -> np.ndarray:
    tree = QuadTree(pos)
    return np.array([tree.repulsion(i, magnitude, theta) for i in range(len(pos))])


def _springs(
    pos: np.ndarray,
    src: np.ndarray,
    dst: np.ndarray,
    rest: float,
    k: float,
) -> np.ndarray:
    disp = np.zeros_like(pos)
    if len(src) == 0:
        return disp
    delta = pos[dst] - pos[src]
    d = np.hypot(delta[:, 0], delta[:, 1])
    ok = d > 0
    f = np.zeros_like(delta)
    f[ok] = delta[ok] / d[ok, None] * ((d[ok] - rest) * k)[:, None]
    np.add.at(disp, src, f)
    np.add.at(disp, dst, -f)
    return disp


def force_directed_layout(data: GraphData, params: Dict[str, Any], rng: np.random.Generator) -> GraphData:
    """
    Fixed-iteration spring embedder.

    Nodes without a position are seeded uniformly in a
    ``seed_width x seed_height`` box centred on the origin. Each iteration
    sums pairwise repulsion (``-strength / d**2``) and link springs
    (``(d - distance) * spring``) and moves every node by the result, capped
    at ``max_displacement``. Above ``barnes_hut_threshold`` nodes the
    pairwise sum is replaced by the quadtree approximation.
    """
    nodes = data.nodes
    n = len(nodes)
    if n == 0:
        return replace(data)

    iterations = int(params.get("iterations", 100))
    magnitude = -float(params.get("strength", -300.0))
    rest = float(params.get("distance", 100.0))
    k = float(params.get("spring", 0.1))
    cap = float(params.get("max_displacement", 50.0))
    theta = float(params.get("theta", 0.8))
    bh_threshold = int(params.get("barnes_hut_threshold", 500))
    w = float(params.get("seed_width", 800.0))
    h = float(params.get("seed_height", 600.0))

    pos = np.zeros((n, 2))
    for i, node in enumerate(nodes):
        if node.position is None:
            pos[i] = ((rng.random() - 0.5) * w, (rng.random() - 0.5) * h)
        else:
            pos[i] = (node.position.x, node.position.y)

    index = {node.id: i for i, node in enumerate(nodes)}
    src, dst = _edge_index(data, index)
    use_bh = n > bh_threshold

    logger.debug(
        "force-directed: %d nodes, %d springs, %d iterations (%s)",
        n, len(src), iterations, "barnes-hut" if use_bh else "exact",
    )

    for _ in range(iterations):
        if use_bh:
            disp = _repulsion_barnes_hut(pos, magnitude, theta)
        else:
            disp = _repulsion_exact(pos, magnitude)
        disp += _springs(pos, src, dst, rest, k)

        if cap > 0:
            norm = np.hypot(disp[:, 0], disp[:, 1])
            too_far = norm > cap
            disp[too_far] *= (cap / norm[too_far])[:, None]
        pos += disp

    coords = {node.id: (float(pos[i, 0]), float(pos[i, 1])) for i, node in enumerate(nodes)}
    return _place(data, coords)


# ============================================================================ #
# Circular
# ============================================================================ #

def circular_layout(data: GraphData, params: Dict[str, Any], rng: np.random.Generator) -> GraphData:
    n = len(data.nodes)
    radius = float(params.get("radius", 200.0))
    cx = float(params.get("center_x", 0.0))
    cy = float(params.get("center_y", 0.0))

    coords = {}
    for i, node in enumerate(data.nodes):
        angle = 2.0 * math.pi * i / n
        coords[node.id] = (cx + radius * math.cos(angle), cy + radius * math.sin(angle))
    return _place(data, coords)


# ============================================================================ #
# Hierarchical
# ============================================================================ #

def _levels(data: GraphData) -> List[List[GraphNode]]:
    node_map = data.node_map()
    in_degree = {n.id: 0 for n in data.nodes}
    children: Dict[str, List[str]] = defaultdict(list)
    for link in data.links:
        if link.target in in_degree:
            in_degree[link.target] += 1
        children[link.source].append(link.target)

    roots = [n for n in data.nodes if in_degree[n.id] == 0]
    visited = {n.id for n in roots}
    levels: List[List[GraphNode]] = [roots] if roots else []

    while levels and levels[-1]:
        nxt: List[GraphNode] = []
        for node in levels[-1]:
            for child_id in children.get(node.id, ()):
                child = node_map.get(child_id)
                if child is None or child_id in visited:
                    continue
                visited.add(child_id)
                nxt.append(child)
        if not nxt:
            break
        levels.append(nxt)

    # nodes only reachable through cycles have no root above them
    leftover = [n for n in data.nodes if n.id not in visited]
    if leftover:
        levels.append(leftover)
    return levels


def hierarchical_layout(data: GraphData, params: Dict[str, Any], rng: np.random.Generator) -> GraphData:
    """
    Layered layout: zero in-degree nodes form the first row, each following
    row holds the not-yet-visited targets of the row above (BFS over
    outgoing links). ``direction`` picks TB, BT, LR or RL growth.
    """
    node_sep = float(params.get("node_separation", 100.0))
    level_sep = float(params.get("level_separation", 150.0))
    direction = str(params.get("direction", "TB")).upper()

    coords = {}
    for depth, level in enumerate(_levels(data)):
        start = -((len(level) - 1) * node_sep) / 2.0
        for j, node in enumerate(level):
            along = start + j * node_sep
            across = depth * level_sep
            if direction == "BT":
                coords[node.id] = (along, -across)
            elif direction == "LR":
                coords[node.id] = (across, along)
            elif direction == "RL":
                coords[node.id] = (-across, along)
            else:
                coords[node.id] = (along, across)
    return _place(data, coords)


# ============================================================================ #
# Grid
# ============================================================================ #

def grid_layout(data: GraphData, params: Dict[str, Any], rng: np.random.Generator) -> GraphData:
    n = len(data.nodes)
    columns = max(1, int(params.get("columns", 10)))
    spacing = float(params.get("spacing", 100.0))

    coords = {}
    for i, node in enumerate(data.nodes):
        row, col = divmod(i, columns)
        coords[node.id] = (
            (col - columns / 2.0) * spacing,
            (row - n / columns / 2.0) * spacing,
        )
    return _place(data, coords)


# ============================================================================ #
# Radial
# ============================================================================ #

def radial_layout(data: GraphData, params: Dict[str, Any], rng: np.random.Generator) -> GraphData:
    """
    Concentric rings: node ``i`` goes on ring ``i mod levels`` and rings are
    filled at equal angular steps. An optional ``center_node`` sits at the
    origin and is left out of the rings.
    """
    levels = max(1, int(params.get("levels", 3)))
    step = float(params.get("radius_increment", 100.0))
    center_id = params.get("center_node")

    coords: Dict[str, Tuple[float, float]] = {}
    ring_nodes = list(data.nodes)
    if center_id is not None and any(n.id == center_id for n in ring_nodes):
        coords[center_id] = (0.0, 0.0)
        ring_nodes = [n for n in ring_nodes if n.id != center_id]

    rings: Dict[int, List[GraphNode]] = defaultdict(list)
    for i, node in enumerate(ring_nodes):
        rings[i % levels].append(node)

    for level, members in rings.items():
        radius = (level + 1) * step
        for p, node in enumerate(members):
            angle = 2.0 * math.pi * p / len(members)
            coords[node.id] = (radius * math.cos(angle), radius * math.sin(angle))
    return _place(data, coords)


__all__ = [
    "force_directed_layout",
    "circular_layout",
    "hierarchical_layout",
    "grid_layout",
    "radial_layout",
]
