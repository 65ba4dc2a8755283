"""
Node clustering strategies.

Each strategy assigns a ``cluster`` label to nodes and returns a new graph;
the input is never touched. Labels are ``cluster_<i>``.

Strategies:
  - connected-components : BFS flood fill over link adjacency
  - louvain              : modularity optimisation (NetworkX)
  - k-means              : Lloyd iterations over node positions
  - spectral             : normalised-Laplacian embedding + k-means (sklearn)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence

import networkx as nx
from networkx.algorithms import community as nx_comm
import numpy as np
from sklearn.cluster import KMeans

from .config import EngineConfig
from .convert import build_graph, connected_components
from .errors import AlgorithmNotFoundError
from .models import GraphData
from .presets import KMeansParams, LouvainParams, SpectralParams

logger = logging.getLogger(__name__)

ClusterFn = Callable[[GraphData, Dict[str, Any], np.random.Generator], GraphData]


# =========================================================================== #
# Helpers
# =========================================================================== #

def _label(data: GraphData, assignment: Dict[str, str]) -> GraphData:
    nodes = [
        replace(n, cluster=assignment[n.id]) if n.id in assignment else n
        for n in data.nodes
    ]
    return data.with_nodes(nodes)


def _groups_to_assignment(groups: Sequence[Sequence[str]]) -> Dict[str, str]:
    out = {}
    for idx, members in enumerate(groups):
        for node_id in members:
            out[node_id] = f"cluster_{idx}"
    return out


def _relabel_by_first_seen(node_ids: Sequence[str], raw: Sequence[int]) -> Dict[str, str]:
    """Renumber arbitrary integer labels in order of first appearance."""
    remap: Dict[int, int] = {}
    out = {}
    for node_id, lab in zip(node_ids, raw):
        lab = int(lab)
        if lab not in remap:
            remap[lab] = len(remap)
        out[node_id] = f"cluster_{remap[lab]}"
    return out


def _seed_from(rng: np.random.Generator) -> int:
    return int(rng.integers(0, 2**31 - 1))


# =========================================================================== #
# Strategies
# =========================================================================== #

def component_clustering(data: GraphData, params: Dict[str, Any], rng: np.random.Generator) -> GraphData:
    """Every connected component becomes one cluster."""
    return _label(data, _groups_to_assignment(connected_components(data)))


def louvain_clustering(data: GraphData, params: Dict[str, Any], rng: np.random.Generator) -> GraphData:
    if not data.nodes:
        return replace(data)
    G = build_graph(data)
    if G.number_of_edges() == 0:
        # every node is its own community
        return _label(data, _groups_to_assignment([[n.id] for n in data.nodes]))

    comms = nx_comm.louvain_communities(
        G,
        weight=None,
        resolution=float(params.get("resolution", 1.0)),
        threshold=float(params.get("threshold", 1e-7)),
        seed=_seed_from(rng),
    )
    order = {n.id: i for i, n in enumerate(data.nodes)}
    groups = sorted(
        (sorted(c, key=order.__getitem__) for c in comms),
        key=lambda members: order[members[0]],
    )
    logger.debug("louvain: %d communities", len(groups))
    return _label(data, _groups_to_assignment(groups))


def _lloyd(
    points: np.ndarray,
    centroids: np.ndarray,
    iterations: int,
) -> np.ndarray:
    """Fixed-count Lloyd iterations; empty clusters keep their centroid."""
    for _ in range(iterations):
        d = np.linalg.norm(points[:, None, :] - centroids[None, :, :], axis=2)
        assign = d.argmin(axis=1)
        for c in range(len(centroids)):
            members = points[assign == c]
            if len(members):
                centroids[c] = members.mean(axis=0)
    d = np.linalg.norm(points[:, None, :] - centroids[None, :, :], axis=2)
    return d.argmin(axis=1)


def kmeans_clustering(data: GraphData, params: Dict[str, Any], rng: np.random.Generator) -> GraphData:
    """
    Cluster by 2D position. Centroids start at random points of a
    ``seed_width x seed_height`` box. Nodes without a position keep their
    previous cluster label; with no positioned node at all the graph comes
    back unchanged.
    """
    positioned = [n for n in data.nodes if n.position is not None]
    if not positioned:
        logger.warning("k-means: no node has a position; run a layout first")
        return replace(data)

    k = max(1, int(params.get("k", 5)))
    iterations = int(params.get("iterations", 10))
    w = float(params.get("seed_width", 800.0))
    h = float(params.get("seed_height", 600.0))

    points = np.array([(n.position.x, n.position.y) for n in positioned])
    centroids = (rng.random((k, 2)) - 0.5) * np.array([w, h])
    assign = _lloyd(points, centroids, iterations)

    return _label(data, {n.id: f"cluster_{int(c)}" for n, c in zip(positioned, assign)})


def spectral_clustering(data: GraphData, params: Dict[str, Any], rng: np.random.Generator) -> GraphData:
    """
    Embed nodes with the ``k`` smallest eigenvectors of the symmetric
    normalised Laplacian, row-normalise, and partition with k-means.
    Isolated nodes get a zero degree term instead of a division by zero.
    """
    n = len(data.nodes)
    if n == 0:
        return replace(data)
    k = max(1, min(int(params.get("k", 5)), n))

    node_ids = [nd.id for nd in data.nodes]
    weighted = bool(params.get("weighted", False))
    G = build_graph(data, weighted=weighted)
    A = nx.to_numpy_array(G, nodelist=node_ids, weight="weight" if weighted else None)

    deg = A.sum(axis=1)
    inv_sqrt = np.zeros_like(deg)
    nz = deg > 0
    inv_sqrt[nz] = 1.0 / np.sqrt(deg[nz])
    L = np.eye(n) - (inv_sqrt[:, None] * A * inv_sqrt[None, :])

    _, vecs = np.linalg.eigh(L)
    emb = vecs[:, :k]
    norms = np.linalg.norm(emb, axis=1, keepdims=True)
    emb = np.divide(emb, norms, out=np.zeros_like(emb), where=norms > 0)

    km = KMeans(
        n_clusters=k,
        n_init=int(params.get("n_init", 10)),
        random_state=_seed_from(rng),
    )
    raw = km.fit_predict(emb)
    return _label(data, _relabel_by_first_seen(node_ids, raw))


# =========================================================================== #
# Engine
# =========================================================================== #

@dataclass(frozen=True)
class ClusterAlgorithm:
    name: str
    description: str
    execute: ClusterFn
    parameters: Dict[str, Any] = field(default_factory=dict)

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": dict(self.parameters),
        }


class ClusteringEngine:
    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else self.config.make_rng()
        self._algorithms: Dict[str, ClusterAlgorithm] = {}

        self.register(ClusterAlgorithm(
            name="connected-components",
            description="One cluster per connected component of the link graph",
            execute=component_clustering,
        ))
        self.register(ClusterAlgorithm(
            name="louvain",
            description="Detects communities using modularity optimization",
            execute=louvain_clustering,
            parameters=LouvainParams().to_dict(),
        ))
        self.register(ClusterAlgorithm(
            name="k-means",
            description="Clusters nodes based on position similarity",
            execute=kmeans_clustering,
            parameters=KMeansParams(iterations=self.config.kmeans_iterations).to_dict(),
        ))
        self.register(ClusterAlgorithm(
            name="spectral",
            description="Uses graph Laplacian eigenvectors for clustering",
            execute=spectral_clustering,
            parameters=SpectralParams().to_dict(),
        ))

    def register(self, algorithm: ClusterAlgorithm) -> None:
        self._algorithms[algorithm.name] = algorithm

    def list_algorithms(self) -> List[Dict[str, Any]]:
        return [a.describe() for a in self._algorithms.values()]

    def get(self, name: str) -> ClusterAlgorithm:
        try:
            return self._algorithms[name]
        except KeyError:
            raise AlgorithmNotFoundError("clustering", name, self._algorithms) from None

    def run(
        self,
        name: str,
        data: GraphData,
        params: Optional[Dict[str, Any]] = None,
    ) -> GraphData:
        algorithm = self.get(name)
        merged = {**algorithm.parameters, **(params or {})}
        logger.info("clustering %s on %d nodes", name, len(data.nodes))
        return algorithm.execute(data, merged, self.rng)


__all__ = [
    "component_clustering",
    "louvain_clustering",
    "kmeans_clustering",
    "spectral_clustering",
    "ClusterAlgorithm",
    "ClusteringEngine",
]
