"""Tests for the clustering strategies and ClusteringEngine."""

import logging

import numpy as np
import pytest

from notegraph.clustering import ClusteringEngine
from notegraph.errors import AlgorithmNotFoundError
from notegraph.models import GraphData


def _engine(seed: int = 5) -> ClusteringEngine:
    return ClusteringEngine(rng=np.random.default_rng(seed))


def _clusters(data: GraphData) -> dict:
    return {n.id: n.cluster for n in data.nodes}


def test_connected_components_partition(make_node, make_link) -> None:
    data = GraphData.build(
        [make_node("A"), make_node("B"), make_node("C")],
        [make_link("A", "B")],
    )
    out = _engine().run("connected-components", data)
    assert _clusters(out) == {"A": "cluster_0", "B": "cluster_0", "C": "cluster_1"}
    assert out.metadata.clusters == 2


def test_louvain_separates_loosely_joined_triangles(two_triangles, make_link) -> None:
    data = two_triangles.with_links(two_triangles.links + (make_link("C", "D"),))
    out = _engine().run("louvain", data)
    c = _clusters(out)
    assert c["A"] == c["B"] == c["C"]
    assert c["D"] == c["E"] == c["F"]
    assert c["A"] != c["D"]
    assert c["A"] == "cluster_0"


def test_louvain_without_links_isolates_every_node(make_node) -> None:
    data = GraphData.build([make_node("A"), make_node("B")], [])
    out = _engine().run("louvain", data)
    assert _clusters(out) == {"A": "cluster_0", "B": "cluster_1"}


def test_kmeans_without_positions_leaves_graph_unchanged(chain_graph, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="notegraph.clustering"):
        out = _engine().run("k-means", chain_graph)
    assert out == chain_graph
    assert all(n.cluster is None for n in out.nodes)
    assert "no node has a position" in caplog.text


def test_kmeans_single_cluster(make_node) -> None:
    data = GraphData.build([make_node(i, x, 0) for i, x in zip("ABC", (0, 5, 10))], [])
    out = _engine().run("k-means", data, {"k": 1})
    assert set(_clusters(out).values()) == {"cluster_0"}


def test_kmeans_keeps_label_of_unpositioned_nodes(make_node) -> None:
    data = GraphData.build(
        [make_node("A", 0, 0), make_node("B", cluster="old")],
        [],
    )
    out = _engine().run("k-means", data, {"k": 2})
    assert out.get_node("B").cluster == "old"
    assert out.get_node("A").cluster.startswith("cluster_")


def test_kmeans_is_reproducible_with_seed(make_node) -> None:
    data = GraphData.build(
        [make_node(str(i), float(i * 37 % 400), float(i * 53 % 300)) for i in range(20)],
        [],
    )
    a = _engine(9).run("k-means", data, {"k": 3})
    b = _engine(9).run("k-means", data, {"k": 3})
    assert _clusters(a) == _clusters(b)


def test_spectral_splits_components(two_triangles) -> None:
    out = _engine().run("spectral", two_triangles, {"k": 2})
    c = _clusters(out)
    assert c["A"] == c["B"] == c["C"] == "cluster_0"
    assert c["D"] == c["E"] == c["F"] == "cluster_1"


def test_spectral_clamps_k_to_node_count(make_node, make_link) -> None:
    data = GraphData.build([make_node("A"), make_node("B")], [make_link("A", "B")])
    out = _engine().run("spectral", data, {"k": 5})
    assert all(n.cluster is not None for n in out.nodes)


def test_clustering_does_not_mutate_input(chain_graph) -> None:
    _engine().run("connected-components", chain_graph)
    assert all(n.cluster is None for n in chain_graph.nodes)


def test_unknown_clustering_raises() -> None:
    with pytest.raises(AlgorithmNotFoundError):
        _engine().run("modularity-magic", GraphData.build([], []))


def test_algorithm_listing() -> None:
    names = [a["name"] for a in _engine().list_algorithms()]
    assert names == ["connected-components", "louvain", "k-means", "spectral"]
