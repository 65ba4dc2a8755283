"""Tests for FilterEngine."""

from datetime import datetime, timezone

from notegraph.filtering import FilterEngine
from notegraph.models import GraphData, GraphFilter


def test_empty_filter_keeps_graph(chain_graph) -> None:
    out = FilterEngine().apply(chain_graph, GraphFilter())
    assert out.node_ids == chain_graph.node_ids
    assert out.link_ids == chain_graph.link_ids


def test_min_connections_then_link_pruning(chain_graph) -> None:
    out = FilterEngine().apply(chain_graph, GraphFilter(min_connections=2))
    assert out.node_ids == ["B"]
    assert out.links == ()
    assert out.metadata.total_nodes == 1
    assert out.metadata.density == 0.0


def test_max_connections(chain_graph) -> None:
    out = FilterEngine().apply(chain_graph, GraphFilter(max_connections=1))
    assert out.node_ids == ["A", "C"]
    assert out.links == ()


def test_connections_counted_after_link_type_filter(make_node, make_link) -> None:
    data = GraphData.build(
        [make_node("A"), make_node("B"), make_node("C")],
        [make_link("A", "B", type="tag"), make_link("B", "C")],
    )
    flt = GraphFilter(link_types=("reference",), min_connections=1)
    out = FilterEngine().apply(data, flt)
    assert out.node_ids == ["B", "C"]
    assert out.link_ids == ["B-C"]


def test_node_type_filter(make_node, make_link) -> None:
    data = GraphData.build(
        [make_node("A"), make_node("T", type="tag"), make_node("B")],
        [make_link("A", "T"), make_link("A", "B")],
    )
    out = FilterEngine().apply(data, GraphFilter(node_types=("note",)))
    assert out.node_ids == ["A", "B"]
    assert out.link_ids == ["A-B"]


def test_date_range_excludes_undated_nodes(make_node) -> None:
    data = GraphData.build(
        [
            make_node("old", created_at=datetime(2020, 1, 1)),
            make_node("new", created_at=datetime(2024, 6, 1)),
            make_node("undated"),
        ],
        [],
    )
    flt = GraphFilter(date_range=(datetime(2024, 1, 1), datetime(2024, 12, 31)))
    assert FilterEngine().apply(data, flt).node_ids == ["new"]


def test_date_range_mixes_aware_and_naive_timestamps(make_node) -> None:
    data = GraphData.from_dict({
        "nodes": [
            {"id": "utc", "metadata": {"createdAt": "2024-03-01T00:00:00Z"}},
            {"id": "local", "metadata": {"createdAt": "2025-01-01T01:00:00+02:00"}},
        ],
        "links": [],
    })
    data = data.with_nodes(data.nodes + (make_node("naive", created_at=datetime(2024, 6, 1)),))

    flt = GraphFilter(date_range=(datetime(2024, 1, 1), datetime(2024, 12, 31, 23, 30)))
    assert FilterEngine().apply(data, flt).node_ids == ["utc", "local", "naive"]

    aware = GraphFilter(date_range=(
        datetime(2024, 6, 1, tzinfo=timezone.utc), datetime(2025, 1, 1, tzinfo=timezone.utc),
    ))
    assert FilterEngine().apply(data, aware).node_ids == ["local", "naive"]


def test_tag_overlap(make_node) -> None:
    data = GraphData.build(
        [
            make_node("A", tags=("python", "graphs")),
            make_node("B", tags=("cooking",)),
            make_node("C"),
        ],
        [],
    )
    out = FilterEngine().apply(data, GraphFilter(tags=("graphs", "rust")))
    assert out.node_ids == ["A"]


def test_cluster_membership(make_node) -> None:
    data = GraphData.build(
        [
            make_node("A", cluster="cluster_0"),
            make_node("B", cluster="cluster_1"),
            make_node("C"),
        ],
        [],
    )
    out = FilterEngine().apply(data, GraphFilter(clusters=("cluster_1",)))
    assert out.node_ids == ["B"]
    assert out.metadata.clusters == 1


def test_filter_does_not_touch_input(chain_graph) -> None:
    FilterEngine().apply(chain_graph, GraphFilter(min_connections=2))
    assert chain_graph.node_ids == ["A", "B", "C"]
