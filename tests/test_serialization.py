"""Tests for JSON import / export."""

import json
from datetime import datetime, timezone

import pytest

from notegraph.errors import GraphImportError
from notegraph.models import GraphData, GraphLink, LinkMetadata
from notegraph.serialization import export_graph, import_graph, read_graph, write_graph


@pytest.fixture
def rich_graph(make_node) -> GraphData:
    nodes = [
        make_node("A", 1.5, -2.0, tags=("x",), created_at=datetime(2024, 1, 2, tzinfo=timezone.utc)),
        make_node("B", label="Beta", type="tag", cluster="cluster_0"),
    ]
    links = [
        GraphLink(
            id="A-B", source="A", target="B", type="tag", weight=0.5,
            metadata=LinkMetadata(strength=0.5, bidirectional=True),
        ),
    ]
    return GraphData.build(nodes, links)


def test_export_import_round_trip(rich_graph) -> None:
    text = export_graph(rich_graph)
    assert import_graph(text) == rich_graph


def test_export_is_camel_case_json(rich_graph) -> None:
    doc = json.loads(export_graph(rich_graph))
    assert doc["metadata"]["totalNodes"] == 2
    assert doc["nodes"][0]["metadata"]["createdAt"].startswith("2024-01-02")


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        "[]",
        '{"nodes": []}',
        '{"nodes": [{"label": "no id"}], "links": []}',
        '{"nodes": [{"id": "A"}, {"id": "A"}], "links": []}',
        '{"nodes": ["A"], "links": []}',
    ],
)
def test_import_rejects_malformed_documents(text) -> None:
    with pytest.raises(GraphImportError):
        import_graph(text)


def test_write_and_read_file(tmp_path, rich_graph) -> None:
    path = tmp_path / "nested" / "graph.json"
    assert write_graph(path, rich_graph) is True
    assert read_graph(path) == rich_graph


def test_read_missing_or_broken_file(tmp_path) -> None:
    assert read_graph(tmp_path / "absent.json") is None
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    assert read_graph(broken) is None
