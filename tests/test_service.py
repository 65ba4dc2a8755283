"""Tests for the GraphService facade."""

from datetime import datetime

import pytest

from notegraph.config import EngineConfig
from notegraph.errors import AlgorithmNotFoundError
from notegraph.models import GraphData, GraphFilter
from notegraph.render import Viewport
from notegraph.service import GraphService


def test_operations_without_data(service) -> None:
    assert service.get_data() is None
    assert service.apply_layout("circular") is None
    assert service.apply_clustering("louvain") is None
    assert service.compute_analytics() is None
    assert service.filter_data(GraphFilter()) is None
    assert service.optimize_view(Viewport(0, 0, 10, 10)) is None
    assert service.export_data() == ""


def test_unknown_algorithm_raises_even_without_data(service) -> None:
    with pytest.raises(AlgorithmNotFoundError):
        service.apply_layout("nope")
    with pytest.raises(AlgorithmNotFoundError):
        service.apply_clustering("nope")


def test_seeded_services_agree(chain_graph) -> None:
    results = []
    for _ in range(2):
        svc = GraphService.from_config(EngineConfig(seed=99))
        svc.set_data(chain_graph)
        svc.apply_layout("force-directed", {"iterations": 10})
        svc.apply_clustering("k-means", {"k": 2})
        data = svc.get_data()
        results.append((data.positions(), [n.cluster for n in data.nodes]))
    assert results[0] == results[1]


def test_layout_result_is_stored(service, chain_graph) -> None:
    service.set_data(chain_graph)
    out = service.apply_layout("grid")
    assert service.get_data() is out
    assert set(out.positions()) == {"A", "B", "C"}


def test_analytics_cache_follows_mutations(service, chain_graph, make_node) -> None:
    service.set_data(chain_graph)
    first = service.compute_analytics()
    assert service.get_analytics() is first
    service.add_node(make_node("D"))
    assert service.get_analytics() is None
    assert service.compute_analytics().statistics.node_count == 4


def test_events_are_emitted(chain_graph) -> None:
    events = []
    svc = GraphService.from_config(
        EngineConfig(seed=1), emit=lambda event, payload: events.append(event),
    )
    svc.set_data(chain_graph)
    svc.apply_layout("circular")
    svc.apply_clustering("connected-components")
    svc.compute_analytics()
    assert events == ["layout", "clustering", "analytics"]


def test_failing_emit_callback_is_contained(chain_graph) -> None:
    def boom(event, payload):
        raise RuntimeError("listener crashed")

    svc = GraphService.from_config(EngineConfig(seed=1), emit=boom)
    svc.set_data(chain_graph)
    assert svc.apply_layout("circular") is not None


def test_import_failure_keeps_previous_graph(service, chain_graph) -> None:
    service.set_data(chain_graph)
    assert service.import_data("{broken") is False
    assert service.get_data() is chain_graph


def test_export_then_import(service, chain_graph) -> None:
    service.set_data(chain_graph)
    text = service.export_data()
    service.set_data(None)
    assert service.import_data(text) is True
    assert service.get_data().node_ids == ["A", "B", "C"]


def test_filter_after_import_with_utc_timestamps(service) -> None:
    document = (
        '{"nodes": [{"id": "A", "label": "A", "metadata": {"createdAt": "2024-03-01T00:00:00Z"}},'
        ' {"id": "B", "label": "B"}], "links": []}'
    )
    assert service.import_data(document) is True
    flt = GraphFilter(date_range=(datetime(2024, 1, 1), datetime(2024, 12, 31)))
    assert service.filter_data(flt).node_ids == ["A"]


def test_derive_links_is_idempotent(service, make_node) -> None:
    service.set_data(GraphData.build(
        [make_node("A", tags=("t",)), make_node("B", tags=("t",))], [],
    ))
    assert len(service.derive_links("tag").links) == 1
    assert len(service.derive_links("tag").links) == 1


def test_optimize_view_uses_stored_graph(service, chain_graph) -> None:
    service.set_data(chain_graph)
    service.apply_layout("circular", {"radius": 10})
    result = service.optimize_view(Viewport(-50, -50, 100, 100))
    assert {n.id for n in result.visible_nodes} == {"A", "B", "C"}


def test_calculate_viewport_passthrough() -> None:
    vp = GraphService.calculate_viewport(200, 100, (0, 0), 1.0)
    assert (vp.x, vp.y) == (-100, -50)
