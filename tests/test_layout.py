"""Tests for the layout strategies and LayoutEngine."""

import math

import numpy as np
import pytest

from notegraph.errors import AlgorithmNotFoundError
from notegraph.layout import LayoutEngine, QuadTree
from notegraph.models import GraphData


def _engine(seed: int = 11) -> LayoutEngine:
    return LayoutEngine(rng=np.random.default_rng(seed))


def test_force_directed_is_reproducible_with_seed(chain_graph) -> None:
    a = _engine().run("force-directed", chain_graph, {"iterations": 20})
    b = _engine().run("force-directed", chain_graph, {"iterations": 20})
    assert a.positions() == b.positions()
    assert set(a.positions()) == {"A", "B", "C"}


def test_force_directed_barnes_hut_path(two_triangles) -> None:
    params = {"iterations": 15, "barnes_hut_threshold": 1}
    a = _engine(3).run("force-directed", two_triangles, params)
    b = _engine(3).run("force-directed", two_triangles, params)
    assert a.positions() == b.positions()
    coords = np.array(list(a.positions().values()))
    assert np.isfinite(coords).all()


def test_force_directed_pushes_unlinked_nodes_apart(make_node) -> None:
    data = GraphData.build([make_node("A", 0, 0), make_node("B", 10, 0)], [])
    out = _engine().run("force-directed", data, {"iterations": 1})
    a, b = out.get_node("A").position, out.get_node("B").position
    assert b.x - a.x > 10


def test_force_directed_caps_displacement(make_node) -> None:
    data = GraphData.build([make_node("A", 0, 0), make_node("B", 0.01, 0)], [])
    out = _engine().run("force-directed", data, {"iterations": 1, "max_displacement": 5})
    assert out.get_node("A").position.x == pytest.approx(-5.0)
    assert out.get_node("B").position.x == pytest.approx(5.01)


def test_barnes_hut_matches_exact_for_distant_pairs() -> None:
    pos = np.array([[0.0, 0.0], [100.0, 0.0], [0.0, 100.0]])
    tree = QuadTree(pos)
    force = tree.repulsion(0, 300.0, theta=0.0)
    # exact: each neighbour pushes with 300 / 100**2 along its axis
    assert force == pytest.approx([-0.03, -0.03])


def test_layout_leaves_input_untouched(chain_graph) -> None:
    _engine().run("circular", chain_graph)
    assert chain_graph.positions() == {}


def test_circular_layout(make_node) -> None:
    data = GraphData.build([make_node(i) for i in "ABCD"], [])
    out = _engine().run("circular", data)
    a, b = out.get_node("A").position, out.get_node("B").position
    assert (a.x, a.y) == pytest.approx((200.0, 0.0))
    assert (b.x, b.y) == pytest.approx((0.0, 200.0), abs=1e-9)
    for node in out.nodes:
        assert math.hypot(node.position.x, node.position.y) == pytest.approx(200.0)


def test_circular_layout_params_override(make_node) -> None:
    data = GraphData.build([make_node("A")], [])
    out = _engine().run("circular", data, {"radius": 50, "center_x": 10})
    assert out.get_node("A").position.x == pytest.approx(60.0)


def test_hierarchical_layout_levels(make_node, make_link) -> None:
    data = GraphData.build(
        [make_node(i) for i in "ABCD"],
        [make_link("A", "B"), make_link("A", "C"), make_link("C", "D")],
    )
    out = _engine().run("hierarchical", data)
    pos = {nid: (p[0], p[1]) for nid, p in out.positions().items()}
    assert pos["A"] == (0.0, 0.0)
    assert pos["B"] == (-50.0, 150.0)
    assert pos["C"] == (50.0, 150.0)
    assert pos["D"] == (0.0, 300.0)


def test_hierarchical_layout_left_to_right(make_node, make_link) -> None:
    data = GraphData.build([make_node("A"), make_node("B")], [make_link("A", "B")])
    out = _engine().run("hierarchical", data, {"direction": "LR"})
    assert out.positions()["B"] == (150.0, 0.0)


def test_hierarchical_layout_places_cycle_members(make_node, make_link) -> None:
    data = GraphData.build(
        [make_node("X"), make_node("Y")],
        [make_link("X", "Y"), make_link("Y", "X")],
    )
    out = _engine().run("hierarchical", data)
    assert set(out.positions()) == {"X", "Y"}


def test_grid_layout(make_node) -> None:
    data = GraphData.build([make_node(i) for i in "ABCD"], [])
    out = _engine().run("grid", data, {"columns": 2})
    pos = out.positions()
    assert pos["A"] == pytest.approx((-100.0, -100.0))
    assert pos["D"] == pytest.approx((0.0, 0.0))


def test_radial_layout_rings(make_node) -> None:
    data = GraphData.build([make_node(i) for i in "ABCD"], [])
    out = _engine().run("radial", data, {"levels": 2})
    radii = {
        nid: math.hypot(x, y) for nid, (x, y) in out.positions().items()
    }
    assert radii["A"] == pytest.approx(100.0)
    assert radii["C"] == pytest.approx(100.0)
    assert radii["B"] == pytest.approx(200.0)
    assert out.positions()["C"] == pytest.approx((-100.0, 0.0), abs=1e-9)


def test_radial_layout_center_node(make_node) -> None:
    data = GraphData.build([make_node(i) for i in "ABC"], [])
    out = _engine().run("radial", data, {"center_node": "B"})
    assert out.positions()["B"] == (0.0, 0.0)


def test_empty_graph_layouts() -> None:
    engine = _engine()
    for algo in engine.list_algorithms():
        out = engine.run(algo["name"], GraphData.build([], []))
        assert out.nodes == ()


def test_unknown_layout_raises() -> None:
    with pytest.raises(AlgorithmNotFoundError) as exc_info:
        _engine().get("spring-magic")
    assert isinstance(exc_info.value, LookupError)
    assert "force-directed" in exc_info.value.available


def test_list_algorithms_describes_parameters() -> None:
    names = [a["name"] for a in _engine().list_algorithms()]
    assert names == ["force-directed", "circular", "hierarchical", "grid", "radial"]
