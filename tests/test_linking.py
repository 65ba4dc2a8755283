"""Tests for link derivation from tags and labels."""

import pytest

from notegraph.linking import generate_links, hierarchy_links, hybrid_links, tag_links


def test_tag_links_weight_by_shared_tags(make_node) -> None:
    nodes = [
        make_node("A", tags=("x", "y")),
        make_node("B", tags=("x", "y")),
        make_node("C", tags=("z",)),
    ]
    links = tag_links(nodes)
    assert [l.id for l in links] == ["tag:A->B"]
    assert links[0].weight == pytest.approx(1.0)
    assert links[0].type == "tag"


def test_hierarchy_from_path_labels(make_node) -> None:
    nodes = [
        make_node("p", label="Projects"),
        make_node("c", label="Projects/Alpha"),
    ]
    links = hierarchy_links(nodes)
    assert [(l.source, l.target) for l in links] == [("p", "c")]
    assert links[0].id == "hierarchy:p->c"


def test_hierarchy_from_numbered_sections(make_node) -> None:
    nodes = [
        make_node("one", label="1 Intro"),
        make_node("sub", label="1.1 Background"),
        make_node("two", label="2 Methods"),
    ]
    links = hierarchy_links(nodes)
    assert [(l.source, l.target) for l in links] == [("one", "sub")]


def test_hierarchy_prefers_shortest_parent(make_node) -> None:
    nodes = [
        make_node("short", label="Ops"),
        make_node("long", label="Ops team"),
        make_node("child", label="Ops > Oncall"),
    ]
    links = [l for l in hierarchy_links(nodes) if l.target == "child"]
    assert [l.source for l in links] == ["short"]


def test_hybrid_merges_pairs(make_node) -> None:
    nodes = [
        make_node("p", label="Projects", tags=("work",)),
        make_node("c", label="Projects/Alpha", tags=("work",)),
    ]
    links = hybrid_links(nodes)
    assert len(links) == 1
    assert links[0].type == "hierarchy"
    assert links[0].weight == pytest.approx(1.25)
    assert links[0].strength == pytest.approx(1.0)


def test_unknown_mode_raises(make_node) -> None:
    with pytest.raises(ValueError):
        generate_links([make_node("A")], "semantic")
