"""Pytest configuration and fixtures."""

from datetime import datetime
from typing import Optional, Sequence

import numpy as np
import pytest

from notegraph.config import EngineConfig
from notegraph.models import GraphData, GraphLink, GraphNode, NodeMetadata, Position
from notegraph.service import GraphService


def _node(
    node_id: str,
    x: Optional[float] = None,
    y: Optional[float] = None,
    *,
    label: Optional[str] = None,
    type: str = "note",
    tags: Sequence[str] = (),
    created_at: Optional[datetime] = None,
    cluster: Optional[str] = None,
) -> GraphNode:
    metadata = None
    if tags or created_at is not None:
        metadata = NodeMetadata(created_at=created_at, tags=tuple(tags))
    return GraphNode(
        id=node_id,
        label=label or node_id,
        type=type,
        position=Position(x, y) if x is not None else None,
        cluster=cluster,
        metadata=metadata,
    )


def _link(source: str, target: str, *, type: str = "reference", weight: float = 1.0) -> GraphLink:
    return GraphLink(id=f"{source}-{target}", source=source, target=target, type=type, weight=weight)


@pytest.fixture
def make_node():
    """Factory for GraphNode values."""
    return _node


@pytest.fixture
def make_link():
    """Factory for GraphLink values with id ``<source>-<target>``."""
    return _link


@pytest.fixture
def chain_graph() -> GraphData:
    """A - B - C, unpositioned."""
    return GraphData.build(
        [_node("A"), _node("B"), _node("C")],
        [_link("A", "B"), _link("B", "C")],
    )


@pytest.fixture
def two_triangles() -> GraphData:
    """Two disconnected triangles: A B C and D E F."""
    nodes = [_node(i) for i in "ABCDEF"]
    links = [
        _link("A", "B"), _link("B", "C"), _link("C", "A"),
        _link("D", "E"), _link("E", "F"), _link("F", "D"),
    ]
    return GraphData.build(nodes, links)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def service() -> GraphService:
    """Seeded service with no graph loaded."""
    return GraphService.from_config(EngineConfig(seed=7))
