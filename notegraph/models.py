"""
Core graph value types.

Everything here is an immutable value: engines receive a GraphData and hand
back a new one built with ``dataclasses.replace``. Nothing in the package
mutates a GraphData after construction.

Wire format
-----------
``to_dict`` / ``from_dict`` use the camelCase keys of the exported JSON
document (``createdAt``, ``isCluster``, ``childNodes`` ...), so a document
produced by :func:`notegraph.serialization.export_graph` can be loaded
by any front-end reading the same camelCase document.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple


NODE_TYPES = ("note", "tag", "user", "category")
LINK_TYPES = ("reference", "tag", "collaboration", "hierarchy")

DEFAULT_NODE_COLOR = "#6c757d"


# =========================================================================== #
# Helpers
# =========================================================================== #

def _dt_to_str(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _dt_from_any(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    text = str(value)
    # JavaScript Date.toJSON() emits a trailing "Z"
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))


def _metadata_dict(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    meta = raw.get("metadata")
    if meta is not None and not isinstance(meta, dict):
        raise ValueError(f"metadata must be an object, got {type(meta).__name__}")
    return meta


# =========================================================================== #
# Geometry
# =========================================================================== #

@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Position":
        return cls(x=float(raw["x"]), y=float(raw["y"]))


# =========================================================================== #
# Nodes
# =========================================================================== #

@dataclass(frozen=True)
class NodeMetadata:
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tags: Tuple[str, ...] = ()
    connections: int = 0
    importance: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "createdAt": _dt_to_str(self.created_at),
            "updatedAt": _dt_to_str(self.updated_at),
            "tags": list(self.tags),
            "connections": self.connections,
            "importance": self.importance,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "NodeMetadata":
        return cls(
            created_at=_dt_from_any(raw.get("createdAt")),
            updated_at=_dt_from_any(raw.get("updatedAt")),
            tags=tuple(str(t) for t in raw.get("tags") or ()),
            connections=int(raw.get("connections", 0)),
            importance=float(raw.get("importance", 0.0)),
        )


@dataclass(frozen=True)
class GraphNode:
    """
    A single vertex of the knowledge graph.

    ``position`` stays None until a layout has run. ``data`` is the opaque
    domain payload (note body, user record ...) and is carried through every
    engine untouched.
    """

    id: str
    label: str
    type: str = "note"
    position: Optional[Position] = None
    size: float = 1.0
    color: str = DEFAULT_NODE_COLOR
    cluster: Optional[str] = None
    metadata: Optional[NodeMetadata] = None
    data: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def tags(self) -> Tuple[str, ...]:
        return self.metadata.tags if self.metadata else ()

    def moved_to(self, x: float, y: float) -> "GraphNode":
        return replace(self, position=Position(float(x), float(y)))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "size": self.size,
            "color": self.color,
            "data": dict(self.data),
        }
        if self.position is not None:
            out["position"] = self.position.to_dict()
        if self.cluster is not None:
            out["cluster"] = self.cluster
        if self.metadata is not None:
            out["metadata"] = self.metadata.to_dict()
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "GraphNode":
        if raw.get("isCluster"):
            return ClusterNode.from_dict(raw)
        return cls(**_node_fields(raw))


def _node_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    pos = raw.get("position")
    meta = _metadata_dict(raw)
    return dict(
        id=str(raw["id"]),
        label=str(raw.get("label", raw["id"])),
        type=str(raw.get("type", "note")),
        position=Position.from_dict(pos) if pos else None,
        size=float(raw.get("size", 1.0)),
        color=str(raw.get("color", DEFAULT_NODE_COLOR)),
        cluster=raw.get("cluster"),
        metadata=NodeMetadata.from_dict(meta) if meta else None,
        data=dict(raw.get("data") or {}),
    )


@dataclass(frozen=True)
class ClusterNode(GraphNode):
    """Synthetic node standing in for a group of nearby real nodes."""

    is_cluster: bool = True
    child_nodes: Tuple[str, ...] = ()
    cluster_size: int = 0
    representative: Optional[GraphNode] = None

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["isCluster"] = True
        out["childNodes"] = list(self.child_nodes)
        out["clusterSize"] = self.cluster_size
        if self.representative is not None:
            out["representativeNode"] = self.representative.to_dict()
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ClusterNode":
        rep = raw.get("representativeNode")
        return cls(
            **_node_fields(raw),
            child_nodes=tuple(str(c) for c in raw.get("childNodes") or ()),
            cluster_size=int(raw.get("clusterSize", 0)),
            representative=GraphNode.from_dict(rep) if rep else None,
        )


# =========================================================================== #
# Links
# =========================================================================== #

@dataclass(frozen=True)
class LinkMetadata:
    created_at: Optional[datetime] = None
    strength: float = 1.0
    bidirectional: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "createdAt": _dt_to_str(self.created_at),
            "strength": self.strength,
            "bidirectional": self.bidirectional,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "LinkMetadata":
        return cls(
            created_at=_dt_from_any(raw.get("createdAt")),
            strength=float(raw.get("strength", 1.0)),
            bidirectional=bool(raw.get("bidirectional", False)),
        )


@dataclass(frozen=True)
class GraphLink:
    id: str
    source: str
    target: str
    type: str = "reference"
    weight: float = 1.0
    color: Optional[str] = None
    metadata: Optional[LinkMetadata] = None

    @property
    def strength(self) -> float:
        return self.metadata.strength if self.metadata else 1.0

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.type,
            "weight": self.weight,
        }
        if self.color is not None:
            out["color"] = self.color
        if self.metadata is not None:
            out["metadata"] = self.metadata.to_dict()
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "GraphLink":
        meta = _metadata_dict(raw)
        weight = float(raw.get("weight", 1.0))
        if weight < 0:
            raise ValueError(f"link {raw.get('id')!r} has negative weight {weight}")
        return cls(
            id=str(raw["id"]),
            source=str(raw["source"]),
            target=str(raw["target"]),
            type=str(raw.get("type", "reference")),
            weight=weight,
            color=raw.get("color"),
            metadata=LinkMetadata.from_dict(meta) if meta else None,
        )


# =========================================================================== #
# Graph container
# =========================================================================== #

@dataclass(frozen=True)
class GraphSummary:
    total_nodes: int = 0
    total_links: int = 0
    clusters: int = 0
    density: float = 0.0
    average_degree: float = 0.0

    @classmethod
    def compute(cls, nodes: Iterable[GraphNode], links: Iterable[GraphLink]) -> "GraphSummary":
        nodes = list(nodes)
        links = list(links)
        n, e = len(nodes), len(links)
        clusters = {nd.cluster for nd in nodes if nd.cluster}
        return cls(
            total_nodes=n,
            total_links=e,
            clusters=len(clusters),
            density=(2.0 * e) / (n * (n - 1)) if n > 1 else 0.0,
            average_degree=(2.0 * e) / n if n > 0 else 0.0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalNodes": self.total_nodes,
            "totalLinks": self.total_links,
            "clusters": self.clusters,
            "density": self.density,
            "averageDegree": self.average_degree,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "GraphSummary":
        return cls(
            total_nodes=int(raw.get("totalNodes", 0)),
            total_links=int(raw.get("totalLinks", 0)),
            clusters=int(raw.get("clusters", 0)),
            density=float(raw.get("density", 0.0)),
            average_degree=float(raw.get("averageDegree", 0.0)),
        )


@dataclass(frozen=True)
class GraphData:
    """
    Node/link graph plus summary metadata.

    Node ids are unique. Links normally reference existing nodes, but
    engines tolerate dangling endpoints by skipping them on lookup.
    """

    nodes: Tuple[GraphNode, ...] = ()
    links: Tuple[GraphLink, ...] = ()
    metadata: Optional[GraphSummary] = None

    def __post_init__(self):
        # accept lists from callers, store tuples
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "links", tuple(self.links))
        seen = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"duplicate node id {node.id!r}")
            seen.add(node.id)

    @classmethod
    def build(cls, nodes: Iterable[GraphNode], links: Iterable[GraphLink]) -> "GraphData":
        """Construct a graph and compute its summary metadata."""
        nodes = tuple(nodes)
        links = tuple(links)
        return cls(nodes=nodes, links=links, metadata=GraphSummary.compute(nodes, links))

    # ------------------------------------------------------------------ #
    @property
    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    @property
    def link_ids(self) -> List[str]:
        return [l.id for l in self.links]

    def node_map(self) -> Dict[str, GraphNode]:
        return {n.id: n for n in self.nodes}

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_link(self, link_id: str) -> Optional[GraphLink]:
        for link in self.links:
            if link.id == link_id:
                return link
        return None

    def with_graph(self, nodes: Iterable[GraphNode], links: Iterable[GraphLink]) -> "GraphData":
        """Copy with new nodes and links; a present summary is recomputed."""
        nodes = tuple(nodes)
        links = tuple(links)
        meta = GraphSummary.compute(nodes, links) if self.metadata is not None else None
        return replace(self, nodes=nodes, links=links, metadata=meta)

    def with_nodes(self, nodes: Iterable[GraphNode]) -> "GraphData":
        return self.with_graph(nodes, self.links)

    def with_links(self, links: Iterable[GraphLink]) -> "GraphData":
        return self.with_graph(self.nodes, links)

    def positions(self) -> Dict[str, Tuple[float, float]]:
        return {
            n.id: (n.position.x, n.position.y)
            for n in self.nodes
            if n.position is not None
        }

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [l.to_dict() for l in self.links],
        }
        if self.metadata is not None:
            out["metadata"] = self.metadata.to_dict()
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "GraphData":
        meta = raw.get("metadata")
        return cls(
            nodes=tuple(GraphNode.from_dict(n) for n in raw["nodes"]),
            links=tuple(GraphLink.from_dict(l) for l in raw["links"]),
            metadata=GraphSummary.from_dict(meta) if meta else None,
        )


# =========================================================================== #
# Filter + analytics value types
# =========================================================================== #

@dataclass(frozen=True)
class GraphFilter:
    """
    Predicates for FilterEngine. Every field left as None is not applied,
    so ``GraphFilter()`` keeps the whole graph.
    """

    node_types: Optional[Tuple[str, ...]] = None
    link_types: Optional[Tuple[str, ...]] = None
    min_connections: Optional[int] = None
    max_connections: Optional[int] = None
    date_range: Optional[Tuple[datetime, datetime]] = None
    tags: Optional[Tuple[str, ...]] = None
    clusters: Optional[Tuple[str, ...]] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "GraphFilter":
        def _tuple(key):
            val = raw.get(key)
            return tuple(val) if val is not None else None

        dr = raw.get("dateRange")
        date_range = None
        if dr:
            date_range = (_dt_from_any(dr["start"]), _dt_from_any(dr["end"]))
        return cls(
            node_types=_tuple("nodeTypes"),
            link_types=_tuple("linkTypes"),
            min_connections=raw.get("minConnections"),
            max_connections=raw.get("maxConnections"),
            date_range=date_range,
            tags=_tuple("tags"),
            clusters=_tuple("clusters"),
        )


@dataclass(frozen=True)
class GraphStatistics:
    node_count: int = 0
    link_count: int = 0
    average_degree: float = 0.0
    density: float = 0.0
    diameter: int = 0
    average_path_length: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodeCount": self.node_count,
            "linkCount": self.link_count,
            "averageDegree": self.average_degree,
            "density": self.density,
            "diameter": self.diameter,
            "averagePathLength": self.average_path_length,
        }


__all__ = [
    "NODE_TYPES",
    "LINK_TYPES",
    "DEFAULT_NODE_COLOR",
    "as_utc",
    "Position",
    "NodeMetadata",
    "GraphNode",
    "ClusterNode",
    "LinkMetadata",
    "GraphLink",
    "GraphSummary",
    "GraphData",
    "GraphFilter",
    "GraphStatistics",
]
