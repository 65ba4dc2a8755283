"""
Derive links from node content.

Modes:
  - tag       : connect every pair of nodes sharing at least one tag,
                weight 0.5 per shared tag
  - hierarchy : connect a node to its most likely parent, judged from
                label patterns ("A/B", "A - B", "A: B", "A > B", "1.2 ...")
  - hybrid    : hierarchy + tag links; a pair found by both keeps the
                hierarchy link and is strengthened by half the tag weight
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Dict, FrozenSet, List, Optional, Sequence

from .models import GraphLink, GraphNode, LinkMetadata

LINK_MODES = ("tag", "hierarchy", "hybrid")

_NUMBERED = re.compile(r"^(\d+(?:\.\d+)*)\.?\s")
_PATH_SPLIT = re.compile(r"/| - ")
_SECTION_SPLIT = re.compile(r":| > ")


def _link(source: str, target: str, type_: str, weight: float) -> GraphLink:
    return GraphLink(
        id=f"{type_}:{source}->{target}",
        source=source,
        target=target,
        type=type_,
        weight=weight,
        metadata=LinkMetadata(strength=min(1.0, weight)),
    )


def tag_links(nodes: Sequence[GraphNode]) -> List[GraphLink]:
    out = []
    for i, a in enumerate(nodes):
        a_tags = set(a.tags)
        if not a_tags:
            continue
        for b in nodes[i + 1:]:
            shared = a_tags.intersection(b.tags)
            if shared:
                out.append(_link(a.id, b.id, "tag", 0.5 * len(shared)))
    return out


def _is_parent(child: str, parent: str) -> bool:
    m_child = _NUMBERED.match(child)
    m_parent = _NUMBERED.match(parent)
    if m_child and m_parent:
        return m_child.group(1).startswith(m_parent.group(1) + ".")

    if len(parent) >= len(child):
        return False
    for splitter in (_PATH_SPLIT, _SECTION_SPLIT):
        parts = [p.strip() for p in splitter.split(child)]
        if len(parts) > 1:
            return any(p and p in parent for p in parts[:-1])
    return False


def _best_parent(node: GraphNode, nodes: Sequence[GraphNode]) -> Optional[GraphNode]:
    title = node.label.lower()
    candidates = [
        other for other in nodes
        if other.id != node.id and _is_parent(title, other.label.lower())
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda n: len(n.label))


def hierarchy_links(nodes: Sequence[GraphNode]) -> List[GraphLink]:
    out = []
    for node in nodes:
        parent = _best_parent(node, nodes)
        if parent is not None:
            out.append(_link(parent.id, node.id, "hierarchy", 1.0))
    return out


def hybrid_links(nodes: Sequence[GraphNode]) -> List[GraphLink]:
    merged: Dict[FrozenSet[str], GraphLink] = {}
    for link in [*hierarchy_links(nodes), *tag_links(nodes)]:
        key = frozenset((link.source, link.target))
        existing = merged.get(key)
        if existing is None:
            merged[key] = link
            continue
        weight = existing.weight + link.weight * 0.5
        merged[key] = replace(
            existing,
            weight=weight,
            metadata=replace(existing.metadata, strength=min(1.0, weight)),
        )
    return list(merged.values())


def generate_links(nodes: Sequence[GraphNode], mode: str = "hybrid") -> List[GraphLink]:
    nodes = list(nodes)
    if mode == "tag":
        return tag_links(nodes)
    if mode == "hierarchy":
        return hierarchy_links(nodes)
    if mode == "hybrid":
        return hybrid_links(nodes)
    raise ValueError(f"unknown link mode {mode!r} (expected one of {LINK_MODES})")


__all__ = [
    "LINK_MODES",
    "tag_links",
    "hierarchy_links",
    "hybrid_links",
    "generate_links",
]
