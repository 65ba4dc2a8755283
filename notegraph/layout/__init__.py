# notegraph/layout/__init__.py

"""
Layout subpackage for notegraph.

Provides:
  - force-directed (exact and Barnes-Hut) / circular / hierarchical /
    grid / radial layouts
  - LayoutEngine registry
"""

from __future__ import annotations

from .layout2d import (
    force_directed_layout,
    circular_layout,
    hierarchical_layout,
    grid_layout,
    radial_layout,
)
from .engine import LayoutAlgorithm, LayoutEngine
from .quadtree import QuadTree

__all__ = [
    "force_directed_layout",
    "circular_layout",
    "hierarchical_layout",
    "grid_layout",
    "radial_layout",
    "LayoutAlgorithm",
    "LayoutEngine",
    "QuadTree",
]
