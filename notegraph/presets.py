"""
Preset parameters for the layout, clustering and render engines.

Each algorithm registers one of these as its default parameter set; callers
override individual keys per call. Values follow the long-standing
front-end defaults so that layouts stay comparable with older exports.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional


# --------------------------------------------------------------------------- #
# Layout presets
# --------------------------------------------------------------------------- #

@dataclass
class ForceDirectedParams:
    strength: float = -300.0      # negative = repulsive
    distance: float = 100.0       # spring rest length
    spring: float = 0.1
    iterations: int = 100
    seed_width: float = 800.0
    seed_height: float = 600.0
    max_displacement: float = 50.0
    theta: float = 0.8            # Barnes-Hut opening angle

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CircularParams:
    radius: float = 200.0
    center_x: float = 0.0
    center_y: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class HierarchicalParams:
    node_separation: float = 100.0
    level_separation: float = 150.0
    direction: str = "TB"         # TB, BT, LR, RL

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GridParams:
    columns: int = 10
    spacing: float = 100.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RadialParams:
    levels: int = 3
    radius_increment: float = 100.0
    center_node: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# --------------------------------------------------------------------------- #
# Clustering presets
# --------------------------------------------------------------------------- #

@dataclass
class LouvainParams:
    resolution: float = 1.0
    threshold: float = 1e-7

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class KMeansParams:
    k: int = 5
    iterations: int = 10
    seed_width: float = 800.0
    seed_height: float = 600.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SpectralParams:
    k: int = 5
    weighted: bool = False
    n_init: int = 10

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# --------------------------------------------------------------------------- #
# Render optimiser constants
# --------------------------------------------------------------------------- #

@dataclass
class OptimizerPreset:
    """
    Node-count thresholds for the clustering level and the base radius used
    when spatially aggregating visible nodes.
    """

    low_threshold: int = 50
    medium_threshold: int = 100
    high_threshold: int = 200
    cluster_radius: float = 100.0
    frame_budget_ms: float = 16.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_OPTIMIZER_PRESET = OptimizerPreset()


__all__ = [
    "ForceDirectedParams",
    "CircularParams",
    "HierarchicalParams",
    "GridParams",
    "RadialParams",
    "LouvainParams",
    "KMeansParams",
    "SpectralParams",
    "OptimizerPreset",
    "DEFAULT_OPTIMIZER_PRESET",
]
