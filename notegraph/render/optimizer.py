"""
RenderOptimizer: viewport culling and spatial aggregation.

Called once per pan/zoom. Culling is linear in nodes + links and the
aggregation pass is a greedy radius sweep over the surviving nodes; the
physics simulation is never re-run here.
"""

from __future__ import annotations

import logging
import math
import time
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..models import (
    ClusterNode,
    DEFAULT_NODE_COLOR,
    GraphLink,
    GraphNode,
    LinkMetadata,
    NodeMetadata,
    Position,
)
from ..presets import DEFAULT_OPTIMIZER_PRESET, OptimizerPreset
from .device import (
    CullingThresholds,
    DeviceProfile,
    DeviceProfileProvider,
    LOW_MEMORY_MB,
    StaticDeviceProvider,
    default_tier_thresholds,
    derive_thresholds,
)
from .viewport import Viewport

logger = logging.getLogger(__name__)

PERFORMANCE_MODES = ("quality", "performance", "auto")
CLUSTERING_LEVELS = ("none", "low", "medium", "high")

_RADIUS_SCALE = {"low": 1.0, "medium": 1.5, "high": 2.0}
_SIZE_SCALE = {"low": 1.5, "medium": 2.0, "high": 2.5}
_CLUSTER_LINK_BOOST = 1.5


# =========================================================================== #
# Results
# =========================================================================== #

@dataclass(frozen=True)
class PerformanceMetrics:
    culling_efficiency: float = 0.0
    clustering_efficiency: float = 0.0
    render_time: float = 0.0       # milliseconds

    def to_dict(self) -> Dict[str, float]:
        return {
            "cullingEfficiency": self.culling_efficiency,
            "clusteringEfficiency": self.clustering_efficiency,
            "renderTime": self.render_time,
        }


@dataclass(frozen=True)
class OptimizedGraphData:
    visible_nodes: List[GraphNode] = field(default_factory=list)
    visible_links: List[GraphLink] = field(default_factory=list)
    total_nodes: int = 0
    total_links: int = 0
    clustering_level: str = "none"
    performance_metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "visibleNodes": [n.to_dict() for n in self.visible_nodes],
            "visibleLinks": [l.to_dict() for l in self.visible_links],
            "totalNodes": self.total_nodes,
            "totalLinks": self.total_links,
            "clusteringLevel": self.clustering_level,
            "performanceMetrics": self.performance_metrics.to_dict(),
            "recommendations": list(self.recommendations),
        }


# =========================================================================== #
# Helpers
# =========================================================================== #

def _inside(p: Position, bounds: Tuple[float, float, float, float]) -> bool:
    min_x, min_y, max_x, max_y = bounds
    return min_x <= p.x <= max_x and min_y <= p.y <= max_y


def _shrink(bounds: Tuple[float, float, float, float], by: float) -> Tuple[float, float, float, float]:
    min_x, min_y, max_x, max_y = bounds
    return (min_x + by, min_y + by, max_x - by, max_y - by)


def _overflow_margin(count: int, threshold: float, margin: float) -> float:
    """Extra inset once ``count`` exceeds ``threshold``; tends to ``margin``."""
    if threshold <= 0 or count <= threshold:
        return 0.0
    factor = count / threshold
    return margin * (1.0 - 1.0 / factor)


def _tag_color(tag: str) -> str:
    if not tag:
        return DEFAULT_NODE_COLOR
    return f"hsl({(len(tag) * 50) % 360}, 70%, 60%)"


# =========================================================================== #
# Optimizer
# =========================================================================== #

class RenderOptimizer:
    """
    Parameters
    ----------
    provider:
        Source of the DeviceProfile. Defaults to a static desktop profile.
    preset:
        Clustering thresholds and base aggregation radius.
    clock:
        Millisecond-resolution timer source, injectable for tests.
    """

    def __init__(
        self,
        provider: Optional[DeviceProfileProvider] = None,
        preset: OptimizerPreset = DEFAULT_OPTIMIZER_PRESET,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.provider = provider or StaticDeviceProvider()
        self.preset = preset
        self.clock = clock
        self.tier_thresholds: Dict[str, CullingThresholds] = default_tier_thresholds()
        self._device: Optional[DeviceProfile] = None
        self._thresholds: Optional[CullingThresholds] = None

    # ------------------------------------------------------------------ #
    # Device configuration
    # ------------------------------------------------------------------ #

    def refresh_device(self) -> DeviceProfile:
        """Re-read the device profile (e.g. after a window resize)."""
        self._device = self.provider.get_profile()
        self._thresholds = derive_thresholds(self._device, self.tier_thresholds)
        logger.debug("device %s -> thresholds %s", self._device, self._thresholds)
        return self._device

    @property
    def device(self) -> DeviceProfile:
        if self._device is None:
            self.refresh_device()
        return self._device

    @property
    def thresholds(self) -> CullingThresholds:
        if self._thresholds is None:
            self.refresh_device()
        return self._thresholds

    def set_device_config(self, tier: str, **overrides: Any) -> CullingThresholds:
        """Override base thresholds for one device tier."""
        self.tier_thresholds[tier] = replace(self.tier_thresholds[tier], **overrides)
        if self._device is not None and self._device.tier == tier:
            self._thresholds = derive_thresholds(self._device, self.tier_thresholds)
        return self.tier_thresholds[tier]

    # ------------------------------------------------------------------ #
    # Pipeline steps
    # ------------------------------------------------------------------ #

    def clustering_level(self, node_count: int, mode: str, thr: CullingThresholds) -> str:
        adjusted = node_count * thr.performance_multiplier
        p = self.preset

        if mode == "quality":
            return "low" if adjusted > p.high_threshold else "none"

        if mode == "performance":
            if adjusted > p.high_threshold:
                return "high"
            if adjusted > p.medium_threshold:
                return "medium"
            if adjusted > p.low_threshold:
                return "low"
            return "none"

        if adjusted > p.high_threshold:
            return "medium"
        if adjusted > p.medium_threshold:
            return "low"
        return "none"

    @staticmethod
    def culling_margin(viewport: Viewport, thr: CullingThresholds) -> float:
        return thr.margin * thr.zoom_sensitivity / viewport.zoom

    def cull_nodes(
        self,
        nodes: Sequence[GraphNode],
        viewport: Viewport,
        thr: CullingThresholds,
    ) -> List[GraphNode]:
        """
        Keep positioned nodes inside the margin-grown viewport. Past the
        node threshold the margin is eaten back in proportion to the
        overflow, down to the bare viewport.
        """
        margin = self.culling_margin(viewport, thr)
        bounds = _shrink(
            viewport.bounds(margin),
            _overflow_margin(len(nodes), thr.node_threshold, margin),
        )
        return [n for n in nodes if n.position is not None and _inside(n.position, bounds)]

    def cull_links(
        self,
        links: Sequence[GraphLink],
        visible: Sequence[GraphNode],
        viewport: Viewport,
        thr: CullingThresholds,
    ) -> List[GraphLink]:
        by_id = {n.id: n for n in visible}
        margin = self.culling_margin(viewport, thr)
        bounds = _shrink(
            viewport.bounds(margin),
            _overflow_margin(len(links), thr.link_threshold, margin),
        )

        out = []
        for link in links:
            s = by_id.get(link.source)
            t = by_id.get(link.target)
            if s is None or t is None:
                continue
            mid = Position((s.position.x + t.position.x) / 2.0, (s.position.y + t.position.y) / 2.0)
            if _inside(mid, bounds):
                out.append(link)
        return out

    def _make_cluster(self, members: List[GraphNode], level: str) -> ClusterNode:
        cx = sum(n.position.x for n in members) / len(members)
        cy = sum(n.position.y for n in members) / len(members)

        representative = members[0]
        best = -1
        for n in members:
            score = len(n.tags) + len(n.label)
            if score > best:
                best, representative = score, n

        tag_counts = Counter(t for n in members for t in n.tags)
        dominant = tag_counts.most_common(1)[0][0] if tag_counts else ""
        node_type = Counter(n.type for n in members).most_common(1)[0][0]

        ids = [n.id for n in members]
        return ClusterNode(
            id="cluster_" + "_".join(ids),
            label=f"{len(members)} notes",
            type=node_type,
            position=Position(cx, cy),
            size=max(n.size for n in members) * _SIZE_SCALE[level],
            color=_tag_color(dominant),
            metadata=NodeMetadata(tags=(dominant,) if dominant else (), connections=0),
            child_nodes=tuple(ids),
            cluster_size=len(members),
            representative=representative,
        )

    def aggregate(
        self,
        nodes: Sequence[GraphNode],
        links: Sequence[GraphLink],
        level: str,
        thr: CullingThresholds,
    ) -> Tuple[List[GraphNode], List[GraphLink]]:
        """
        Greedy radius sweep: each unclaimed node claims every other unclaimed
        node within the level radius; groups of two or more collapse into a
        ClusterNode at their centroid. Links are rewired to cluster ids,
        internal links vanish and parallel rewired links are merged.
        """
        radius = self.preset.cluster_radius * _RADIUS_SCALE[level] * thr.performance_multiplier
        r2 = radius * radius

        claimed = set()
        clusters: List[ClusterNode] = []
        singles: List[GraphNode] = []
        for seed in nodes:
            if seed.id in claimed:
                continue
            claimed.add(seed.id)
            group = [seed]
            for other in nodes:
                if other.id in claimed:
                    continue
                dx = other.position.x - seed.position.x
                dy = other.position.y - seed.position.y
                if dx * dx + dy * dy <= r2:
                    group.append(other)
                    claimed.add(other.id)
            if len(group) > 1:
                clusters.append(self._make_cluster(group, level))
            else:
                singles.append(seed)

        owner: Dict[str, str] = {}
        for c in clusters:
            for child in c.child_nodes:
                owner[child] = c.id

        seen = set()
        out_links: List[GraphLink] = []
        for link in links:
            src = owner.get(link.source, link.source)
            dst = owner.get(link.target, link.target)
            if src == dst:
                continue
            key = (src, dst)
            if key in seen:
                continue
            seen.add(key)

            if link.source in owner and link.target in owner:
                meta = link.metadata or LinkMetadata()
                meta = replace(meta, strength=meta.strength * _CLUSTER_LINK_BOOST)
                out_links.append(replace(link, source=src, target=dst, metadata=meta))
            elif src != link.source or dst != link.target:
                out_links.append(replace(link, source=src, target=dst))
            else:
                out_links.append(link)

        return [*clusters, *singles], out_links

    # ------------------------------------------------------------------ #
    # Entry point
    # ------------------------------------------------------------------ #

    def optimize_graph(
        self,
        nodes: Sequence[GraphNode],
        links: Sequence[GraphLink],
        viewport: Viewport,
        mode: str = "auto",
    ) -> OptimizedGraphData:
        """
        Cull to the viewport, then aggregate the survivors at the level the
        node count and mode call for.

        The culled set only grows as the viewport grows. The visible count
        returned here follows it only at level ``none``: aggregation is a
        greedy sweep over whatever survived culling, so a wider viewport can
        pull in a seed that merges nodes a narrower one leaves apart.
        """
        if mode not in PERFORMANCE_MODES:
            raise ValueError(f"unknown performance mode {mode!r}")
        if viewport.zoom <= 0:
            raise ValueError(f"viewport zoom must be positive, got {viewport.zoom}")

        start = self.clock()
        thr = self.thresholds

        level = self.clustering_level(len(nodes), mode, thr)
        culled_nodes = self.cull_nodes(nodes, viewport, thr)
        culled_links = self.cull_links(links, culled_nodes, viewport, thr)

        final_nodes: List[GraphNode] = list(culled_nodes)
        final_links: List[GraphLink] = list(culled_links)
        if level != "none":
            final_nodes, final_links = self.aggregate(culled_nodes, culled_links, level, thr)

        elapsed_ms = (self.clock() - start) * 1000.0

        total = len(nodes)
        kept = len(culled_nodes)
        metrics = PerformanceMetrics(
            culling_efficiency=(total - kept) / total if total else 0.0,
            clustering_efficiency=(kept - len(final_nodes)) / kept if kept else 0.0,
            render_time=elapsed_ms,
        )
        logger.debug(
            "optimize: %d -> %d -> %d nodes (level=%s, %.2f ms)",
            total, kept, len(final_nodes), level, elapsed_ms,
        )
        return OptimizedGraphData(
            visible_nodes=final_nodes,
            visible_links=final_links,
            total_nodes=total,
            total_links=len(links),
            clustering_level=level,
            performance_metrics=metrics,
            recommendations=self.recommendations(metrics),
        )

    def recommendations(self, metrics: PerformanceMetrics) -> List[str]:
        device = self.device
        thr = self.thresholds
        out: List[str] = []

        if metrics.render_time > self.preset.frame_budget_ms:
            out.append("Consider enabling higher clustering level")
            if device.tier == "mobile":
                out.append("Mobile device detected - consider reducing graph complexity")

        if metrics.culling_efficiency < 0.3:
            out.append("Viewport culling efficiency is low - consider zooming out")
            out.append(
                f"Current margin: {math.floor(thr.margin)}px, "
                f"threshold: {math.floor(thr.node_threshold)} nodes"
            )

        if metrics.clustering_efficiency > 0.5:
            out.append("High clustering efficiency - graph is well optimized")

        if device.memory_mb < LOW_MEMORY_MB:
            out.append("Low memory device detected - consider reducing graph size")

        if device.gpu == "low":
            out.append("Low GPU capability detected - using simplified rendering")

        return out


__all__ = [
    "PERFORMANCE_MODES",
    "CLUSTERING_LEVELS",
    "PerformanceMetrics",
    "OptimizedGraphData",
    "RenderOptimizer",
]
