"""
Core façade for the notegraph engines.

GraphService is the single, high-level entrypoint used by:

    - the HTTP layer (notegraph.api),
    - embedding applications that drive a graph view directly.

It wraps:

    - GraphDataStore (the one mutable graph)
    - LayoutEngine / ClusteringEngine (seeded from one random source)
    - AnalyticsEngine (cached per store version)
    - FilterEngine
    - RenderOptimizer (with an injected device provider)

There is no module-level instance: construct one per graph view and hand it
to whoever needs it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .analytics import AnalyticsEngine, GraphAnalytics
from .clustering import ClusteringEngine
from .config import EngineConfig, load_config
from .errors import GraphImportError
from .filtering import FilterEngine
from .layout import LayoutEngine
from .linking import generate_links
from .models import GraphData, GraphFilter, GraphLink, GraphNode
from .render import (
    DeviceProfileProvider,
    OptimizedGraphData,
    RenderOptimizer,
    Viewport,
    calculate_viewport,
)
from .serialization import export_graph, import_graph
from .store import GraphDataStore

logger = logging.getLogger(__name__)

Emit = Callable[[str, Dict[str, Any]], None]


def _get_emit(emit: Optional[Emit]) -> Emit:
    if emit:
        return emit
    return lambda *_args, **_kwargs: None


# ---------------------------------------------------------------------------
# GraphService façade
# ---------------------------------------------------------------------------

@dataclass
class GraphService:
    """
    High-level façade over one graph and its engines.

    Attributes
    ----------
    config:
        EngineConfig used to construct this instance.

    store:
        Owner of the current GraphData.

    layout, clustering, analytics, filters, optimizer:
        The engines. ``layout`` and ``clustering`` share one
        ``numpy.random.Generator`` so a seeded service is reproducible.

    emit:
        Optional ``emit(event, payload)`` callback for progress events.
    """

    config: EngineConfig
    store: GraphDataStore
    layout: LayoutEngine
    clustering: ClusteringEngine
    analytics: AnalyticsEngine
    filters: FilterEngine
    optimizer: RenderOptimizer
    emit: Optional[Emit] = field(default=None, repr=False)

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        config: Optional[EngineConfig] = None,
        *,
        device_provider: Optional[DeviceProfileProvider] = None,
        emit: Optional[Emit] = None,
    ) -> "GraphService":
        cfg = config or load_config()

        if cfg.enable_logging:
            logging.basicConfig(level=logging.INFO)
            logger.info("Initializing GraphService with config: %s", cfg)

        rng = cfg.make_rng()
        return cls(
            config=cfg,
            store=GraphDataStore(),
            layout=LayoutEngine(rng=rng, config=cfg),
            clustering=ClusteringEngine(rng=rng, config=cfg),
            analytics=AnalyticsEngine(config=cfg),
            filters=FilterEngine(),
            optimizer=RenderOptimizer(provider=device_provider),
            emit=emit,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "GraphService":
        """Construct GraphService using environment variables."""
        return cls.from_config(load_config(), **kwargs)

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        try:
            _get_emit(self.emit)(event, payload)
        except Exception:
            logger.exception("emit callback failed for event %s", event)

    # ------------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------------

    def set_data(self, data: Optional[GraphData]) -> None:
        self.store.set_data(data)
        self.analytics.invalidate()

    def get_data(self) -> Optional[GraphData]:
        return self.store.get_data()

    def add_node(self, node: GraphNode) -> Optional[GraphData]:
        return self.store.add_node(node)

    def remove_node(self, node_id: str) -> Optional[GraphData]:
        return self.store.remove_node(node_id)

    def update_node(self, node_id: str, **fields: Any) -> Optional[GraphData]:
        return self.store.update_node(node_id, **fields)

    def add_link(self, link: GraphLink) -> Optional[GraphData]:
        return self.store.add_link(link)

    def remove_link(self, link_id: str) -> Optional[GraphData]:
        return self.store.remove_link(link_id)

    def update_link(self, link_id: str, **fields: Any) -> Optional[GraphData]:
        return self.store.update_link(link_id, **fields)

    def derive_links(self, mode: str = "hybrid") -> Optional[GraphData]:
        """Add links inferred from node tags / labels, skipping known ids."""
        data = self.get_data()
        if data is None:
            return None
        known = set(data.link_ids)
        fresh = [l for l in generate_links(data.nodes, mode) if l.id not in known]
        updated = data.with_links(data.links + tuple(fresh))
        self.set_data(updated)
        self._emit("links", {"mode": mode, "added": len(fresh)})
        return updated

    # ------------------------------------------------------------------
    # Layout / clustering
    # ------------------------------------------------------------------

    def list_layouts(self) -> List[Dict[str, Any]]:
        return self.layout.list_algorithms()

    def list_clusterings(self) -> List[Dict[str, Any]]:
        return self.clustering.list_algorithms()

    def apply_layout(
        self,
        name: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[GraphData]:
        """
        Run a layout on the current graph and store the result.

        Raises AlgorithmNotFoundError for an unknown name; returns None when
        no graph is loaded.
        """
        self.layout.get(name)
        data = self.get_data()
        if data is None:
            return None
        result = self.layout.run(name, data, params)
        self.set_data(result)
        self._emit("layout", {"algorithm": name, "n_nodes": len(result.nodes)})
        return result

    def apply_clustering(
        self,
        name: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[GraphData]:
        self.clustering.get(name)
        data = self.get_data()
        if data is None:
            return None
        result = self.clustering.run(name, data, params)
        self.set_data(result)
        n_clusters = len({n.cluster for n in result.nodes if n.cluster})
        self._emit("clustering", {"algorithm": name, "n_clusters": n_clusters})
        return result

    # ------------------------------------------------------------------
    # Analytics / filtering
    # ------------------------------------------------------------------

    def compute_analytics(self) -> Optional[GraphAnalytics]:
        data = self.get_data()
        if data is None:
            return None
        result = self.analytics.compute(data, cache_key=self.store.version)
        self._emit("analytics", result.statistics.to_dict())
        return result

    def get_analytics(self) -> Optional[GraphAnalytics]:
        """Last computed analytics, or None once the graph has changed."""
        return self.analytics.cached_for(self.store.version)

    def filter_data(self, flt: GraphFilter) -> Optional[GraphData]:
        data = self.get_data()
        if data is None:
            return None
        return self.filters.apply(data, flt)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def optimize_graph(
        self,
        nodes: Sequence[GraphNode],
        links: Sequence[GraphLink],
        viewport: Viewport,
        mode: str = "auto",
    ) -> OptimizedGraphData:
        return self.optimizer.optimize_graph(nodes, links, viewport, mode)

    def optimize_view(self, viewport: Viewport, mode: str = "auto") -> Optional[OptimizedGraphData]:
        """optimize_graph over the stored graph."""
        data = self.get_data()
        if data is None:
            return None
        return self.optimizer.optimize_graph(data.nodes, data.links, viewport, mode)

    @staticmethod
    def calculate_viewport(
        canvas_width: float,
        canvas_height: float,
        pan: Tuple[float, float],
        zoom: float,
    ) -> Viewport:
        return calculate_viewport(canvas_width, canvas_height, pan, zoom)

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_data(self) -> str:
        data = self.get_data()
        if data is None:
            return ""
        return export_graph(data)

    def import_data(self, text: str) -> bool:
        """Replace the graph with a parsed document; keep it on failure."""
        try:
            data = import_graph(text)
        except GraphImportError as exc:
            logger.error("Failed to import graph data: %s", exc)
            return False
        self.set_data(data)
        self._emit("import", {"n_nodes": len(data.nodes), "n_links": len(data.links)})
        return True


__all__ = ["GraphService"]
