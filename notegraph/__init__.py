"""
notegraph: layout, clustering, analytics and render optimisation for
note/knowledge graphs.
"""

# ---------------------------------------------------------------------------
# Facade and configuration
# ---------------------------------------------------------------------------
from .service import GraphService
from .config import EngineConfig, load_config

# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------
from .models import (
    Position,
    NodeMetadata,
    GraphNode,
    ClusterNode,
    LinkMetadata,
    GraphLink,
    GraphSummary,
    GraphData,
    GraphFilter,
    GraphStatistics,
)

# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------
from .store import GraphDataStore
from .layout import LayoutEngine, LayoutAlgorithm
from .clustering import ClusteringEngine, ClusterAlgorithm
from .analytics import AnalyticsEngine, GraphAnalytics
from .filtering import FilterEngine
from .render import (
    Viewport,
    calculate_viewport,
    DeviceProfile,
    StaticDeviceProvider,
    CullingThresholds,
    RenderOptimizer,
    OptimizedGraphData,
    PerformanceMetrics,
)

# ---------------------------------------------------------------------------
# Import / export and link derivation
# ---------------------------------------------------------------------------
from .serialization import export_graph, import_graph, read_graph, write_graph
from .linking import generate_links

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from .errors import (
    NotegraphError,
    AlgorithmNotFoundError,
    DuplicateNodeError,
    GraphImportError,
)

__all__ = [
    "GraphService",
    "EngineConfig",
    "load_config",
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
    "GraphDataStore",
    "LayoutEngine",
    "LayoutAlgorithm",
    "ClusteringEngine",
    "ClusterAlgorithm",
    "AnalyticsEngine",
    "GraphAnalytics",
    "FilterEngine",
    "Viewport",
    "calculate_viewport",
    "DeviceProfile",
    "StaticDeviceProvider",
    "CullingThresholds",
    "RenderOptimizer",
    "OptimizedGraphData",
    "PerformanceMetrics",
    "export_graph",
    "import_graph",
    "read_graph",
    "write_graph",
    "generate_links",
    "NotegraphError",
    "AlgorithmNotFoundError",
    "DuplicateNodeError",
    "GraphImportError",
]
