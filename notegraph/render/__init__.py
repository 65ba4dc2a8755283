# notegraph/render/__init__.py

"""
Render-optimisation subpackage.

Provides:
  - Viewport / calculate_viewport
  - DeviceProfile, providers and CullingThresholds
  - RenderOptimizer (culling + spatial aggregation)
"""

from __future__ import annotations

from .viewport import Viewport, calculate_viewport
from .device import (
    DEVICE_TIERS,
    GPU_TIERS,
    DeviceProfile,
    DEFAULT_DEVICE_PROFILE,
    DeviceProfileProvider,
    StaticDeviceProvider,
    CullingThresholds,
    default_tier_thresholds,
    derive_thresholds,
)
from .optimizer import (
    PERFORMANCE_MODES,
    CLUSTERING_LEVELS,
    PerformanceMetrics,
    OptimizedGraphData,
    RenderOptimizer,
)

__all__ = [
    "Viewport",
    "calculate_viewport",
    "DEVICE_TIERS",
    "GPU_TIERS",
    "DeviceProfile",
    "DEFAULT_DEVICE_PROFILE",
    "DeviceProfileProvider",
    "StaticDeviceProvider",
    "CullingThresholds",
    "default_tier_thresholds",
    "derive_thresholds",
    "PERFORMANCE_MODES",
    "CLUSTERING_LEVELS",
    "PerformanceMetrics",
    "OptimizedGraphData",
    "RenderOptimizer",
]
