"""
Global configuration for the notegraph engines.

This module centralizes configuration for:

    - the random seed shared by layout and clustering
    - force-directed iteration count and Barnes-Hut switch-over
    - shortest-path budget for analytics
    - feature flags (logging)

It provides:
    EngineConfig   – structured config object
    load_config()  – load from environment variables or defaults
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional

import numpy as np


@dataclass
class EngineConfig:
    """
    Canonical configuration for a GraphService and its engines.

    Attributes
    ----------
    seed:
        Seed for the shared ``numpy.random.Generator``. ``None`` draws fresh
        OS entropy, which makes layouts and k-means non-reproducible.

    layout_iterations:
        Default iteration count for the force-directed layout.

    barnes_hut_threshold:
        Node count above which force-directed repulsion switches from the
        exact pairwise sum to the quadtree approximation.

    barnes_hut_theta:
        Opening angle for the quadtree approximation.

    kmeans_iterations:
        Default iteration count for k-means clustering.

    max_path_nodes:
        Largest graph for which diameter / average path length are computed.

    enable_logging:
        Whether to configure root logging at INFO level on construction.
    """

    seed: Optional[int] = None
    layout_iterations: int = 100
    barnes_hut_threshold: int = 500
    barnes_hut_theta: float = 0.8
    kmeans_iterations: int = 10
    max_path_nodes: int = 2000

    enable_logging: bool = False

    def make_rng(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)


def load_config() -> EngineConfig:
    """
    Load EngineConfig from environment variables, falling back to defaults.

    Recognized variables:
        NOTEGRAPH_SEED                  (int)
        NOTEGRAPH_LAYOUT_ITERATIONS     (int)
        NOTEGRAPH_BARNES_HUT_THRESHOLD  (int)
        NOTEGRAPH_BARNES_HUT_THETA      (float)
        NOTEGRAPH_KMEANS_ITERATIONS     (int)
        NOTEGRAPH_MAX_PATH_NODES        (int)
        NOTEGRAPH_ENABLE_LOGGING        ("true" / "false" / "1" / "0")

    Returns
    -------
    EngineConfig
    """

    def _env_flag(name: str, default: bool) -> bool:
        val = os.getenv(name)
        if val is None:
            return default
        return val.strip().lower() in ("1", "true", "yes", "on")

    def _env_int(name: str, default: Optional[int]) -> Optional[int]:
        val = os.getenv(name)
        if val is None or not val.strip():
            return default
        return int(val)

    def _env_float(name: str, default: float) -> float:
        val = os.getenv(name)
        if val is None or not val.strip():
            return default
        return float(val)

    defaults = EngineConfig()

    return EngineConfig(
        seed=_env_int("NOTEGRAPH_SEED", None),
        layout_iterations=_env_int(
            "NOTEGRAPH_LAYOUT_ITERATIONS", defaults.layout_iterations
        ),
        barnes_hut_threshold=_env_int(
            "NOTEGRAPH_BARNES_HUT_THRESHOLD", defaults.barnes_hut_threshold
        ),
        barnes_hut_theta=_env_float(
            "NOTEGRAPH_BARNES_HUT_THETA", defaults.barnes_hut_theta
        ),
        kmeans_iterations=_env_int(
            "NOTEGRAPH_KMEANS_ITERATIONS", defaults.kmeans_iterations
        ),
        max_path_nodes=_env_int(
            "NOTEGRAPH_MAX_PATH_NODES", defaults.max_path_nodes
        ),
        enable_logging=_env_flag(
            "NOTEGRAPH_ENABLE_LOGGING",
            default=False
        ),
    )


__all__ = ["EngineConfig", "load_config"]
