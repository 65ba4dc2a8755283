"""
LayoutEngine: registry of named layout algorithms.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from ..config import EngineConfig
from ..errors import AlgorithmNotFoundError
from ..models import GraphData
from ..presets import (
    CircularParams,
    ForceDirectedParams,
    GridParams,
    HierarchicalParams,
    RadialParams,
)
from .layout2d import (
    circular_layout,
    force_directed_layout,
    grid_layout,
    hierarchical_layout,
    radial_layout,
)

logger = logging.getLogger(__name__)

LayoutFn = Callable[[GraphData, Dict[str, Any], np.random.Generator], GraphData]


@dataclass(frozen=True)
class LayoutAlgorithm:
    name: str
    description: str
    execute: LayoutFn
    parameters: Dict[str, Any] = field(default_factory=dict)

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": dict(self.parameters),
        }


class LayoutEngine:
    """
    Holds the layout registry and the random source used to seed
    unpositioned nodes. Two engines built from the same seed produce the
    same layouts.
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else self.config.make_rng()
        self._algorithms: Dict[str, LayoutAlgorithm] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        cfg = self.config

        force = ForceDirectedParams(
            iterations=cfg.layout_iterations,
            theta=cfg.barnes_hut_theta,
        ).to_dict()
        force["barnes_hut_threshold"] = cfg.barnes_hut_threshold

        self.register(LayoutAlgorithm(
            name="force-directed",
            description="Uses physics simulation to position nodes based on forces",
            execute=force_directed_layout,
            parameters=force,
        ))
        self.register(LayoutAlgorithm(
            name="circular",
            description="Arranges nodes in a circle",
            execute=circular_layout,
            parameters=CircularParams().to_dict(),
        ))
        self.register(LayoutAlgorithm(
            name="hierarchical",
            description="Arranges nodes in a tree-like structure",
            execute=hierarchical_layout,
            parameters=HierarchicalParams().to_dict(),
        ))
        self.register(LayoutAlgorithm(
            name="grid",
            description="Arranges nodes in a grid pattern",
            execute=grid_layout,
            parameters=GridParams().to_dict(),
        ))
        self.register(LayoutAlgorithm(
            name="radial",
            description="Arranges nodes in concentric circles",
            execute=radial_layout,
            parameters=RadialParams().to_dict(),
        ))

    # ------------------------------------------------------------------ #
    def register(self, algorithm: LayoutAlgorithm) -> None:
        self._algorithms[algorithm.name] = algorithm

    def list_algorithms(self) -> List[Dict[str, Any]]:
        return [a.describe() for a in self._algorithms.values()]

    def get(self, name: str) -> LayoutAlgorithm:
        try:
            return self._algorithms[name]
        except KeyError:
            raise AlgorithmNotFoundError("layout", name, self._algorithms) from None

    def run(
        self,
        name: str,
        data: GraphData,
        params: Optional[Dict[str, Any]] = None,
    ) -> GraphData:
        algorithm = self.get(name)
        merged = {**algorithm.parameters, **(params or {})}
        logger.info("layout %s on %d nodes", name, len(data.nodes))
        return algorithm.execute(data, merged, self.rng)


__all__ = ["LayoutAlgorithm", "LayoutEngine"]
