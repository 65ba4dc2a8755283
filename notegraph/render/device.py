"""
Device capability profiles and the culling thresholds derived from them.

The engine never probes the platform itself. The host environment supplies
a DeviceProfile through any object with a ``get_profile()`` method; the
default provider just returns a fixed desktop profile.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, replace
from typing import Any, Dict, Protocol

DEVICE_TIERS = ("mobile", "tablet", "desktop")
GPU_TIERS = ("low", "medium", "high")

LOW_MEMORY_MB = 2048
HIGH_MEMORY_MB = 8192
SMALL_SCREEN_PX = 300_000
LARGE_SCREEN_PX = 2_000_000


# --------------------------------------------------------------------------- #
# Profiles
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class DeviceProfile:
    tier: str = "desktop"
    screen_width: int = 1920
    screen_height: int = 1080
    pixel_ratio: float = 1.0
    memory_mb: int = 8192
    cpu_cores: int = 4
    gpu: str = "high"

    def __post_init__(self):
        if self.tier not in DEVICE_TIERS:
            raise ValueError(f"unknown device tier {self.tier!r}")
        if self.gpu not in GPU_TIERS:
            raise ValueError(f"unknown GPU tier {self.gpu!r}")

    @property
    def screen_area(self) -> int:
        return self.screen_width * self.screen_height

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_DEVICE_PROFILE = DeviceProfile()


class DeviceProfileProvider(Protocol):
    def get_profile(self) -> DeviceProfile:
        ...


class StaticDeviceProvider:
    """Provider that always reports the same profile."""

    def __init__(self, profile: DeviceProfile = DEFAULT_DEVICE_PROFILE):
        self.profile = profile

    def get_profile(self) -> DeviceProfile:
        return self.profile


# --------------------------------------------------------------------------- #
# Thresholds
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class CullingThresholds:
    margin: float                  # extra world margin for smooth panning
    node_threshold: float          # node count before culling tightens
    link_threshold: float          # link count before culling tightens
    zoom_sensitivity: float
    performance_multiplier: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def default_tier_thresholds() -> Dict[str, CullingThresholds]:
    return {
        "mobile": CullingThresholds(
            margin=100, node_threshold=30, link_threshold=50,
            zoom_sensitivity=1.5, performance_multiplier=0.7,
        ),
        "tablet": CullingThresholds(
            margin=150, node_threshold=60, link_threshold=100,
            zoom_sensitivity=1.2, performance_multiplier=0.85,
        ),
        "desktop": CullingThresholds(
            margin=200, node_threshold=100, link_threshold=200,
            zoom_sensitivity=1.0, performance_multiplier=1.0,
        ),
    }


def derive_thresholds(
    profile: DeviceProfile,
    tiers: Dict[str, CullingThresholds],
) -> CullingThresholds:
    """
    Start from the tier's base thresholds and scale them by memory, GPU
    tier and screen area.
    """
    t = tiers[profile.tier]
    margin = t.margin
    nodes = t.node_threshold
    links = t.link_threshold
    zoom = t.zoom_sensitivity
    mult = t.performance_multiplier

    if profile.memory_mb < LOW_MEMORY_MB:
        nodes *= 0.7
        links *= 0.7
        mult *= 0.8
    elif profile.memory_mb > HIGH_MEMORY_MB:
        nodes *= 1.3
        links *= 1.3
        mult *= 1.2

    if profile.gpu == "low":
        mult *= 0.8
        zoom *= 1.2
    elif profile.gpu == "high":
        mult *= 1.2
        zoom *= 0.9

    area = profile.screen_area
    if area < SMALL_SCREEN_PX:
        margin *= 0.8
    elif area > LARGE_SCREEN_PX:
        margin *= 1.2

    return replace(
        t,
        margin=margin,
        node_threshold=nodes,
        link_threshold=links,
        zoom_sensitivity=zoom,
        performance_multiplier=mult,
    )


__all__ = [
    "DEVICE_TIERS",
    "GPU_TIERS",
    "DeviceProfile",
    "DEFAULT_DEVICE_PROFILE",
    "DeviceProfileProvider",
    "StaticDeviceProvider",
    "CullingThresholds",
    "default_tier_thresholds",
    "derive_thresholds",
]
