"""
World-space viewport handed in by the drawing layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class Viewport:
    x: float
    y: float
    width: float
    height: float
    zoom: float = 1.0

    def bounds(self, margin: float = 0.0) -> Tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y) grown by ``margin`` on every side."""
        return (
            self.x - margin,
            self.y - margin,
            self.x + self.width + margin,
            self.y + self.height + margin,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "zoom": self.zoom,
        }


def calculate_viewport(
    canvas_width: float,
    canvas_height: float,
    pan: Tuple[float, float],
    zoom: float,
) -> Viewport:
    """
    Convert a canvas size plus pan/zoom transform (pan measured from the
    canvas centre) into the world rectangle currently on screen.
    """
    if zoom <= 0:
        raise ValueError(f"zoom must be positive, got {zoom}")
    pan_x, pan_y = pan
    return Viewport(
        x=-pan_x / zoom - canvas_width / (2 * zoom),
        y=-pan_y / zoom - canvas_height / (2 * zoom),
        width=canvas_width / zoom,
        height=canvas_height / zoom,
        zoom=zoom,
    )


__all__ = ["Viewport", "calculate_viewport"]
