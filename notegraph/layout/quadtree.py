"""
Barnes-Hut quadtree for approximate n-body repulsion.

The tree is rebuilt from scratch on every force-directed iteration. Each
cell stores its point count (all points weigh 1) and centre of mass; a cell
whose width / distance ratio falls under ``theta`` is treated as a single
pseudo-point.
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np


_MAX_DEPTH = 24


class _Cell:
    __slots__ = ("origin", "size", "mass", "com", "children", "indices")

    def __init__(self, origin: np.ndarray, size: float, mass: int, com: np.ndarray):
        self.origin = origin
        self.size = size
        self.mass = mass
        self.com = com
        self.children: List["_Cell"] = []
        self.indices: Optional[np.ndarray] = None

    @property
    def is_leaf(self) -> bool:
        return self.indices is not None

    def contains(self, p: np.ndarray) -> bool:
        rel = p - self.origin
        return 0.0 <= rel[0] <= self.size and 0.0 <= rel[1] <= self.size


class QuadTree:
    def __init__(self, points: np.ndarray):
        self.points = np.asarray(points, dtype=float)
        if len(self.points) == 0:
            self.root = None
            return
        lo = self.points.min(axis=0)
        hi = self.points.max(axis=0)
        size = float(max(hi[0] - lo[0], hi[1] - lo[1], 1e-9))
        self.root = self._build(np.arange(len(self.points)), lo, size, 0)

    def _build(self, idx: np.ndarray, origin: np.ndarray, size: float, depth: int) -> _Cell:
        pts = self.points[idx]
        cell = _Cell(origin, size, len(idx), pts.mean(axis=0))
        if len(idx) == 1 or depth >= _MAX_DEPTH:
            cell.indices = idx
            return cell

        half = size / 2.0
        mid = origin + half
        right = pts[:, 0] >= mid[0]
        top = pts[:, 1] >= mid[1]
        for qx in (False, True):
            for qy in (False, True):
                mask = (right == qx) & (top == qy)
                if not mask.any():
                    continue
                sub_origin = origin + np.array([half if qx else 0.0, half if qy else 0.0])
                cell.children.append(self._build(idx[mask], sub_origin, half, depth + 1))
        return cell

    def repulsion(self, i: int, magnitude: float, theta: float) -> np.ndarray:
        """
        Net displacement on point ``i`` from all other points, each pushing
        with ``magnitude / d**2`` along the separating direction.
        """
        out = np.zeros(2)
        if self.root is None:
            return out
        p = self.points[i]
        stack = [self.root]
        while stack:
            cell = stack.pop()
            if cell.is_leaf:
                for j in cell.indices:
                    if j == i:
                        continue
                    delta = p - self.points[j]
                    d = float(np.hypot(delta[0], delta[1]))
                    if d > 0:
                        out += delta / d * (magnitude / (d * d))
                continue

            delta = p - cell.com
            d = float(np.hypot(delta[0], delta[1]))
            # a cell holding p itself is always opened
            if d > 0 and cell.size / d < theta and not cell.contains(p):
                out += delta / d * (magnitude * cell.mass / (d * d))
            else:
                stack.extend(cell.children)
        return out


__all__ = ["QuadTree"]
