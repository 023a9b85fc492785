# MIT License (see LICENSE)
"""
Broadphase collision detection using spatial hashing.

This module culls collision candidates by partitioning space into a uniform
grid. Each body is hashed into every grid cell its radius-expanded bounding
box overlaps, and only bodies sharing a cell are considered as potential
collision pairs.

Key concepts:
- AABB (Axis-Aligned Bounding Box): the square of half-side r around a body.
- Spatial hashing: O(1) expected cell lookup for broad phase culling.
- The output is a sorted list of index pairs (i, j), i < j, that may overlap.
"""
from __future__ import annotations
from collections import defaultdict
from math import floor
from typing import Iterator

import numpy as np


def aabb_for_circle(x: float, y: float, r: float) -> tuple[float, float, float, float]:
    """Axis-Aligned Bounding Box (min_x, min_y, max_x, max_y) of a circle."""
    return (x - r, y - r, x + r, y + r)


class SpatialHashBroadphase:
    """
    Spatial hash grid for broadphase collision detection.

    Attributes:
        cell: Size of each grid cell in world units, or None to size cells
              from the largest radius at query time (two radii per cell).

    Example:
        broadphase = SpatialHashBroadphase()
        for i, j in broadphase.pairs(store.positions, store.radii):
            contact = circle_contact(store, i, j)
            ...
    """

    def __init__(self, cell_size: float | None = None) -> None:
        """
        Initialize the spatial hash grid.

        Args:
            cell_size: Size of each grid cell. Larger cells reduce insertion
                       cost but increase false positives.
        """
        if cell_size is not None and cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell = None if cell_size is None else float(cell_size)

    def _cells_for_aabb(
        self,
        aabb: tuple[float, float, float, float],
        cs: float,
    ) -> Iterator[tuple[int, int]]:
        """
        Yield all grid cell coordinates that overlap with an AABB.

        Yields:
            (ix, iy) integer cell coordinates.
        """
        x0, y0, x1, y1 = aabb
        ix0, iy0 = floor(x0 / cs), floor(y0 / cs)
        ix1, iy1 = floor(x1 / cs), floor(y1 / cs)
        for ix in range(ix0, ix1 + 1):
            for iy in range(iy0, iy1 + 1):
                yield (ix, iy)

    def pairs(self, positions: np.ndarray, radii: np.ndarray) -> list[tuple[int, int]]:
        """
        Find all potential collision pairs.

        Args:
            positions: (N, 2) body positions.
            radii: (N,) body radii.

        Returns:
            List of (i, j) index pairs with i < j, sorted ascending, so that
            resolution order is deterministic.
        """
        n = len(positions)
        if n < 2:
            return []

        cs = self.cell
        if cs is None:
            cs = max(2.0 * float(np.max(radii)), 1e-9)

        xs = positions[:, 0].tolist()
        ys = positions[:, 1].tolist()
        rs = radii.tolist()

        grid: dict[tuple[int, int], list[int]] = defaultdict(list)
        for i in range(n):
            for c in self._cells_for_aabb(aabb_for_circle(xs[i], ys[i], rs[i]), cs):
                grid[c].append(i)

        seen: set[tuple[int, int]] = set()
        for bs in grid.values():
            # Indices were appended in ascending order.
            for a in range(len(bs)):
                for b in range(a + 1, len(bs)):
                    seen.add((bs[a], bs[b]))

        return sorted(seen)
