# MIT License (see LICENSE)
"""
Barnes-Hut quadtree.

The quadtree recursively subdivides a square region into four quadrants
(NW, NE, SW, SE) until every leaf holds at most one body. Each node carries
the total mass and center of mass of the bodies in its subtree, which lets the
force walk (see forces.py) replace a distant subtree by a single point mass.

Storage is an arena: every node is an integer handle into parallel lists
(square geometry, depth, children, held bodies, aggregates). The root is
handle 0 and a child always has a larger handle than its parent, so the
aggregates can be computed bottom-up by a single reverse sweep.

Construction:
    1. Insert bodies one at a time, in store order.
    2. An occupied leaf is subdivided and its occupant pushed down.
       Child nodes are only allocated for quadrants that receive a body.
    3. At max_depth, leaves stop subdividing and aggregate every body that
       reaches them (coincident bodies would otherwise recurse forever).
    4. Aggregate mass and center of mass bottom-up.

The tree is immutable once built and is rebuilt from scratch every step.
"""
from __future__ import annotations
import logging
from typing import Iterator

import numpy as np

from ..constants import MAX_TREE_DEPTH, MIN_ROOT_SIDE, ROOT_PADDING
from ..types import Square

logger = logging.getLogger(__name__)

# Handle of the root node / marker for an absent child.
ROOT = 0
NULL = -1


class TreeBoundsError(RuntimeError):
    """A body lies outside the root square (or has a non-finite coordinate)."""


class Quadtree:
    """
    Arena-backed Barnes-Hut quadtree.

    Attributes:
        max_depth: Depth at which leaves stop subdividing.
        cx, cy, half: Square geometry of each node.
        depth_of: Depth of each node (root = 0).
        children: None for a leaf, else four child handles (NULL if absent).
        bodies: Body indices held by each node (empty for internal nodes).
        mass: Total mass of each node's subtree.
        com_x, com_y: Center of mass of each node's subtree (0 when empty).
        aggregated_leaves: Number of leaves at max_depth holding > 1 body.

    Usage:
        tree = Quadtree.build(store.positions, store.masses)
        tree.total_mass, tree.center_of_mass
        for square in tree.squares():
            draw(square)
    """

    def __init__(self, root: Square, max_depth: int = MAX_TREE_DEPTH) -> None:
        self.max_depth = int(max_depth)
        self.cx: list[float] = []
        self.cy: list[float] = []
        self.half: list[float] = []
        self.depth_of: list[int] = []
        self.children: list[list[int] | None] = []
        self.bodies: list[list[int]] = []
        self.mass: list[float] = []
        self.com_x: list[float] = []
        self.com_y: list[float] = []
        self.aggregated_leaves = 0
        self._new_node(root.cx, root.cy, root.half, 0)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        positions: np.ndarray,
        masses: np.ndarray,
        bounds: Square | None = None,
        max_depth: int = MAX_TREE_DEPTH,
    ) -> Quadtree:
        """
        Build a tree over a snapshot of body positions and masses.

        Args:
            positions: (N, 2) array of body positions.
            masses: (N,) array of body masses.
            bounds: Root square. Computed from the body extents when None.
            max_depth: Maximum subdivision depth.

        Returns:
            A fully built tree with consistent aggregates.

        Raises:
            TreeBoundsError: If a body lies outside `bounds` or has a
                non-finite coordinate.
        """
        positions = np.asarray(positions, dtype=np.float64)
        masses = np.asarray(masses, dtype=np.float64)
        n = len(positions)

        if bounds is None:
            if n and not np.all(np.isfinite(positions)):
                bad = int(np.flatnonzero(~np.all(np.isfinite(positions), axis=1))[0])
                raise TreeBoundsError(
                    f"Body {bad} has a non-finite position {positions[bad].tolist()}"
                )
            bounds = Square.containing(positions, ROOT_PADDING, MIN_ROOT_SIDE)

        tree = cls(bounds, max_depth=max_depth)
        xs = positions[:, 0].tolist() if n else []
        ys = positions[:, 1].tolist() if n else []

        for i in range(n):
            x, y = xs[i], ys[i]
            if not bounds.contains(x, y):
                raise TreeBoundsError(
                    f"Body {i} at ({x}, {y}) lies outside the root square "
                    f"center=({bounds.cx}, {bounds.cy}) half={bounds.half}"
                )
            tree._insert(i, x, y, xs, ys)

        tree._aggregate(masses.tolist() if n else [], xs, ys)

        if tree.aggregated_leaves:
            logger.warning(
                "Quadtree reached max depth %d: %d leaves hold coincident bodies",
                tree.max_depth, tree.aggregated_leaves,
            )
        return tree

    def _new_node(self, cx: float, cy: float, half: float, depth: int) -> int:
        self.cx.append(cx)
        self.cy.append(cy)
        self.half.append(half)
        self.depth_of.append(depth)
        self.children.append(None)
        self.bodies.append([])
        self.mass.append(0.0)
        self.com_x.append(0.0)
        self.com_y.append(0.0)
        return len(self.cx) - 1

    def _child(self, node: int, x: float, y: float) -> int:
        """Handle of the child quadrant containing (x, y), allocating it if absent."""
        cx, cy = self.cx[node], self.cy[node]
        q = (0 if y >= cy else 2) + (1 if x >= cx else 0)
        kids = self.children[node]
        child = kids[q]
        if child == NULL:
            h = 0.5 * self.half[node]
            child = self._new_node(
                cx + (h if q & 1 else -h),
                cy + (-h if q & 2 else h),
                h,
                self.depth_of[node] + 1,
            )
            kids[q] = child
        return child

    def _insert(self, i: int, x: float, y: float, xs: list[float], ys: list[float]) -> None:
        node = ROOT
        while True:
            if self.children[node] is None:
                held = self.bodies[node]
                if not held:
                    held.append(i)
                    return
                if self.depth_of[node] >= self.max_depth:
                    if len(held) == 1:
                        self.aggregated_leaves += 1
                    held.append(i)
                    return
                # Occupied leaf: subdivide and push the occupant down.
                (occupant,) = held
                self.bodies[node] = []
                self.children[node] = [NULL, NULL, NULL, NULL]
                child = self._child(node, xs[occupant], ys[occupant])
                self.bodies[child].append(occupant)
            node = self._child(node, x, y)

    def _aggregate(self, masses: list[float], xs: list[float], ys: list[float]) -> None:
        for node in range(len(self.cx) - 1, -1, -1):
            kids = self.children[node]
            if kids is None:
                held = self.bodies[node]
                if not held:
                    continue
                if len(held) == 1:
                    j = held[0]
                    self.mass[node] = masses[j]
                    self.com_x[node] = xs[j]
                    self.com_y[node] = ys[j]
                    continue
                parts = [(masses[j], xs[j], ys[j]) for j in held]
            else:
                parts = [
                    (self.mass[c], self.com_x[c], self.com_y[c])
                    for c in kids if c != NULL
                ]

            total = 0.0
            wx = 0.0
            wy = 0.0
            for m, x, y in parts:
                total += m
                wx += m * x
                wy += m * y
            self.mass[node] = total
            if total > 0:
                self.com_x[node] = wx / total
                self.com_y[node] = wy / total

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def node_count(self) -> int:
        return len(self.cx)

    @property
    def depth(self) -> int:
        """Depth of the deepest node (0 for a single root leaf)."""
        return max(self.depth_of)

    @property
    def bounds(self) -> Square:
        return self.square(ROOT)

    @property
    def total_mass(self) -> float:
        return self.mass[ROOT]

    @property
    def center_of_mass(self) -> np.ndarray | None:
        return self.node_center(ROOT)

    def square(self, node: int) -> Square:
        return Square(self.cx[node], self.cy[node], self.half[node])

    def is_leaf(self, node: int) -> bool:
        return self.children[node] is None

    def child_handles(self, node: int) -> list[int]:
        """Present children of a node, in quadrant order."""
        kids = self.children[node]
        if kids is None:
            return []
        return [c for c in kids if c != NULL]

    def node_center(self, node: int) -> np.ndarray | None:
        """Center of mass of a node, or None for an empty node."""
        if self.mass[node] <= 0:
            return None
        return np.array([self.com_x[node], self.com_y[node]], dtype=np.float64)

    def subtree_bodies(self, node: int = ROOT) -> list[int]:
        """All body indices below a node, in traversal order."""
        out: list[int] = []
        stack = [node]
        while stack:
            h = stack.pop()
            kids = self.children[h]
            if kids is None:
                out.extend(self.bodies[h])
            else:
                stack.extend(c for c in reversed(kids) if c != NULL)
        return out

    def leaves(self) -> Iterator[int]:
        for h in range(self.node_count):
            if self.children[h] is None:
                yield h

    def squares(self) -> list[Square]:
        """Boundaries of every node, for overlay drawing."""
        return [Square(x, y, h) for x, y, h in zip(self.cx, self.cy, self.half)]
