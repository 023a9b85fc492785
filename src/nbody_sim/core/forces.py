# MIT License (see LICENSE)
"""
Gravitational acceleration: Barnes-Hut approximation and direct summation.

For a body i at x_i, the softened acceleration due to a source of mass m at
position x is

    a = G m (x - x_i) / (|x - x_i|² + ε²)^(3/2)

The Barnes-Hut walk visits the quadtree from the root. An internal node of
side s whose center of mass lies at distance d is accepted as a single point
mass when s / d < θ (and the node does not contain x_i); otherwise its
children are visited. Leaves always contribute exactly.

    θ = 0      every leaf is visited: exact O(N²) summation.
    θ ≈ 0.5    the usual accuracy/speed balance.
    θ ≥ 1      fast, visibly less accurate.

Key concepts:
- The tree is read-only during the walk, so bodies can be processed in
  parallel; each worker writes only its own rows of the output array.
- Child order is fixed (NW, NE, SW, SE), so results are reproducible bit for
  bit for identical inputs.
"""
from __future__ import annotations
from concurrent.futures import Executor
from math import sqrt

import numpy as np

from ..constants import DEFAULT_SOFTENING
from .quadtree import NULL, ROOT, Quadtree


def _walk(
    tree: Quadtree,
    i: int,
    x: float,
    y: float,
    xs: list[float],
    ys: list[float],
    ms: list[float],
    theta: float,
    eps2: float,
) -> tuple[float, float]:
    """Acceleration on body i per unit G, as (ax, ay)."""
    children = tree.children
    bodies = tree.bodies
    mass = tree.mass
    com_x, com_y = tree.com_x, tree.com_y
    cx, cy, half = tree.cx, tree.cy, tree.half

    ax = 0.0
    ay = 0.0
    stack = [ROOT]
    while stack:
        node = stack.pop()
        kids = children[node]

        if kids is None:
            for j in bodies[node]:
                if j == i:
                    continue
                dx = xs[j] - x
                dy = ys[j] - y
                r2 = dx * dx + dy * dy + eps2
                if r2 == 0.0:
                    # Coincident and unsoftened: no defined direction.
                    continue
                f = ms[j] / (r2 * sqrt(r2))
                ax += f * dx
                ay += f * dy
            continue

        dx = com_x[node] - x
        dy = com_y[node] - y
        d2 = dx * dx + dy * dy
        h = half[node]
        # s / d < θ  <=>  s < θ d  (d = 0 never passes)
        if (
            2.0 * h < theta * sqrt(d2)
            and not (abs(x - cx[node]) <= h and abs(y - cy[node]) <= h)
        ):
            r2 = d2 + eps2
            f = mass[node] / (r2 * sqrt(r2))
            ax += f * dx
            ay += f * dy
        else:
            for c in reversed(kids):
                if c != NULL:
                    stack.append(c)

    return ax, ay


def body_acceleration(
    tree: Quadtree,
    index: int,
    positions: np.ndarray,
    masses: np.ndarray,
    g: float,
    theta: float,
    softening: float = DEFAULT_SOFTENING,
) -> np.ndarray:
    """
    Approximate acceleration on a single body.

    Args:
        tree: Quadtree built from `positions` and `masses`.
        index: Body index in the store.
        positions: (N, 2) positions the tree was built from.
        masses: (N,) masses the tree was built from.
        g: Gravitational constant.
        theta: Opening-angle threshold (0 = exact).
        softening: Softening length ε.

    Returns:
        Acceleration vector [ax, ay].
    """
    xs = positions[:, 0].tolist()
    ys = positions[:, 1].tolist()
    ax, ay = _walk(
        tree, index, xs[index], ys[index], xs, ys, masses.tolist(),
        float(theta), float(softening) ** 2,
    )
    return np.array([g * ax, g * ay], dtype=np.float64)


def barnes_hut_accelerations(
    tree: Quadtree,
    positions: np.ndarray,
    masses: np.ndarray,
    g: float,
    theta: float,
    softening: float = DEFAULT_SOFTENING,
    executor: Executor | None = None,
    chunks: int = 4,
) -> np.ndarray:
    """
    Approximate acceleration on every body.

    Complexity: O(N log N) on average for θ > 0.

    Args:
        tree: Quadtree built from `positions` and `masses`.
        positions: (N, 2) body positions.
        masses: (N,) body masses.
        g: Gravitational constant.
        theta: Opening-angle threshold (0 = exact).
        softening: Softening length ε.
        executor: Optional executor. When given, bodies are split into
            `chunks` contiguous ranges evaluated concurrently (fork-join).
        chunks: Number of ranges when an executor is used.

    Returns:
        (N, 2) array of accelerations.
    """
    n = len(positions)
    out = np.zeros((n, 2), dtype=np.float64)
    if n == 0:
        return out

    xs = positions[:, 0].tolist()
    ys = positions[:, 1].tolist()
    ms = masses.tolist()
    theta = float(theta)
    eps2 = float(softening) ** 2

    def work(start: int, stop: int) -> None:
        for i in range(start, stop):
            ax, ay = _walk(tree, i, xs[i], ys[i], xs, ys, ms, theta, eps2)
            out[i, 0] = g * ax
            out[i, 1] = g * ay

    if executor is None or chunks <= 1 or n < 2 * chunks:
        work(0, n)
        return out

    size = -(-n // chunks)
    futures = [
        executor.submit(work, start, min(start + size, n))
        for start in range(0, n, size)
    ]
    for fut in futures:
        fut.result()
    return out


def direct_accelerations(
    positions: np.ndarray,
    masses: np.ndarray,
    g: float,
    softening: float = DEFAULT_SOFTENING,
) -> np.ndarray:
    """
    Exact softened accelerations by direct O(N²) summation.

    Reference implementation for the Barnes-Hut walk; uses the same softening
    so that θ = 0 reproduces it to floating-point tolerance.

    Returns:
        (N, 2) array of accelerations.
    """
    positions = np.asarray(positions, dtype=np.float64)
    masses = np.asarray(masses, dtype=np.float64)
    n = len(positions)
    if n == 0:
        return np.zeros((0, 2), dtype=np.float64)

    # d[i, j] = x_j - x_i
    d = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
    r2 = np.einsum("ijk,ijk->ij", d, d) + softening * softening
    with np.errstate(divide="ignore", invalid="ignore"):
        w = masses[np.newaxis, :] / (r2 * np.sqrt(r2))
    w[~np.isfinite(w)] = 0.0
    np.fill_diagonal(w, 0.0)
    return g * np.einsum("ij,ijk->ik", w, d)
