# MIT License (see LICENSE)
"""
Initial body distributions.

A layout is any callable taking the restart parameters and a numpy random
Generator and returning a fresh BodyStore. The simulation invokes its layout
on every restart; the default picks square_layout or donut_layout from
RestartParameters.donut_start.

Masses are drawn uniformly from RestartParameters.mass_range. Draw order is
fixed (masses, then positions, then anything else), so a given seed always
produces the same population.
"""
from __future__ import annotations
from typing import Iterable, Protocol

import numpy as np

from .constants import DONUT_INNER_RADIUS, DONUT_OUTER_RADIUS
from .params import RestartParameters
from .types import Body, BodyStore


class Layout(Protocol):
    def __call__(self, params: RestartParameters, rng: np.random.Generator) -> BodyStore:
        ...


def _masses(params: RestartParameters, rng: np.random.Generator) -> np.ndarray:
    lo, hi = params.mass_range
    return rng.uniform(lo, hi, size=params.num_bodies)


def square_layout(params: RestartParameters, rng: np.random.Generator) -> BodyStore:
    """Bodies uniform in [-spawn_extent, spawn_extent]², at rest."""
    n = params.num_bodies
    masses = _masses(params, rng)
    ext = params.spawn_extent
    positions = rng.uniform(-ext, ext, size=(n, 2))
    return BodyStore(positions, np.zeros((n, 2)), masses)


def donut_layout(
    params: RestartParameters,
    rng: np.random.Generator,
    inner: float = DONUT_INNER_RADIUS,
    outer: float = DONUT_OUTER_RADIUS,
) -> BodyStore:
    """
    Bodies on an annulus, orbiting counter-clockwise.

    Each body takes the direction of a uniform point in the spawn square and a
    radius uniform in [inner, outer]. Its velocity is that direction rotated
    by +90°, scaled to initial_velocity.
    """
    n = params.num_bodies
    masses = _masses(params, rng)
    ext = params.spawn_extent
    pts = rng.uniform(-ext, ext, size=(n, 2))
    radii = rng.uniform(inner, outer, size=n)

    lengths = np.hypot(pts[:, 0], pts[:, 1])
    dirs = np.zeros((n, 2), dtype=np.float64)
    dirs[:, 0] = 1.0
    ok = lengths > 0
    dirs[ok] = pts[ok] / lengths[ok, np.newaxis]

    positions = dirs * radii[:, np.newaxis]
    velocities = params.initial_velocity * np.column_stack((-dirs[:, 1], dirs[:, 0]))
    return BodyStore(positions, velocities, masses)


def default_layout(params: RestartParameters) -> Layout:
    return donut_layout if params.donut_start else square_layout


class FixedLayout:
    """
    Layout that always produces the same explicit bodies.

    Ignores num_bodies and the mass bounds; useful for scripted scenarios
    and tests.

    Example:
        layout = FixedLayout([Body((0, 0), mass=100), Body((10, 0), mass=1)])
        sim = Simulation(RestartParameters(), layout=layout)
    """

    def __init__(self, bodies: Iterable[Body]) -> None:
        self._store = BodyStore.from_bodies(bodies)

    def __call__(self, params: RestartParameters, rng: np.random.Generator) -> BodyStore:
        return self._store.copy()
