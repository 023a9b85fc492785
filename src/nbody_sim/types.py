# MIT License (see LICENSE)
"""
Core type definitions for the N-body simulation.

Defines the fundamental data structures:
- Square: axis-aligned bounding square used by the quadtree.
- Body: a single point mass (position, velocity, mass).
- BodyStore: the flat struct-of-arrays collection every stage operates on.

Equations of motion for a body i (Newtonian gravity, softened):
  dx/dt = v
  dv/dt = Σ_j G m_j (x_j - x_i) / (|x_j - x_i|² + ε²)^(3/2)
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np

from .constants import RADIUS_ACCEL
from .util import f64, vec2_array


# =============================================================================
# Mass mappings
# =============================================================================

def mass_to_radius(mass):
    """
    Derived body radius, r = sqrt(m / a) with a = RADIUS_ACCEL.

    This is the radius at which a unit-G body of mass m produces a surface
    acceleration of a. Monotonic in mass. Accepts scalars or arrays.
    """
    return np.sqrt(np.asarray(mass, dtype=np.float64) / RADIUS_ACCEL)


def mass_to_hue(mass: float, min_mass: float, max_mass: float) -> float:
    """
    Linear map of a mass onto [0, 1], used as a color hint by renderers.

    Returns 1.0 when the mass range is degenerate (min_mass == max_mass).
    """
    if min_mass == max_mass:
        return 1.0
    return float((mass - min_mass) / (max_mass - min_mass))


# =============================================================================
# Bounding square
# =============================================================================

# Quadrant indices, in child order.
NW, NE, SW, SE = 0, 1, 2, 3


@dataclass(frozen=True)
class Square:
    """
    Axis-aligned square region.

    Attributes:
        cx, cy: Center of the square.
        half: Half of the side length (half-extent).
    """
    cx: float
    cy: float
    half: float

    @property
    def side(self) -> float:
        return 2.0 * self.half

    @property
    def center(self) -> np.ndarray:
        return np.array([self.cx, self.cy], dtype=np.float64)

    def contains(self, x: float, y: float) -> bool:
        """Closed containment test. NaN coordinates are never contained."""
        return abs(x - self.cx) <= self.half and abs(y - self.cy) <= self.half

    def quadrant(self, x: float, y: float) -> int:
        """
        Quadrant index of a point relative to the center.

        Points on a dividing line go east (x >= cx) and north (y >= cy), so
        placement of boundary points is deterministic.
        """
        east = x >= self.cx
        north = y >= self.cy
        return (0 if north else 2) + (1 if east else 0)

    def child(self, quadrant: int) -> Square:
        """Square of the given child quadrant (NW, NE, SW, SE)."""
        h = 0.5 * self.half
        cx = self.cx + (h if quadrant & 1 else -h)
        cy = self.cy + (-h if quadrant & 2 else h)
        return Square(cx, cy, h)

    @classmethod
    def containing(cls, positions: np.ndarray, padding: float, min_side: float) -> Square:
        """
        Smallest (padded) square covering every position.

        The square is centered on the bounding box of the positions and never
        has a side below `min_side`. The half-extent is measured from the
        rounded center, then widened by the relative `padding` and by a few
        ulps of the largest coordinate, so contains() holds for every
        position even for tight clusters far from the origin.
        """
        if len(positions) == 0:
            return cls(0.0, 0.0, 0.5 * min_side)
        lo = positions.min(axis=0)
        hi = positions.max(axis=0)
        cx = 0.5 * float(lo[0] + hi[0])
        cy = 0.5 * float(lo[1] + hi[1])
        half = max(
            float(hi[0]) - cx, cx - float(lo[0]),
            float(hi[1]) - cy, cy - float(lo[1]),
        )
        scale = float(max(np.abs(lo).max(), np.abs(hi).max()))
        half = half * (1.0 + padding) + 4.0 * float(np.spacing(scale))
        return cls(cx, cy, max(half, 0.5 * min_side))


# =============================================================================
# Bodies
# =============================================================================

@dataclass
class Body:
    """
    A point mass.

    Attributes:
        position: Position [x, y].
        velocity: Velocity [vx, vy].
        mass: Mass, strictly positive.

    Note:
        Position and velocity are converted to float64 numpy arrays on init.
        Bodies returned by BodyStore indexing are copies; mutate the store's
        arrays to change simulation state.
    """
    position: np.ndarray | tuple[float, float] = (0.0, 0.0)
    velocity: np.ndarray | tuple[float, float] = (0.0, 0.0)
    mass: float = 1.0

    def __post_init__(self) -> None:
        self.position = f64(self.position)
        self.velocity = f64(self.velocity)
        self.mass = float(self.mass)

    @property
    def radius(self) -> float:
        return float(mass_to_radius(self.mass))

    @property
    def momentum(self) -> np.ndarray:
        return self.mass * self.velocity


class BodyStore:
    """
    Flat struct-of-arrays collection of body state.

    Index i addresses the same body for the lifetime of the store. Positions
    and velocities are mutated in place by the integrator and the collision
    resolver; masses and radii are fixed at creation (read-only arrays).

    Attributes:
        positions: float64 array of shape (N, 2).
        velocities: float64 array of shape (N, 2).
        masses: float64 array of shape (N,), all > 0.
        radii: float64 array of shape (N,), derived from masses.
    """

    def __init__(self, positions, velocities, masses) -> None:
        self.positions = vec2_array(positions)
        n = len(self.positions)
        self.velocities = vec2_array(velocities, n)

        masses = f64(masses).reshape(-1)
        if masses.shape[0] != n:
            raise ValueError(f"Expected {n} masses, got {masses.shape[0]}")
        if n and not np.all(masses > 0):
            raise ValueError("Body masses must be strictly positive")

        self.masses = masses
        self.radii = mass_to_radius(masses)
        self.masses.flags.writeable = False
        self.radii.flags.writeable = False

    @classmethod
    def empty(cls) -> BodyStore:
        return cls(np.zeros((0, 2)), np.zeros((0, 2)), np.zeros(0))

    @classmethod
    def from_bodies(cls, bodies: Iterable[Body]) -> BodyStore:
        bodies = list(bodies)
        return cls(
            [b.position for b in bodies],
            [b.velocity for b in bodies],
            [b.mass for b in bodies],
        )

    def __len__(self) -> int:
        return len(self.masses)

    def __getitem__(self, i: int) -> Body:
        return Body(
            position=self.positions[i].copy(),
            velocity=self.velocities[i].copy(),
            mass=float(self.masses[i]),
        )

    def __iter__(self) -> Iterator[Body]:
        for i in range(len(self)):
            yield self[i]

    def copy(self) -> BodyStore:
        return BodyStore(self.positions.copy(), self.velocities.copy(), self.masses.copy())

    @property
    def total_mass(self) -> float:
        return float(self.masses.sum())
