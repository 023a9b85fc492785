# MIT License (see LICENSE)
"""
Contact detection and resolution between overlapping bodies.

Bodies are circles of radius mass_to_radius(m). Two bodies collide when the
distance between their centers is less than the sum of their radii.

Resolution policy: bounce. Bodies are never merged or removed, so store
indices stay valid for the whole run.
- Velocity: an impulse along the line of centers with restitution e
  (e = 1 elastic, e = 0 perfectly inelastic), applied only to approaching
  pairs. Total momentum is conserved.
- Position: the overlap is removed by moving both bodies apart along the
  normal in inverse-mass proportion, which leaves the pair's center of mass
  where it was.

Impulse magnitude for normal n (from i toward j) and relative normal
velocity v_n = (v_j - v_i) · n:

    J = -(1 + e) v_n / (1/m_i + 1/m_j)
"""
from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from ..types import BodyStore
from .broadphase import SpatialHashBroadphase


@dataclass
class Contact:
    """
    An overlap between two bodies.

    Attributes:
        i: Index of the first body (i < j).
        j: Index of the second body.
        normal: Unit normal from body i toward body j.
        penetration: Overlap depth (positive = overlapping).
        impulse: Normal impulse applied during resolution (0 if separating).
    """
    i: int
    j: int
    normal: np.ndarray
    penetration: float
    impulse: float = 0.0


def circle_contact(store: BodyStore, i: int, j: int) -> Contact | None:
    """
    Detect overlap between bodies i and j.

    Coincident centers get the normal (1, 0) so the pair still separates.

    Returns:
        Contact object if the bodies overlap, None otherwise.
    """
    d = store.positions[j] - store.positions[i]
    dist = float(np.hypot(d[0], d[1]))
    R = float(store.radii[i] + store.radii[j])

    if dist >= R:
        return None

    n = d / dist if dist > 1e-12 else np.array([1.0, 0.0], dtype=np.float64)
    return Contact(i=i, j=j, normal=n, penetration=R - dist)


def resolve_contact(store: BodyStore, contact: Contact, elasticity: float, correction: float = 1.0) -> None:
    """
    Resolve a single contact in place.

    Args:
        store: Body store (positions and velocities are modified).
        contact: Contact from circle_contact.
        elasticity: Restitution coefficient e in [0, 1].
        correction: Fraction of the overlap removed positionally (0 to 1).
    """
    i, j = contact.i, contact.j
    n = contact.normal
    inv_i = 1.0 / store.masses[i]
    inv_j = 1.0 / store.masses[j]
    inv_sum = inv_i + inv_j

    if correction > 0.0:
        push = (correction * contact.penetration / inv_sum) * n
        store.positions[i] -= push * inv_i
        store.positions[j] += push * inv_j

    rv = store.velocities[j] - store.velocities[i]
    vn = float(np.dot(rv, n))
    if vn >= 0.0:
        # Already separating.
        return

    jn = -(1.0 + elasticity) * vn / inv_sum
    P = jn * n
    store.velocities[i] -= P * inv_i
    store.velocities[j] += P * inv_j
    contact.impulse = jn


def resolve_collisions(
    store: BodyStore,
    elasticity: float,
    broadphase: SpatialHashBroadphase | None = None,
    correction: float = 1.0,
) -> list[Contact]:
    """
    Detect and resolve every overlapping pair.

    Candidate pairs come from the broadphase in ascending (i, j) order; each
    candidate is tested against current positions and resolved immediately,
    so mutually colliding groups resolve in a fixed, reproducible order.

    Returns:
        The contacts that were resolved, in resolution order.
    """
    if broadphase is None:
        broadphase = SpatialHashBroadphase()

    resolved: list[Contact] = []
    for i, j in broadphase.pairs(store.positions, store.radii):
        c = circle_contact(store, i, j)
        if c is None:
            continue
        resolve_contact(store, c, elasticity, correction)
        resolved.append(c)
    return resolved
