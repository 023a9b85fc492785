# MIT License (see LICENSE)
"""
Utilities for calculating physical invariants and conserved quantities.

Used for verifying simulation correctness and debugging stability issues.
In a closed gravitating system total momentum is conserved exactly by
pairwise-symmetric forces; total energy is conserved up to integration and
approximation error (the Barnes-Hut walk is not symmetric in general).
"""
from __future__ import annotations
import numpy as np

from ..constants import DEFAULT_SOFTENING
from ..types import BodyStore


def kinetic_energy(store: BodyStore) -> float:
    """
    Total kinetic energy.

    T = Σ 0.5 * m * v²
    """
    v2 = np.einsum("ij,ij->i", store.velocities, store.velocities)
    return float(0.5 * np.dot(store.masses, v2))


def potential_energy(store: BodyStore, g: float, softening: float = DEFAULT_SOFTENING) -> float:
    """
    Total softened gravitational potential energy, by direct summation.

    U = -Σ_{i<j} G m_i m_j / sqrt(r_ij² + ε²)
    """
    n = len(store)
    if n < 2:
        return 0.0
    d = store.positions[np.newaxis, :, :] - store.positions[:, np.newaxis, :]
    r2 = np.einsum("ijk,ijk->ij", d, d) + softening * softening
    iu = np.triu_indices(n, k=1)
    mm = np.outer(store.masses, store.masses)[iu]
    with np.errstate(divide="ignore"):
        terms = mm / np.sqrt(r2[iu])
    return float(-g * terms[np.isfinite(terms)].sum())


def linear_momentum(store: BodyStore) -> np.ndarray:
    """
    Total linear momentum.

    P = Σ m * v
    """
    if len(store) == 0:
        return np.zeros(2, dtype=np.float64)
    return store.masses @ store.velocities


def center_of_mass(store: BodyStore) -> np.ndarray | None:
    """Mass-weighted mean position, or None for an empty store."""
    total = store.total_mass
    if total <= 0:
        return None
    return (store.masses @ store.positions) / total
