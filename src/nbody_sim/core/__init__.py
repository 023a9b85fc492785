# MIT License (see LICENSE)
"""
Core simulation components.

This subpackage provides:
    - Quadtree: Arena-backed Barnes-Hut tree, rebuilt every step.
    - Forces: Barnes-Hut and direct-summation gravitational accelerations.
    - Integrators: Semi-implicit (symplectic) and explicit Euler.
    - Invariants: Energy, momentum and center of mass.

Typical usage:
    from nbody_sim.core import Quadtree, barnes_hut_accelerations, integrate

    tree = Quadtree.build(store.positions, store.masses)
    acc = barnes_hut_accelerations(tree, store.positions, store.masses, g=1.0, theta=0.5)
    integrate(store, acc, dt=0.001)
"""
from .quadtree import Quadtree, TreeBoundsError
from .forces import barnes_hut_accelerations, body_acceleration, direct_accelerations
from .integrators import integrate, symplectic_euler_step, euler_step
from .invariants import kinetic_energy, potential_energy, linear_momentum, center_of_mass

__all__ = [
    # Tree
    "Quadtree",
    "TreeBoundsError",
    # Forces
    "barnes_hut_accelerations",
    "body_acceleration",
    "direct_accelerations",
    # Integrators
    "integrate",
    "symplectic_euler_step",
    "euler_step",
    # Invariants
    "kinetic_energy",
    "potential_energy",
    "linear_momentum",
    "center_of_mass",
]
