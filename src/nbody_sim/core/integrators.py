# MIT License (see LICENSE)
"""
Time integrators for point-mass dynamics.

All integrators advance the equations of motion
    dx/dt = v,    dv/dt = a(x)
by one step of size dt, in place, for a whole BodyStore at once. The
acceleration array is computed before the step (by the Barnes-Hut walk) and
held constant over it.

Available integrators:
- symplectic_euler_step: semi-implicit Euler, velocity first (default).
- euler_step: explicit Euler, kept for comparison.

The semi-implicit variant is symplectic: its energy error stays bounded on
orbits instead of drifting, at the same cost as explicit Euler.

Reference:
    https://en.wikipedia.org/wiki/Semi-implicit_Euler_method
"""
from __future__ import annotations

import numpy as np

from ..types import BodyStore

SYMPLECTIC_EULER = "symplectic_euler"
EULER = "euler"
INTEGRATORS = (SYMPLECTIC_EULER, EULER)


def symplectic_euler_step(
    positions: np.ndarray,
    velocities: np.ndarray,
    accelerations: np.ndarray,
    dt: float,
) -> None:
    """
    Semi-implicit Euler step, in place.

        v' = v + a dt
        x' = x + v' dt

    No clamping: bodies may legitimately escape to large distances.
    """
    velocities += accelerations * dt
    positions += velocities * dt


def euler_step(
    positions: np.ndarray,
    velocities: np.ndarray,
    accelerations: np.ndarray,
    dt: float,
) -> None:
    """
    Explicit Euler step, in place.

        x' = x + v dt
        v' = v + a dt
    """
    positions += velocities * dt
    velocities += accelerations * dt


def integrate(store: BodyStore, accelerations: np.ndarray, dt: float, scheme: str = SYMPLECTIC_EULER) -> None:
    """
    Advance every body of the store by dt using the named scheme.

    Raises:
        ValueError: If `scheme` is not one of INTEGRATORS.
    """
    if scheme == SYMPLECTIC_EULER:
        symplectic_euler_step(store.positions, store.velocities, accelerations, dt)
    elif scheme == EULER:
        euler_step(store.positions, store.velocities, accelerations, dt)
    else:
        raise ValueError(f"Unknown integrator: {scheme}")
