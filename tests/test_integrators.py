import numpy as np
import pytest

from nbody_sim.core.forces import direct_accelerations
from nbody_sim.core.integrators import (
    EULER,
    SYMPLECTIC_EULER,
    euler_step,
    integrate,
    symplectic_euler_step,
)
from nbody_sim.core.invariants import kinetic_energy, linear_momentum, potential_energy
from nbody_sim.types import Body, BodyStore


def test_symplectic_euler_updates_velocity_first():
    """
    v' = v + a dt       -> 0.1
    x' = x + v' dt      -> 0.01 (uses the new velocity)
    """
    x = np.array([[0.0, 0.0]])
    v = np.array([[0.0, 0.0]])
    a = np.array([[1.0, 0.0]])
    symplectic_euler_step(x, v, a, 0.1)
    assert v[0, 0] == pytest.approx(0.1)
    assert x[0, 0] == pytest.approx(0.01)


def test_explicit_euler_uses_old_velocity():
    x = np.array([[0.0, 0.0]])
    v = np.array([[0.0, 0.0]])
    a = np.array([[1.0, 0.0]])
    euler_step(x, v, a, 0.1)
    assert v[0, 0] == pytest.approx(0.1)
    assert x[0, 0] == 0.0


def test_integrate_unknown_scheme_raises():
    store = BodyStore.from_bodies([Body((0, 0), (1, 0), mass=1.0)])
    with pytest.raises(ValueError, match="Unknown integrator"):
        integrate(store, np.zeros((1, 2)), 0.1, scheme="rk4")


def test_no_clamping_of_large_velocities():
    store = BodyStore.from_bodies([Body((0, 0), (1e12, 0), mass=1.0)])
    integrate(store, np.zeros((1, 2)), 10.0)
    assert store.positions[0, 0] == pytest.approx(1e13)


def _orbit_energy_drift(scheme: str, steps: int, dt: float) -> float:
    """Relative energy drift of a near-circular two-body orbit (G = 1, ε = 0)."""
    M, m, r = 1000.0, 1.0, 10.0
    v = np.sqrt((M + m) / r)
    store = BodyStore(
        positions=[(0.0, 0.0), (r, 0.0)],
        velocities=[(0.0, -m / M * v), (0.0, v)],
        masses=[M, m],
    )
    e0 = kinetic_energy(store) + potential_energy(store, g=1.0, softening=0.0)
    for _ in range(steps):
        acc = direct_accelerations(store.positions, store.masses, g=1.0, softening=0.0)
        integrate(store, acc, dt, scheme)
    e1 = kinetic_energy(store) + potential_energy(store, g=1.0, softening=0.0)
    return abs((e1 - e0) / e0)


def test_symplectic_energy_stays_bounded_on_orbit():
    """
    Over about three orbits, semi-implicit Euler keeps the energy error small
    while explicit Euler spirals outward.
    """
    sym = _orbit_energy_drift(SYMPLECTIC_EULER, steps=2000, dt=0.01)
    exp = _orbit_energy_drift(EULER, steps=2000, dt=0.01)
    print("energy drift symplectic", sym, "explicit", exp)
    assert sym < 0.01
    assert exp > 2 * sym


def test_momentum_conserved_by_pairwise_symmetric_forces():
    rng = np.random.default_rng(3)
    store = BodyStore(
        positions=rng.uniform(-50, 50, size=(20, 2)),
        velocities=rng.normal(size=(20, 2)),
        masses=rng.uniform(1, 10, size=20),
    )
    p0 = linear_momentum(store)
    for _ in range(200):
        acc = direct_accelerations(store.positions, store.masses, g=1.0)
        integrate(store, acc, 0.01)
    assert np.allclose(linear_momentum(store), p0, atol=1e-9)
