import numpy as np
import pytest

from nbody_sim.layouts import FixedLayout, default_layout, donut_layout, square_layout
from nbody_sim.params import RestartParameters
from nbody_sim.types import Body


def test_square_layout_bounds_and_rest():
    params = RestartParameters(num_bodies=500, spawn_extent=50.0)
    store = square_layout(params, np.random.default_rng(0))

    assert len(store) == 500
    assert np.all(np.abs(store.positions) <= 50.0)
    assert np.array_equal(store.velocities, np.zeros((500, 2)))
    assert np.all((store.masses >= 10.0) & (store.masses <= 100.0))


def test_clamped_mass_range_gives_constant_masses():
    params = RestartParameters(num_bodies=20, min_mass=30.0, max_mass=1.0)
    store = square_layout(params, np.random.default_rng(0))
    assert np.all(store.masses == 30.0)


def test_donut_layout_radii_and_tangential_velocity():
    """
    Each body sits at radius r in [10, 200] and moves counter-clockwise:
      v ⟂ x,  |v| = initial_velocity,  x × v > 0
    """
    params = RestartParameters(num_bodies=400, donut_start=True, initial_velocity=7.0)
    store = donut_layout(params, np.random.default_rng(1))

    x, v = store.positions, store.velocities
    r = np.hypot(x[:, 0], x[:, 1])
    assert np.all((r >= 10.0 - 1e-9) & (r <= 200.0 + 1e-9))

    speed = np.hypot(v[:, 0], v[:, 1])
    assert np.allclose(speed, 7.0)

    dot = (x * v).sum(axis=1)
    cross = x[:, 0] * v[:, 1] - x[:, 1] * v[:, 0]
    assert np.allclose(dot, 0.0, atol=1e-9)
    assert np.all(cross > 0)


def test_donut_custom_annulus():
    params = RestartParameters(num_bodies=100)
    store = donut_layout(params, np.random.default_rng(2), inner=1.0, outer=2.0)
    r = np.hypot(store.positions[:, 0], store.positions[:, 1])
    assert np.all((r >= 1.0 - 1e-12) & (r <= 2.0 + 1e-12))


@pytest.mark.parametrize("layout", [square_layout, donut_layout])
def test_layouts_are_seed_deterministic(layout):
    params = RestartParameters(num_bodies=64)
    a = layout(params, np.random.default_rng(123))
    b = layout(params, np.random.default_rng(123))
    c = layout(params, np.random.default_rng(124))
    assert np.array_equal(a.positions, b.positions)
    assert np.array_equal(a.masses, b.masses)
    assert not np.array_equal(a.positions, c.positions)


def test_default_layout_follows_donut_flag():
    assert default_layout(RestartParameters()) is square_layout
    assert default_layout(RestartParameters(donut_start=True)) is donut_layout


def test_fixed_layout_returns_independent_copies():
    layout = FixedLayout([Body((1.0, 1.0), (0.0, 2.0), mass=10.0)])
    params = RestartParameters(num_bodies=999)

    a = layout(params, np.random.default_rng(0))
    a.positions[0] = (100.0, 100.0)
    b = layout(params, np.random.default_rng(0))

    assert len(b) == 1
    assert np.array_equal(b.positions[0], [1.0, 1.0])
    assert np.array_equal(b.velocities[0], [0.0, 2.0])
