from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from nbody_sim.core.forces import (
    barnes_hut_accelerations,
    body_acceleration,
    direct_accelerations,
)
from nbody_sim.core.quadtree import Quadtree


def random_bodies(n, seed=21, extent=200.0):
    rng = np.random.default_rng(seed)
    positions = rng.uniform(-extent, extent, size=(n, 2))
    masses = rng.uniform(10.0, 100.0, size=n)
    return positions, masses


def test_theta_zero_matches_direct_summation():
    """With θ = 0 no node is ever approximated: the walk is exact O(N²)."""
    positions, masses = random_bodies(150)
    tree = Quadtree.build(positions, masses)

    bh = barnes_hut_accelerations(tree, positions, masses, g=1.0, theta=0.0, softening=1.0)
    exact = direct_accelerations(positions, masses, g=1.0, softening=1.0)

    assert np.allclose(bh, exact, rtol=1e-9, atol=1e-12)


def test_theta_half_is_close_to_direct_summation():
    positions, masses = random_bodies(400, seed=4)
    tree = Quadtree.build(positions, masses)

    bh = barnes_hut_accelerations(tree, positions, masses, g=1.0, theta=0.5)
    exact = direct_accelerations(positions, masses, g=1.0)

    rel = np.linalg.norm(bh - exact, axis=1) / np.linalg.norm(exact, axis=1)
    print("theta=0.5 median rel err", np.median(rel), "max", rel.max())
    assert np.median(rel) < 0.02


def test_two_body_pair_is_exact_and_opposite():
    """
    a_0 = G m_1 r / (|r|² + ε²)^(3/2),  r = x_1 - x_0
    m_0 a_0 = -m_1 a_1
    """
    positions = np.array([[0.0, 0.0], [10.0, 0.0]])
    masses = np.array([100.0, 1.0])
    eps = 1.0
    tree = Quadtree.build(positions, masses)

    acc = barnes_hut_accelerations(tree, positions, masses, g=1.0, theta=0.5, softening=eps)

    r2 = 100.0 + eps * eps
    assert acc[0, 0] == pytest.approx(1.0 * 10.0 / r2 ** 1.5)
    assert acc[1, 0] == pytest.approx(-100.0 * 10.0 / r2 ** 1.5)
    assert acc[0, 1] == 0.0 and acc[1, 1] == 0.0
    assert np.allclose(masses[0] * acc[0], -masses[1] * acc[1])


def test_acceleration_scales_with_g():
    positions, masses = random_bodies(50, seed=8)
    tree = Quadtree.build(positions, masses)
    a1 = barnes_hut_accelerations(tree, positions, masses, g=1.0, theta=0.5)
    a3 = barnes_hut_accelerations(tree, positions, masses, g=3.0, theta=0.5)
    assert np.allclose(a3, 3.0 * a1)


def test_single_body_feels_nothing():
    positions = np.array([[5.0, 5.0]])
    masses = np.array([42.0])
    tree = Quadtree.build(positions, masses)
    acc = barnes_hut_accelerations(tree, positions, masses, g=1.0, theta=0.5)
    assert np.array_equal(acc, np.zeros((1, 2)))


def test_softening_bounds_close_encounters():
    """Near-coincident bodies get a finite acceleration, |a| <= G m / ε²."""
    positions = np.array([[0.0, 0.0], [1e-9, 0.0], [0.0, 0.0]])
    masses = np.array([50.0, 50.0, 50.0])
    tree = Quadtree.build(positions, masses)

    acc = barnes_hut_accelerations(tree, positions, masses, g=1.0, theta=0.5, softening=0.5)

    assert np.all(np.isfinite(acc))
    assert np.all(np.linalg.norm(acc, axis=1) <= 2 * 50.0 / 0.25)


def test_body_acceleration_matches_batch():
    positions, masses = random_bodies(80, seed=13)
    tree = Quadtree.build(positions, masses)
    batch = barnes_hut_accelerations(tree, positions, masses, g=2.0, theta=0.7)
    for i in (0, 17, 79):
        single = body_acceleration(tree, i, positions, masses, g=2.0, theta=0.7)
        assert np.array_equal(single, batch[i])


def test_parallel_walk_matches_serial():
    """Workers write disjoint rows of the output; results are identical."""
    positions, masses = random_bodies(300, seed=17)
    tree = Quadtree.build(positions, masses)

    serial = barnes_hut_accelerations(tree, positions, masses, g=1.0, theta=0.5)
    with ThreadPoolExecutor(max_workers=4) as pool:
        parallel = barnes_hut_accelerations(
            tree, positions, masses, g=1.0, theta=0.5, executor=pool, chunks=4
        )

    assert np.array_equal(serial, parallel)


def test_repeated_walk_is_bitwise_identical():
    positions, masses = random_bodies(200, seed=1)
    a = barnes_hut_accelerations(Quadtree.build(positions, masses), positions, masses, 1.0, 0.5)
    b = barnes_hut_accelerations(Quadtree.build(positions, masses), positions, masses, 1.0, 0.5)
    assert np.array_equal(a, b)


def test_direct_accelerations_empty():
    assert direct_accelerations(np.zeros((0, 2)), np.zeros(0), g=1.0).shape == (0, 2)
