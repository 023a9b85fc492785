import numpy as np
import pytest

from nbody_sim.collision.broadphase import SpatialHashBroadphase
from nbody_sim.collision.contact import circle_contact, resolve_collisions, resolve_contact
from nbody_sim.core.invariants import center_of_mass, kinetic_energy, linear_momentum
from nbody_sim.types import Body, BodyStore


def crowded_store(n=300, seed=5, extent=40.0):
    rng = np.random.default_rng(seed)
    return BodyStore(
        positions=rng.uniform(-extent, extent, size=(n, 2)),
        velocities=rng.normal(size=(n, 2)),
        masses=rng.uniform(10.0, 100.0, size=n),
    )


def brute_force_overlaps(store):
    out = set()
    n = len(store)
    for i in range(n):
        for j in range(i + 1, n):
            d = np.linalg.norm(store.positions[j] - store.positions[i])
            if d < store.radii[i] + store.radii[j]:
                out.add((i, j))
    return out


def test_broadphase_finds_every_overlap():
    store = crowded_store()
    pairs = SpatialHashBroadphase().pairs(store.positions, store.radii)

    assert pairs == sorted(pairs)
    assert all(i < j for i, j in pairs)
    assert len(set(pairs)) == len(pairs)
    expected = brute_force_overlaps(store)
    assert expected, "fixture should contain overlapping bodies"
    assert expected <= set(pairs)


def test_broadphase_fixed_cell_size():
    store = crowded_store(n=100)
    pairs = SpatialHashBroadphase(cell_size=3.0).pairs(store.positions, store.radii)
    assert brute_force_overlaps(store) <= set(pairs)


def test_broadphase_rejects_bad_cell_size():
    with pytest.raises(ValueError):
        SpatialHashBroadphase(cell_size=0.0)


def test_elastic_head_on_equal_masses_swap_velocities():
    """
    Equal masses, e = 1:
      v1' = v2,  v2' = v1
    """
    # mass 10 -> radius 1; centers 1.8 apart -> 0.2 overlap
    store = BodyStore.from_bodies([
        Body((-0.9, 0.0), (1.0, 0.0), mass=10.0),
        Body((0.9, 0.0), (-1.0, 0.0), mass=10.0),
    ])
    p0 = linear_momentum(store)
    ke0 = kinetic_energy(store)

    contacts = resolve_collisions(store, elasticity=1.0)

    assert len(contacts) == 1
    assert np.allclose(store.velocities, [[-1.0, 0.0], [1.0, 0.0]])
    assert np.allclose(linear_momentum(store), p0)
    assert kinetic_energy(store) == pytest.approx(ke0)


def test_unequal_masses_conserve_momentum():
    """
    1D analytic, e = 1:
      v1' = (m1-m2)/(m1+m2) v1 + 2 m2/(m1+m2) v2
      v2' = 2 m1/(m1+m2) v1 + (m2-m1)/(m1+m2) v2
    """
    m1, m2 = 10.0, 40.0  # radii 1 and 2
    v1, v2 = 3.0, -1.0
    store = BodyStore.from_bodies([
        Body((0.0, 0.0), (v1, 0.0), mass=m1),
        Body((2.9, 0.0), (v2, 0.0), mass=m2),
    ])
    resolve_collisions(store, elasticity=1.0)

    v1p = (m1 - m2) / (m1 + m2) * v1 + (2 * m2) / (m1 + m2) * v2
    v2p = (2 * m1) / (m1 + m2) * v1 + (m2 - m1) / (m1 + m2) * v2
    assert store.velocities[0, 0] == pytest.approx(v1p)
    assert store.velocities[1, 0] == pytest.approx(v2p)


def test_perfectly_inelastic_removes_normal_relative_velocity():
    store = BodyStore.from_bodies([
        Body((0.0, 0.0), (2.0, 1.0), mass=10.0),
        Body((1.5, 0.0), (0.0, 0.0), mass=10.0),
    ])
    resolve_collisions(store, elasticity=0.0)
    rv = store.velocities[1] - store.velocities[0]
    assert rv[0] == pytest.approx(0.0, abs=1e-12)
    # Tangential component is untouched
    assert store.velocities[0, 1] == pytest.approx(1.0)


def test_overlap_removed_and_center_of_mass_kept():
    store = BodyStore.from_bodies([
        Body((0.0, 0.0), (0.0, 0.0), mass=10.0),
        Body((0.5, 0.5), (0.0, 0.0), mass=40.0),
    ])
    com0 = center_of_mass(store)
    resolve_collisions(store, elasticity=0.5)

    d = np.linalg.norm(store.positions[1] - store.positions[0])
    assert d == pytest.approx(store.radii[0] + store.radii[1])
    assert np.allclose(center_of_mass(store), com0)
    c = circle_contact(store, 0, 1)
    assert c is None or c.penetration < 1e-9


def test_separating_pair_gets_no_impulse():
    store = BodyStore.from_bodies([
        Body((0.0, 0.0), (-1.0, 0.0), mass=10.0),
        Body((1.0, 0.0), (1.0, 0.0), mass=10.0),
    ])
    c = circle_contact(store, 0, 1)
    assert c is not None
    resolve_contact(store, c, elasticity=1.0)
    assert c.impulse == 0.0
    assert np.array_equal(store.velocities, [[-1.0, 0.0], [1.0, 0.0]])


def test_coincident_centers_separate_along_x():
    store = BodyStore.from_bodies([
        Body((3.0, 3.0), mass=10.0),
        Body((3.0, 3.0), mass=10.0),
    ])
    c = circle_contact(store, 0, 1)
    assert np.array_equal(c.normal, [1.0, 0.0])
    resolve_contact(store, c, elasticity=0.5)
    assert store.positions[0, 0] < 3.0 < store.positions[1, 0]


def test_resolution_is_deterministic_and_keeps_bodies():
    a = crowded_store(seed=12)
    b = a.copy()
    ca = resolve_collisions(a, elasticity=0.5)
    cb = resolve_collisions(b, elasticity=0.5)

    assert [(c.i, c.j) for c in ca] == [(c.i, c.j) for c in cb]
    assert [(c.i, c.j) for c in ca] == sorted((c.i, c.j) for c in ca)
    assert np.array_equal(a.positions, b.positions)
    assert np.array_equal(a.velocities, b.velocities)
    assert len(a) == 300
    assert np.allclose(linear_momentum(a), linear_momentum(crowded_store(seed=12)))
