# MIT License (see LICENSE)
"""
Collision detection and resolution subsystem.

This subpackage provides:
    - Broadphase: Spatial hashing for efficient pair culling.
    - Contact: Exact circle overlap test and bounce resolution.

Typical usage:
    from nbody_sim.collision import SpatialHashBroadphase, resolve_collisions

    broadphase = SpatialHashBroadphase()
    contacts = resolve_collisions(store, elasticity=0.5, broadphase=broadphase)
"""
from .broadphase import SpatialHashBroadphase, aabb_for_circle
from .contact import Contact, circle_contact, resolve_contact, resolve_collisions

__all__ = [
    # Broadphase
    "SpatialHashBroadphase",
    "aabb_for_circle",
    # Contact
    "Contact",
    "circle_contact",
    "resolve_contact",
    "resolve_collisions",
]
