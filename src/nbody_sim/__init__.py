# MIT License (see LICENSE)
"""
nbody_sim - A 2D Barnes-Hut N-body gravity simulation.

This package approximates the gravitational dynamics of many point masses.
Each step builds a quadtree over the bodies, uses it to approximate the
accelerations in O(N log N), integrates with semi-implicit Euler and
optionally resolves collisions.

Main entry points:
    - Simulation: The driver owning the bodies and stepping them.
    - RestartParameters / LiveParameters: Configuration.
    - SimulationParameters: Thread-safe live parameter holder.
    - Body, BodyStore: Body state.
    - Quadtree: The Barnes-Hut tree.

Submodules:
    - core: Quadtree, force approximation, integrators, invariants.
    - collision: Broadphase and bounce resolution.
    - layouts: Initial body distributions (square, donut).
    - renderer: Optional visualization adapters.

Example:
    from nbody_sim import Simulation, RestartParameters

    sim = Simulation(RestartParameters(num_bodies=500, seed=42))
    sim.params.update(dt=0.01)
    sim.run(100)
"""
from .simulation import Simulation, Frame, BodySnapshot
from .params import (
    ConfigurationError,
    LiveParameters,
    RestartParameters,
    SimulationParameters,
)
from .types import Body, BodyStore, Square
from .core.quadtree import Quadtree, TreeBoundsError
from .layouts import FixedLayout, donut_layout, square_layout

__all__ = [
    # Driver
    "Simulation",
    "Frame",
    "BodySnapshot",
    # Parameters
    "ConfigurationError",
    "LiveParameters",
    "RestartParameters",
    "SimulationParameters",
    # State
    "Body",
    "BodyStore",
    "Square",
    # Tree
    "Quadtree",
    "TreeBoundsError",
    # Layouts
    "FixedLayout",
    "donut_layout",
    "square_layout",
]
