# MIT License (see LICENSE)
"""
Simulation parameters.

Parameters come in two kinds, modelled as two distinct types:

- LiveParameters: may change at any time (gravitational constant, time step,
  display and collision switches). The driver takes one snapshot of them at
  the start of every step.
- RestartParameters: shape the body population and the approximation
  (body count, mass bounds, theta, layout). They are read once, when the
  simulation is (re)started; changing them requires a restart.

SimulationParameters is the thread-safe holder an external parameter panel
writes to while the simulation reads from it.

Example:
    params = SimulationParameters()
    params.update(g=2.0)            # from a UI thread
    sim = Simulation(RestartParameters(num_bodies=500), params)
    sim.step()                      # reads a consistent snapshot
"""
from __future__ import annotations
import logging
import math
import threading
from dataclasses import dataclass, fields, replace

from .constants import DEFAULT_SOFTENING, MAX_TREE_DEPTH
from .core.integrators import INTEGRATORS, SYMPLECTIC_EULER

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Invalid simulation parameters."""


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigurationError(msg)


def _finite(obj) -> None:
    for f in fields(obj):
        v = getattr(obj, f.name)
        if isinstance(v, float):
            _require(math.isfinite(v), f"{f.name} must be finite, got {v}")


@dataclass(frozen=True)
class LiveParameters:
    """
    Parameters that take effect at the next step.

    Attributes:
        g: Gravitational constant (> 0).
        dt: Time step (> 0).
        show_quadtree: Keep each step's tree for overlay drawing. No effect
                       on the physics.
        collisions: Run the collision stage after integration.
        elasticity: Restitution coefficient for collisions, in [0, 1].
    """
    g: float = 1.0
    dt: float = 0.001
    show_quadtree: bool = False
    collisions: bool = True
    elasticity: float = 0.5

    def validate(self) -> LiveParameters:
        """Return self if valid, else raise ConfigurationError."""
        _finite(self)
        _require(self.g > 0, f"g must be positive, got {self.g}")
        _require(self.dt > 0, f"dt must be positive, got {self.dt}")
        _require(
            0.0 <= self.elasticity <= 1.0,
            f"elasticity must be in [0, 1], got {self.elasticity}",
        )
        return self


@dataclass(frozen=True)
class RestartParameters:
    """
    Parameters read once per (re)start.

    Attributes:
        num_bodies: Number of bodies (0 is a valid, empty simulation).
        min_mass: Lower mass bound (> 0).
        max_mass: Upper mass bound (>= 0). Clamped up to min_mass when lower.
        theta: Barnes-Hut opening-angle threshold (> 0).
        donut_start: Use the donut layout instead of the square one.
        initial_velocity: Tangential speed of donut bodies.
        spawn_extent: Half-width of the square spawn area.
        seed: RNG seed; None draws fresh entropy.
        softening: Softening length ε (> 0).
        integrator: "symplectic_euler" (default) or "euler".
        workers: Threads used by the force phase (1 = serial).
        max_depth: Maximum quadtree subdivision depth.
    """
    num_bodies: int = 1500
    min_mass: float = 10.0
    max_mass: float = 100.0
    theta: float = 0.5
    donut_start: bool = False
    initial_velocity: float = 50.0
    spawn_extent: float = 300.0
    seed: int | None = None
    softening: float = DEFAULT_SOFTENING
    integrator: str = SYMPLECTIC_EULER
    workers: int = 1
    max_depth: int = MAX_TREE_DEPTH

    def validate(self) -> RestartParameters:
        """Return self if valid, else raise ConfigurationError."""
        _finite(self)
        _require(self.num_bodies >= 0, f"num_bodies must be >= 0, got {self.num_bodies}")
        _require(self.min_mass > 0, f"min_mass must be positive, got {self.min_mass}")
        _require(self.max_mass >= 0, f"max_mass must be >= 0, got {self.max_mass}")
        _require(self.theta > 0, f"theta must be positive, got {self.theta}")
        _require(self.spawn_extent > 0, f"spawn_extent must be positive, got {self.spawn_extent}")
        _require(self.softening > 0, f"softening must be positive, got {self.softening}")
        _require(
            self.integrator in INTEGRATORS,
            f"integrator must be one of {INTEGRATORS}, got {self.integrator!r}",
        )
        _require(self.workers >= 1, f"workers must be >= 1, got {self.workers}")
        _require(self.max_depth >= 1, f"max_depth must be >= 1, got {self.max_depth}")
        return self

    @property
    def mass_range(self) -> tuple[float, float]:
        """(min_mass, max_mass) with max_mass clamped up to min_mass."""
        return self.min_mass, max(self.max_mass, self.min_mass)


class SimulationParameters:
    """
    Thread-safe holder of the current live parameters.

    Writers (a UI thread) call update(); the simulation calls live() once per
    step and uses that immutable snapshot throughout, so a concurrent update
    is seen either entirely or not at all by a given step.
    """

    def __init__(self, live: LiveParameters | None = None) -> None:
        self._lock = threading.RLock()
        self._live = (live or LiveParameters()).validate()

    def live(self) -> LiveParameters:
        """Current live parameters (immutable snapshot)."""
        with self._lock:
            return self._live

    def update(self, **changes) -> LiveParameters:
        """
        Atomically change one or more live parameters.

        Raises:
            ConfigurationError: If a name is unknown or a value invalid. The
                current parameters are left unchanged.
        """
        with self._lock:
            try:
                new = replace(self._live, **changes)
            except TypeError as e:
                raise ConfigurationError(str(e)) from e
            self._live = new.validate()
            logger.debug("Live parameters updated: %s", changes)
            return self._live
