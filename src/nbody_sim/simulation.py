# MIT License (see LICENSE)
"""
The simulation driver.

The Simulation class owns the body store and orchestrates one step:
    1. Build a fresh quadtree from the current positions.
    2. Walk it per body to approximate gravitational accelerations.
    3. Integrate velocities and positions (semi-implicit Euler by default).
    4. Resolve collisions (optional, bounce policy).

Live parameters (G, dt, switches) are snapshotted once at the start of each
step; restart parameters (body count, masses, theta, layout) are read only by
restart(). Steps and restarts are serialized, so a UI thread may push
parameter updates while another thread drives the loop.

Structure:
    - User creates a Simulation from RestartParameters.
    - User calls sim.step() in a loop and reads sim.frame() for drawing.
    - A parameter panel calls sim.params.update(...) or sim.restart(...).
"""
from __future__ import annotations
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass

import numpy as np

from .collision.broadphase import SpatialHashBroadphase
from .collision.contact import Contact, resolve_collisions
from .core.forces import barnes_hut_accelerations
from .core.integrators import integrate
from .core.quadtree import Quadtree
from .layouts import Layout, default_layout
from .params import (
    ConfigurationError,
    LiveParameters,
    RestartParameters,
    SimulationParameters,
)
from .profiler import Profiler
from .types import BodyStore, Square, mass_to_hue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BodySnapshot:
    """
    Read-only view of one body for renderers.

    Attributes:
        index: Stable body index.
        position: Copy of the position [x, y].
        mass: Body mass.
        radius: Derived radius.
        hue: Color hint in [0, 1] (mass within the configured mass range).
    """
    index: int
    position: np.ndarray
    mass: float
    radius: float
    hue: float


@dataclass(frozen=True)
class Frame:
    """
    Everything a renderer needs after a step.

    Attributes:
        time: Simulation time.
        step: Number of steps taken since the last restart.
        bodies: Bodies in store order.
        squares: Quadtree node boundaries when show_quadtree was set for the
                 last step, else empty.
    """
    time: float
    step: int
    bodies: tuple[BodySnapshot, ...]
    squares: tuple[Square, ...]


class Simulation:
    """
    Barnes-Hut N-body simulation.

    Attributes:
        params: Live parameter holder (shared with a parameter panel).
        restart_params: Parameters of the current run.
        store: Body state of the current run.
        time: Simulation time since the last restart.
        steps: Steps taken since the last restart.
        quadtree: Tree of the last step when show_quadtree was set, else None.
        accelerations: (N, 2) accelerations computed by the last step.
        contacts: Contacts resolved by the last step.
        profiler: Optional Profiler timing 'tree', 'forces', 'integrate' and
                  'collisions'.

    Example:
        with Simulation(RestartParameters(num_bodies=500, seed=1)) as sim:
            sim.params.update(g=2.0)
            sim.run(100)
            frame = sim.frame()
    """

    def __init__(
        self,
        restart: RestartParameters | None = None,
        params: SimulationParameters | LiveParameters | None = None,
        layout: Layout | None = None,
        profiler: Profiler | None = None,
    ) -> None:
        if isinstance(params, SimulationParameters):
            self.params = params
        else:
            self.params = SimulationParameters(params)
        self.profiler = profiler

        self._lock = threading.Lock()
        self._layout = layout
        self._executor: ThreadPoolExecutor | None = None
        self._workers = 1
        self._broadphase = SpatialHashBroadphase()

        self.restart_params: RestartParameters | None = None
        self.store = BodyStore.empty()
        self.time = 0.0
        self.steps = 0
        self.quadtree: Quadtree | None = None
        self.accelerations = np.zeros((0, 2), dtype=np.float64)
        self.contacts: list[Contact] = []

        self.restart(restart or RestartParameters(), layout)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def restart(self, params: RestartParameters | None = None, layout: Layout | None = None) -> None:
        """
        Regenerate the body population.

        Args:
            params: New restart parameters; the current ones when None.
            layout: Layout strategy to use from now on. When neither this nor
                    a previous explicit layout is set, the layout follows
                    params.donut_start.

        Raises:
            ConfigurationError: If params are invalid. The running simulation
                is left untouched, as it is when the layout itself raises.
        """
        params = params if params is not None else self.restart_params
        try:
            params.validate()
        except ConfigurationError as e:
            logger.warning("Restart rejected: %s", e)
            raise

        explicit = layout if layout is not None else self._layout
        strategy = explicit or default_layout(params)

        rng = np.random.default_rng(params.seed)
        store = strategy(params, rng)

        with self._lock:
            self._layout = explicit
            self._resize_pool(params.workers)
            self.restart_params = params
            self.store = store
            self.time = 0.0
            self.steps = 0
            self.quadtree = None
            self.accelerations = np.zeros((len(store), 2), dtype=np.float64)
            self.contacts = []

        logger.info(
            "Simulation restarted: %d bodies, layout=%s, theta=%g, seed=%s",
            len(store), getattr(strategy, "__name__", type(strategy).__name__),
            params.theta, params.seed,
        )

    def _resize_pool(self, workers: int) -> None:
        if self._executor is not None and self._workers == workers:
            return
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._workers = workers
        if workers > 1:
            self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="nbody-forces")

    def close(self) -> None:
        """Release the force worker pool."""
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

    def __enter__(self) -> Simulation:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------------

    def _section(self, name: str):
        if self.profiler is None:
            return nullcontext()
        return self.profiler.section(name)

    def step(self, live: LiveParameters | None = None) -> None:
        """
        Advance the simulation by one time step.

        Args:
            live: Parameters for this step. When None, one snapshot is taken
                  from self.params.

        Raises:
            ConfigurationError: If an explicit `live` is invalid.
            TreeBoundsError: If a body position is not finite.
        """
        live = live.validate() if live is not None else self.params.live()

        with self._lock:
            rp = self.restart_params
            store = self.store

            with self._section("tree"):
                tree = Quadtree.build(store.positions, store.masses, max_depth=rp.max_depth)

            with self._section("forces"):
                acc = barnes_hut_accelerations(
                    tree, store.positions, store.masses,
                    g=live.g, theta=rp.theta, softening=rp.softening,
                    executor=self._executor, chunks=rp.workers,
                )

            with self._section("integrate"):
                integrate(store, acc, live.dt, rp.integrator)

            contacts: list[Contact] = []
            if live.collisions:
                with self._section("collisions"):
                    contacts = resolve_collisions(store, live.elasticity, self._broadphase)

            self.accelerations = acc
            self.contacts = contacts
            self.quadtree = tree if live.show_quadtree else None
            self.time += live.dt
            self.steps += 1

        logger.debug(
            "step %d: %d nodes, depth %d, %d contacts",
            self.steps, tree.node_count, tree.depth, len(contacts),
        )

    def run(self, steps: int) -> None:
        """Take `steps` consecutive steps."""
        for _ in range(steps):
            self.step()

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def frame(self) -> Frame:
        """Snapshot of the current state for renderers."""
        with self._lock:
            lo, hi = self.restart_params.mass_range
            store = self.store
            bodies = tuple(
                BodySnapshot(
                    index=i,
                    position=store.positions[i].copy(),
                    mass=float(store.masses[i]),
                    radius=float(store.radii[i]),
                    hue=min(1.0, max(0.0, mass_to_hue(float(store.masses[i]), lo, hi))),
                )
                for i in range(len(store))
            )
            squares = tuple(self.quadtree.squares()) if self.quadtree is not None else ()
            return Frame(time=self.time, step=self.steps, bodies=bodies, squares=squares)
