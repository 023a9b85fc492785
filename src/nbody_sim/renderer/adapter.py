# MIT License (see LICENSE)
"""
Renderer adapters for simulation visualization.

This module provides an abstract base class for rendering and a few concrete
implementations. The simulation core has no rendering dependency; renderers
consume the read-only Frame produced by Simulation.frame().
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, TextIO
import sys

from ..types import Square

if TYPE_CHECKING:
    from ..simulation import BodySnapshot, Frame, Simulation


class RendererAdapter(ABC):
    """
    Abstract base class for renderer implementations.

    Subclasses implement the drawing methods to integrate with a graphics
    backend (matplotlib, pygame, a web frontend, ...).

    Usage:
        renderer = MyRenderer()
        renderer.render_simulation(sim)
    """

    @abstractmethod
    def begin_frame(self, time: float) -> None:
        """
        Begin a new frame.

        Args:
            time: Simulation time of the frame.
        """
        ...

    @abstractmethod
    def draw_body(self, body: "BodySnapshot") -> None:
        """Draw a single body."""
        ...

    def draw_square(self, square: Square) -> None:
        """Draw one quadtree node boundary. Ignored by default."""

    @abstractmethod
    def end_frame(self) -> None:
        """Finalize the current frame."""
        ...

    def render_frame(self, frame: "Frame") -> None:
        """Draw a complete frame: tree overlay first, then bodies."""
        self.begin_frame(frame.time)
        for square in frame.squares:
            self.draw_square(square)
        for body in frame.bodies:
            self.draw_body(body)
        self.end_frame()

    def render_simulation(self, sim: "Simulation") -> None:
        """Convenience method: render the simulation's current frame."""
        self.render_frame(sim.frame())


class DebugRenderer(RendererAdapter):
    """
    Console/text renderer for development and testing.

    Output:
        === Frame t=0.0100 ===
        [0] m=100.00 r=3.16 @ (0.00, 0.00) hue=1.00
        [1] m=1.00 r=0.32 @ (10.00, 0.00) hue=0.00
    """

    def __init__(self, output: TextIO | None = None, show_squares: bool = False):
        """
        Args:
            output: Output stream (defaults to sys.stdout).
            show_squares: Also print quadtree node boundaries.
        """
        self.output = output or sys.stdout
        self.show_squares = show_squares

    def begin_frame(self, time: float) -> None:
        self.output.write(f"=== Frame t={time:.4f} ===\n")

    def draw_body(self, body: "BodySnapshot") -> None:
        x, y = body.position
        self.output.write(
            f"[{body.index}] m={body.mass:.2f} r={body.radius:.2f} "
            f"@ ({x:.2f}, {y:.2f}) hue={body.hue:.2f}\n"
        )

    def draw_square(self, square: Square) -> None:
        if self.show_squares:
            self.output.write(
                f"  quad center=({square.cx:.2f}, {square.cy:.2f}) side={square.side:.2f}\n"
            )

    def end_frame(self) -> None:
        self.output.write("\n")
        self.output.flush()


class NullRenderer(RendererAdapter):
    """No-op renderer, for measuring the simulation without drawing."""

    def begin_frame(self, time: float) -> None:
        pass

    def draw_body(self, body: "BodySnapshot") -> None:
        pass

    def end_frame(self) -> None:
        pass


class BufferedRenderer(RendererAdapter):
    """
    Renderer that records frames as plain dicts.

    Example:
        renderer = BufferedRenderer()
        for _ in range(100):
            sim.step()
            renderer.render_simulation(sim)
        positions = [b["position"] for b in renderer.frames[-1]["bodies"]]
    """

    def __init__(self):
        self.frames: list[dict] = []
        self._current_frame: dict | None = None

    def begin_frame(self, time: float) -> None:
        self._current_frame = {"time": time, "bodies": [], "squares": []}

    def draw_body(self, body: "BodySnapshot") -> None:
        if self._current_frame is None:
            return
        self._current_frame["bodies"].append({
            "index": body.index,
            "position": body.position.tolist(),
            "mass": body.mass,
            "radius": body.radius,
            "hue": body.hue,
        })

    def draw_square(self, square: Square) -> None:
        if self._current_frame is None:
            return
        self._current_frame["squares"].append((square.cx, square.cy, square.half))

    def end_frame(self) -> None:
        if self._current_frame is not None:
            self.frames.append(self._current_frame)
            self._current_frame = None

    def clear(self) -> None:
        self.frames.clear()
