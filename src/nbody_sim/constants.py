# MIT License (see LICENSE)
"""
Numerical constants and defaults shared across the simulation.

Units are simulation units: the gravitational constant G is a tunable
parameter (default 1.0), so masses, lengths and times carry no SI meaning.
"""
from __future__ import annotations

# Default softening length ε for gravitational interactions.
# Pairwise acceleration uses r² + ε² in the denominator, which bounds the
# acceleration when two bodies (nearly) coincide. Randomly generated initial
# layouts routinely produce such overlaps.
DEFAULT_SOFTENING: float = 1.0

# Maximum subdivision depth of the quadtree. Beyond this depth, bodies that
# reach the same leaf are aggregated there instead of splitting further
# (coincident bodies would otherwise recurse forever).
MAX_TREE_DEPTH: int = 32

# Relative padding applied to the root square computed from body extents,
# so that the extreme bodies lie strictly inside it.
ROOT_PADDING: float = 1e-6

# Smallest side of a root square computed from body extents (also used when
# every body sits on the same point).
MIN_ROOT_SIDE: float = 1.0

# Surface acceleration used by the mass -> radius mapping: r = sqrt(m / a).
RADIUS_ACCEL: float = 10.0

# Donut layout: bodies are placed at a uniform radius in this range.
DONUT_INNER_RADIUS: float = 10.0
DONUT_OUTER_RADIUS: float = 200.0
