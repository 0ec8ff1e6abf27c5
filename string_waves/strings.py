"""
String state and initial shapes.

A string is discretised into N equally spaced points. Each point carries
an amplitude, a velocity and a mass; the spacing between points is
length / (N - 1).

Initial shapes:
- 'plucked':  triangular tent, zero at both ends, peak at the centre
- 'pulse':    a single sine pulse placed somewhere along the string
- 'standing': sampled standing wave of a given mode
"""

from dataclasses import dataclass
from typing import Callable
import logging
import math

import numpy as np

from .errors import ConfigurationError, IndexRangeError

logger = logging.getLogger(__name__)


def _check_points(n_points: int, minimum: int = 3) -> None:
    if n_points < minimum:
        raise ConfigurationError(
            f"String needs at least {minimum} points, got {n_points}")


def _check_length(length: float) -> None:
    if length <= 0:
        raise ConfigurationError(f"String length must be positive, got {length}")


@dataclass
class StringState:
    """
    Discretised string: amplitude, velocity and mass per point.

    The three arrays always have the same length N (>= 3), and N never
    changes once the state exists. Integrators mutate the arrays in place.
    """
    positions: np.ndarray       # Amplitude at each point
    velocities: np.ndarray      # Transverse velocity at each point
    mass: np.ndarray            # Mass of each point (kg)
    point_spacing: float        # Distance between adjacent points (dx)

    def __post_init__(self):
        self.positions = np.asarray(self.positions, dtype=float)
        self.velocities = np.asarray(self.velocities, dtype=float)
        self.mass = np.asarray(self.mass, dtype=float)

        n = len(self.positions)
        _check_points(n)
        if len(self.velocities) != n or len(self.mass) != n:
            raise ConfigurationError(
                f"positions, velocities and mass must have the same length "
                f"(got {n}, {len(self.velocities)}, {len(self.mass)})")
        if self.point_spacing <= 0:
            raise ConfigurationError(
                f"Point spacing must be positive, got {self.point_spacing}")

    @classmethod
    def from_positions(cls, positions, length: float,
                       mass: float = 1.0) -> 'StringState':
        """Wrap an initial shape: zero velocity, uniform mass."""
        _check_length(length)
        positions = np.array(positions, dtype=float)
        n = len(positions)
        _check_points(n)
        return cls(
            positions=positions,
            velocities=np.zeros(n),
            mass=np.full(n, float(mass)),
            point_spacing=length / (n - 1)
        )

    @property
    def n_points(self) -> int:
        return len(self.positions)

    @property
    def length(self) -> float:
        return self.point_spacing * (self.n_points - 1)

    def x_positions(self) -> np.ndarray:
        """Position of each point along the string."""
        return np.arange(self.n_points) * self.point_spacing

    def copy(self) -> 'StringState':
        return StringState(
            positions=self.positions.copy(),
            velocities=self.velocities.copy(),
            mass=self.mass.copy(),
            point_spacing=self.point_spacing
        )


# =============================================================================
# Initial shapes
# =============================================================================

def plucked_shape(n_points: int, length: float, height: float) -> np.ndarray:
    """
    Triangular (plucked) shape.

    Rises linearly from 0 at both ends to `height` at the centre index
    (n_points - 1) / 2. Both halves are written from the same ramp so the
    result is exactly symmetric and the centre is exactly `height`.

    n_points must be odd so that there is a single centre point.
    """
    _check_points(n_points)
    _check_length(length)
    if n_points % 2 == 0:
        raise ConfigurationError(
            f"Plucked string needs an odd number of points, got {n_points}")

    half = (n_points - 1) // 2
    # gradient height / (length / 2) applied to i * dx reduces to i / half
    ramp = height * (np.arange(half + 1) / half)

    positions = np.zeros(n_points)
    positions[:half + 1] = ramp
    positions[n_points - 1 - np.arange(half + 1)] = ramp
    return positions


def pulse_shape(
    n_points: int,
    length: float,
    height: float,
    width: float,
    start: float,
    sign: str = 'positive'
) -> np.ndarray:
    """
    Single sine pulse on an otherwise flat string.

    The pulse starts at index round(start / length * (N - 1)) and spans
    round(width / length * (N - 1)) index steps:

        y_i = height * sign * sin(2 * pi * (i - i_start) / width_points)

    Raises:
        ConfigurationError: non-positive width/length, unknown sign, or a
            width that rounds to zero points
        IndexRangeError: the pulse does not fit on the string
    """
    _check_points(n_points)
    _check_length(length)
    if width <= 0:
        raise ConfigurationError(f"Pulse width must be positive, got {width}")
    if sign not in ('positive', 'negative'):
        raise ConfigurationError(
            f"Pulse sign must be 'positive' or 'negative', got {sign!r}")

    width_points = int((width / length) * (n_points - 1) + 0.5)
    if width_points < 1:
        raise ConfigurationError(
            f"Pulse width {width} is narrower than one point spacing "
            f"({length / (n_points - 1)})")

    start_point = math.floor((start / length) * (n_points - 1) + 0.5)
    end_point = start_point + width_points
    if start_point < 0 or end_point > n_points - 1:
        raise IndexRangeError(
            f"Pulse spans indices {start_point}..{end_point} but the string "
            f"has indices 0..{n_points - 1}")

    sign_value = 1.0 if sign == 'positive' else -1.0
    local = np.arange(width_points + 1)

    positions = np.zeros(n_points)
    positions[start_point:end_point + 1] = (
        height * sign_value * np.sin(local * 2.0 * np.pi / width_points))
    return positions


def standing_wave_shape(n_points: int, mode: int, height: float) -> np.ndarray:
    """
    Sampled standing wave.

        y_i = height * sin(i * (mode / 2) * 2 * pi / (N - 1))

    so `mode` counts half-wavelengths along the string; mode 0 is flat.
    """
    _check_points(n_points)
    i = np.arange(n_points)
    return height * np.sin(i * (mode / 2.0) * 2.0 * np.pi / (n_points - 1))


# =============================================================================
# Shape registry
# =============================================================================

def _build_plucked(n_points, length, height, **_):
    return plucked_shape(n_points, length, height)


def _build_pulse(n_points, length, height, *, width, start, sign, **_):
    return pulse_shape(n_points, length, height, width, start, sign)


def _build_standing(n_points, length, height, *, mode, **_):
    return standing_wave_shape(n_points, mode, height)


SHAPES: dict[str, Callable[..., np.ndarray]] = {
    'plucked': _build_plucked,
    'pulse': _build_pulse,
    'standing': _build_standing,
}

# Alternative spellings, after lower-casing and mapping '-' to '_'
SHAPE_ALIASES = {
    'standing_wave': 'standing',
}


def normalize_shape(name: str) -> str:
    """Canonical shape name for `name` (case-insensitive, aliases allowed)."""
    key = str(name).strip().lower().replace(" ", "_").replace("-", "_")
    key = SHAPE_ALIASES.get(key, key)
    if key not in SHAPES:
        available = ", ".join(list_shapes())
        raise ConfigurationError(f"Unknown shape '{name}'. Available: {available}")
    return key


def list_shapes() -> list[str]:
    """List all available initial shape names."""
    return sorted(SHAPES.keys())


def create_string(
    shape: str,
    n_points: int,
    length: float,
    height: float,
    mass: float = 1.0,
    *,
    width: float = 5.0,
    start: float = 50.0,
    sign: str = 'positive',
    mode: int = 1
) -> StringState:
    """
    Create a string at rest in one of the named initial shapes.

    Args:
        shape: 'plucked', 'pulse' or 'standing' (see SHAPE_ALIASES)
        n_points: Number of points (odd for 'plucked')
        length: String length
        height: Peak amplitude
        mass: Uniform mass per point
        width, start, sign: Pulse parameters (ignored by other shapes)
        mode: Standing-wave mode (ignored by other shapes)

    Returns:
        StringState with zero velocity and uniform mass
    """
    key = normalize_shape(shape)
    if mass <= 0:
        raise ConfigurationError(f"Point mass must be positive, got {mass}")

    positions = SHAPES[key](n_points, length, height,
                            width=width, start=start, sign=sign, mode=mode)

    logger.debug("Created %s string: %d points over %g", key, n_points, length)
    return StringState.from_positions(positions, length, mass=mass)
