"""
Damped, driven harmonic oscillator.

    m x'' = -k x - c x' + F cos(w t)

integrated with the same semi-implicit Euler update the string uses
(velocity first, then position with the new velocity). A scipy reference
solution and the analytical steady-state amplitude are provided for
validation.
"""

from dataclasses import dataclass
from typing import TextIO
import logging
import math

import numpy as np
from scipy.integrate import solve_ivp

from .errors import ConfigurationError, ExportError

logger = logging.getLogger(__name__)


@dataclass
class OscillatorParams:
    """Physical parameters of the oscillator."""
    mass: float = 1.0               # kg
    spring_constant: float = 1.0    # N/m
    damping: float = 1.0            # kg/s
    driving_force: float = 1.0      # N
    driving_frequency: float = 1.0  # rad/s

    def __post_init__(self):
        if self.mass <= 0:
            raise ConfigurationError(f"Oscillator mass must be positive, got {self.mass}")
        if self.spring_constant < 0:
            raise ConfigurationError(
                f"Spring constant must be non-negative, got {self.spring_constant}")
        if self.damping < 0:
            raise ConfigurationError(f"Damping must be non-negative, got {self.damping}")

    def force(self, position: float, velocity: float, time: float) -> float:
        return (-self.spring_constant * position
                - self.damping * velocity
                + self.driving_force * math.cos(self.driving_frequency * time))


@dataclass
class OscillatorResult:
    times: np.ndarray
    positions: np.ndarray
    velocities: np.ndarray

    def tail_amplitude(self, fraction: float = 0.25) -> float:
        """Peak |x| over the last `fraction` of the run."""
        start = int(len(self.positions) * (1 - fraction))
        return float(np.max(np.abs(self.positions[start:])))


def integrate_oscillator(
    params: OscillatorParams,
    initial_position: float = 1.0,
    initial_velocity: float = 0.0,
    dt: float = 0.001,
    time_limit: float = 20.0
) -> OscillatorResult:
    """
    Semi-implicit Euler integration, sampling before each update while
    t <= time_limit.
    """
    if dt <= 0:
        raise ConfigurationError(f"Time step must be positive, got {dt}")
    if time_limit < 0:
        raise ConfigurationError(f"Time limit must be non-negative, got {time_limit}")

    times, positions, velocities = [], [], []
    t = 0.0
    x = initial_position
    v = initial_velocity
    while t <= time_limit:
        times.append(t)
        positions.append(x)
        velocities.append(v)
        v += params.force(x, v, t) * dt / params.mass
        x += v * dt
        t += dt

    logger.debug("Oscillator: %d samples at dt=%g", len(times), dt)
    return OscillatorResult(
        times=np.array(times),
        positions=np.array(positions),
        velocities=np.array(velocities)
    )


def reference_solution(
    params: OscillatorParams,
    initial_position: float,
    initial_velocity: float,
    times: np.ndarray
) -> np.ndarray:
    """Positions at `times` from scipy's adaptive RK45 solver."""
    def rhs(t, y):
        return [y[1], params.force(y[0], y[1], t) / params.mass]

    sol = solve_ivp(rhs, (times[0], times[-1]), [initial_position, initial_velocity],
                    t_eval=times, rtol=1e-9, atol=1e-12)
    if not sol.success:
        raise RuntimeError(f"Reference solver failed: {sol.message}")
    return sol.y[0]


def steady_state_amplitude(params: OscillatorParams) -> float:
    """
    Amplitude of the driven response once transients have died out.

        A = F / sqrt((k - m w^2)^2 + (c w)^2)
    """
    w = params.driving_frequency
    denom = math.hypot(params.spring_constant - params.mass * w**2, params.damping * w)
    if denom == 0:
        return math.inf
    return params.driving_force / denom


def write_oscillator_data(destination: TextIO, result: OscillatorResult) -> int:
    """Write a `t<TAB>x` series. Returns the number of samples written."""
    try:
        destination.write("t\tx\n")
        for t, x in zip(result.times, result.positions):
            destination.write(f"{float(t)}\t{float(x)}\n")
    except OSError as exc:
        raise ExportError(f"Failed writing oscillator data: {exc}") from exc
    return len(result.times)
