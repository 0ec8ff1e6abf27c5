"""
Explicit time stepping for a discretised string.

Interior points (1 <= i <= N-2) follow the finite-difference wave equation
with a semi-implicit Euler update:

    a_i  = (T / m_i) * (y_{i-1} - 2 y_i + y_{i+1}) / dx^2
    v_i += a_i * dt
    y_i' = y_i + v_i * dt

The two endpoints are governed by a single boundary policy:

- FIXED:            ends never move (zero displacement)
- FREE:             ends follow a one-sided difference against their
                    single interior neighbour
- FREE_DISPERSIVE:  as FREE, plus linear drag on the two ends only
"""

from dataclasses import dataclass
from enum import Enum
import logging

import numpy as np

from .errors import ConfigurationError
from .strings import StringState

logger = logging.getLogger(__name__)


class BoundaryPolicy(Enum):
    """How the two endpoint indices evolve."""
    FIXED = 'fixed'
    FREE = 'free'
    FREE_DISPERSIVE = 'free-dispersive'

    @classmethod
    def from_name(cls, name) -> 'BoundaryPolicy':
        """Look up a policy by value or member name (case-insensitive)."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace('_', '-')
        for policy in cls:
            if key == policy.value:
                return policy
        available = ", ".join(p.value for p in cls)
        raise ConfigurationError(
            f"Unknown boundary policy '{name}'. Available: {available}")

    @property
    def moves_endpoints(self) -> bool:
        return self is not BoundaryPolicy.FIXED


class _LaggedCommit:
    """
    Writes freshly computed positions back into the live array two
    indices behind the loop.

    When index i is computed, the value pending for i-2 is committed.
    Index i-2 is never read again during the sweep (each step reads only
    i-1, i and i+1), so every neighbour read in the sweep still sees the
    previous step's value. `flush` commits the two values still pending
    after the last interior index.
    """

    def __init__(self, positions: np.ndarray):
        self.positions = positions
        self.pending = positions.copy()
        self.first = None
        self.last = None

    def push(self, i: int, value: float) -> None:
        self.pending[i] = value
        if self.first is None:
            self.first = i
        if i - 2 >= self.first:
            self.positions[i - 2] = self.pending[i - 2]
        self.last = i

    def flush(self) -> None:
        if self.last is None:
            return
        for i in (self.last, self.last - 1):
            if i >= self.first:
                self.positions[i] = self.pending[i]


def _endpoint_acceleration(
    state: StringState,
    end: int,
    neighbour: int,
    tension: float,
    policy: BoundaryPolicy,
    damping: float
) -> float:
    """One-sided acceleration of an endpoint against its only neighbour."""
    y = state.positions
    m = state.mass[end]
    accel = (tension / m) * (y[neighbour] - y[end]) / state.point_spacing**2
    if policy is BoundaryPolicy.FREE_DISPERSIVE:
        accel -= (damping / m) * state.velocities[end]
    return accel


def step(
    state: StringState,
    tension: float,
    dt: float,
    policy=BoundaryPolicy.FIXED,
    damping: float = 0.0
) -> None:
    """
    Advance `state` by one time step, in place.

    Args:
        state: String to advance (N >= 4)
        tension: String tension (N)
        dt: Time step (s)
        policy: BoundaryPolicy (or its name)
        damping: Drag coefficient on the endpoints, FREE_DISPERSIVE only
    """
    policy = BoundaryPolicy.from_name(policy)
    y = state.positions
    v = state.velocities
    m = state.mass
    n = state.n_points
    dx2 = state.point_spacing**2

    # Endpoints are evaluated against the pre-step shape and committed
    # after the interior sweep.
    ends = []
    if policy.moves_endpoints:
        for end, neighbour in ((0, 1), (n - 1, n - 2)):
            accel = _endpoint_acceleration(state, end, neighbour, tension,
                                           policy, damping)
            v[end] += accel * dt
            ends.append((end, y[end] + v[end] * dt))

    commit = _LaggedCommit(y)
    for i in range(1, n - 1):
        accel = (tension / m[i]) * (y[i - 1] - 2 * y[i] + y[i + 1]) / dx2
        v[i] += accel * dt
        commit.push(i, y[i] + v[i] * dt)
    commit.flush()

    for end, value in ends:
        y[end] = value


# =============================================================================
# Diagnostics
# =============================================================================

def kinetic_energy(state: StringState) -> float:
    """Sum of 1/2 m v^2 over all points."""
    return float(0.5 * np.sum(state.mass * state.velocities**2))


def potential_energy(state: StringState, tension: float) -> float:
    """Elastic energy of the stretched segments: 1/2 T sum(dy^2) / dx."""
    dy = np.diff(state.positions)
    return float(0.5 * tension * np.sum(dy**2) / state.point_spacing)


def total_energy(state: StringState, tension: float) -> float:
    return kinetic_energy(state) + potential_energy(state, tension)


def total_momentum(state: StringState) -> float:
    """Total transverse momentum, sum of m v."""
    return float(np.sum(state.mass * state.velocities))


@dataclass
class Integrator:
    """Time stepper with its physical parameters bound once per run."""
    tension: float = 10.0                  # String tension (N)
    dt: float = 0.1                        # Time step (s)
    policy: BoundaryPolicy = BoundaryPolicy.FIXED
    damping: float = 0.0                   # Endpoint drag (FREE_DISPERSIVE)

    def __post_init__(self):
        self.policy = BoundaryPolicy.from_name(self.policy)
        if self.dt <= 0:
            raise ConfigurationError(f"Time step must be positive, got {self.dt}")
        if self.tension <= 0:
            raise ConfigurationError(f"Tension must be positive, got {self.tension}")
        if self.damping < 0:
            raise ConfigurationError(f"Damping must be non-negative, got {self.damping}")

    def step(self, state: StringState) -> None:
        step(state, self.tension, self.dt, self.policy, self.damping)

    def run(self, state: StringState, n_steps: int) -> None:
        """Take `n_steps` steps."""
        for _ in range(n_steps):
            self.step(state)
        logger.debug("Advanced %d steps (%s boundaries)", n_steps, self.policy.value)

    def energy(self, state: StringState) -> float:
        return total_energy(state, self.tension)
