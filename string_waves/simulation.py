"""
Simulation loop: ties the string, integrator, sample buffer and clock
together.

Per frame:
    1. the clock decides whether the simulation advances
    2. if so: capture a snapshot if a whole second is due, step the
       integrator, advance simulation time, check the auto-save deadline
    3. the renderer (if any) is handed the current (x, y) points

File-only runs skip the wall clock and step in a tight loop.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol
import logging
import time

import numpy as np

from .clock import Clock
from .config import SimulationConfig
from .integrator import Integrator, total_energy
from .sampling import Exporter, SampleBuffer
from .strings import StringState, create_string

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """Anything that can draw an (N, 2) array of (x, y) points."""

    def draw(self, points: np.ndarray) -> None:
        ...


def render_points(state: StringState) -> np.ndarray:
    """
    Screen-space points for a renderer.

    x runs from -1 to 1 across the string (index / 50 - 1 for 101 points),
    y is the amplitude.
    """
    n = state.n_points
    points = np.empty((n, 2))
    points[:, 0] = np.arange(n) / ((n - 1) / 2.0) - 1
    points[:, 1] = state.positions
    return points


class ActionKind(Enum):
    SPEED = 'speed'
    SAVE = 'save'
    QUIT = 'quit'


@dataclass(frozen=True)
class Action:
    """A discrete input event from the surrounding shell."""
    kind: ActionKind
    preset: int = 0     # index into SPEED_PRESETS, SPEED only

    @classmethod
    def speed(cls, preset: int) -> 'Action':
        return cls(ActionKind.SPEED, preset)


SAVE = Action(ActionKind.SAVE)
QUIT = Action(ActionKind.QUIT)


class EdgeTrigger:
    """Fires once per key press, however long the key is held."""

    def __init__(self):
        self._held = set()

    def press(self, key) -> bool:
        if key in self._held:
            return False
        self._held.add(key)
        return True

    def release(self, key) -> None:
        self._held.discard(key)


def create_initial_state(config: SimulationConfig) -> StringState:
    return create_string(
        config.shape, config.n_points, config.length, config.height, config.mass,
        width=config.pulse_width, start=config.pulse_start,
        sign=config.pulse_sign, mode=config.mode
    )


class Simulation:
    """
    Owns one string and everything that advances, samples and saves it.

    Args:
        config: Simulation options
        state: Initial string; built from `config` when omitted
        exporter: Destination for saved snapshots (optional)
        renderer: Receives render points every frame (optional)
        time_source: Wall clock used by `frame()` when no time is passed
    """

    def __init__(
        self,
        config: SimulationConfig,
        state: Optional[StringState] = None,
        exporter: Optional[Exporter] = None,
        renderer: Optional[Renderer] = None,
        time_source: Callable[[], float] = time.perf_counter
    ):
        self.config = config
        self.state = state if state is not None else create_initial_state(config)
        self.integrator = Integrator(
            tension=config.tension,
            dt=config.dt,
            policy=config.policy,
            damping=config.damping
        )
        self.buffer = SampleBuffer(config.capacity)
        self.clock = Clock(config.dt, speed=config.speed, time_source=time_source)
        self.exporter = exporter
        self.renderer = renderer
        self.auto_save_time = config.auto_save_time
        self.steps = 0
        self.running = True
        self._evictions_reported = 0

    @property
    def sim_time(self) -> float:
        return self.clock.sim_time

    def energy(self) -> float:
        return total_energy(self.state, self.config.tension)

    def advance(self) -> None:
        """Take one physics step unconditionally."""
        if self.clock.sample_due():
            self.buffer.capture(self.state, self.clock.sim_time)
        self.integrator.step(self.state)
        self.clock.advance()
        self.steps += 1
        self._check_auto_save()

    def frame(self, now: Optional[float] = None) -> bool:
        """
        Run one display frame. Returns True if a physics step was taken.
        """
        stepped = False
        if self.running and self.clock.tick(now):
            self.advance()
            stepped = True
        if self.renderer is not None:
            self.renderer.draw(render_points(self.state))
        return stepped

    def run(self, duration: Optional[float] = None) -> int:
        """
        Step in a tight loop while simulation time <= `duration`.

        Returns:
            Number of steps taken
        """
        if duration is None:
            duration = self.config.duration
        start = self.steps
        while self.running and self.clock.sim_time <= duration + self.clock.epsilon:
            self.advance()
        taken = self.steps - start
        logger.info("Ran %d steps to t=%.1f", taken, self.clock.sim_time)
        return taken

    def _check_auto_save(self) -> None:
        if self.auto_save_time and self.clock.reached(self.auto_save_time):
            logger.info("Auto-save deadline t=%g reached", self.auto_save_time)
            # the sample for the deadline's own second goes out with this save
            if self.clock.sample_due():
                self.buffer.capture(self.state, self.clock.sim_time)
            self.save()
            self.auto_save_time = 0.0

    def save(self) -> int:
        """Drain the buffer to the exporter. Returns snapshots written."""
        if self.exporter is None:
            logger.warning("No output file configured, %d snapshot(s) kept in buffer",
                           len(self.buffer))
            return 0
        lost = self.buffer.evicted - self._evictions_reported
        if lost:
            logger.warning("%d snapshot(s) were evicted before saving "
                           "(buffer capacity %d)", lost, self.buffer.capacity)
            self._evictions_reported = self.buffer.evicted
        return self.exporter.drain(self.buffer)

    def handle(self, action: Action) -> None:
        """Apply a discrete input action."""
        if action.kind is ActionKind.SPEED:
            speed = self.clock.set_speed_preset(action.preset)
            logger.info("Speed %gx", speed)
        elif action.kind is ActionKind.SAVE:
            self.save()
        elif action.kind is ActionKind.QUIT:
            self.running = False

    def close(self, drain: bool = True) -> None:
        """
        Stop the simulation. With `drain`, snapshots still in the buffer
        are saved before the exporter is closed. Safe to call again.
        """
        self.running = False
        if self.exporter is None:
            if len(self.buffer):
                logger.info("Discarding %d unsaved snapshot(s)", len(self.buffer))
            return
        if self.exporter.closed:
            return
        if drain:
            self.save()
        self.exporter.close()
