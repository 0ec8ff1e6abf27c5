"""
Frame clock: maps wall-clock frame time to simulation time.

Real time accumulates frame time scaled by a speed multiplier. The
simulation takes at most one fixed step per frame, and only when the
scaled real time has caught up with the simulation time; it never runs
ahead and never catches up with several steps in one frame.
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging
import time

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Speed multipliers bound to keys 1-5
SPEED_PRESETS = (1.0, 2.0, 5.0, 0.5, 0.1)

# Tolerance for comparisons against accumulated floating point time
EPSILON = 1e-6


@dataclass
class ClockState:
    sim_time: float = 0.0
    real_time: float = 0.0
    next_sample_tick: int = 0
    update_speed_multiplier: float = 1.0
    previous_frame_time: Optional[float] = None


class Clock:
    """Decides, frame by frame, whether the simulation advances."""

    def __init__(
        self,
        dt: float,
        speed: float = 1.0,
        time_source: Callable[[], float] = time.perf_counter,
        epsilon: float = EPSILON
    ):
        if dt <= 0:
            raise ConfigurationError(f"Time step must be positive, got {dt}")
        self.dt = dt
        self.epsilon = epsilon
        self.time_source = time_source
        self.state = ClockState()
        self.set_speed(speed)

    @property
    def sim_time(self) -> float:
        return self.state.sim_time

    @property
    def real_time(self) -> float:
        return self.state.real_time

    @property
    def speed(self) -> float:
        return self.state.update_speed_multiplier

    def set_speed(self, speed: float) -> None:
        """Change the speed multiplier; applies from the next frame."""
        if speed <= 0:
            raise ConfigurationError(f"Speed multiplier must be positive, got {speed}")
        self.state.update_speed_multiplier = float(speed)
        logger.debug("Speed multiplier set to %gx", speed)

    def set_speed_preset(self, index: int) -> float:
        """Select one of SPEED_PRESETS (0-based). Returns the new speed."""
        if not 0 <= index < len(SPEED_PRESETS):
            raise ConfigurationError(
                f"Speed preset {index} out of range 0..{len(SPEED_PRESETS) - 1}")
        self.set_speed(SPEED_PRESETS[index])
        return self.speed

    def tick(self, now: Optional[float] = None) -> bool:
        """
        Account for one frame. Returns True if the simulation should take
        a step this frame.

        The first frame has zero frame time.
        """
        if now is None:
            now = self.time_source()
        s = self.state
        frame_time = 0.0 if s.previous_frame_time is None else now - s.previous_frame_time
        s.previous_frame_time = now
        s.real_time += frame_time * s.update_speed_multiplier
        return s.real_time + self.epsilon >= s.sim_time

    def advance(self) -> float:
        """Move simulation time forward by one step."""
        self.state.sim_time += self.dt
        return self.state.sim_time

    def sample_due(self) -> bool:
        """
        True once per whole second of simulation time; consumes the tick.
        """
        s = self.state
        if s.sim_time + self.epsilon >= s.next_sample_tick:
            s.next_sample_tick = int(s.sim_time + self.epsilon) + 1
            return True
        return False

    def reached(self, deadline: float) -> bool:
        return self.state.sim_time + self.epsilon >= deadline
