"""
Simulation configuration and named presets.

Every option the simulator recognises lives on SimulationConfig. Values are
validated when the config is built, so a bad point count or a negative
length fails before a string is ever created.
"""

from dataclasses import dataclass, fields, asdict, replace as _replace
from pathlib import Path
import json
import logging

from .errors import ConfigurationError
from .integrator import BoundaryPolicy
from .sampling import DEFAULT_CAPACITY
from .strings import normalize_shape

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """All runtime options of a string simulation."""
    # String
    length: float = 100.0          # String length (m)
    n_points: int = 101            # Number of points (odd for plucked)
    tension: float = 10.0          # Tension along the string (N)
    mass: float = 1.0              # Uniform mass per point (kg)
    damping: float = 1.0           # Endpoint drag, free-dispersive only
    boundary: str = 'fixed'        # 'fixed', 'free', 'free-dispersive'

    # Initial shape
    shape: str = 'plucked'         # 'plucked', 'pulse', 'standing'
    height: float = 0.1            # Peak amplitude (m)
    pulse_width: float = 5.0       # Pulse width (m)
    pulse_start: float = 50.0      # Pulse start location (m)
    pulse_sign: str = 'positive'   # 'positive' or 'negative'
    mode: int = 3                  # Standing wave mode

    # Time stepping and output
    dt: float = 0.1                # Time step (s)
    duration: float = 50.0         # Simulated time for file-only runs (s)
    speed: float = 1.0             # Initial speed multiplier
    capacity: int = DEFAULT_CAPACITY  # Snapshots held before eviction
    auto_save_time: float = 0.0    # Simulation time of forced save (0 = off)
    output: str = 'WavesOnStringsData.dat'

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.length <= 0:
            raise ConfigurationError(f"length must be positive, got {self.length}")
        if self.n_points < 3:
            raise ConfigurationError(f"n_points must be at least 3, got {self.n_points}")
        self.shape = normalize_shape(self.shape)
        if self.shape == 'plucked' and self.n_points % 2 == 0:
            raise ConfigurationError(
                f"n_points must be odd for a plucked string, got {self.n_points}")
        if self.tension <= 0:
            raise ConfigurationError(f"tension must be positive, got {self.tension}")
        if self.mass <= 0:
            raise ConfigurationError(f"mass must be positive, got {self.mass}")
        if self.damping < 0:
            raise ConfigurationError(f"damping must be non-negative, got {self.damping}")
        if self.shape == 'pulse' and self.pulse_width <= 0:
            raise ConfigurationError(f"pulse_width must be positive, got {self.pulse_width}")
        if self.dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {self.dt}")
        if self.duration < 0:
            raise ConfigurationError(f"duration must be non-negative, got {self.duration}")
        if self.speed <= 0:
            raise ConfigurationError(f"speed must be positive, got {self.speed}")
        if self.capacity < 1:
            raise ConfigurationError(f"capacity must be at least 1, got {self.capacity}")
        if self.auto_save_time < 0:
            raise ConfigurationError(
                f"auto_save_time must be non-negative (0 disables), got {self.auto_save_time}")
        BoundaryPolicy.from_name(self.boundary)

    @property
    def point_spacing(self) -> float:
        """dx = length / (N - 1)"""
        return self.length / (self.n_points - 1)

    @property
    def policy(self) -> BoundaryPolicy:
        return BoundaryPolicy.from_name(self.boundary)

    def replace(self, **overrides) -> 'SimulationConfig':
        """Copy with some fields changed; None values are ignored."""
        overrides = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(overrides) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigurationError(f"Unknown config option(s): {', '.join(sorted(unknown))}")
        return _replace(self, **overrides)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'SimulationConfig':
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ConfigurationError(f"Unknown config option(s): {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_json(cls, path) -> 'SimulationConfig':
        """Load a config from a JSON object of field names to values."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except OSError as exc:
            raise ConfigurationError(f"Could not read config file '{path}': {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Config file '{path}' is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file '{path}' must contain a JSON object")
        logger.info("Loaded config from %s", path)
        return cls.from_dict(data)

    def save_json(self, path) -> None:
        Path(path).write_text(json.dumps(self.to_dict(), indent=2), encoding='utf-8')


# =============================================================================
# Presets
# =============================================================================

PLUCKED = SimulationConfig()

PULSE = SimulationConfig(shape='pulse', pulse_width=5.0, pulse_start=50.0)

STANDING = SimulationConfig(shape='standing', mode=3, height=1.0)

FREE_PULSE = SimulationConfig(shape='pulse', boundary='free', pulse_start=20.0)

DISPERSIVE = SimulationConfig(boundary='free-dispersive', damping=1.0, duration=20.0)


PRESETS = {
    "plucked": PLUCKED,
    "pulse": PULSE,
    "standing": STANDING,
    "standing-wave": STANDING,
    "free-pulse": FREE_PULSE,
    "dispersive": DISPERSIVE,
    "free-dispersive": DISPERSIVE,
}

PRESET_DESCRIPTIONS = {
    "plucked": "Plucked string, fixed ends",
    "pulse": "Sine pulse at the centre, fixed ends",
    "standing": "Mode-3 standing wave, fixed ends",
    "free-pulse": "Sine pulse travelling towards free ends",
    "dispersive": "Plucked string losing energy through damped free ends",
}


def get_preset(name: str) -> SimulationConfig:
    """Get a copy of a preset by name (case-insensitive)."""
    key = name.lower().replace(" ", "-").replace("_", "-")
    if key not in PRESETS:
        available = ", ".join(list_presets())
        raise ConfigurationError(f"Unknown preset '{name}'. Available: {available}")
    return _replace(PRESETS[key])


def list_presets() -> list[str]:
    """List all available preset names."""
    return sorted(set(PRESETS.keys()))
