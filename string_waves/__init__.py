"""
Waves on a String

Explicit time stepping of a 1-D string with fixed, free or damped free
ends, plus the sampling and export pipeline that turns a run into a
tab-separated time series.

Quick start:
    from string_waves import create_string, Integrator, SampleBuffer, HEADER

    # Plucked string, 101 points over 100 m, peak 0.1 m
    state = create_string('plucked', 101, 100.0, 0.1)

    # Step it with fixed ends
    integrator = Integrator(tension=10.0, dt=0.1, policy='fixed')
    buffer = SampleBuffer(capacity=10)
    for second in range(5):
        buffer.capture(state, float(second))
        integrator.run(state, 10)

    # Export the buffered snapshots
    with open('WavesOnStringsData.dat', 'w') as f:
        f.write(HEADER)
        buffer.drain(f, state.point_spacing)
"""

from .errors import (
    WaveStringError,
    ConfigurationError,
    IndexRangeError,
    ExportError
)

from .strings import (
    StringState,
    plucked_shape,
    pulse_shape,
    standing_wave_shape,
    create_string,
    list_shapes,
    normalize_shape
)

from .integrator import (
    BoundaryPolicy,
    Integrator,
    step,
    kinetic_energy,
    potential_energy,
    total_energy,
    total_momentum
)

from .sampling import (
    Snapshot,
    SampleBuffer,
    Exporter,
    capture,
    drain,
    HEADER
)

from .clock import (
    Clock,
    ClockState,
    SPEED_PRESETS
)

from .config import (
    SimulationConfig,
    get_preset,
    list_presets
)

from .simulation import (
    Simulation,
    Action,
    EdgeTrigger,
    render_points
)

from .modes import (
    modal_analysis,
    ModalAnalysisResult,
    ideal_string_frequencies,
    discrete_fixed_frequencies
)

from .oscillator import (
    OscillatorParams,
    OscillatorResult,
    integrate_oscillator,
    steady_state_amplitude
)

__version__ = '0.1.0'

__all__ = [
    # Errors
    'WaveStringError', 'ConfigurationError', 'IndexRangeError', 'ExportError',

    # String state and shapes
    'StringState', 'plucked_shape', 'pulse_shape', 'standing_wave_shape',
    'create_string', 'list_shapes', 'normalize_shape',

    # Integration
    'BoundaryPolicy', 'Integrator', 'step',
    'kinetic_energy', 'potential_energy', 'total_energy', 'total_momentum',

    # Sampling and export
    'Snapshot', 'SampleBuffer', 'Exporter', 'capture', 'drain', 'HEADER',

    # Clock and simulation loop
    'Clock', 'ClockState', 'SPEED_PRESETS',
    'SimulationConfig', 'get_preset', 'list_presets',
    'Simulation', 'Action', 'EdgeTrigger', 'render_points',

    # Analysis
    'modal_analysis', 'ModalAnalysisResult',
    'ideal_string_frequencies', 'discrete_fixed_frequencies',
    'OscillatorParams', 'OscillatorResult', 'integrate_oscillator',
    'steady_state_amplitude',
]
