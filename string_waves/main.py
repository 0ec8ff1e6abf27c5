#!/usr/bin/env python3
"""
Waves on a String - CLI Interface

Simulate a plucked, pulsed or standing-wave string and write the result to
a tab-separated data file, or watch it in a window.
"""

import argparse
import logging
import sys

import numpy as np

from .config import SimulationConfig, get_preset, list_presets, PRESET_DESCRIPTIONS
from .errors import WaveStringError
from .integrator import BoundaryPolicy
from .logging_config import level_for_verbosity, setup_logging
from .modes import modal_analysis, discrete_fixed_frequencies, ideal_string_frequencies
from .oscillator import (
    OscillatorParams, integrate_oscillator, steady_state_amplitude, write_oscillator_data
)
from .sampling import Exporter
from .simulation import Simulation, create_initial_state
from .strings import list_shapes

logger = logging.getLogger(__name__)


def build_config(args) -> SimulationConfig:
    """Preset or config file, then command line overrides."""
    if getattr(args, 'config', None):
        config = SimulationConfig.from_json(args.config)
    else:
        config = get_preset(getattr(args, 'preset', None) or 'plucked')

    return config.replace(
        n_points=args.points,
        length=args.length,
        height=args.height,
        tension=args.tension,
        mass=args.mass,
        damping=args.damping,
        dt=args.dt,
        boundary=args.boundary,
        shape=args.shape,
        mode=args.mode,
        pulse_width=args.pulse_width,
        pulse_start=args.pulse_start,
        pulse_sign=args.pulse_sign,
        capacity=args.capacity,
        auto_save_time=args.auto_save,
        output=getattr(args, 'output', None),
        duration=getattr(args, 'duration', None),
    )


def print_config(config: SimulationConfig):
    print(f"String: {config.n_points} points over {config.length:g} m "
          f"(dx = {config.point_spacing:g} m)")
    print(f"  tension = {config.tension:g} N, mass = {config.mass:g} kg/point")
    print(f"  boundary = {config.boundary}", end="")
    if config.policy is BoundaryPolicy.FREE_DISPERSIVE:
        print(f" (damping = {config.damping:g})")
    else:
        print("")
    print(f"Initial shape: {config.shape}, height {config.height:g} m")


def run_command(args):
    """Simulate without a window and write snapshots to a data file."""
    config = build_config(args)

    # One snapshot per simulated second: keep the whole run unless the
    # capacity was set explicitly.
    needed = int(config.duration) + 1
    if args.capacity is None and config.capacity < needed:
        logger.info("Raising buffer capacity from %d to %d for a %gs run",
                    config.capacity, needed, config.duration)
        config = config.replace(capacity=needed)

    print("\n" + "=" * 60)
    print("WAVES ON A STRING")
    print("=" * 60)
    print_config(config)
    print(f"Time step: {config.dt:g} s, duration {config.duration:g} s")
    print("")

    with Exporter(config.output, config.point_spacing) as exporter:
        sim = Simulation(config, exporter=exporter)
        e0 = sim.energy()
        steps = sim.run(config.duration)
        e1 = sim.energy()
        sim.close(drain=True)

    print(f"Steps taken:        {steps}")
    print(f"Snapshots written:  {exporter.snapshots_written}")
    if sim.buffer.evicted:
        print(f"Snapshots evicted:  {sim.buffer.evicted}")
    print(f"Energy: {e0:.6g} -> {e1:.6g} J")
    print(f"Data saved to {config.output}")
    print("=" * 60)


def animate_command(args):
    """Open an interactive window."""
    config = build_config(args)
    exporter = Exporter(config.output, config.point_spacing) if args.save else None
    sim = Simulation(config, exporter=exporter)

    print("Keys: 1-5 speed (1x, 2x, 5x, 0.5x, 0.1x), s save, q quit")
    try:
        from .viewer import run_interactive
        run_interactive(sim)
    except ImportError:
        print("(matplotlib not available for the interactive window)")
        sim.close(drain=True)


def shape_command(args):
    """Write the initial shape as index<TAB>amplitude lines."""
    config = build_config(args)
    state = create_initial_state(config)
    lines = [f"{i}\t{float(y)}\n" for i, y in enumerate(state.positions)]
    if args.output:
        try:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.writelines(lines)
        except OSError as exc:
            raise WaveStringError(f"Could not write '{args.output}': {exc}") from exc
        print(f"Shape written to {args.output}")
    else:
        sys.stdout.writelines(lines)


def modes_command(args):
    """Report normal-mode frequencies of the configured string."""
    config = build_config(args)
    result = modal_analysis(config.n_points, config.length, config.tension,
                            config.mass, config.policy, n_modes=args.modes)

    print("\n" + "=" * 60)
    print("NORMAL MODES")
    print("=" * 60)
    print_config(config)
    print("")

    ideal = ideal_string_frequencies(config.length, config.tension,
                                     config.mass / config.point_spacing,
                                     n_modes=len(result.frequencies))
    exact = None
    if config.policy is BoundaryPolicy.FIXED:
        exact = discrete_fixed_frequencies(config.n_points, config.length,
                                           config.tension, config.mass,
                                           n_modes=len(result.frequencies))

    print(f"  {'Mode':<6} {'Freq (Hz)':>10} {'Period (s)':>11} {'Ideal (Hz)':>11}")
    print(f"  {'-'*6} {'-'*10} {'-'*11} {'-'*11}")
    for i, f in enumerate(result.frequencies):
        print(f"  {i+1:<6} {f:>10.4f} {1/f:>11.2f} {ideal[i]:>11.4f}")

    if exact is not None:
        err = np.max(np.abs(exact - result.frequencies[:len(exact)]))
        print(f"\nMax deviation from closed form: {err:.2e} Hz")
    print("=" * 60)


def oscillator_command(args):
    """Integrate the damped, driven harmonic oscillator."""
    params = OscillatorParams(
        mass=args.mass,
        spring_constant=args.k,
        damping=args.damping,
        driving_force=args.force,
        driving_frequency=args.omega
    )
    result = integrate_oscillator(params, args.x0, args.v0, args.dt, args.time_limit)

    try:
        with open(args.output, 'w', encoding='utf-8') as f:
            n = write_oscillator_data(f, result)
    except OSError as exc:
        raise WaveStringError(f"Could not open output file '{args.output}': {exc}") from exc

    print(f"{n} samples written to {args.output}")
    print(f"  Late-time amplitude:  {result.tail_amplitude():.4f} m")
    print(f"  Steady-state theory:  {steady_state_amplitude(params):.4f} m")


def presets_command(args):
    """List available presets."""
    print("\nAVAILABLE PRESETS:")
    print("=" * 60)
    for name in list_presets():
        config = get_preset(name)
        desc = PRESET_DESCRIPTIONS.get(name)
        if desc is None:
            continue
        print(f"\n{name}:")
        print(f"  {desc}")
        print(f"  shape={config.shape}, boundary={config.boundary}, "
              f"N={config.n_points}, T={config.tension:g} N, dt={config.dt:g} s")


def add_string_options(parser, with_output=True):
    parser.add_argument('--config', type=str, help='JSON config file')
    parser.add_argument('--preset', type=str, choices=list_presets(),
                        help='Named preset (default: plucked)')
    parser.add_argument('--points', type=int, help='Number of points (odd for plucked)')
    parser.add_argument('--length', type=float, help='String length (m)')
    parser.add_argument('--height', type=float, help='Peak amplitude (m)')
    parser.add_argument('--tension', type=float, help='Tension (N)')
    parser.add_argument('--mass', type=float, help='Mass per point (kg)')
    parser.add_argument('--damping', type=float, help='Endpoint damping (free-dispersive)')
    parser.add_argument('--dt', type=float, help='Time step (s)')
    parser.add_argument('--boundary', type=str,
                        choices=[p.value for p in BoundaryPolicy], help='Boundary policy')
    parser.add_argument('--shape', type=str,
                        help=f"Initial shape ({', '.join(list_shapes())})")
    parser.add_argument('--mode', type=int, help='Standing wave mode')
    parser.add_argument('--pulse-width', type=float, help='Pulse width (m)')
    parser.add_argument('--pulse-start', type=float, help='Pulse start location (m)')
    parser.add_argument('--pulse-sign', type=str, choices=['positive', 'negative'],
                        help='Pulse sign')
    parser.add_argument('--capacity', type=int, help='Snapshots kept before eviction')
    parser.add_argument('--auto-save', type=float,
                        help='Simulation time at which to save (0 = off)')
    if with_output:
        parser.add_argument('--output', type=str, help='Output data file')


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Waves on a String - 1-D string simulator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Plucked string, 50 s, written to WavesOnStringsData.dat
  python -m string_waves run

  # Pulse on a string with damped free ends
  python -m string_waves run --preset pulse --boundary free-dispersive --damping 0.5

  # Watch a standing wave (keys 1-5 change speed, s saves, q quits)
  python -m string_waves animate --preset standing --save

  # Normal modes of the default string
  python -m string_waves modes --modes 5

  # Damped, driven harmonic oscillator
  python -m string_waves oscillator --output shm-data.dat
        """
    )
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='More logging (-v info, -vv debug)')
    parser.add_argument('--log-file', type=str, help='Also write logs to this file')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Run command
    run_parser = subparsers.add_parser('run', help='Simulate and write a data file')
    add_string_options(run_parser)
    run_parser.add_argument('--duration', type=float, help='Simulated time (s)')

    # Animate command
    anim_parser = subparsers.add_parser('animate', help='Interactive window')
    add_string_options(anim_parser)
    anim_parser.add_argument('--save', action='store_true',
                             help='Write saved snapshots to --output')

    # Shape command
    shape_parser = subparsers.add_parser('shape', help='Print the initial shape')
    add_string_options(shape_parser)

    # Modes command
    modes_parser = subparsers.add_parser('modes', help='Normal-mode frequencies')
    add_string_options(modes_parser, with_output=False)
    modes_parser.add_argument('--modes', type=int, default=5, help='Number of modes')

    # Oscillator command
    osc_parser = subparsers.add_parser('oscillator', help='Damped, driven oscillator')
    osc_parser.add_argument('--mass', type=float, default=1.0, help='Mass (kg)')
    osc_parser.add_argument('--k', type=float, default=1.0, help='Spring constant (N/m)')
    osc_parser.add_argument('--damping', type=float, default=1.0, help='Damping (kg/s)')
    osc_parser.add_argument('--force', type=float, default=1.0, help='Driving force (N)')
    osc_parser.add_argument('--omega', type=float, default=1.0,
                            help='Driving angular frequency (rad/s)')
    osc_parser.add_argument('--x0', type=float, default=1.0, help='Initial position (m)')
    osc_parser.add_argument('--v0', type=float, default=0.0, help='Initial velocity (m/s)')
    osc_parser.add_argument('--dt', type=float, default=0.001, help='Time step (s)')
    osc_parser.add_argument('--time-limit', type=float, default=20.0, help='End time (s)')
    osc_parser.add_argument('--output', type=str, default='SimpleHarmonicMotionData.dat',
                            help='Output data file')

    # Presets command
    subparsers.add_parser('presets', help='List available presets')

    args = parser.parse_args(argv)
    setup_logging(level_for_verbosity(args.verbose), args.log_file)

    commands = {
        'run': run_command,
        'animate': animate_command,
        'shape': shape_command,
        'modes': modes_command,
        'oscillator': oscillator_command,
        'presets': presets_command,
    }
    if args.command not in commands:
        parser.print_help()
        return 0

    try:
        commands[args.command](args)
    except WaveStringError as exc:
        parser.exit(1, f"error: {exc}\n")
    return 0


if __name__ == '__main__':
    sys.exit(main())
