"""
Example: Simulate a string with all available controls.

This file demonstrates every tuneable parameter of the simulator.
Adjust the values below to suit the string and the output you want.
"""

from string_waves import (
    SimulationConfig, Simulation, Exporter, BoundaryPolicy,
    create_string, modal_analysis, total_energy
)

# =========================================================================
# String
# =========================================================================
# length:    string length (m)
# n_points:  number of points; must be odd for the plucked shape so the
#            peak lands on a single centre point
# tension:   tension along the string (N)
# mass:      mass of every point (kg) - uniform across the string

config = SimulationConfig(
    length=100.0,
    n_points=101,
    tension=10.0,
    mass=1.0,

    # =====================================================================
    # Boundary policy
    # =====================================================================
    # 'fixed'            ends pinned at zero displacement
    # 'free'             ends move with their single neighbour
    # 'free-dispersive'  free ends with linear drag (energy leaves here)
    boundary='free-dispersive',
    damping=1.0,                 # drag coefficient, free-dispersive only

    # =====================================================================
    # Initial shape
    # =====================================================================
    # 'plucked'   triangle peaking at the centre
    # 'pulse'     one sine pulse of pulse_width starting at pulse_start
    # 'standing'  standing wave; mode counts half-wavelengths
    shape='plucked',
    height=0.1,
    pulse_width=5.0,
    pulse_start=50.0,
    pulse_sign='positive',
    mode=3,

    # =====================================================================
    # Time stepping and output
    # =====================================================================
    dt=0.1,                      # time step (s)
    duration=50.0,               # simulated time for file-only runs (s)
    speed=1.0,                   # interactive speed multiplier
    capacity=60,                 # snapshots kept before the oldest is evicted
    auto_save_time=0.0,          # simulation time of a forced save (0 = off)
    output='WavesOnStringsData.dat',
)


if __name__ == '__main__':
    # Normal modes of the configured string
    modes = modal_analysis(config.n_points, config.length, config.tension,
                           config.mass, config.policy, n_modes=3)
    print("Lowest modes (Hz):", ", ".join(f"{f:.4f}" for f in modes.frequencies))

    # File-only run: one snapshot per simulated second, saved on close
    with Exporter(config.output, config.point_spacing) as exporter:
        sim = Simulation(config, exporter=exporter)
        e0 = sim.energy()
        sim.run()
        sim.close(drain=True)

    print(f"Energy {e0:.6f} -> {sim.energy():.6f} J")
    print(f"{exporter.snapshots_written} snapshots written to {config.output}")

    # Strings can also be built and stepped directly
    state = create_string('pulse', 101, 100.0, 0.1, width=10.0, start=20.0)
    free = config.replace(boundary=BoundaryPolicy.FREE.value, shape='pulse')
    Simulation(free, state=state).run(10.0)
    print(f"Pulse energy after 10 s: {total_energy(state, free.tension):.6f} J")
