"""Tests for the damped, driven harmonic oscillator."""

import io

import numpy as np
import pytest

from string_waves import (
    ConfigurationError, OscillatorParams, integrate_oscillator, steady_state_amplitude
)
from string_waves.oscillator import reference_solution, write_oscillator_data


def test_matches_reference_solver():
    params = OscillatorParams()
    result = integrate_oscillator(params, 1.0, 0.0, dt=0.001, time_limit=20.0)
    ref = reference_solution(params, 1.0, 0.0, result.times)
    np.testing.assert_allclose(result.positions, ref, atol=1e-2)


def test_settles_to_steady_state_amplitude():
    params = OscillatorParams()
    result = integrate_oscillator(params, time_limit=20.0)
    # m = k = c = F = w = 1: A = 1 / sqrt(0 + 1) = 1
    assert steady_state_amplitude(params) == pytest.approx(1.0)
    assert result.tail_amplitude() == pytest.approx(1.0, abs=0.01)


def test_undamped_free_oscillation_keeps_its_energy():
    params = OscillatorParams(damping=0.0, driving_force=0.0)
    result = integrate_oscillator(params, 1.0, 0.0, dt=0.001, time_limit=10.0)
    energy = 0.5 * result.velocities**2 + 0.5 * result.positions**2
    np.testing.assert_allclose(energy, 0.5, rtol=2e-3)


def test_damped_free_oscillation_decays():
    params = OscillatorParams(damping=0.5, driving_force=0.0)
    result = integrate_oscillator(params, 1.0, 0.0, dt=0.01, time_limit=30.0)
    assert result.tail_amplitude() < 0.01


def test_sampling_starts_at_zero_and_stops_at_limit():
    result = integrate_oscillator(OscillatorParams(), dt=0.1, time_limit=1.0)
    assert result.times[0] == 0.0
    assert result.positions[0] == 1.0
    assert result.times[-1] <= 1.0
    assert len(result.times) in (10, 11)


def test_resonance_without_damping_is_unbounded():
    params = OscillatorParams(damping=0.0)
    assert steady_state_amplitude(params) == float('inf')


def test_write_oscillator_data():
    result = integrate_oscillator(OscillatorParams(), dt=0.5, time_limit=1.0)
    out = io.StringIO()
    n = write_oscillator_data(out, result)
    lines = out.getvalue().splitlines()
    assert lines[0] == "t\tx"
    assert len(lines) == n + 1
    assert lines[1] == "0.0\t1.0"


def test_invalid_parameters():
    with pytest.raises(ConfigurationError):
        OscillatorParams(mass=0.0)
    with pytest.raises(ConfigurationError):
        integrate_oscillator(OscillatorParams(), dt=0.0)
    with pytest.raises(ConfigurationError):
        integrate_oscillator(OscillatorParams(), time_limit=-1.0)
