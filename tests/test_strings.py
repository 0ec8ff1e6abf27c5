"""Tests for string state and initial shapes."""

import numpy as np
import pytest

from string_waves import (
    StringState, ConfigurationError, IndexRangeError,
    plucked_shape, pulse_shape, standing_wave_shape, create_string,
    list_shapes, normalize_shape
)


@pytest.mark.parametrize("n_points", [3, 5, 11, 101, 1001])
@pytest.mark.parametrize("length, height", [(100.0, 0.1), (1.0, 3.7), (7.3, -0.25)])
def test_plucked_is_symmetric_with_exact_peak(n_points, length, height):
    y = plucked_shape(n_points, length, height)
    assert len(y) == n_points
    np.testing.assert_array_equal(y, y[::-1])
    assert y[(n_points - 1) // 2] == height
    assert y[0] == 0.0 and y[-1] == 0.0


def test_plucked_reference_string():
    state = create_string('plucked', 101, 100.0, 0.1)
    y = state.positions
    assert y[50] == 0.1
    assert y[0] == y[100] == 0.0
    assert y[25] == y[75]
    assert y[25] == pytest.approx(0.05)
    assert state.point_spacing == 1.0


def test_plucked_is_linear_between_end_and_peak():
    y = plucked_shape(101, 100.0, 0.1)
    np.testing.assert_allclose(np.diff(y[:51]), 0.002)
    np.testing.assert_allclose(np.diff(y[50:]), -0.002)


@pytest.mark.parametrize("n_points", [2, 4, 100])
def test_plucked_rejects_even_or_tiny_point_counts(n_points):
    with pytest.raises(ConfigurationError):
        plucked_shape(n_points, 100.0, 0.1)


def test_plucked_rejects_non_positive_length():
    with pytest.raises(ConfigurationError):
        plucked_shape(101, 0.0, 0.1)
    with pytest.raises(ValueError):
        plucked_shape(101, -5.0, 0.1)


@pytest.mark.parametrize("n_points", [3, 10, 101])
def test_standing_wave_mode_zero_is_flat(n_points):
    y = standing_wave_shape(n_points, 0, 0.7)
    assert np.all(y == 0.0)


def test_standing_wave_counts_half_wavelengths():
    y = standing_wave_shape(101, 2, 1.0)
    # mode 2: one full wavelength, peak at a quarter of the string
    assert y[25] == pytest.approx(1.0)
    assert y[75] == pytest.approx(-1.0)
    assert y[50] == pytest.approx(0.0, abs=1e-12)
    assert y[0] == 0.0


def test_pulse_shape_and_placement():
    y = pulse_shape(101, 100.0, 0.1, width=5.0, start=50.0)
    expected = 0.1 * np.sin(np.arange(6) * 2.0 * np.pi / 5)
    np.testing.assert_allclose(y[50:56], expected)
    assert np.all(y[:50] == 0.0)
    assert np.all(y[56:] == 0.0)


def test_negative_pulse_flips_sign():
    pos = pulse_shape(101, 100.0, 0.1, 5.0, 20.0, 'positive')
    neg = pulse_shape(101, 100.0, 0.1, 5.0, 20.0, 'negative')
    np.testing.assert_array_equal(neg, -pos)


def test_pulse_rounds_start_and_width_to_points():
    # dx = 0.5: start 10.2 -> index 20, width 2.4 -> 5 points
    y = pulse_shape(201, 100.0, 1.0, 2.4, 10.2)
    assert y[21] == pytest.approx(np.sin(2 * np.pi / 5))
    assert np.all(y[:20] == 0.0)
    assert np.all(y[26:] == 0.0)


@pytest.mark.parametrize("start, width", [(98.0, 5.0), (100.0, 1.0), (-3.0, 5.0)])
def test_pulse_outside_string_raises(start, width):
    with pytest.raises(IndexRangeError):
        pulse_shape(101, 100.0, 0.1, width, start)


def test_pulse_touching_the_far_end_is_allowed():
    y = pulse_shape(101, 100.0, 0.1, 5.0, 95.0)
    assert y[96] != 0.0


def test_pulse_rejects_bad_parameters():
    with pytest.raises(ConfigurationError):
        pulse_shape(101, 100.0, 0.1, 0.0, 50.0)
    with pytest.raises(ConfigurationError):
        pulse_shape(101, 100.0, 0.1, 0.1, 50.0)   # rounds to zero points
    with pytest.raises(ConfigurationError):
        pulse_shape(101, 100.0, 0.1, 5.0, 50.0, sign='up')


def test_create_string_initialises_rest_state():
    state = create_string('standing', 51, 25.0, 0.2, mass=2.5, mode=3)
    assert state.n_points == 51
    assert np.all(state.velocities == 0.0)
    assert np.all(state.mass == 2.5)
    assert state.point_spacing == pytest.approx(0.5)
    assert state.length == pytest.approx(25.0)
    np.testing.assert_allclose(state.x_positions()[[0, -1]], [0.0, 25.0])


def test_create_string_unknown_shape():
    with pytest.raises(ConfigurationError, match="Unknown shape"):
        create_string('square', 101, 100.0, 0.1)


@pytest.mark.parametrize("name", ['standing', 'standing-wave', 'Standing_Wave'])
def test_create_string_accepts_shape_aliases(name):
    state = create_string(name, 101, 100.0, 0.5, mode=2)
    np.testing.assert_array_equal(state.positions, standing_wave_shape(101, 2, 0.5))


def test_shape_registry_dispatch():
    assert list_shapes() == ['plucked', 'pulse', 'standing']
    assert normalize_shape(' Pulse ') == 'pulse'
    state = create_string('pulse', 101, 100.0, 0.1, width=10.0, start=20.0, sign='negative')
    np.testing.assert_array_equal(
        state.positions, pulse_shape(101, 100.0, 0.1, 10.0, 20.0, 'negative'))


def test_string_state_requires_matching_lengths():
    with pytest.raises(ConfigurationError):
        StringState(np.zeros(5), np.zeros(4), np.ones(5), 1.0)
    with pytest.raises(ConfigurationError):
        StringState(np.zeros(2), np.zeros(2), np.ones(2), 1.0)


def test_copy_is_independent():
    state = create_string('plucked', 11, 10.0, 1.0)
    clone = state.copy()
    clone.positions[5] = 42.0
    assert state.positions[5] == 1.0
