"""Tests for normal-mode analysis of the discrete string."""

import numpy as np
import pytest

from string_waves import (
    BoundaryPolicy, ConfigurationError, Integrator, create_string,
    modal_analysis, discrete_fixed_frequencies, ideal_string_frequencies
)
from string_waves.modes import assemble_string_matrices


def test_fixed_modes_match_closed_form():
    result = modal_analysis(101, 100.0, 10.0, 1.0, 'fixed', n_modes=8)
    expected = discrete_fixed_frequencies(101, 100.0, 10.0, 1.0, n_modes=8)
    np.testing.assert_allclose(result.frequencies, expected, rtol=1e-9)


def test_low_modes_approach_continuous_string():
    result = modal_analysis(101, 100.0, 10.0, 1.0, 'fixed', n_modes=3)
    # linear density = mass / dx = 1 kg/m
    ideal = ideal_string_frequencies(100.0, 10.0, 1.0, n_modes=3)
    np.testing.assert_allclose(result.frequencies, ideal, rtol=1e-3)


def test_fixed_mode_shapes_are_pinned_and_normalised():
    result = modal_analysis(51, 10.0, 5.0, 1.0, BoundaryPolicy.FIXED, n_modes=4)
    for n in range(1, 5):
        shape = result.get_mode(n)
        assert shape[0] == 0.0 and shape[-1] == 0.0
        assert np.max(np.abs(shape)) == pytest.approx(1.0)
    with pytest.raises(ValueError):
        result.get_mode(5)


def test_free_string_drops_rigid_body_mode():
    free = modal_analysis(21, 20.0, 10.0, 1.0, 'free', n_modes=30)
    # 21 points, one zero-frequency translation mode
    assert len(free.frequencies) == 20
    assert free.frequencies[0] > 1e-3
    assert np.all(np.diff(free.frequencies) > 0)


def test_free_dispersive_uses_free_matrices():
    K1, M1, _ = assemble_string_matrices(11, 10.0, 2.0, 1.0, 'free')
    K2, M2, _ = assemble_string_matrices(11, 10.0, 2.0, 1.0, 'free-dispersive')
    np.testing.assert_array_equal(K1, K2)
    np.testing.assert_array_equal(M1, M2)
    # rows of the free stiffness matrix sum to zero (translation costs nothing)
    np.testing.assert_allclose(K1.sum(axis=1), 0.0, atol=1e-12)


def test_standing_wave_keeps_its_shape():
    # a sampled standing wave is an eigenvector of the fixed operator
    state = create_string('standing', 101, 100.0, 0.1, mode=2)
    initial = state.positions.copy()
    Integrator(tension=10.0, dt=0.1).run(state, 37)
    scale = state.positions @ initial / (initial @ initial)
    np.testing.assert_allclose(state.positions, scale * initial, atol=1e-12)


def test_assemble_validates_input():
    with pytest.raises(ConfigurationError):
        assemble_string_matrices(2, 1.0, 1.0)
    with pytest.raises(ConfigurationError):
        assemble_string_matrices(11, 0.0, 1.0)
