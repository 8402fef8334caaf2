from __future__ import annotations

import numpy as np
import pytest

from nqsampler.errors import ConfigurationError
from nqsampler.vmc.gradients import centered_log_derivatives, expectation_gradient, stack_log_derivatives


def test_gradient_matches_covariance_formula() -> None:
    rng = np.random.default_rng(0)
    local = rng.normal(size=40) + 1j * rng.normal(size=40)
    log_derivatives = rng.normal(size=(40, 5)) + 1j * rng.normal(size=(40, 5))

    expected = np.mean(np.conj(log_derivatives) * local[:, None], axis=0) - np.mean(
        np.conj(log_derivatives), axis=0
    ) * np.mean(local)

    np.testing.assert_allclose(expectation_gradient(local, log_derivatives), expected, atol=1e-12)


def test_constant_local_values_have_zero_gradient() -> None:
    rng = np.random.default_rng(1)
    log_derivatives = rng.normal(size=(4, 3, 6))
    gradient = expectation_gradient(np.full((4, 3), -1.25), log_derivatives)
    np.testing.assert_allclose(gradient, 0.0, atol=1e-14)


def test_centering_and_stacking() -> None:
    stacked = stack_log_derivatives(np.arange(24.0).reshape(2, 3, 4))
    assert stacked.shape == (6, 4)
    np.testing.assert_allclose(centered_log_derivatives(stacked).mean(axis=0), 0.0, atol=1e-12)


def test_gradient_shape_mismatch() -> None:
    with pytest.raises(ConfigurationError):
        expectation_gradient(np.zeros(5), np.zeros((4, 2)))
    with pytest.raises(ConfigurationError):
        expectation_gradient(np.zeros(0), np.zeros((0, 2)))
    with pytest.raises(ConfigurationError):
        stack_log_derivatives(np.zeros(3))
