from __future__ import annotations

import jax
import numpy as np
import pytest

from nqsampler.errors import ConfigurationError
from nqsampler.nqs.base import GradientMachine
from nqsampler.nqs.parameterization import unflatten_with_layout
from nqsampler.nqs.rbm import RbmParams, RbmSpin, init_rbm
from nqsampler.physics.hilbert import spin_hilbert
from nqsampler.physics.tfim import enumerate_spin_basis


def _rbm(n_visible: int = 4, n_hidden: int = 3, seed: int = 0) -> RbmSpin:
    rng = np.random.default_rng(seed)
    params = RbmParams(
        a=0.2 * rng.normal(size=n_visible),
        b=0.2 * rng.normal(size=n_hidden),
        w=0.3 * rng.normal(size=(n_visible, n_hidden)),
    )
    return RbmSpin(spin_hilbert(n_visible), params)


def _reference_log_psi(params: RbmParams, configs: np.ndarray) -> np.ndarray:
    theta = params.b[None, :] + configs @ params.w
    return configs @ params.a + np.sum(np.log(2.0 * np.cosh(theta)), axis=1)


def test_log_val_matches_closed_form() -> None:
    machine = _rbm()
    basis = enumerate_spin_basis(4)
    out = machine.log_val(basis)
    assert out.dtype == np.complex128
    np.testing.assert_allclose(out.real, _reference_log_psi(machine.params, basis), rtol=1e-12)
    np.testing.assert_allclose(out.imag, 0.0)


def test_log_val_gradient_matches_finite_differences() -> None:
    machine = _rbm(n_visible=3, n_hidden=2, seed=1)
    configs = enumerate_spin_basis(3)[[0, 3, 6]]
    grads = machine.log_val_gradient(configs)
    assert grads.shape == (3, machine.n_par)

    theta = machine.parameters
    eps = 1.0e-6
    numeric = np.zeros((configs.shape[0], machine.n_par))
    for k in range(machine.n_par):
        step = np.zeros_like(theta)
        step[k] = eps
        plus = machine.with_parameters(theta + step).log_val(configs).real
        minus = machine.with_parameters(theta - step).log_val(configs).real
        numeric[:, k] = (plus - minus) / (2.0 * eps)

    np.testing.assert_allclose(grads.real, numeric, rtol=1e-6, atol=1e-8)


def test_parameter_round_trip_and_protocol() -> None:
    machine = _rbm(seed=2)
    clone = machine.with_parameters(machine.parameters)
    np.testing.assert_array_equal(clone.parameters, machine.parameters)
    assert isinstance(machine, GradientMachine)
    assert machine.n_par == 4 + 3 + 4 * 3


def test_empty_batches() -> None:
    machine = _rbm()
    empty = np.zeros((0, 4))
    assert machine.log_val(empty).shape == (0,)
    assert machine.log_val_gradient(empty).shape == (0, machine.n_par)


def test_init_rbm_hidden_units() -> None:
    key = jax.random.PRNGKey(0)
    assert init_rbm(spin_hilbert(4), alpha=1.5, init_std=0.01, key=key).params.b.shape == (6,)
    assert init_rbm(spin_hilbert(4), alpha=0.1, init_std=0.01, key=key).params.b.shape == (1,)


def test_invalid_rbm_arguments() -> None:
    key = jax.random.PRNGKey(1)
    with pytest.raises(ConfigurationError):
        init_rbm(spin_hilbert(3), alpha=0.0, init_std=0.01, key=key)
    with pytest.raises(ConfigurationError):
        RbmParams(a=np.zeros(3), b=np.zeros(2), w=np.zeros((2, 3)))
    with pytest.raises(ConfigurationError):
        RbmSpin(spin_hilbert(5), _rbm(n_visible=4).params)
    with pytest.raises(ConfigurationError):
        _rbm().log_val(np.ones((2, 5)))
    with pytest.raises(ConfigurationError):
        unflatten_with_layout(np.zeros(3), _rbm().layout)
