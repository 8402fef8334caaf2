from __future__ import annotations

import numpy as np

from nqsampler.errors import ConfigurationError
from nqsampler.types import ComplexArray


def stack_log_derivatives(gradients: ComplexArray) -> ComplexArray:
    """Flatten recorded ``(..., n_par)`` log-derivatives into a ``(n_samples, n_par)`` matrix."""

    gradients = np.asarray(gradients, dtype=np.complex128)
    if gradients.ndim < 2:
        raise ConfigurationError("gradients must have shape (..., n_par)")
    return gradients.reshape(-1, gradients.shape[-1])


def centered_log_derivatives(log_derivatives: ComplexArray) -> ComplexArray:
    """``O_k(s) - <O_k>`` over the sample axis."""

    return log_derivatives - np.mean(log_derivatives, axis=0, keepdims=True)


def expectation_gradient(local: ComplexArray, log_derivatives: ComplexArray) -> ComplexArray:
    """Covariance estimator ``G_k = <conj(O_k) O_loc> - <conj(O_k)><O_loc>``.

    For a Hermitian operator and real parameters the gradient of ``<O>`` is
    ``2 Re(G)``.
    """

    local = np.asarray(local, dtype=np.complex128).reshape(-1)
    log_derivatives = stack_log_derivatives(log_derivatives)
    if log_derivatives.shape[0] != local.shape[0]:
        raise ConfigurationError(
            f"{log_derivatives.shape[0]} gradient rows for {local.shape[0]} local values"
        )
    if local.shape[0] == 0:
        raise ConfigurationError("cannot estimate a gradient from zero samples")

    centered_local = local - np.mean(local)
    return np.conj(log_derivatives).T @ centered_local / local.shape[0]
