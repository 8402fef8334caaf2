"""Restricted Boltzmann machine for spin-1/2 configurations, evaluated with JAX.

``log psi(v) = a . v + sum_j log(2 cosh(b_j + sum_i W_ij v_i))``

Parameters are real, so ``log psi`` is real; it is returned as complex to
match the machine contract. Log-derivatives come from ``jax.grad`` and are
flattened with the deterministic layout in ``parameterization``.
"""

from __future__ import annotations

from dataclasses import dataclass

import jax
import numpy as np
from jax import numpy as jnp

from nqsampler.errors import ConfigurationError
from nqsampler.nqs.parameterization import (
    FlatParameterLayout,
    build_layout,
    flatten_batch_with_layout,
    flatten_with_layout,
    unflatten_with_layout,
)
from nqsampler.physics.hilbert import HilbertSpace
from nqsampler.types import ComplexArray, ConfigBatch, FloatArray, LogAmpArray

jax.config.update("jax_enable_x64", True)


@dataclass(frozen=True)
class RbmParams:
    """Visible biases ``a``, hidden biases ``b`` and couplings ``w``."""

    a: FloatArray
    b: FloatArray
    w: FloatArray

    def __post_init__(self) -> None:
        if self.a.ndim != 1 or self.b.ndim != 1:
            raise ConfigurationError("a and b must be rank-1")
        n_visible, n_hidden = self.a.shape[0], self.b.shape[0]
        if self.w.shape != (n_visible, n_hidden):
            raise ConfigurationError(
                f"w shape {self.w.shape} incompatible with {(n_visible, n_hidden)}"
            )

    def named_arrays(self) -> dict[str, FloatArray]:
        return {"a": self.a, "b": self.b, "w": self.w}


def _log_cosh2(x: jax.Array) -> jax.Array:
    # log(2 cosh x) without overflow.
    return jnp.logaddexp(x, -x)


def rbm_log_psi(params: dict[str, jax.Array], v: jax.Array) -> jax.Array:
    theta = params["b"] + v @ params["w"]
    return jnp.dot(params["a"], v) + jnp.sum(_log_cosh2(theta))


_batched_log_psi = jax.jit(jax.vmap(rbm_log_psi, in_axes=(None, 0)))
_batched_grad_log_psi = jax.jit(jax.vmap(jax.grad(rbm_log_psi), in_axes=(None, 0)))


class RbmSpin:
    """Batched RBM wavefunction implementing the gradient-machine contract."""

    def __init__(self, hilbert: HilbertSpace, params: RbmParams) -> None:
        if params.a.shape[0] != hilbert.n_sites:
            raise ConfigurationError(
                f"RBM has {params.a.shape[0]} visible units for {hilbert.n_sites} sites"
            )
        self._hilbert = hilbert
        self._params = params
        self._layout = build_layout(params.named_arrays())
        self._jax_params = {k: jnp.asarray(v, dtype=jnp.float64) for k, v in params.named_arrays().items()}

    @property
    def hilbert(self) -> HilbertSpace:
        return self._hilbert

    @property
    def params(self) -> RbmParams:
        return self._params

    @property
    def layout(self) -> FlatParameterLayout:
        return self._layout

    @property
    def n_par(self) -> int:
        return self._layout.size

    @property
    def parameters(self) -> FloatArray:
        return flatten_with_layout(self._params.named_arrays(), self._layout)

    def with_parameters(self, vector: FloatArray) -> RbmSpin:
        """New machine with parameters taken from a flat vector."""

        unpacked = unflatten_with_layout(np.asarray(vector, dtype=np.float64), self._layout)
        return RbmSpin(self._hilbert, RbmParams(a=unpacked["a"], b=unpacked["b"], w=unpacked["w"]))

    def _as_batch(self, configs: ConfigBatch) -> jax.Array:
        configs = np.asarray(configs, dtype=np.float64)
        if configs.ndim != 2 or configs.shape[1] != self._hilbert.n_sites:
            raise ConfigurationError(
                f"configs must have shape (n, {self._hilbert.n_sites}), received {configs.shape}"
            )
        return jnp.asarray(configs)

    def log_val(self, configs: ConfigBatch) -> LogAmpArray:
        batch = self._as_batch(configs)
        if batch.shape[0] == 0:
            return np.zeros(0, dtype=np.complex128)
        return np.asarray(_batched_log_psi(self._jax_params, batch), dtype=np.complex128)

    def log_val_gradient(self, configs: ConfigBatch) -> ComplexArray:
        batch = self._as_batch(configs)
        n_rows = batch.shape[0]
        if n_rows == 0:
            return np.zeros((0, self.n_par), dtype=np.complex128)
        grads = _batched_grad_log_psi(self._jax_params, batch)
        named = {k: np.asarray(v) for k, v in grads.items()}
        return flatten_batch_with_layout(named, self._layout, n_rows).astype(np.complex128)


def init_rbm(
    hilbert: HilbertSpace,
    alpha: float,
    init_std: float,
    key: jax.Array,
) -> RbmSpin:
    """Gaussian initialisation with ``n_hidden = max(1, round(alpha * N))``."""

    if alpha <= 0.0:
        raise ConfigurationError("alpha must be > 0")
    if init_std <= 0.0:
        raise ConfigurationError("init_std must be > 0")

    n_visible = hilbert.n_sites
    n_hidden = max(1, int(round(alpha * n_visible)))
    key_a, key_b, key_w = jax.random.split(key, 3)

    a = init_std * jax.random.normal(key_a, (n_visible,), dtype=jnp.float64)
    b = init_std * jax.random.normal(key_b, (n_hidden,), dtype=jnp.float64)
    w = init_std * jax.random.normal(key_w, (n_visible, n_hidden), dtype=jnp.float64)
    params = RbmParams(
        a=np.asarray(a, dtype=np.float64),
        b=np.asarray(b, dtype=np.float64),
        w=np.asarray(w, dtype=np.float64),
    )
    return RbmSpin(hilbert, params)
