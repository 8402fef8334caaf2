from __future__ import annotations

import numpy as np

from nqsampler.errors import ConfigurationError
from nqsampler.physics.hilbert import HilbertSpace, local_state_table
from nqsampler.types import ComplexArray, ConfigBatch, IntArray, LogAmpArray


class ProductMachine:
    """Product-state ansatz ``log psi(s) = sum_i w_i(s_i)``.

    One complex weight per admissible local value on every site. All weights
    zero give the constant wavefunction. Parameters are laid out site by site,
    local values in ascending order.
    """

    def __init__(self, hilbert: HilbertSpace, weights: ComplexArray | None = None) -> None:
        self._hilbert = hilbert
        self._table, self._sizes = local_state_table(hilbert)
        self._offsets = np.concatenate(([0], np.cumsum(self._sizes)[:-1])).astype(np.int64)
        n_par = int(self._sizes.sum())
        if weights is None:
            weights = np.zeros(n_par, dtype=np.complex128)
        self.parameters = weights

    @property
    def hilbert(self) -> HilbertSpace:
        return self._hilbert

    @property
    def n_par(self) -> int:
        return int(self._sizes.sum())

    @property
    def parameters(self) -> ComplexArray:
        return self._weights.copy()

    @parameters.setter
    def parameters(self, weights: ComplexArray) -> None:
        weights = np.asarray(weights, dtype=np.complex128).reshape(-1)
        if weights.shape != (self.n_par,):
            raise ConfigurationError(
                f"weights must have {self.n_par} entries, received {weights.shape[0]}"
            )
        self._weights = weights

    @classmethod
    def from_site_weights(
        cls, hilbert: HilbertSpace, site_weights: list[list[complex]]
    ) -> ProductMachine:
        """Build from nested per-site weights ordered like ``hilbert.local_states``."""

        flat = [complex(w) for site in site_weights for w in site]
        return cls(hilbert, np.asarray(flat, dtype=np.complex128))

    def _parameter_index(self, configs: ConfigBatch) -> IntArray:
        configs = np.asarray(configs, dtype=np.float64)
        n_sites = self._hilbert.n_sites
        if configs.ndim != 2 or configs.shape[1] != n_sites:
            raise ConfigurationError(
                f"configs must have shape (n, {n_sites}), received {configs.shape}"
            )
        matches = configs[:, :, None] == self._table[None, :, :]
        if not np.all(np.any(matches, axis=2)):
            raise ConfigurationError("configs contain values outside the Hilbert space")
        return self._offsets[None, :] + np.argmax(matches, axis=2)

    def log_val(self, configs: ConfigBatch) -> LogAmpArray:
        index = self._parameter_index(configs)
        return np.sum(self._weights[index], axis=1)

    def log_val_gradient(self, configs: ConfigBatch) -> ComplexArray:
        index = self._parameter_index(configs)
        grads = np.zeros((index.shape[0], self.n_par), dtype=np.complex128)
        rows = np.arange(index.shape[0])[:, None]
        grads[rows, index] = 1.0
        return grads
