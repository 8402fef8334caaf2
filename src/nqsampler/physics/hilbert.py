from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import numpy as np

from nqsampler.errors import ConfigurationError
from nqsampler.types import BoolArray, Config, ConfigBatch, FloatArray, IntArray


@runtime_checkable
class HilbertSpace(Protocol):
    """Discrete local degrees of freedom, one set of admissible values per site."""

    @property
    def n_sites(self) -> int:
        """Number of sites ``N``."""

    def local_size(self, site: int) -> int:
        """Number of admissible values on ``site``."""

    def local_states(self, site: int) -> FloatArray:
        """Sorted admissible values on ``site``."""


class DiscreteHilbert:
    """Hilbert space with an explicit finite list of local values per site."""

    def __init__(self, local_states: Sequence[Sequence[float]]) -> None:
        if len(local_states) < 1:
            raise ConfigurationError("a Hilbert space needs at least one site")

        states: list[FloatArray] = []
        for site, values in enumerate(local_states):
            arr = np.unique(np.asarray(values, dtype=np.float64))
            if arr.size != len(values):
                raise ConfigurationError(f"site {site} lists duplicate local values")
            if arr.size < 1:
                raise ConfigurationError(f"site {site} has no admissible values")
            if not np.all(np.isfinite(arr)):
                raise ConfigurationError(f"site {site} has non-finite local values")
            arr.setflags(write=False)
            states.append(arr)
        self._states = tuple(states)

    @classmethod
    def uniform(cls, local_states: Sequence[float], n_sites: int) -> DiscreteHilbert:
        """Same local values on every one of ``n_sites`` sites."""

        if n_sites < 1:
            raise ConfigurationError("n_sites must be >= 1")
        return cls([local_states] * n_sites)

    @property
    def n_sites(self) -> int:
        return len(self._states)

    def local_size(self, site: int) -> int:
        return int(self._states[site].size)

    def local_states(self, site: int) -> FloatArray:
        return self._states[site]

    @property
    def is_uniform(self) -> bool:
        first = self._states[0]
        return all(np.array_equal(first, s) for s in self._states[1:])

    def random_states(self, rng: np.random.Generator) -> Config:
        """Draw one configuration uniformly from the product space."""

        return np.asarray(
            [s[rng.integers(0, s.size)] for s in self._states], dtype=np.float64
        )

    def is_admissible(self, configs: ConfigBatch) -> BoolArray:
        """Row-wise check that every value is allowed on its site."""

        return admissible_rows(self, configs)

    def __repr__(self) -> str:
        if self.is_uniform:
            return f"DiscreteHilbert(local_states={self._states[0].tolist()}, n_sites={self.n_sites})"
        return f"DiscreteHilbert(n_sites={self.n_sites})"


def spin_hilbert(n_sites: int, s: float = 0.5) -> DiscreteHilbert:
    """Spin-``s`` sites with values ``-2s, -2s + 2, ..., 2s``.

    Spin-1/2 gives the usual ``{-1, +1}`` Pauli eigenvalues.
    """

    two_s = 2.0 * s
    if two_s < 1.0 or not float(two_s).is_integer():
        raise ConfigurationError(f"s must be a positive half-integer, received {s}")
    values = np.arange(-two_s, two_s + 1.0, 2.0)
    return DiscreteHilbert.uniform(values.tolist(), n_sites)


def boson_hilbert(n_sites: int, n_max: int) -> DiscreteHilbert:
    """Occupation numbers ``0..n_max`` on every site."""

    if n_max < 0:
        raise ConfigurationError("n_max must be >= 0")
    return DiscreteHilbert.uniform(list(range(n_max + 1)), n_sites)


def local_state_table(hilbert: HilbertSpace) -> tuple[FloatArray, IntArray]:
    """Padded ``(n_sites, max_local_size)`` table of local values and per-site sizes.

    Unused slots hold NaN so that they never compare equal to a real value.
    """

    n_sites = hilbert.n_sites
    sizes = np.asarray([hilbert.local_size(i) for i in range(n_sites)], dtype=np.int64)
    table = np.full((n_sites, int(sizes.max())), np.nan, dtype=np.float64)
    for i in range(n_sites):
        values = np.sort(np.asarray(hilbert.local_states(i), dtype=np.float64))
        if values.shape != (sizes[i],):
            raise ConfigurationError(
                f"site {i}: local_states has {values.shape[0]} values, local_size is {sizes[i]}"
            )
        table[i, : sizes[i]] = values
    return table, sizes


def admissible_rows(hilbert: HilbertSpace, configs: ConfigBatch) -> BoolArray:
    """Boolean mask of rows whose values are all admissible."""

    configs = np.asarray(configs, dtype=np.float64)
    if configs.ndim != 2 or configs.shape[1] != hilbert.n_sites:
        raise ConfigurationError(
            f"configs must have shape (n, {hilbert.n_sites}), received {configs.shape}"
        )
    table, _ = local_state_table(hilbert)
    matches = configs[:, :, None] == table[None, :, :]
    return np.asarray(np.all(np.any(matches, axis=2), axis=1), dtype=np.bool_)
