from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np

from nqsampler.errors import ConfigurationError
from nqsampler.physics.hilbert import HilbertSpace
from nqsampler.types import ComplexArray, Config, ConfigBatch, FloatArray, IntArray


@runtime_checkable
class Operator(Protocol):
    """Sparse operator seen through its non-zero matrix elements."""

    def connected_configurations(self, config: Config) -> tuple[ConfigBatch, ComplexArray]:
        """Return ``(configs, mels)`` with ``configs[k]`` paired to ``mels[k]``."""


@dataclass(frozen=True)
class DiagonalOperator:
    """Operator diagonal in the computational basis, ``O(s) = func(s)``."""

    hilbert: HilbertSpace
    func: Callable[[Config], complex]

    def connected_configurations(self, config: Config) -> tuple[ConfigBatch, ComplexArray]:
        config = np.asarray(config, dtype=np.float64)
        if config.shape != (self.hilbert.n_sites,):
            raise ConfigurationError(
                f"config must have shape ({self.hilbert.n_sites},), received {config.shape}"
            )
        mel = np.asarray([self.func(config)], dtype=np.complex128)
        return config[None, :].copy(), mel


class Magnetization(DiagonalOperator):
    """Mean magnetization per site as a diagonal operator."""

    def __init__(self, hilbert: HilbertSpace) -> None:
        super().__init__(hilbert=hilbert, func=magnetization)


def magnetization(spins: Config) -> float:
    """Mean magnetization per spin for one configuration."""

    if spins.ndim != 1:
        raise ConfigurationError("spins must be rank-1")
    return float(np.mean(spins, dtype=np.float64))


def magnetization_batch(spins: ConfigBatch) -> FloatArray:
    """Batch magnetization per sample."""

    if spins.ndim != 2:
        raise ConfigurationError("spins must be rank-2")
    return np.asarray(np.mean(spins, axis=1, dtype=np.float64), dtype=np.float64)


def nearest_neighbor_correlator(spins: Config, bonds: IntArray) -> float:
    """Average nearest-neighbor correlator ``<s_i s_j>`` over bond list."""

    if spins.ndim != 1:
        raise ConfigurationError("spins must be rank-1")
    pair_products = spins[bonds[:, 0]] * spins[bonds[:, 1]]
    return float(np.mean(pair_products, dtype=np.float64))
