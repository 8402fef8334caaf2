from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from nqsampler.errors import ConfigurationError, ContractViolationError
from nqsampler.nqs.base import Machine, evaluate_log_val
from nqsampler.physics.observables import Operator
from nqsampler.types import ComplexArray, Config, ConfigBatch, FloatArray, IntArray, LogAmpArray
from nqsampler.utils.checks import require_positive_int


@dataclass(frozen=True)
class MeanWithError:
    """Mean estimate with standard error from block statistics."""

    mean: float
    stderr: float


def blocking_error_bars(values: FloatArray, n_bins: int) -> MeanWithError:
    """Mean and standard error from ``n_bins`` contiguous block averages."""

    if values.ndim != 1:
        raise ConfigurationError("values must be rank-1")
    if n_bins < 1:
        raise ConfigurationError("n_bins must be >= 1")
    if values.shape[0] < n_bins:
        raise ConfigurationError("need at least n_bins samples for blocking")

    trimmed = values[: (values.shape[0] // n_bins) * n_bins]
    block_size = trimmed.shape[0] // n_bins

    blocks = trimmed.reshape(n_bins, block_size)
    block_means = np.mean(blocks, axis=1, dtype=np.float64)

    mean = float(np.mean(block_means, dtype=np.float64))
    if n_bins == 1:
        return MeanWithError(mean=mean, stderr=0.0)

    stderr = float(np.std(block_means, ddof=1, dtype=np.float64) / np.sqrt(n_bins))
    return MeanWithError(mean=mean, stderr=stderr)


def expectation_value(local: ComplexArray, n_bins: int) -> MeanWithError:
    """Real part of ``<O>`` with blocking error bars, bins capped by sample count."""

    flat = np.real(np.asarray(local)).reshape(-1).astype(np.float64)
    if flat.shape[0] == 0:
        raise ConfigurationError("cannot estimate an expectation value from zero samples")
    return blocking_error_bars(flat, n_bins=max(1, min(n_bins, flat.shape[0])))


def _connected(operator: Operator, config: Config, n_sites: int) -> tuple[ConfigBatch, ComplexArray]:
    configs, mels = operator.connected_configurations(config)
    configs = np.asarray(configs, dtype=np.float64)
    mels = np.asarray(mels, dtype=np.complex128).reshape(-1)
    if configs.size == 0 and mels.size == 0:
        return np.zeros((0, n_sites), dtype=np.float64), mels
    if configs.ndim != 2 or configs.shape[1] != n_sites:
        raise ContractViolationError(
            f"operator returned connected configurations of shape {configs.shape}, "
            f"expected (K, {n_sites})"
        )
    if configs.shape[0] != mels.shape[0]:
        raise ContractViolationError(
            f"operator returned {configs.shape[0]} configurations "
            f"but {mels.shape[0]} matrix elements"
        )
    return configs, mels


class _ConnectedBuffer:
    """Pending connected configurations, flushed in machine calls of bounded size."""

    def __init__(self, machine: Machine, log_values: LogAmpArray, out: ComplexArray, batch_size: int) -> None:
        self._machine = machine
        self._log_values = log_values
        self._out = out
        self._batch_size = batch_size
        self._configs: list[ConfigBatch] = []
        self._mels: list[ComplexArray] = []
        self._owners: list[IntArray] = []
        self.pending = 0

    def add(self, owner: int, configs: ConfigBatch, mels: ComplexArray) -> None:
        if configs.shape[0] == 0:
            return
        self._configs.append(configs)
        self._mels.append(mels)
        self._owners.append(np.full(configs.shape[0], owner, dtype=np.int64))
        self.pending += configs.shape[0]

    def flush(self) -> None:
        if self.pending == 0:
            return
        configs = np.concatenate(self._configs)
        mels = np.concatenate(self._mels)
        owners = np.concatenate(self._owners)

        conn_log = np.empty(configs.shape[0], dtype=np.complex128)
        for lo in range(0, configs.shape[0], self._batch_size):
            hi = lo + self._batch_size
            conn_log[lo:hi] = evaluate_log_val(self._machine, configs[lo:hi])

        terms = mels * np.exp(conn_log - self._log_values[owners])
        np.add.at(self._out, owners, terms)

        self._configs.clear()
        self._mels.clear()
        self._owners.clear()
        self.pending = 0


def local_values(
    samples: ConfigBatch,
    values: LogAmpArray,
    machine: Machine,
    operator: Operator,
    batch_size: int,
) -> ComplexArray:
    """Local values ``O_loc(s) = sum_k O_k psi(s'_k) / psi(s)`` for every sample.

    Args:
        samples: Configurations of shape ``(..., N)``; leading axes are kept,
            so the ``(n_records, B, N)`` output of ``compute_samples`` works
            directly.
        values: ``log psi`` of every sample, shape ``(...)``.
        machine: Wavefunction used for the connected configurations.
        operator: Provides ``connected_configurations``.
        batch_size: Upper bound on the rows of a single ``log_val`` call. Does
            not change the result.

    Returns:
        Complex local values with the leading shape of ``samples``.
    """

    batch_size = require_positive_int("batch_size", batch_size)
    samples = np.asarray(samples, dtype=np.float64)
    values = np.asarray(values, dtype=np.complex128)

    n_sites = machine.hilbert.n_sites
    if samples.ndim < 1 or samples.shape[-1] != n_sites:
        raise ConfigurationError(
            f"samples must have shape (..., {n_sites}), received {samples.shape}"
        )
    lead_shape = samples.shape[:-1]
    if values.shape != lead_shape:
        raise ConfigurationError(
            f"values shape {values.shape} does not match samples leading shape {lead_shape}"
        )

    flat_samples = samples.reshape(-1, n_sites)
    flat_values = values.reshape(-1)
    out = np.zeros(flat_samples.shape[0], dtype=np.complex128)

    buffer = _ConnectedBuffer(machine, flat_values, out, batch_size)
    for i, config in enumerate(flat_samples):
        conns, mels = _connected(operator, config, n_sites)
        buffer.add(i, conns, mels)
        if buffer.pending >= batch_size:
            buffer.flush()
    buffer.flush()

    return out.reshape(lead_shape)
