from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np

from nqsampler.errors import ContractViolationError
from nqsampler.physics.hilbert import HilbertSpace
from nqsampler.types import ComplexArray, ConfigBatch, LogAmpArray


@runtime_checkable
class Machine(Protocol):
    """Opaque wavefunction evaluated on batches of configurations.

    ``log_val`` must be pure and order-preserving: row ``i`` of the output is
    ``log psi`` of row ``i`` of the input, for any batch size.
    """

    @property
    def hilbert(self) -> HilbertSpace:
        """Hilbert space the machine is defined on."""

    def log_val(self, configs: ConfigBatch) -> LogAmpArray:
        """Complex log-amplitudes of shape ``(n,)`` for ``configs`` of shape ``(n, N)``."""


@runtime_checkable
class GradientMachine(Machine, Protocol):
    """Machine that also exposes analytic log-derivatives."""

    @property
    def n_par(self) -> int:
        """Number of variational parameters."""

    def log_val_gradient(self, configs: ConfigBatch) -> ComplexArray:
        """``d log psi / d theta`` of shape ``(n, n_par)``."""


def supports_gradients(machine: Machine) -> bool:
    return callable(getattr(machine, "log_val_gradient", None))


def evaluate_log_val(machine: Machine, configs: ConfigBatch) -> LogAmpArray:
    """Call ``machine.log_val`` and enforce the one-value-per-row contract."""

    out = np.asarray(machine.log_val(configs), dtype=np.complex128)
    n_rows = configs.shape[0]
    if out.shape != (n_rows,):
        raise ContractViolationError(
            f"machine.log_val returned shape {out.shape} for a batch of {n_rows} configurations"
        )
    return out


def evaluate_log_val_gradient(machine: GradientMachine, configs: ConfigBatch) -> ComplexArray:
    """Call ``machine.log_val_gradient`` and enforce the batch contract."""

    out = np.asarray(machine.log_val_gradient(configs), dtype=np.complex128)
    n_rows = configs.shape[0]
    if out.ndim != 2 or out.shape[0] != n_rows:
        raise ContractViolationError(
            f"machine.log_val_gradient returned shape {out.shape} "
            f"for a batch of {n_rows} configurations"
        )
    return out
