from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TypeAlias, runtime_checkable

import numpy as np

from nqsampler.nqs.base import Machine
from nqsampler.physics.hilbert import HilbertSpace
from nqsampler.types import ComplexArray, ConfigBatch, FloatArray, LogAmpArray

MachineFunc: TypeAlias = Callable[[ComplexArray], FloatArray]


def squared_modulus(x: ComplexArray) -> FloatArray:
    """Default weighting ``F(x) = |x|^2``."""

    return np.abs(x) ** 2


@runtime_checkable
class Sampler(Protocol):
    """Capability set shared by every sampler.

    Configurations are drawn from ``P(s) ∝ F(psi(s))`` where ``F`` is
    ``machine_func``. Each concrete sampler decides what one ``sweep`` means.
    """

    def seed(self, base_seed: int) -> None:
        """Derive per-worker, per-chain random streams from ``base_seed``."""

    def reset(self, init_random: bool = False) -> None:
        """Clear acceptance statistics, optionally redraw configurations."""

    def sweep(self) -> None:
        """Advance every chain by one sweep."""

    @property
    def visible(self) -> ConfigBatch:
        """Current configurations, one row per chain."""

    @visible.setter
    def visible(self, configs: ConfigBatch) -> None: ...

    @property
    def log_values(self) -> LogAmpArray:
        """Cached log-amplitudes of the current configurations."""

    @property
    def acceptance(self) -> FloatArray:
        """Accepted over proposed moves, per chain."""

    @property
    def hilbert(self) -> HilbertSpace: ...

    @property
    def machine(self) -> Machine: ...

    @property
    def machine_func(self) -> MachineFunc: ...

    @machine_func.setter
    def machine_func(self, func: MachineFunc) -> None: ...
