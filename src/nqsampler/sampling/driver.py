from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from nqsampler.errors import ConfigurationError
from nqsampler.nqs.base import evaluate_log_val_gradient, supports_gradients
from nqsampler.sampling.base import Sampler
from nqsampler.sampling.schedules import SweepSchedule
from nqsampler.types import ComplexArray, ConfigBatch, FloatArray, IntArray, LogAmpArray
from nqsampler.utils.logging import log_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleRecord:
    """Configurations and log-amplitudes recorded by one driver run.

    Shapes are ``(n_records, batch_size, n_sites)`` for ``samples``,
    ``(n_records, batch_size)`` for ``values`` and
    ``(n_records, batch_size, n_par)`` for ``gradients``.
    """

    samples: ConfigBatch
    values: LogAmpArray
    gradients: ComplexArray | None
    acceptance: FloatArray
    nonfinite_counts: IntArray | None = None

    def __post_init__(self) -> None:
        for arr in (self.samples, self.values, self.gradients):
            if arr is not None:
                arr.setflags(write=False)

    @property
    def n_records(self) -> int:
        return int(self.samples.shape[0])

    def flat_samples(self) -> ConfigBatch:
        return self.samples.reshape(-1, self.samples.shape[-1])

    def flat_values(self) -> LogAmpArray:
        return self.values.reshape(-1)

    def flat_gradients(self) -> ComplexArray:
        if self.gradients is None:
            raise ConfigurationError("record was computed without gradients")
        return self.gradients.reshape(-1, self.gradients.shape[-1])

    def as_tuple(
        self,
    ) -> tuple[ConfigBatch, LogAmpArray] | tuple[ConfigBatch, LogAmpArray, ComplexArray]:
        if self.gradients is None:
            return self.samples, self.values
        return self.samples, self.values, self.gradients


def run_sampling(
    sampler: Sampler,
    steps: Sequence[int] | SweepSchedule,
    compute_gradients: bool = False,
) -> SampleRecord:
    """Thermalize, then sweep and record according to ``steps``.

    Acceptance counters are reset at the start (configurations are kept), so
    ``SampleRecord.acceptance`` describes this run only.
    """

    schedule = SweepSchedule.from_tuple(steps)
    machine = sampler.machine
    if compute_gradients and not supports_gradients(machine):
        raise ConfigurationError(
            f"{type(machine).__name__} does not provide log_val_gradient"
        )

    t0 = time.perf_counter()
    sampler.reset()
    for _ in range(schedule.start):
        sampler.sweep()

    n_records = schedule.n_records
    n_sites = sampler.hilbert.n_sites
    visible = sampler.visible
    batch_size = visible.shape[0]

    samples = np.empty((n_records, batch_size, n_sites), dtype=np.float64)
    values = np.empty((n_records, batch_size), dtype=np.complex128)
    gradient_rows: list[ComplexArray] = []

    for record in range(n_records):
        n_between = 1 if record == 0 else schedule.step
        for _ in range(n_between):
            sampler.sweep()

        visible = sampler.visible
        samples[record] = visible
        values[record] = sampler.log_values
        if compute_gradients:
            gradient_rows.append(evaluate_log_val_gradient(machine, visible))  # type: ignore[arg-type]

    gradients: ComplexArray | None = None
    if compute_gradients:
        n_par = gradient_rows[0].shape[1] if gradient_rows else int(getattr(machine, "n_par", 0))
        gradients = (
            np.stack(gradient_rows)
            if gradient_rows
            else np.empty((0, batch_size, n_par), dtype=np.complex128)
        )

    acceptance = np.asarray(sampler.acceptance, dtype=np.float64)
    nonfinite = getattr(sampler, "nonfinite_counts", None)
    log_event(
        logger,
        "compute_samples",
        steps=list(schedule.as_tuple()),
        n_records=n_records,
        batch_size=batch_size,
        mean_acceptance=float(np.mean(acceptance)) if acceptance.size else 0.0,
        seconds=time.perf_counter() - t0,
    )
    return SampleRecord(
        samples=samples,
        values=values,
        gradients=gradients,
        acceptance=acceptance,
        nonfinite_counts=None if nonfinite is None else np.asarray(nonfinite),
    )


def compute_samples(
    sampler: Sampler,
    steps: Sequence[int] | SweepSchedule,
    compute_gradients: bool = False,
) -> tuple[ConfigBatch, LogAmpArray] | tuple[ConfigBatch, LogAmpArray, ComplexArray]:
    """Record ``(samples, values)`` or ``(samples, values, gradients)``.

    ``steps`` is ``(start, stop, step)`` with the meaning of ``range``: a
    typical call is ``(T, T + n_samples * N // B, N)`` with ``T`` discarded
    sweeps, ``N`` sites and ``B`` chains.
    """

    return run_sampling(sampler, steps, compute_gradients).as_tuple()
