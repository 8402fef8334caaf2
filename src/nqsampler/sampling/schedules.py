from __future__ import annotations

import operator
from collections.abc import Sequence
from dataclasses import dataclass

from nqsampler.errors import ConfigurationError


@dataclass(frozen=True)
class SweepSchedule:
    """Thermalization and thinning schedule with ``range(start, stop, step)`` semantics.

    ``start`` sweeps are discarded, then the state after every ``step``-th
    sweep is recorded while the sweep counter stays below ``stop``.
    """

    start: int
    stop: int
    step: int = 1

    def __post_init__(self) -> None:
        for name in ("start", "stop", "step"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, received {value!r}")
        if self.start < 0:
            raise ConfigurationError("start must be >= 0")
        if self.step < 1:
            raise ConfigurationError("step must be >= 1")

    @classmethod
    def from_tuple(cls, steps: Sequence[int] | SweepSchedule) -> SweepSchedule:
        if isinstance(steps, SweepSchedule):
            return steps
        if len(steps) != 3:
            raise ConfigurationError(f"steps must be (start, stop, step), received {steps!r}")
        try:
            start, stop, step = (operator.index(s) for s in steps)
        except TypeError as exc:
            raise ConfigurationError(f"steps must be integers, received {steps!r}") from exc
        return cls(start=start, stop=stop, step=step)

    @property
    def n_records(self) -> int:
        if self.stop <= self.start:
            return 0
        return -(-(self.stop - self.start) // self.step)

    @property
    def n_sweeps(self) -> int:
        """Total sweeps executed, thermalization included."""

        if self.n_records == 0:
            return self.start
        return self.start + 1 + (self.n_records - 1) * self.step

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.start, self.stop, self.step)
