"""Batched Metropolis sampling and local estimators for variational wavefunctions."""

from nqsampler.errors import ConfigurationError, ContractViolationError, SamplerError
from nqsampler.sampling.driver import SampleRecord, compute_samples, run_sampling
from nqsampler.sampling.metropolis import MetropolisLocalSampler
from nqsampler.sampling.schedules import SweepSchedule
from nqsampler.vmc.estimators import local_values

__all__ = [
    "ConfigurationError",
    "ContractViolationError",
    "MetropolisLocalSampler",
    "SampleRecord",
    "SamplerError",
    "SweepSchedule",
    "compute_samples",
    "local_values",
    "run_sampling",
]
