from nqsampler.sampling.base import MachineFunc, Sampler, squared_modulus
from nqsampler.sampling.driver import SampleRecord, compute_samples, run_sampling
from nqsampler.sampling.metropolis import MetropolisLocalSampler
from nqsampler.sampling.schedules import SweepSchedule

__all__ = [
    "MachineFunc",
    "MetropolisLocalSampler",
    "SampleRecord",
    "Sampler",
    "SweepSchedule",
    "compute_samples",
    "run_sampling",
    "squared_modulus",
]
