from nqsampler.vmc.estimators import (
    MeanWithError,
    blocking_error_bars,
    expectation_value,
    local_values,
)
from nqsampler.vmc.evaluation import (
    EvaluationResult,
    build_tfim_sampler,
    evaluate_observable,
    evaluate_tfim_energy,
)
from nqsampler.vmc.gradients import (
    centered_log_derivatives,
    expectation_gradient,
    stack_log_derivatives,
)

__all__ = [
    "EvaluationResult",
    "MeanWithError",
    "blocking_error_bars",
    "build_tfim_sampler",
    "centered_log_derivatives",
    "evaluate_observable",
    "evaluate_tfim_energy",
    "expectation_gradient",
    "expectation_value",
    "local_values",
    "stack_log_derivatives",
]
