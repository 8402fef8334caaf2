from nqsampler.config.presets import tfim_chain_benchmark_config, tfim_chain_small_config
from nqsampler.config.schemas import (
    ChainConfig,
    EstimatorConfig,
    EvaluationConfig,
    RbmConfig,
    SamplerConfig,
    ScheduleConfig,
    TfimConfig,
)

__all__ = [
    "ChainConfig",
    "EstimatorConfig",
    "EvaluationConfig",
    "RbmConfig",
    "SamplerConfig",
    "ScheduleConfig",
    "TfimConfig",
    "tfim_chain_benchmark_config",
    "tfim_chain_small_config",
]
