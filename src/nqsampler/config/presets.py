from __future__ import annotations

from nqsampler.config.schemas import (
    ChainConfig,
    EstimatorConfig,
    EvaluationConfig,
    RbmConfig,
    SamplerConfig,
    ScheduleConfig,
    TfimConfig,
)


def tfim_chain_small_config(seed: int = 7) -> EvaluationConfig:
    """Small CI/laptop TFIM chain evaluation."""

    n_sites = 6
    return EvaluationConfig(
        chain=ChainConfig(n_sites=n_sites, pbc=True),
        tfim=TfimConfig(J=1.0, h=1.0),
        model=RbmConfig(alpha=1.0, init_std=0.05),
        sampler=SamplerConfig(batch_size=16, seed=seed),
        schedule=ScheduleConfig(start=20, stop=60, step=2),
        estimator=EstimatorConfig(batch_size=256, blocking_bins=10),
        compute_gradients=True,
        seed=seed,
    )


def tfim_chain_benchmark_config(seed: int = 11) -> EvaluationConfig:
    """Larger chain with many chains per call, for throughput measurements."""

    n_sites = 32
    return EvaluationConfig(
        chain=ChainConfig(n_sites=n_sites, pbc=True),
        tfim=TfimConfig(J=1.0, h=1.0),
        model=RbmConfig(alpha=2.0, init_std=0.01),
        sampler=SamplerConfig(batch_size=128, seed=seed),
        schedule=ScheduleConfig(start=100, stop=100 + 100 * n_sites, step=n_sites),
        estimator=EstimatorConfig(batch_size=4096, blocking_bins=20),
        compute_gradients=False,
        seed=seed,
    )
