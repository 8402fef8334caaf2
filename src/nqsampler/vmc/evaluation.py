from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from nqsampler.config.schemas import EstimatorConfig, EvaluationConfig
from nqsampler.nqs.rbm import init_rbm
from nqsampler.physics.hilbert import spin_hilbert
from nqsampler.physics.observables import Operator
from nqsampler.physics.tfim import TransverseFieldIsing, build_chain_bonds
from nqsampler.sampling.base import Sampler
from nqsampler.sampling.driver import SampleRecord, run_sampling
from nqsampler.sampling.metropolis import MetropolisLocalSampler
from nqsampler.sampling.schedules import SweepSchedule
from nqsampler.types import ComplexArray
from nqsampler.utils.logging import log_event
from nqsampler.utils.rng import RngStreams
from nqsampler.vmc.estimators import MeanWithError, expectation_value, local_values
from nqsampler.vmc.gradients import expectation_gradient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """Observable estimate and the sampling diagnostics behind it."""

    estimate: MeanWithError
    local_values: ComplexArray
    record: SampleRecord
    gradient: ComplexArray | None
    mean_acceptance: float
    nonfinite_proposals: int


def evaluate_observable(
    sampler: Sampler,
    operator: Operator,
    steps: Sequence[int] | SweepSchedule,
    estimator: EstimatorConfig | None = None,
    compute_gradients: bool = False,
) -> EvaluationResult:
    """Sample, then estimate ``<O>`` (and its parameter gradient) from the record."""

    estimator = estimator if estimator is not None else EstimatorConfig()
    record = run_sampling(sampler, steps, compute_gradients=compute_gradients)

    local = local_values(
        samples=record.samples,
        values=record.values,
        machine=sampler.machine,
        operator=operator,
        batch_size=estimator.batch_size,
    )
    estimate = expectation_value(local, n_bins=estimator.blocking_bins)

    gradient = None
    if compute_gradients:
        gradient = expectation_gradient(local, record.flat_gradients())

    nonfinite = 0 if record.nonfinite_counts is None else int(np.sum(record.nonfinite_counts))
    mean_acceptance = float(np.mean(record.acceptance)) if record.acceptance.size else 0.0
    log_event(
        logger,
        "evaluate_observable",
        mean=estimate.mean,
        stderr=estimate.stderr,
        n_samples=int(local.size),
        mean_acceptance=mean_acceptance,
        nonfinite_proposals=nonfinite,
    )
    return EvaluationResult(
        estimate=estimate,
        local_values=local,
        record=record,
        gradient=gradient,
        mean_acceptance=mean_acceptance,
        nonfinite_proposals=nonfinite,
    )


def build_tfim_sampler(config: EvaluationConfig) -> tuple[MetropolisLocalSampler, TransverseFieldIsing]:
    """RBM sampler and TFIM Hamiltonian for a spin-1/2 chain from ``config``."""

    rngs = RngStreams(seed=config.seed)
    hilbert = spin_hilbert(config.chain.n_sites)
    machine = init_rbm(
        hilbert=hilbert,
        alpha=config.model.alpha,
        init_std=config.model.init_std,
        key=rngs.split_jax(),
    )
    seed = config.sampler.seed if config.sampler.seed is not None else rngs.next_int()
    sampler = MetropolisLocalSampler(
        machine,
        batch_size=config.sampler.batch_size,
        sweep_size=config.sampler.sweep_size,
        seed=seed,
        worker_index=config.sampler.worker_index,
    )
    hamiltonian = TransverseFieldIsing(
        hilbert=hilbert,
        bonds=build_chain_bonds(config.chain.n_sites, pbc=config.chain.pbc),
        J=config.tfim.J,
        h=config.tfim.h,
    )
    return sampler, hamiltonian


def evaluate_tfim_energy(config: EvaluationConfig) -> EvaluationResult:
    """Variational energy of a randomly initialised RBM on the TFIM chain."""

    sampler, hamiltonian = build_tfim_sampler(config)
    return evaluate_observable(
        sampler=sampler,
        operator=hamiltonian,
        steps=config.schedule.as_tuple(),
        estimator=config.estimator,
        compute_gradients=config.compute_gradients,
    )
