"""Batched Metropolis sampler with single-site moves.

``batch_size`` independent Markov chains advance in lockstep. Every move
proposes a new local value on one random site per chain, and the ``B``
proposals are evaluated with a single ``machine.log_val`` call. The accept or
reject decision of each chain only ever uses that chain's own random stream.
"""

from __future__ import annotations

import logging

import numpy as np

from nqsampler.errors import ConfigurationError
from nqsampler.nqs.base import Machine, evaluate_log_val
from nqsampler.physics.hilbert import HilbertSpace, admissible_rows, local_state_table
from nqsampler.sampling.base import MachineFunc, squared_modulus
from nqsampler.types import BoolArray, ConfigBatch, FloatArray, IntArray, LogAmpArray
from nqsampler.utils.checks import require_finite, require_positive_int, require_shape
from nqsampler.utils.logging import log_event
from nqsampler.utils.rng import chain_generators, fresh_seed

logger = logging.getLogger(__name__)

# Uniform draws consumed per chain per move: site, new value, Metropolis test.
_DRAWS_PER_MOVE = 3


class MetropolisLocalSampler:
    """Run ``batch_size`` Metropolis chains with local moves on one worker.

    Args:
        machine: Wavefunction exposing ``hilbert`` and a batched ``log_val``.
        batch_size: Number of chains ``B``.
        sweep_size: Moves per sweep. Defaults to the number of sites.
        seed: Base seed. ``None`` draws one from OS entropy.
        worker_index: Rank of this worker. Mixed into every chain stream so
            that workers seeded with the same base seed never share streams.
    """

    def __init__(
        self,
        machine: Machine,
        batch_size: int = 128,
        sweep_size: int | None = None,
        seed: int | None = None,
        worker_index: int = 0,
    ) -> None:
        batch_size = require_positive_int("batch_size", batch_size)
        if sweep_size is not None:
            sweep_size = require_positive_int("sweep_size", sweep_size)
        if isinstance(worker_index, bool) or not isinstance(worker_index, (int, np.integer)):
            raise ConfigurationError(f"worker_index must be an integer, received {worker_index!r}")
        if worker_index < 0:
            raise ConfigurationError("worker_index must be >= 0")

        hilbert = machine.hilbert
        n_sites = hilbert.n_sites

        self._machine = machine
        self._hilbert = hilbert
        self._batch_size = batch_size
        self._worker_index = int(worker_index)
        self._sweep_size = n_sites if sweep_size is None else sweep_size
        self._machine_func: MachineFunc = squared_modulus

        self._table, self._sizes = local_state_table(hilbert)
        self._movable_sites: IntArray = np.flatnonzero(self._sizes > 1).astype(np.int64)
        self._rows = np.arange(batch_size)

        self._visible = np.zeros((batch_size, n_sites), dtype=np.float64)
        self._log_values = np.zeros(batch_size, dtype=np.complex128)
        self._n_accepted = np.zeros(batch_size, dtype=np.int64)
        self._n_proposed = np.zeros(batch_size, dtype=np.int64)
        self._nonfinite = np.zeros(batch_size, dtype=np.int64)

        if self._movable_sites.size == 0:
            logger.warning("all %d sites have local size 1; sweeps will not move", n_sites)

        if seed is None:
            seed = fresh_seed()
            logger.debug("no seed given, drew base seed %d from OS entropy", seed)
        self.seed(seed)
        self.reset(init_random=True)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(batch_size={self._batch_size}, "
            f"sweep_size={self._sweep_size}, worker_index={self._worker_index}, "
            f"n_sites={self._hilbert.n_sites})"
        )

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def sweep_size(self) -> int:
        return self._sweep_size

    @property
    def worker_index(self) -> int:
        return self._worker_index

    @property
    def base_seed(self) -> int:
        return self._base_seed

    @property
    def hilbert(self) -> HilbertSpace:
        return self._hilbert

    @property
    def machine(self) -> Machine:
        return self._machine

    @property
    def machine_func(self) -> MachineFunc:
        return self._machine_func

    @machine_func.setter
    def machine_func(self, func: MachineFunc) -> None:
        if not callable(func):
            raise ConfigurationError("machine_func must be callable")
        self._machine_func = func

    def seed(self, base_seed: int) -> None:
        if isinstance(base_seed, bool) or not isinstance(base_seed, (int, np.integer)):
            raise ConfigurationError(f"base_seed must be an integer, received {base_seed!r}")
        self._base_seed = int(base_seed)
        self._rngs = chain_generators(self._base_seed, self._worker_index, self._batch_size)

    def reset(self, init_random: bool = False) -> None:
        if init_random:
            configs = np.stack([self._random_config(rng) for rng in self._rngs])
        else:
            configs = self._visible
        self._commit(configs, evaluate_log_val(self._machine, configs))

        self._n_accepted[:] = 0
        self._n_proposed[:] = 0
        self._nonfinite[:] = 0

    @property
    def visible(self) -> ConfigBatch:
        return self._visible.copy()

    @visible.setter
    def visible(self, configs: ConfigBatch) -> None:
        shape = (self._batch_size, self._hilbert.n_sites)
        configs = np.asarray(configs, dtype=np.float64)
        if configs.ndim == 1:
            require_shape("visible", configs, shape[1:])
            configs = np.broadcast_to(configs, shape)
        require_shape("visible", configs, shape)
        require_finite("visible", configs)

        bad = np.flatnonzero(~admissible_rows(self._hilbert, configs))
        if bad.size:
            raise ConfigurationError(
                f"visible rows {bad.tolist()} contain values outside the Hilbert space"
            )
        self._commit(configs, evaluate_log_val(self._machine, configs))

    @property
    def log_values(self) -> LogAmpArray:
        return self._log_values.copy()

    @property
    def n_accepted(self) -> IntArray:
        return self._n_accepted.copy()

    @property
    def n_proposed(self) -> IntArray:
        return self._n_proposed.copy()

    @property
    def nonfinite_counts(self) -> IntArray:
        """Per-chain count of proposals rejected for a non-finite log-amplitude."""

        return self._nonfinite.copy()

    @property
    def acceptance(self) -> FloatArray:
        """Per-chain acceptance rate; 0.0 for chains with no proposals yet."""

        out = np.zeros(self._batch_size, dtype=np.float64)
        np.divide(self._n_accepted, self._n_proposed, out=out, where=self._n_proposed > 0)
        return out

    @property
    def mean_acceptance(self) -> float:
        """Pooled rate ``sum(accepted) / sum(proposed)`` over all chains."""

        proposed = int(self._n_proposed.sum())
        if proposed == 0:
            return 0.0
        return float(self._n_accepted.sum()) / proposed

    def sweep(self) -> None:
        if self._movable_sites.size == 0:
            return

        n_moves = self._sweep_size
        draws = np.stack([rng.random((_DRAWS_PER_MOVE, n_moves)) for rng in self._rngs])
        n_movable = self._movable_sites.size
        site_slot = np.minimum((draws[:, 0, :] * n_movable).astype(np.int64), n_movable - 1)
        sites = self._movable_sites[site_slot]

        rejected_nonfinite = 0
        for move in range(n_moves):
            proposed, moved_sites, new_values = self._propose(sites[:, move], draws[:, 1, move])
            proposed_log = evaluate_log_val(self._machine, proposed)
            accept, finite = self._metropolis_test(proposed_log, draws[:, 2, move])

            rows = self._rows[accept]
            self._visible[rows, moved_sites[accept]] = new_values[accept]
            self._log_values[accept] = proposed_log[accept]

            self._n_accepted += accept
            self._n_proposed += 1
            self._nonfinite += ~finite
            rejected_nonfinite += int(np.count_nonzero(~finite))

        if rejected_nonfinite:
            log_event(
                logger,
                "nonfinite_log_amplitude",
                level=logging.WARNING,
                rejected=rejected_nonfinite,
                chains=np.flatnonzero(self._nonfinite).tolist(),
            )

    def _propose(
        self, sites: IntArray, value_draws: FloatArray
    ) -> tuple[ConfigBatch, IntArray, FloatArray]:
        """New local value per chain, uniform over the site's values minus the current one."""

        current = self._visible[self._rows, sites]
        sizes = self._sizes[sites]
        current_idx = np.argmax(self._table[sites] == current[:, None], axis=1)

        offset = np.minimum((value_draws * (sizes - 1)).astype(np.int64), sizes - 2)
        new_idx = offset + (offset >= current_idx)
        new_values = self._table[sites, new_idx]

        proposed = self._visible.copy()
        proposed[self._rows, sites] = new_values
        return proposed, sites, new_values

    def _metropolis_test(
        self, proposed_log: LogAmpArray, uniforms: FloatArray
    ) -> tuple[BoolArray, BoolArray]:
        finite = np.isfinite(proposed_log)
        current_finite = np.isfinite(self._log_values)
        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            if self._machine_func is squared_modulus:
                delta = proposed_log - self._log_values
                ratio = np.exp(np.minimum(2.0 * delta.real, 0.0))
            else:
                # Target is P(s) ~ F(psi(s)).
                proposed_weight = np.asarray(self._machine_func(np.exp(proposed_log)), dtype=np.float64)
                current_weight = np.asarray(self._machine_func(np.exp(self._log_values)), dtype=np.float64)
                ratio = np.where(current_weight > 0.0, proposed_weight / current_weight, np.inf)
        # A chain stuck on an undefined amplitude takes any finite proposal.
        ratio = np.where(current_finite, ratio, np.inf)
        accept = finite & (uniforms < ratio)
        return accept, finite

    def _random_config(self, rng: np.random.Generator) -> FloatArray:
        slots = (rng.random(self._sizes.shape[0]) * self._sizes).astype(np.int64)
        slots = np.minimum(slots, self._sizes - 1)
        return self._table[np.arange(self._sizes.shape[0]), slots]

    def _commit(self, configs: ConfigBatch, log_values: LogAmpArray) -> None:
        self._visible = np.array(configs, dtype=np.float64, copy=True)
        self._log_values = log_values
        if not np.all(np.isfinite(log_values)):
            log_event(
                logger,
                "nonfinite_initial_log_amplitude",
                level=logging.WARNING,
                chains=np.flatnonzero(~np.isfinite(log_values)).tolist(),
            )
