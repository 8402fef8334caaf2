from __future__ import annotations

from dataclasses import dataclass
from typing import cast

import jax
import numpy as np
from jax import Array


def _entropy(base_seed: int) -> tuple[int, int]:
    # SeedSequence only takes non-negative entropy; keep the sign as a word.
    return (int(base_seed < 0), abs(int(base_seed)))


def chain_seed_sequence(base_seed: int, worker_index: int, chain_index: int) -> np.random.SeedSequence:
    """Seed sequence of one (worker, chain) stream.

    Distinct ``(worker_index, chain_index)`` pairs map to distinct spawn keys of
    the same root entropy, which numpy guarantees to give independent streams.
    """

    if worker_index < 0 or chain_index < 0:
        raise ValueError("worker_index and chain_index must be non-negative")
    return np.random.SeedSequence(
        entropy=_entropy(base_seed),
        spawn_key=(int(worker_index), int(chain_index)),
    )


def chain_generators(
    base_seed: int, worker_index: int, n_chains: int
) -> list[np.random.Generator]:
    """One independent generator per chain owned by ``worker_index``."""

    return [
        np.random.default_rng(chain_seed_sequence(base_seed, worker_index, chain))
        for chain in range(n_chains)
    ]


def fresh_seed() -> int:
    """Draw a base seed from OS entropy."""

    return int(np.random.SeedSequence().generate_state(1, dtype=np.uint64)[0])


@dataclass
class RngStreams:
    """Deterministic random streams for numpy and JAX callers."""

    seed: int

    def __post_init__(self) -> None:
        if self.seed < 0:
            raise ValueError("seed must be non-negative")
        self._np_rng = np.random.default_rng(self.seed)
        self._jax_key = jax.random.PRNGKey(self.seed)

    @property
    def numpy(self) -> np.random.Generator:
        return self._np_rng

    def split_jax(self) -> Array:
        self._jax_key, subkey = jax.random.split(self._jax_key)
        return cast(Array, subkey)

    def next_int(self, low: int = 0, high: int = 2**31 - 1) -> int:
        return int(self._np_rng.integers(low=low, high=high))
