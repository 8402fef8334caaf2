from __future__ import annotations

import numpy as np

from nqsampler.utils.rng import RngStreams, chain_generators, chain_seed_sequence


def _first_draws(generators: list[np.random.Generator]) -> np.ndarray:
    return np.stack([rng.random(8) for rng in generators])


def test_chain_streams_are_reproducible() -> None:
    a = _first_draws(chain_generators(123, worker_index=0, n_chains=4))
    b = _first_draws(chain_generators(123, worker_index=0, n_chains=4))
    np.testing.assert_array_equal(a, b)


def test_chains_and_workers_get_distinct_streams() -> None:
    worker0 = _first_draws(chain_generators(5, worker_index=0, n_chains=3))
    worker1 = _first_draws(chain_generators(5, worker_index=1, n_chains=3))

    rows = np.concatenate([worker0, worker1])
    assert np.unique(rows, axis=0).shape[0] == rows.shape[0]


def test_negative_seed_differs_from_its_absolute_value() -> None:
    pos = chain_seed_sequence(17, 0, 0).generate_state(4)
    neg = chain_seed_sequence(-17, 0, 0).generate_state(4)
    assert not np.array_equal(pos, neg)


def test_rng_streams_are_deterministic() -> None:
    a = RngStreams(seed=3)
    b = RngStreams(seed=3)
    assert a.next_int() == b.next_int()
    np.testing.assert_array_equal(np.asarray(a.split_jax()), np.asarray(b.split_jax()))
