from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from nqsampler.errors import ConfigurationError
from nqsampler.nqs.product import ProductMachine
from nqsampler.physics.hilbert import spin_hilbert
from nqsampler.sampling.driver import run_sampling
from nqsampler.sampling.metropolis import MetropolisLocalSampler
from nqsampler.utils.io import load_samples, save_json, save_samples


def test_sample_record_survives_npz(tmp_path: Path) -> None:
    sampler = MetropolisLocalSampler(ProductMachine(spin_hilbert(3)), batch_size=2, seed=0)
    record = run_sampling(sampler, (1, 4, 1), compute_gradients=True)
    local = np.ones(record.values.shape)

    path = tmp_path / "out" / "record.npz"
    save_samples(path, record.samples, record.values, record.gradients, local_values=local)
    loaded = load_samples(path)

    np.testing.assert_array_equal(loaded["samples"], record.samples)
    np.testing.assert_array_equal(loaded["values"], record.values)
    np.testing.assert_array_equal(loaded["gradients"], record.gradients)
    np.testing.assert_array_equal(loaded["local_values"], local)


def test_save_samples_checks_leading_shapes(tmp_path: Path) -> None:
    samples = np.zeros((2, 3, 4))
    with pytest.raises(ConfigurationError):
        save_samples(tmp_path / "a.npz", samples, np.zeros((2, 4)))
    with pytest.raises(ConfigurationError):
        save_samples(tmp_path / "b.npz", samples, np.zeros((2, 3)), local_values=np.zeros(6))


def test_load_samples_requires_record_keys(tmp_path: Path) -> None:
    path = tmp_path / "other.npz"
    np.savez(path, samples=np.zeros((1, 1, 2)))
    with pytest.raises(ConfigurationError):
        load_samples(path)


def test_save_json_is_sorted_and_accepts_numpy_scalars(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "metrics.json"
    save_json(path, {"b": np.float64(1.5), "a": 2})
    text = path.read_text(encoding="utf-8")
    assert text.index('"a"') < text.index('"b"')
    assert json.loads(text) == {"a": 2, "b": 1.5}
