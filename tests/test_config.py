from __future__ import annotations

import pytest
from pydantic import ValidationError

from nqsampler.config.presets import tfim_chain_benchmark_config, tfim_chain_small_config
from nqsampler.config.schemas import SamplerConfig, ScheduleConfig, TfimConfig
from nqsampler.sampling.schedules import SweepSchedule


def test_presets_validate() -> None:
    small = tfim_chain_small_config(seed=3)
    assert small.sampler.seed == 3
    assert SweepSchedule.from_tuple(small.schedule.as_tuple()).n_records == 20

    bench = tfim_chain_benchmark_config()
    assert bench.chain.n_sites == 32
    assert bench.schedule.step == bench.chain.n_sites


def test_invalid_fields_are_rejected() -> None:
    with pytest.raises(ValidationError):
        SamplerConfig(batch_size=0)
    with pytest.raises(ValidationError):
        SamplerConfig(sweep_size=0)
    with pytest.raises(ValidationError):
        ScheduleConfig(start=0, stop=10, step=0)
    with pytest.raises(ValidationError):
        TfimConfig(h=0.0)
    with pytest.raises(ValidationError):
        SamplerConfig(batch_size=4, chains=2)


def test_model_copy_updates_nested_schedule() -> None:
    base = tfim_chain_small_config()
    cfg = base.model_copy(update={"schedule": ScheduleConfig(start=2, stop=6, step=1)})
    assert cfg.schedule.as_tuple() == (2, 6, 1)
    assert cfg.chain == base.chain
