from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ChainConfig(BaseModel):
    """Spin-1/2 chain geometry."""

    model_config = ConfigDict(extra="forbid")

    n_sites: int = Field(ge=2)
    pbc: bool = True


class TfimConfig(BaseModel):
    """TFIM couplings in the sigma^z basis."""

    model_config = ConfigDict(extra="forbid")

    J: float = 1.0
    h: float = Field(gt=0.0)


class RbmConfig(BaseModel):
    """RBM ansatz with ``alpha * N`` hidden units."""

    model_config = ConfigDict(extra="forbid")

    alpha: float = Field(default=1.0, gt=0.0)
    init_std: float = Field(default=0.01, gt=0.0)


class SamplerConfig(BaseModel):
    """Batched Metropolis sampler construction parameters."""

    model_config = ConfigDict(extra="forbid")

    batch_size: int = Field(default=128, ge=1)
    sweep_size: int | None = Field(default=None, ge=1)
    seed: int | None = Field(default=None, ge=0)
    worker_index: int = Field(default=0, ge=0)


class ScheduleConfig(BaseModel):
    """Sweep schedule ``(start, stop, step)`` with ``range`` semantics."""

    model_config = ConfigDict(extra="forbid")

    start: int = Field(ge=0)
    stop: int = Field(ge=0)
    step: int = Field(default=1, ge=1)

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.start, self.stop, self.step)


class EstimatorConfig(BaseModel):
    """Local-value evaluation and error-bar parameters."""

    model_config = ConfigDict(extra="forbid")

    batch_size: int = Field(default=1024, ge=1)
    blocking_bins: int = Field(default=20, ge=1)


class EvaluationConfig(BaseModel):
    """Complete TFIM-chain energy evaluation settings."""

    model_config = ConfigDict(extra="forbid")

    chain: ChainConfig
    tfim: TfimConfig
    model: RbmConfig
    sampler: SamplerConfig
    schedule: ScheduleConfig
    estimator: EstimatorConfig = Field(default_factory=EstimatorConfig)
    compute_gradients: bool = False
    seed: int = Field(default=0, ge=0)
