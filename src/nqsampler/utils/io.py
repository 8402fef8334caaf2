from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np

from nqsampler.errors import ConfigurationError

_RECORD_KEYS = ("samples", "values")


def save_json(path: Path, payload: dict[str, Any]) -> None:
    """Write run metrics as sorted JSON; numpy scalars are stored as floats."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True, default=float)


def save_samples(
    path: Path,
    samples: np.ndarray,
    values: np.ndarray,
    gradients: np.ndarray | None = None,
    **extra: np.ndarray,
) -> None:
    """Store a ``(R, B, N)`` sample record and its per-sample arrays in one ``.npz``.

    Every extra array must share the ``(R, B)`` leading shape of ``values``,
    e.g. the local values computed from the record.
    """

    samples = np.asarray(samples)
    values = np.asarray(values)
    lead = samples.shape[:-1]
    if values.shape != lead:
        raise ConfigurationError(f"values shape {values.shape} does not match samples {samples.shape}")

    arrays: dict[str, np.ndarray] = {"samples": samples, "values": values}
    if gradients is not None:
        arrays["gradients"] = np.asarray(gradients)
    for name, value in extra.items():
        value = np.asarray(value)
        if value.shape[: len(lead)] != lead:
            raise ConfigurationError(f"{name} shape {value.shape} does not start with {lead}")
        arrays[name] = value

    path.parent.mkdir(parents=True, exist_ok=True)
    np.savez_compressed(path, **arrays)  # type: ignore[arg-type]


def load_samples(path: Path) -> dict[str, np.ndarray]:
    """Read back an archive written by ``save_samples``."""

    with np.load(path) as data:
        missing = [key for key in _RECORD_KEYS if key not in data.files]
        if missing:
            raise ConfigurationError(f"{path} is missing {missing}")
        return {key: data[key] for key in data.files}
