from __future__ import annotations

import numpy as np

from nqsampler.errors import ConfigurationError


def require_shape(name: str, array: np.ndarray, expected: tuple[int, ...]) -> None:
    """Raise a clear error if an array shape differs from expectations."""

    if array.shape != expected:
        raise ConfigurationError(
            f"{name} shape mismatch: expected {expected}, received {array.shape}"
        )


def require_finite(name: str, array: np.ndarray) -> None:
    """Guard against NaN/Inf in user-supplied arrays."""

    if not np.all(np.isfinite(array)):
        raise ConfigurationError(f"{name} contains NaN or Inf values")


def require_positive_int(name: str, value: int) -> int:
    """Validate integer arguments such as batch sizes and strides."""

    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ConfigurationError(f"{name} must be an integer, received {value!r}")
    if value < 1:
        raise ConfigurationError(f"{name} must be >= 1, received {value}")
    return int(value)
