from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from nqsampler.errors import ConfigurationError
from nqsampler.types import FloatArray


@dataclass(frozen=True)
class ParameterSlice:
    """Slice metadata for flatten/unflatten operations."""

    name: str
    start: int
    stop: int
    shape: tuple[int, ...]


@dataclass(frozen=True)
class FlatParameterLayout:
    """Deterministic layout mapping between named tensors and flat gradient vectors."""

    slices: tuple[ParameterSlice, ...]

    @property
    def size(self) -> int:
        return int(sum(s.stop - s.start for s in self.slices))


def build_layout(named_arrays: dict[str, FloatArray]) -> FlatParameterLayout:
    """Create a deterministic flat-vector layout sorted by key."""

    slices: list[ParameterSlice] = []
    cursor = 0
    for name in sorted(named_arrays.keys()):
        shape = tuple(int(d) for d in np.shape(named_arrays[name]))
        length = int(np.prod(shape))
        slices.append(ParameterSlice(name=name, start=cursor, stop=cursor + length, shape=shape))
        cursor += length
    return FlatParameterLayout(tuple(slices))


def flatten_batch_with_layout(
    named_arrays: dict[str, np.ndarray], layout: FlatParameterLayout, n_rows: int
) -> np.ndarray:
    """Pack per-sample tensors of shape ``(n_rows, *shape)`` into ``(n_rows, size)``."""

    first = named_arrays[layout.slices[0].name] if layout.slices else np.zeros(0)
    flat = np.zeros((n_rows, layout.size), dtype=np.result_type(first, np.float64))
    for sl in layout.slices:
        flat[:, sl.start : sl.stop] = np.asarray(named_arrays[sl.name]).reshape(n_rows, -1)
    return flat


def flatten_with_layout(
    named_arrays: dict[str, FloatArray], layout: FlatParameterLayout
) -> FloatArray:
    """Pack named parameter tensors into a single contiguous vector."""

    return flatten_batch_with_layout(
        {k: np.asarray(v)[None, ...] for k, v in named_arrays.items()}, layout, 1
    )[0]


def unflatten_with_layout(vector: FloatArray, layout: FlatParameterLayout) -> dict[str, FloatArray]:
    """Unpack a flat vector back into tensor dictionary format."""

    if vector.ndim != 1:
        raise ConfigurationError("vector must be rank-1")
    if vector.shape[0] != layout.size:
        raise ConfigurationError(
            f"vector length {vector.shape[0]} does not match layout size {layout.size}"
        )

    out: dict[str, FloatArray] = {}
    for sl in layout.slices:
        out[sl.name] = np.asarray(vector[sl.start : sl.stop].reshape(sl.shape))
    return out
