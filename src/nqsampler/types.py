from __future__ import annotations

from typing import TypeAlias

import numpy as np
import numpy.typing as npt

Config: TypeAlias = npt.NDArray[np.float64]
ConfigBatch: TypeAlias = npt.NDArray[np.float64]
FloatArray: TypeAlias = npt.NDArray[np.float64]
ComplexArray: TypeAlias = npt.NDArray[np.complex128]
LogAmpArray: TypeAlias = npt.NDArray[np.complex128]
IntArray: TypeAlias = npt.NDArray[np.int64]
BoolArray: TypeAlias = npt.NDArray[np.bool_]
