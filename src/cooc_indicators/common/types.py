"""Shared type aliases for the indicator toolchain."""
from __future__ import annotations

from typing import TypeAlias, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import sparse

Vector: TypeAlias = NDArray[np.floating]

# Anything ``indicators`` accepts as an observation×item matrix
MatrixLike: TypeAlias = Union[ArrayLike, sparse.spmatrix, sparse.sparray]

# Random source accepted wherever down-sampling happens
SeedLike: TypeAlias = Union[np.random.Generator, int, None]


__all__ = [
    "MatrixLike",
    "SeedLike",
    "Vector",
]
