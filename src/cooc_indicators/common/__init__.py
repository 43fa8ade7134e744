"""Shared infrastructure for the indicator toolchain."""

from __future__ import annotations

from .config import IndicatorConfig
from .types import MatrixLike, SeedLike, Vector

__all__ = [
    "IndicatorConfig",
    "MatrixLike",
    "SeedLike",
    "Vector",
]
