"""Log-likelihood ratio cooccurrence indicators."""

from __future__ import annotations

from .analysis.cooccurrence import (
    Indicator,
    IndicatorResult,
    compute_indicators,
    indicators,
    top_indicators,
)
from .analysis.frequency import compare, rank_keys
from .analysis.sampling import cap_degrees
from .common.config import IndicatorConfig
from .utils.stats import (
    ContingencyShapeError,
    denorm_entropy,
    g2_test,
    llr,
    signed_g2,
    signed_g2_cells,
)

__version__ = "0.1.0"

__all__ = [
    "ContingencyShapeError",
    "Indicator",
    "IndicatorConfig",
    "IndicatorResult",
    "cap_degrees",
    "compare",
    "compute_indicators",
    "denorm_entropy",
    "g2_test",
    "indicators",
    "llr",
    "rank_keys",
    "signed_g2",
    "signed_g2_cells",
    "top_indicators",
]
