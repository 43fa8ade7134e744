"""Compare two keyed frequency tables with the signed log-likelihood ratio."""
from __future__ import annotations

import logging
from typing import Hashable, Mapping, TypeVar

from ..utils.stats import signed_g2

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


def compare(a: Mapping[K, float], b: Mapping[K, float]) -> dict[K, float]:
    """Score how much more (positive) or less (negative) prevalent each key is in *a* than in *b*.

    Keys missing from one mapping count as zero there. Every key of either
    mapping gets exactly one score.
    """

    a_total = sum(a.values())
    b_total = sum(b.values())
    result: dict[K, float] = {}
    for key in a.keys() | b.keys():
        va = a.get(key, 0)
        vb = b.get(key, 0)
        result[key] = signed_g2(va, a_total - va, vb, b_total - vb)

    logger.debug(
        "Compared frequency tables",
        extra={"keys": len(result), "a_total": a_total, "b_total": b_total},
    )
    return result


def rank_keys(scores: Mapping[K, float], k: int = 0, *, descending: bool = True) -> list[tuple[K, float]]:
    """Order ``(key, score)`` pairs by score, keeping the first *k* when ``k > 0``."""

    ordered = sorted(scores.items(), key=lambda item: item[1], reverse=descending)
    return ordered[:k] if k > 0 else ordered


__all__ = ["compare", "rank_keys"]
