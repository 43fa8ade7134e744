"""Cooccurrence indicators scored with the signed log-likelihood ratio."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy import sparse

from ..common.types import MatrixLike, SeedLike, Vector
from ..utils.io import make_rng
from ..utils.stats import signed_g2_cells
from .sampling import cap_degrees

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IndicatorResult:
    """Scores plus the counts they were derived from."""

    scores: sparse.csr_matrix
    cooccurrence: sparse.csr_matrix
    item_counts: Vector
    observations: int


@dataclass(slots=True)
class Indicator:
    """A single ranked partner of an item."""

    item: int
    other: int
    score: float
    cooccurrences: int | None = None


def _working_matrix(matrix: MatrixLike, copy: bool) -> sparse.csr_matrix:
    if not sparse.issparse(matrix):
        dense = np.asarray(matrix)
        if dense.ndim != 2:
            raise ValueError(f"Observation matrix must be two-dimensional, got shape {dense.shape}")
        return sparse.csr_matrix(dense)
    if matrix.format == "csr":
        return matrix.copy() if copy else matrix
    return matrix.tocsr(copy=copy)


def _binarize(matrix: sparse.csr_matrix) -> None:
    matrix.sum_duplicates()
    matrix.eliminate_zeros()
    matrix.data[:] = 1


def _symmetric(
    rows: NDArray[np.intp], cols: NDArray[np.intp], values: NDArray, size: int
) -> sparse.csr_matrix:
    return sparse.csr_matrix(
        (
            np.concatenate((values, values)),
            (np.concatenate((rows, cols)), np.concatenate((cols, rows))),
        ),
        shape=(size, size),
    )


def compute_indicators(
    matrix: MatrixLike,
    item_cap: int = 0,
    row_cap: int = 200,
    *,
    copy: bool = True,
    rng: SeedLike = None,
) -> IndicatorResult:
    """Score every cooccurring item pair of an observation×item matrix.

    Items are columns and observations (users, sessions, windows) are rows.
    Stored values only mark presence. Rows are first limited to ``row_cap``
    items and items to ``item_cap`` observations by random down-sampling
    (zero or less disables a cap), then ``AᵀA`` gives the pair counts that
    fill each 2×2 table.

    With ``copy=False`` a CSR input is binarized and down-sampled in place.
    """

    start = time.perf_counter()
    working = _working_matrix(matrix, copy)
    observations, items = working.shape

    _binarize(working)
    cap_degrees(working, row_cap=row_cap, item_cap=item_cap, rng=make_rng(rng))

    binary = working.astype(np.float64, copy=False)
    item_counts = np.asarray(binary.sum(axis=0), dtype=np.float64).ravel()

    if observations == 0 or binary.nnz == 0:
        logger.info("No interactions to score", extra={"observations": observations, "items": items})
        empty = sparse.csr_matrix((items, items), dtype=np.float64)
        return IndicatorResult(
            scores=empty,
            cooccurrence=empty.copy(),
            item_counts=item_counts,
            observations=observations,
        )

    upper = sparse.triu(binary.T @ binary, k=1, format="coo")
    keep = upper.data > 0
    left = upper.row[keep]
    right = upper.col[keep]
    k11 = upper.data[keep]

    k12 = item_counts[left] - k11
    k21 = item_counts[right] - k11
    k22 = observations - k11 - k12 - k21
    scores = np.asarray(signed_g2_cells(k11, k12, k21, k22), dtype=np.float64)

    result = IndicatorResult(
        scores=_symmetric(left, right, scores, items),
        cooccurrence=_symmetric(left, right, k11, items),
        item_counts=item_counts,
        observations=observations,
    )

    logger.info(
        "Computed cooccurrence indicators",
        extra={
            "observations": observations,
            "items": items,
            "pairs": int(k11.size),
            "row_cap": row_cap,
            "item_cap": item_cap,
            "elapsed_s": round(time.perf_counter() - start, 2),
        },
    )
    return result


def indicators(
    matrix: MatrixLike,
    item_cap: int = 0,
    row_cap: int = 200,
    *,
    copy: bool = True,
    rng: SeedLike = None,
) -> sparse.csr_matrix:
    """Return the symmetric item×item matrix of signed G² scores.

    Pairs that never cooccur and the diagonal are left empty.
    """

    return compute_indicators(matrix, item_cap, row_cap, copy=copy, rng=rng).scores


def top_indicators(
    scores: sparse.spmatrix,
    k: int = 50,
    *,
    min_score: float = 0.0,
    cooccurrence: sparse.spmatrix | None = None,
) -> dict[int, list[Indicator]]:
    """Rank each item's partners by descending score.

    Only scores strictly above ``min_score`` are kept and at most ``k`` per
    item (``k <= 0`` keeps all). Ties go to the lower partner index. Items
    without a qualifying partner are omitted.
    """

    table = sparse.csr_matrix(scores)
    counts = sparse.csr_matrix(cooccurrence) if cooccurrence is not None else None
    ranked: dict[int, list[Indicator]] = {}

    for item in range(table.shape[0]):
        lo, hi = table.indptr[item], table.indptr[item + 1]
        partners = table.indices[lo:hi]
        values = table.data[lo:hi]
        mask = values > min_score
        if not mask.any():
            continue
        partners = partners[mask]
        values = values[mask]
        order = np.lexsort((partners, -values))
        if k > 0:
            order = order[:k]

        entries: list[Indicator] = []
        for position in order:
            other = int(partners[position])
            joint = int(counts[item, other]) if counts is not None else None
            entries.append(Indicator(item=item, other=other, score=float(values[position]), cooccurrences=joint))
        ranked[item] = entries

    return ranked


__all__ = [
    "Indicator",
    "IndicatorResult",
    "compute_indicators",
    "indicators",
    "top_indicators",
]
