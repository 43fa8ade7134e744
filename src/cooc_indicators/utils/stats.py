"""Log-likelihood ratio (G²) statistics for contingency tables.

The entropy terms are "denormalized": ``H(k) = Σ -k·log(k/N)`` with ``N = Σ k``
and the convention that a zero count contributes nothing. With that form the
G² statistic of an r×c table is ``2·(H(rows) + H(cols) − H(table))``.

See Dunning (1993), "Accurate Methods for the Statistics of Surprise and
Coincidence", and http://tdunning.blogspot.com/2008/03/surprise-and-coincidence.html
"""
from __future__ import annotations

import math
from typing import Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import special

CellValue = Union[float, int, NDArray[np.floating], NDArray[np.integer]]


class ContingencyShapeError(ValueError):
    """Raised when a contingency table does not have the required shape."""


def _entropy_terms(counts: tuple[CellValue, ...]) -> NDArray[np.float64]:
    cells = [np.asarray(k, dtype=np.float64) for k in counts]
    total = sum(cells[1:], cells[0])
    safe_total = np.where(total > 0, total, 1.0)
    # xlogy(0, y) == 0, so empty cells drop out without producing 0 * -inf
    return -sum(special.xlogy(k, k / safe_total) for k in cells)


def _as_result(value: NDArray[np.float64]) -> float | NDArray[np.float64]:
    return float(value) if np.ndim(value) == 0 else value


def denorm_entropy(counts: ArrayLike) -> float:
    """Return ``Σ -k·log(k/N)`` over an arbitrary container of counts.

    Zero counts contribute 0 and an all-zero container has entropy 0.
    """

    values = np.asarray(counts, dtype=np.float64).ravel()
    total = values.sum()
    if total <= 0:
        return 0.0
    return float(-np.sum(special.xlogy(values, values / total)))


def denorm_entropy2(a: CellValue, b: CellValue) -> float | NDArray[np.float64]:
    """Denormalized entropy of exactly two counts, element-wise on arrays."""

    return _as_result(_entropy_terms((a, b)))


def denorm_entropy4(
    a: CellValue, b: CellValue, c: CellValue, d: CellValue
) -> float | NDArray[np.float64]:
    """Denormalized entropy of exactly four counts, element-wise on arrays."""

    return _as_result(_entropy_terms((a, b, c, d)))


def g2_test(table: ArrayLike) -> float:
    """Compute the G² test statistic for a two-dimensional contingency table.

    This is a χ² style test that avoids the normality assumption of Pearson's
    χ², which makes it well behaved on sparse counts. The result is
    non-negative up to floating-point noise.
    """

    matrix = np.asarray(table, dtype=np.float64)
    if matrix.ndim != 2:
        raise ContingencyShapeError(
            f"Contingency table must be two-dimensional, got shape {matrix.shape}"
        )
    return 2.0 * (
        denorm_entropy(matrix.sum(axis=0))
        + denorm_entropy(matrix.sum(axis=1))
        - denorm_entropy(matrix)
    )


def _g2_cells(
    k11: CellValue, k12: CellValue, k21: CellValue, k22: CellValue
) -> NDArray[np.float64]:
    row1 = np.add(k11, k12)
    row2 = np.add(k21, k22)
    col1 = np.add(k11, k21)
    col2 = np.add(k12, k22)
    return 2.0 * (
        np.asarray(denorm_entropy2(row1, row2))
        + np.asarray(denorm_entropy2(col1, col2))
        - np.asarray(denorm_entropy4(k11, k12, k21, k22))
    )


def llr(k11: CellValue, k12: CellValue, k21: CellValue, k22: CellValue) -> float | NDArray[np.float64]:
    """Compute the Dunning (1993) log-likelihood ratio for a 2×2 table."""

    return _as_result(_g2_cells(k11, k12, k21, k22))


def signed_g2_cells(
    k11: CellValue, k12: CellValue, k21: CellValue, k22: CellValue
) -> float | NDArray[np.float64]:
    """Signed root of G² for cells arranged as ``[[k11, k12], [k21, k22]]``.

    Accepts scalars or equally shaped arrays of cells; arrays are scored
    element-wise. The sign is positive when ``k11`` exceeds its expected
    value under independence. Empty tables score 0.
    """

    g2 = np.maximum(_g2_cells(k11, k12, k21, k22), 0.0)
    row1 = np.asarray(np.add(k11, k12), dtype=np.float64)
    col1 = np.asarray(np.add(k11, k21), dtype=np.float64)
    total = row1 + np.asarray(np.add(k21, k22), dtype=np.float64)
    expected = np.where(total > 0, row1 / np.where(total > 0, total, 1.0) * col1, 0.0)
    return _as_result(np.copysign(np.sqrt(g2), np.asarray(k11, dtype=np.float64) - expected))


def _cells_from_table(table: ArrayLike) -> tuple[float, float, float, float]:
    matrix = np.asarray(table, dtype=np.float64)
    if matrix.shape != (2, 2):
        raise ContingencyShapeError(f"Must have 2x2 matrix, got shape {matrix.shape}")
    return matrix[0, 0], matrix[0, 1], matrix[1, 0], matrix[1, 1]


def signed_g2(*args: ArrayLike) -> float:
    """Root of the G² statistic for a 2×2 table, signed by direction.

    Call either as ``signed_g2(table)`` with a 2×2 table or as
    ``signed_g2(k11, k12, k21, k22)``. For uncorrelated rows and columns and
    large enough counts the result is approximately standard normal.
    """

    if len(args) == 1:
        cells = _cells_from_table(args[0])
    elif len(args) == 4:
        cells = args
    else:
        raise ContingencyShapeError(
            f"signed_g2 takes a 2x2 table or four cell counts, got {len(args)} arguments"
        )
    score = signed_g2_cells(*cells)
    if np.ndim(score) != 0:
        raise ContingencyShapeError("signed_g2 expects scalar cells; use signed_g2_cells for arrays")
    return float(score)


def normal_tail(score: float) -> float:
    """Two-sided normal tail probability for a signed G² score."""

    return math.erfc(abs(score) / math.sqrt(2.0))


__all__ = [
    "CellValue",
    "ContingencyShapeError",
    "denorm_entropy",
    "denorm_entropy2",
    "denorm_entropy4",
    "g2_test",
    "llr",
    "normal_tail",
    "signed_g2",
    "signed_g2_cells",
]
