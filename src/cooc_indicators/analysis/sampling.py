"""Bounded-degree down-sampling of sparse observation×item matrices."""
from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray
from scipy import sparse

from ..common.types import SeedLike
from ..utils.io import make_rng

logger = logging.getLogger(__name__)


def _drop_excess(
    data: NDArray,
    positions: NDArray[np.intp],
    cap: int,
    rng: np.random.Generator,
) -> int:
    excess = positions.size - cap
    if excess <= 0:
        return 0
    drops = rng.choice(positions, size=excess, replace=False)
    data[drops] = 0
    return excess


def _cap_rows(matrix: sparse.csr_matrix, cap: int, rng: np.random.Generator) -> tuple[int, int]:
    degrees = np.diff(matrix.indptr)
    heavy = np.flatnonzero(degrees > cap)
    dropped = 0
    for row in heavy:
        start, end = matrix.indptr[row], matrix.indptr[row + 1]
        dropped += _drop_excess(matrix.data, np.arange(start, end), cap, rng)
    return heavy.size, dropped


def _cap_columns(matrix: sparse.csr_matrix, cap: int, rng: np.random.Generator) -> tuple[int, int]:
    _, items = matrix.shape
    degrees = np.bincount(matrix.indices, minlength=items)
    heavy = np.flatnonzero(degrees > cap)
    if heavy.size == 0:
        return 0, 0

    # stored positions grouped by column, rows in ascending order within a column
    order = np.argsort(matrix.indices, kind="stable")
    bounds = np.concatenate(([0], np.cumsum(degrees)))
    dropped = 0
    for column in heavy:
        positions = order[bounds[column] : bounds[column + 1]]
        dropped += _drop_excess(matrix.data, positions, cap, rng)
    return heavy.size, dropped


def cap_degrees(
    matrix: sparse.csr_matrix,
    *,
    row_cap: int = 200,
    item_cap: int = 0,
    rng: SeedLike = None,
) -> sparse.csr_matrix:
    """Limit the stored entries per row and per column of *matrix*.

    Rows holding more than ``row_cap`` entries keep a uniform random subset
    of ``row_cap`` of them; afterwards columns are limited to ``item_cap``
    entries the same way, looking only at what survived the row pass. A cap
    of zero or less leaves that axis alone.

    The CSR buffers of *matrix* are modified in place and the same object is
    returned with dropped entries compacted out.
    """

    if not sparse.issparse(matrix) or matrix.format != "csr":
        raise TypeError(f"cap_degrees expects a CSR matrix, got {type(matrix).__name__}")

    generator = make_rng(rng)
    matrix.eliminate_zeros()

    if row_cap > 0:
        rows_capped, rows_dropped = _cap_rows(matrix, row_cap, generator)
        matrix.eliminate_zeros()
        logger.debug(
            "Capped observation degrees",
            extra={"row_cap": row_cap, "rows": rows_capped, "dropped": rows_dropped},
        )

    if item_cap > 0:
        items_capped, items_dropped = _cap_columns(matrix, item_cap, generator)
        matrix.eliminate_zeros()
        logger.debug(
            "Capped item degrees",
            extra={"item_cap": item_cap, "items": items_capped, "dropped": items_dropped},
        )

    return matrix


__all__ = ["cap_degrees"]
