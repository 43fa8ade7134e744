"""File, randomness and timestamp helpers for the indicator tooling."""
from __future__ import annotations

import csv
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Iterable, Sequence

import numpy as np
from scipy import sparse

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class InteractionMatrix:
    """Observation×item matrix together with the labels of its axes."""

    matrix: sparse.csr_matrix
    observations: list[str]
    items: list[str]


def make_rng(seed: np.random.Generator | int | None = None) -> np.random.Generator:
    """Return a numpy Generator, reusing *seed* when it already is one."""

    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def utcnow_iso() -> str:
    """Return the current UTC timestamp in ISO-8601 format with a trailing 'Z'."""

    now = datetime.now(timezone.utc).replace(microsecond=0)
    return now.isoformat().replace("+00:00", "Z")


def _validate_input_file(path: Path, description: str) -> None:
    if not path.exists() or not path.is_file():
        raise FileNotFoundError(f"{description} '{path}' does not exist or is not a file")


def _parse_count(raw: str, line_no: int) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid count {raw!r} on line {line_no}") from exc


def load_interactions(path: Path, *, delimiter: str = ",") -> InteractionMatrix:
    """Read ``observation,item[,count]`` rows into a sparse matrix.

    A header row is skipped when its first two fields are ``observation`` and
    ``item``. Rows with fewer than two fields are skipped with a warning.
    Repeated (observation, item) pairs are summed.
    """

    _validate_input_file(path, "Interaction file")
    observation_index: dict[str, int] = {}
    item_index: dict[str, int] = {}
    rows: list[int] = []
    cols: list[int] = []
    data: list[float] = []

    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.reader(handle, delimiter=delimiter)
        for line_no, record in enumerate(reader, start=1):
            fields = [field.strip() for field in record]
            if line_no == 1 and [f.lower() for f in fields[:2]] == ["observation", "item"]:
                continue
            if len(fields) < 2 or not fields[0] or not fields[1]:
                if any(fields):
                    logger.warning(
                        "Skipping malformed interaction row",
                        extra={"path": str(path), "line": line_no},
                    )
                continue
            count = _parse_count(fields[2], line_no) if len(fields) > 2 and fields[2] else 1.0
            rows.append(observation_index.setdefault(fields[0], len(observation_index)))
            cols.append(item_index.setdefault(fields[1], len(item_index)))
            data.append(count)

    matrix = sparse.csr_matrix(
        (data, (rows, cols)),
        shape=(len(observation_index), len(item_index)),
        dtype=np.float64,
    )
    logger.info(
        "Loaded interactions",
        extra={
            "path": str(path),
            "observations": len(observation_index),
            "items": len(item_index),
            "entries": len(data),
        },
    )
    return InteractionMatrix(
        matrix=matrix,
        observations=list(observation_index),
        items=list(item_index),
    )


def load_frequencies(path: Path) -> dict[str, float]:
    """Read a JSON object mapping keys to non-negative counts."""

    _validate_input_file(path, "Frequency file")
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Frequency file '{path}' must contain a JSON object")

    frequencies: dict[str, float] = {}
    for key, value in payload.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Frequency for {key!r} in '{path}' is not a number")
        if value < 0:
            raise ValueError(f"Frequency for {key!r} in '{path}' is negative")
        frequencies[str(key)] = value
    return frequencies


def _atomic_write(path: Path, write_fn, *, newline: str | None = "\n") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile("w", delete=False, dir=str(path.parent), encoding="utf-8", newline=newline) as tmp:
        write_fn(tmp)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def write_csv(path: Path, header: Sequence[str], rows: Iterable[Sequence[object]]) -> None:
    """Atomically write *rows* under *header* to *path*."""

    def writer(tmp) -> None:
        csv_writer = csv.writer(tmp)
        csv_writer.writerow(list(header))
        for row in rows:
            csv_writer.writerow(list(row))

    _atomic_write(path, writer, newline="")


def write_json(path: Path, payload: dict[str, object]) -> None:
    """Atomically write *payload* as indented JSON to *path*."""

    def writer(tmp) -> None:
        json.dump(payload, tmp, indent=2, ensure_ascii=False)
        tmp.write("\n")

    _atomic_write(path, writer)


__all__ = [
    "InteractionMatrix",
    "load_frequencies",
    "load_interactions",
    "make_rng",
    "utcnow_iso",
    "write_csv",
    "write_json",
]
