"""SQLite helpers for persisting indicator scores."""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Iterator, Sequence

logger = logging.getLogger(__name__)

INDICATOR_TABLE_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS indicator_scores (
      id INTEGER PRIMARY KEY,
      item TEXT NOT NULL,
      other TEXT NOT NULL,
      rank INTEGER NOT NULL,
      score REAL NOT NULL,
      llr REAL NOT NULL,
      cooccurrences INTEGER,
      updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS uniq_indicator_pair
    ON indicator_scores(item, other);
    """,
    """
    CREATE TABLE IF NOT EXISTS indicator_runs (
      id INTEGER PRIMARY KEY,
      source TEXT NOT NULL,
      observations INTEGER NOT NULL,
      items INTEGER NOT NULL,
      pairs INTEGER NOT NULL,
      row_cap INTEGER NOT NULL,
      item_cap INTEGER NOT NULL,
      seed INTEGER,
      created_at TEXT NOT NULL
    );
    """,
)

_CONFLICT_KEYS: dict[str, tuple[str, ...]] = {
    "indicator_scores": ("item", "other"),
}


def connect_sqlite(db_path: str | Path) -> sqlite3.Connection:
    """Open *db_path* with row access by column name."""

    logger.info("Opening SQLite database", extra={"path": str(db_path)})
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL;")
    conn.execute("PRAGMA synchronous = NORMAL;")
    return conn


def ensure_indicator_tables(conn: sqlite3.Connection) -> None:
    """Ensure the indicator tables exist in *conn*."""

    logger.info("Ensuring indicator tables")
    for statement in INDICATOR_TABLE_STATEMENTS:
        conn.execute(statement)


def _prepare_named_parameters(rows: Sequence[dict[str, object]]) -> tuple[str, tuple[str, ...]]:
    columns = tuple(rows[0].keys())
    placeholders = ", ".join(f":{col}" for col in columns)
    column_list = ", ".join(columns)
    return f"({column_list}) VALUES ({placeholders})", columns


def _batch_iterable(rows: list[dict[str, object]], batch_size: int) -> Iterator[list[dict[str, object]]]:
    for index in range(0, len(rows), batch_size):
        yield rows[index : index + batch_size]


def _upsert_sql(table: str, rows: Sequence[dict[str, object]]) -> str:
    values_sql, columns = _prepare_named_parameters(rows)
    sql = f"INSERT INTO {table} {values_sql}"

    conflict = _CONFLICT_KEYS.get(table)
    if conflict:
        update_assignments = ", ".join(
            f"{col} = excluded.{col}" for col in columns if col not in {*conflict, "id"}
        )
        sql = f"{sql} ON CONFLICT({', '.join(conflict)}) DO UPDATE SET {update_assignments}"
    return sql


def upsert_rows(conn: sqlite3.Connection, table: str, rows: list[dict[str, object]]) -> None:
    """Insert or upsert *rows* into *table*."""

    if not rows:
        return

    conn.executemany(_upsert_sql(table, rows), rows)
    conn.commit()


def replace_rows(
    conn: sqlite3.Connection, table: str, rows: list[dict[str, object]], batch_size: int = 500
) -> None:
    """Replace the whole contents of *table* with *rows* in one transaction.

    Rows left over from an earlier run are removed, so the table always holds
    exactly the latest result. On error nothing is changed.
    """

    with conn:
        deleted = conn.execute(f"DELETE FROM {table}").rowcount
        if rows:
            sql = _upsert_sql(table, rows)
            for batch in _batch_iterable(rows, batch_size):
                conn.executemany(sql, batch)
    logger.info("Replaced table rows", extra={"table": table, "deleted": deleted, "inserted": len(rows)})


def fetch_all(conn: sqlite3.Connection, query: str, params: tuple[object, ...] = ()) -> list[sqlite3.Row]:
    """Execute *query* with *params* and return all rows."""

    cursor = conn.execute(query, params)
    return cursor.fetchall()


__all__ = [
    "connect_sqlite",
    "ensure_indicator_tables",
    "fetch_all",
    "replace_rows",
    "upsert_rows",
    "INDICATOR_TABLE_STATEMENTS",
]
