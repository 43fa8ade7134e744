import json
import sqlite3

import numpy as np
import pytest

from cooc_indicators.utils.io import load_frequencies, load_interactions, make_rng, write_csv
from cooc_indicators.utils.sql import ensure_indicator_tables, fetch_all, replace_rows, upsert_rows


def test_load_interactions_sums_repeats(tmp_path):
    path = tmp_path / "interactions.csv"
    path.write_text(
        "observation,item,count\n"
        "u1,apple,2\n"
        "u1,pear\n"
        "u2,apple,1\n"
        "u1,apple,1\n"
        "broken\n",
        encoding="utf-8",
    )
    loaded = load_interactions(path)

    assert loaded.observations == ["u1", "u2"]
    assert loaded.items == ["apple", "pear"]
    assert loaded.matrix.toarray().tolist() == [[3.0, 1.0], [1.0, 0.0]]


def test_load_interactions_bad_count(tmp_path):
    path = tmp_path / "interactions.csv"
    path.write_text("u1,apple,lots\n", encoding="utf-8")
    with pytest.raises(ValueError, match="line 1"):
        load_interactions(path)


def test_load_interactions_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_interactions(tmp_path / "missing.csv")


def test_load_frequencies(tmp_path):
    path = tmp_path / "freq.json"
    path.write_text(json.dumps({"a": 3, "b": 0.5}), encoding="utf-8")
    assert load_frequencies(path) == {"a": 3, "b": 0.5}

    path.write_text(json.dumps({"a": -1}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_frequencies(path)

    path.write_text(json.dumps([1, 2]), encoding="utf-8")
    with pytest.raises(ValueError):
        load_frequencies(path)


def test_make_rng_reuses_generator():
    generator = np.random.default_rng(1)
    assert make_rng(generator) is generator
    assert make_rng(5).integers(1000) == np.random.default_rng(5).integers(1000)


def test_write_csv_creates_parents(tmp_path):
    path = tmp_path / "nested" / "out.csv"
    write_csv(path, ["a", "b"], [(1, 2), (3, 4)])
    assert path.read_text(encoding="utf-8").splitlines() == ["a,b", "1,2", "3,4"]


def test_upsert_indicator_scores():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    ensure_indicator_tables(conn)

    row = {
        "item": "apple",
        "other": "pear",
        "rank": 1,
        "score": 1.5,
        "llr": 2.25,
        "cooccurrences": 4,
        "updated_at": "2024-01-01T00:00:00Z",
    }
    upsert_rows(conn, "indicator_scores", [row])
    upsert_rows(conn, "indicator_scores", [{**row, "score": 2.0, "llr": 4.0}])

    rows = fetch_all(conn, "SELECT item, other, score, llr FROM indicator_scores")
    assert [tuple(r) for r in rows] == [("apple", "pear", 2.0, 4.0)]


def test_replace_indicator_scores_drops_stale_rows():
    conn = sqlite3.connect(":memory:")
    ensure_indicator_tables(conn)

    def score_row(item, other, rank):
        return {
            "item": item,
            "other": other,
            "rank": rank,
            "score": 1.0,
            "llr": 1.0,
            "cooccurrences": 1,
            "updated_at": "2024-01-01T00:00:00Z",
        }

    replace_rows(conn, "indicator_scores", [score_row("a", "b", 1), score_row("a", "c", 2), score_row("c", "b", 1)])
    replace_rows(conn, "indicator_scores", [score_row("a", "b", 1), score_row("b", "a", 1)], batch_size=1)

    rows = fetch_all(conn, "SELECT item, other FROM indicator_scores ORDER BY item, other")
    assert [tuple(r) for r in rows] == [("a", "b"), ("b", "a")]

    replace_rows(conn, "indicator_scores", [])
    assert fetch_all(conn, "SELECT COUNT(*) FROM indicator_scores")[0][0] == 0
