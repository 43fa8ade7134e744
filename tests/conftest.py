from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

COOC_VARIABLES = ("COOC_ROW_CAP", "COOC_ITEM_CAP", "COOC_SEED", "COOC_TOP_K", "COOC_MIN_SCORE")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate COOC_* variables, including ones a .env file sets during the test."""

    for name in COOC_VARIABLES:
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def example_matrix():
    return [
        [1, 0, 0, 0, 0],
        [0, 2, 0, 1, 0],
        [0, 0, 0, 1, 1],
        [0, 1, 0, 1, 1],
        [0, 1, 0, 0, 0],
    ]
