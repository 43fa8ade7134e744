from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "COOC_"


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from exc


def load_env(env_file: str | Path | None = None) -> str | None:
    """Load ``.env`` style settings without overriding the process environment."""

    path = str(env_file) if env_file else find_dotenv(".env", usecwd=True)
    if not path:
        return None
    load_dotenv(path, override=False)
    logger.debug("Loaded environment file", extra={"path": path})
    return path


@dataclass(frozen=True, slots=True)
class IndicatorConfig:
    """Settings for an indicator run.

    ``row_cap`` limits the items kept per observation and ``item_cap`` the
    observations kept per item; zero or less disables the cap.
    """

    row_cap: int = 200
    item_cap: int = 0
    seed: int | None = None
    top_k: int = 50
    min_score: float = 0.0

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "IndicatorConfig":
        load_env(env_file)
        defaults = cls()
        return cls(
            row_cap=_env_int("ROW_CAP", defaults.row_cap),
            item_cap=_env_int("ITEM_CAP", defaults.item_cap),
            seed=_env_int("SEED", defaults.seed),
            top_k=_env_int("TOP_K", defaults.top_k),
            min_score=_env_float("MIN_SCORE", defaults.min_score),
        )

    def with_overrides(self, **overrides: object) -> "IndicatorConfig":
        """Return a copy with every non-``None`` override applied."""

        return replace(self, **{key: value for key, value in overrides.items() if value is not None})
