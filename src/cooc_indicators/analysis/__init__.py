"""Cooccurrence analysis modules."""

from __future__ import annotations

__all__ = [
    "cooccurrence",
    "frequency",
    "sampling",
]
