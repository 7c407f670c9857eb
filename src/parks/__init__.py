"""Curated urban park registry: import conversion, facilities and storage."""

from __future__ import annotations

__all__ = [
    "convert",
    "facilities",
    "store",
]
