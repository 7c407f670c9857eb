"""Place search, address matching and reconciliation with curated data."""

from __future__ import annotations

__all__ = [
    "address",
    "client",
    "diagnostics",
    "match",
    "models",
    "normalize",
    "search",
]
