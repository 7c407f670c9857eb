"""Korean address normalisation and similarity scoring.

Addresses coming from the map provider and from the public park registry
describe the same location with different amounts of administrative
context ("서울특별시 중랑구 면목동 137-14" vs "중랑구 면목동 137-14"). The
helpers here strip that context and score how closely two addresses agree.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Optional

__all__ = [
    "address_similarity",
    "extract_neighborhood_and_lot",
    "normalize_address",
]

# Top-level regions with their suffix variants, plus the common abbreviations.
_REGION_PREFIXES = (
    r"서울(?:특별시|시)?",
    r"부산(?:광역시|시)?",
    r"대구(?:광역시|시)?",
    r"인천(?:광역시|시)?",
    r"광주(?:광역시|시)?",
    r"대전(?:광역시|시)?",
    r"울산(?:광역시|시)?",
    r"세종(?:특별자치시|시)?",
    r"경기(?:도|남도|북도)?",
    r"강원(?:특별자치도|도)?",
    r"충청(?:남도|북도)?",
    r"전라(?:남도|북도)?",
    r"전북(?:특별자치도)?",
    r"경상(?:남도|북도)?",
    r"제주(?:특별자치도|도)?",
    r"충남",
    r"충북",
    r"전남",
    r"경남",
    r"경북",
)
_REGION_PREFIX_RE = re.compile(
    r"^(?:" + "|".join(_REGION_PREFIXES) + r")(?:\s+|$)",
    re.IGNORECASE,
)
_WS_RE = re.compile(r"\s+")

_NEIGHBORHOOD_LOT_RE = re.compile(r"(\S+동)\s*(\d+(?:-\d+)?)")
_NEIGHBORHOOD_RE = re.compile(r"(\S+동)")
_LOT_RE = re.compile(r"(\d+(?:-\d+)?)")


def normalize_address(address: Optional[str]) -> Optional[str]:
    """Return ``address`` without its region prefix and with tidy whitespace.

    ``None`` is returned for missing, non-string or blank input.
    """

    if not isinstance(address, str):
        return None

    normalized = _WS_RE.sub(" ", address).strip()
    while True:
        stripped = _REGION_PREFIX_RE.sub("", normalized, count=1)
        if stripped == normalized:
            break
        normalized = stripped.strip()

    return normalized or None


def extract_neighborhood_and_lot(address: Optional[str]) -> Optional[str]:
    """Extract the ``"<동> <lot>"`` token used for fuzzy address comparison.

    Falls back to the neighbourhood alone, then to a bare lot number, then
    to the normalised address itself.
    """

    normalized = normalize_address(address)
    if normalized is None:
        return None

    match = _NEIGHBORHOOD_LOT_RE.search(normalized)
    if match:
        return f"{match.group(1)} {match.group(2)}"

    match = _NEIGHBORHOOD_RE.search(normalized)
    if match:
        return match.group(1)

    match = _LOT_RE.search(normalized)
    if match:
        return match.group(1)

    return normalized


def address_similarity(addr1: Optional[str], addr2: Optional[str]) -> float:
    """Score how likely two addresses describe the same location (0..1)."""

    norm1 = normalize_address(addr1)
    norm2 = normalize_address(addr2)
    if norm1 is None or norm2 is None:
        return 0.0

    if norm1 == norm2:
        return 1.0
    if norm1 in norm2 or norm2 in norm1:
        return 0.9

    token1 = extract_neighborhood_and_lot(norm1)
    token2 = extract_neighborhood_and_lot(norm2)
    if token1 and token2:
        if token1 == token2:
            return 0.8
        if token1 in token2 or token2 in token1:
            return 0.7

    words1 = norm1.split(" ")
    words2 = norm2.split(" ")
    shared = sum((Counter(words1) & Counter(words2)).values())
    return shared / max(len(words1), len(words2))
