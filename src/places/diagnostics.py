"""Diagnostics helpers for comparing external and curated place data.

The weighted scoring below mirrors an exploratory comparison of the two
sources and is kept for analysis only; :func:`src.places.match.find_match`
is the authoritative matcher.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..parks.convert import CuratedParkRecord
from .models import Place
from .normalize import haversine_m, normalize_name

__all__ = [
    "PairAssessment",
    "assess_pair",
    "levenshtein_distance",
    "name_similarity",
    "permission_hint",
]

MATCH_SCORE_THRESHOLD = 70
CERTAIN_DISTANCE_M = 50.0

# (upper bound in metres, points)
_DISTANCE_POINTS = ((10.0, 50), (30.0, 45), (50.0, 40), (100.0, 30), (200.0, 15))
# (lower bound of the overlap ratio, points)
_ADDRESS_POINTS = ((0.8, 40), (0.6, 30), (0.4, 20))
# (exclusive lower bound of the name similarity, points)
_NAME_POINTS = ((0.9, 10), (0.7, 7), (0.5, 5), (0.0, 2))


@dataclass
class PairAssessment:
    is_match: bool
    confidence: int
    distance_m: Optional[float]
    reasons: List[str] = field(default_factory=list)


def levenshtein_distance(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def name_similarity(name1: str, name2: str) -> float:
    """Similarity of two place names ignoring whitespace, case and accents (0..1)."""

    s1 = normalize_name(name1).replace(" ", "")
    s2 = normalize_name(name2).replace(" ", "")
    if s1 == s2:
        return 1.0
    if s1 in s2 or s2 in s1:
        return 0.9
    longest = max(len(s1), len(s2))
    return 1 - levenshtein_distance(s1, s2) / longest


def _address_overlap(external: str, curated: str) -> float:
    external_parts = external.split()
    curated_parts = curated.split()
    if not external_parts or not curated_parts:
        return 0.0
    matching = sum(
        1
        for part in external_parts
        if any(part in other or other in part for other in curated_parts)
    )
    return matching / max(len(external_parts), len(curated_parts))


def assess_pair(place: Place, record: CuratedParkRecord) -> PairAssessment:
    """Score how likely ``place`` and ``record`` are the same park (0-100)."""

    score = 0
    reasons: List[str] = []

    distance: Optional[float] = None
    if record.has_coordinates:
        distance = haversine_m(place.latitude, place.longitude, record.lat, record.lng)  # type: ignore[arg-type]
        points = next((pts for bound, pts in _DISTANCE_POINTS if distance < bound), 0)
        score += points
        reasons.append(f"distance {distance:.1f}m (+{points})")
    else:
        reasons.append("curated record has no coordinates")

    curated_address = record.address
    if curated_address and place.address:
        overlap = _address_overlap(place.address, curated_address)
        points = next((pts for bound, pts in _ADDRESS_POINTS if overlap >= bound), 10 if overlap > 0 else 0)
        score += points
        reasons.append(f"address overlap {overlap:.0%} (+{points})")
    else:
        reasons.append("address missing on one side")

    similarity = name_similarity(place.name, record.name)
    points = next((pts for bound, pts in _NAME_POINTS if similarity > bound), 0)
    score += points
    reasons.append(f"name similarity {similarity:.0%} (+{points})")

    is_match = (distance is not None and distance < CERTAIN_DISTANCE_M) or score >= MATCH_SCORE_THRESHOLD
    return PairAssessment(is_match=is_match, confidence=min(score, 100), distance_m=distance, reasons=reasons)


def permission_hint(details: str) -> Optional[str]:
    """Return a remediation hint for common Kakao permission error messages."""

    message = details.lower()

    if "open_map_and_local" in message or "disabled" in message:
        return (
            "Enable the Kakao Map / Local service for the app in the Kakao developers "
            "console (Product settings > Kakao Map)."
        )

    if "kakaoak" in message or "appkey" in message or "invalid" in message:
        return (
            "The configured KAKAO_REST_KEY was rejected. Use the app's REST API key, "
            "not the JavaScript or native key."
        )

    if "ip" in message and "not allowed" in message:
        return "Update the allowed IP addresses of the Kakao app platform settings."

    return None
