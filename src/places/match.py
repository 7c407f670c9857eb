"""Reconciliation of external search results with curated park records.

An external place is linked to at most one curated record in two stages:

1. Address stage (only when the place has an address): every candidate
   with a road or lot-number address is scored with
   :func:`address_similarity`. Candidates at or below
   ``min_address_similarity`` are discarded. The best similarity wins, but
   candidates within ``similarity_tie_threshold`` of it count as tied and
   the nearest of those is taken instead.
2. Coordinate stage (only when the address stage found nothing): the
   nearest candidate within ``max_distance_m``.

``None`` is the expected outcome for places the registry does not know.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..parks.convert import CuratedParkRecord
from .address import address_similarity
from .models import FacilityBundle, Place
from .normalize import format_distance, haversine_m, is_valid_coordinate

__all__ = [
    "MatchConfig",
    "MatchResult",
    "STAGE_ADDRESS",
    "STAGE_COORDINATES",
    "find_match",
]

LOGGER = logging.getLogger("places.match")

STAGE_ADDRESS = "address"
STAGE_COORDINATES = "coordinates"

# Absorbs float noise such as 0.9 - 0.8 == 0.09999999999999998.
_EPSILON = 1e-9


@dataclass(frozen=True)
class MatchConfig:
    min_address_similarity: float = 0.5
    similarity_tie_threshold: float = 0.1
    max_distance_m: float = 500.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_address_similarity <= 1.0:
            raise ValueError("min_address_similarity must be within 0..1")
        if self.similarity_tie_threshold < 0.0:
            raise ValueError("similarity_tie_threshold must not be negative")
        if not self.max_distance_m > 0.0:
            raise ValueError("max_distance_m must be positive")


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a successful reconciliation.

    ``distance_m`` is the distance between the external place and the
    curated record and only serves ranking and explanation; the place's own
    distance to the user is left untouched.
    """

    place: Place
    record: CuratedParkRecord
    stage: str
    confidence: int
    similarity: Optional[float]
    distance_m: float
    reasons: List[str] = field(default_factory=list)

    @property
    def facilities(self) -> FacilityBundle:
        return self.record.facilities

    def merged_place(self) -> Place:
        return self.place.with_facilities(self.facilities)


@dataclass(frozen=True)
class _Candidate:
    record: CuratedParkRecord
    similarity: float
    distance_m: float
    address: str
    index: int


def _distance_to(place: Place, record: CuratedParkRecord) -> float:
    if not record.has_coordinates or not is_valid_coordinate(place.latitude, place.longitude):
        return math.inf
    return haversine_m(place.latitude, place.longitude, record.lat, record.lng)  # type: ignore[arg-type]


def _describe_distance(distance_m: float) -> str:
    if math.isinf(distance_m):
        return "distance unknown (missing coordinates)"
    return f"distance {format_distance(distance_m)}"


def _match_by_address(
    place: Place,
    candidates: Sequence[CuratedParkRecord],
    config: MatchConfig,
) -> Optional[_Candidate]:
    scored: List[_Candidate] = []
    for index, record in enumerate(candidates):
        candidate_address = record.address
        if not candidate_address:
            continue
        similarity = address_similarity(place.address, candidate_address)
        if similarity <= config.min_address_similarity:
            continue
        scored.append(
            _Candidate(
                record=record,
                similarity=similarity,
                distance_m=_distance_to(place, record),
                address=candidate_address,
                index=index,
            )
        )

    if not scored:
        return None

    best_similarity = max(candidate.similarity for candidate in scored)
    tied = [
        candidate
        for candidate in scored
        if best_similarity - candidate.similarity <= config.similarity_tie_threshold + _EPSILON
    ]
    return min(tied, key=_tie_break_key)


def _tie_break_key(candidate: _Candidate) -> Tuple[float, float, int]:
    return (candidate.distance_m, -candidate.similarity, candidate.index)


def _match_by_coordinates(
    place: Place,
    candidates: Sequence[CuratedParkRecord],
    config: MatchConfig,
) -> Optional[Tuple[CuratedParkRecord, float]]:
    best: Optional[Tuple[CuratedParkRecord, float]] = None
    for record in candidates:
        distance = _distance_to(place, record)
        if distance > config.max_distance_m:
            continue
        if best is None or distance < best[1]:
            best = (record, distance)
    return best


def find_match(
    place: Place,
    candidates: Sequence[CuratedParkRecord],
    config: Optional[MatchConfig] = None,
) -> Optional[MatchResult]:
    """Find the curated record describing the same location as ``place``."""

    cfg = config or MatchConfig()

    if place.address and place.address.strip():
        best = _match_by_address(place, candidates, cfg)
        if best is not None:
            reasons = [
                f"address similarity {best.similarity:.2f} ({place.address!r} vs {best.address!r})",
                _describe_distance(best.distance_m),
            ]
            LOGGER.debug("Address match for %s -> %s: %s", place.place_id, best.record.id, "; ".join(reasons))
            return MatchResult(
                place=place,
                record=best.record,
                stage=STAGE_ADDRESS,
                confidence=_clamp_confidence(best.similarity * 100),
                similarity=best.similarity,
                distance_m=best.distance_m,
                reasons=reasons,
            )
        LOGGER.debug(
            "No address match for %s above similarity %.2f",
            place.place_id,
            cfg.min_address_similarity,
        )

    if is_valid_coordinate(place.latitude, place.longitude):
        nearest = _match_by_coordinates(place, candidates, cfg)
        if nearest is not None:
            record, distance = nearest
            reasons = [
                "no address match",
                f"{_describe_distance(distance)} within {format_distance(cfg.max_distance_m)}",
            ]
            LOGGER.debug("Coordinate match for %s -> %s at %.1fm", place.place_id, record.id, distance)
            return MatchResult(
                place=place,
                record=record,
                stage=STAGE_COORDINATES,
                confidence=_clamp_confidence(100 * (1 - distance / cfg.max_distance_m)),
                similarity=None,
                distance_m=distance,
                reasons=reasons,
            )
        LOGGER.debug(
            "No curated park within %.0fm of %s",
            cfg.max_distance_m,
            place.place_id,
        )

    return None


def _clamp_confidence(value: float) -> int:
    return max(0, min(100, int(round(value))))
