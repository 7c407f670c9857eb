"""Unified place representation shared by all data sources."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Literal, Optional, Tuple

from .normalize import is_valid_coordinate

__all__ = [
    "CATEGORY_LABELS",
    "FacilityBundle",
    "PLACE_CATEGORIES",
    "Place",
    "PlaceCategory",
    "PlaceSource",
]

PlaceCategory = Literal["park", "museum", "library", "cultural_center", "etc"]
PlaceSource = Literal["external", "curated", "manual"]

CATEGORY_LABELS: Dict[str, str] = {
    "park": "공원",
    "museum": "미술관",
    "library": "도서관",
    "cultural_center": "문화센터",
    "etc": "기타",
}
PLACE_CATEGORIES: Tuple[str, ...] = tuple(CATEGORY_LABELS)


@dataclass(frozen=True)
class FacilityBundle:
    """The five raw facility texts of a curated park record."""

    sports: Optional[str] = None
    play: Optional[str] = None
    convenience: Optional[str] = None
    culture: Optional[str] = None
    other: Optional[str] = None

    def texts(self) -> List[Optional[str]]:
        return [self.sports, self.play, self.convenience, self.culture, self.other]

    def is_empty(self) -> bool:
        return not any(text for text in self.texts())

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "sports": self.sports,
            "play": self.play,
            "convenience": self.convenience,
            "culture": self.culture,
            "other": self.other,
        }


@dataclass(frozen=True)
class Place:
    """A place surfaced to the display layer.

    Coordinates are validated on construction; a place with missing or out
    of range coordinates cannot exist.
    """

    place_id: str
    name: str
    latitude: float
    longitude: float
    address: str
    category: str
    source: str
    distance_m: Optional[float] = None
    tags: List[str] = field(default_factory=list)
    phone: Optional[str] = None
    url: Optional[str] = None
    facilities: Optional[FacilityBundle] = None

    def __post_init__(self) -> None:
        if not is_valid_coordinate(self.latitude, self.longitude):
            raise ValueError(
                f"Place {self.place_id!r} has invalid coordinates "
                f"({self.latitude!r}, {self.longitude!r})"
            )
        if self.category not in CATEGORY_LABELS:
            raise ValueError(f"Unknown place category: {self.category!r}")
        if self.source not in ("external", "curated", "manual"):
            raise ValueError(f"Unknown place source: {self.source!r}")

    def with_distance(self, distance_m: Optional[float]) -> "Place":
        return replace(self, distance_m=distance_m)

    def with_facilities(self, facilities: Optional[FacilityBundle]) -> "Place":
        return replace(self, facilities=facilities)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.place_id,
            "name": self.name,
            "lat": self.latitude,
            "lng": self.longitude,
            "address": self.address,
            "category": self.category,
            "source": self.source,
            "distance": self.distance_m,
            "tags": list(self.tags),
            "phone": self.phone,
            "url": self.url,
            "facilities": self.facilities.to_dict() if self.facilities else None,
        }
