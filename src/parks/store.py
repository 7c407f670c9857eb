"""JSON-file backed store of curated park records."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from ..places.models import Place
from ..places.normalize import haversine_m
from ..utils.files import atomic_write
from .convert import CuratedParkRecord
from .facilities import facility_tags

__all__ = [
    "ParkQuery",
    "ParkStore",
    "ParkStoreError",
    "get_park_place",
    "record_to_place",
    "search_nearby_parks",
]

log = logging.getLogger("parks.store")

_FLAG_FILTERS = ("has_playground", "has_gym", "has_toilet", "has_parking", "has_bench", "has_stage_or_culture")


class ParkStoreError(ValueError):
    """Raised when the park store cannot be read or is malformed."""


@dataclass(frozen=True)
class ParkQuery:
    """Filter for :meth:`ParkStore.query`.

    A set ``lat``/``lng``/``radius_m`` turns the query into a spatial one,
    which excludes records without coordinates. ``text`` matches the name
    and both addresses case-insensitively.
    """

    lat: Optional[float] = None
    lng: Optional[float] = None
    radius_m: Optional[float] = None
    text: Optional[str] = None
    park_type: Optional[str] = None
    has_playground: Optional[bool] = None
    has_gym: Optional[bool] = None
    has_toilet: Optional[bool] = None
    has_parking: Optional[bool] = None
    has_bench: Optional[bool] = None
    has_stage_or_culture: Optional[bool] = None
    limit: Optional[int] = None

    @property
    def is_spatial(self) -> bool:
        return self.lat is not None and self.lng is not None and self.radius_m is not None


class ParkStore:
    """In-memory view over the imported park registry.

    The store is read-only for the matching core; it is rebuilt by the
    import script and persisted with :meth:`save`.
    """

    def __init__(self, records: Iterable[CuratedParkRecord] = ()) -> None:
        self._records: List[CuratedParkRecord] = []
        self._by_id: Dict[str, CuratedParkRecord] = {}
        for record in records:
            if record.id in self._by_id:
                log.warning("Duplicate park id %s; keeping the first record", record.id)
                continue
            self._by_id[record.id] = record
            self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    @classmethod
    def load(cls, path: Path) -> "ParkStore":
        if not path.exists():
            log.warning("Park store not found at %s; starting empty", path)
            return cls()
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ParkStoreError(f"Cannot read park store {path}: {exc}") from exc

        if isinstance(payload, dict) and isinstance(payload.get("parks"), list):
            raw_records = payload["parks"]
        elif isinstance(payload, list):
            raw_records = payload
        else:
            raise ParkStoreError("park store must contain a list or a wrapped 'parks' object")

        records: List[CuratedParkRecord] = []
        for raw in raw_records:
            if not isinstance(raw, Mapping):
                raise ParkStoreError("park store entries must be objects")
            try:
                records.append(CuratedParkRecord.from_dict(raw))
            except (TypeError, ValueError) as exc:
                raise ParkStoreError(f"Invalid park entry {raw.get('id')!r}: {exc}") from exc
        return cls(records)

    def save(self, path: Path) -> None:
        payload = json.dumps(
            {"parks": [record.to_dict() for record in self._records]},
            ensure_ascii=False,
            indent=2,
        )
        with atomic_write(path) as handle:
            handle.write(payload + "\n")
        log.info("Wrote %d parks to %s", len(self._records), path)

    def all_records(self) -> List[CuratedParkRecord]:
        return list(self._records)

    def get(self, record_id: str) -> Optional[CuratedParkRecord]:
        return self._by_id.get(record_id)

    def query(self, query: ParkQuery) -> List[CuratedParkRecord]:
        """Return records matching ``query``; spatial queries are sorted by distance."""

        needle = query.text.strip().casefold() if query.text and query.text.strip() else None
        matches: List[tuple[float, CuratedParkRecord]] = []
        for record in self._records:
            if query.park_type is not None and record.park_type != query.park_type:
                continue
            if any(
                getattr(query, name) is not None and getattr(record, name) != getattr(query, name)
                for name in _FLAG_FILTERS
            ):
                continue
            if needle is not None and not _matches_text(record, needle):
                continue

            distance = 0.0
            if query.is_spatial:
                if not record.has_coordinates:
                    continue
                distance = haversine_m(query.lat, query.lng, record.lat, record.lng)  # type: ignore[arg-type]
                if distance > query.radius_m:  # type: ignore[operator]
                    continue
            matches.append((distance, record))

        if query.is_spatial:
            matches.sort(key=lambda item: item[0])
        records = [record for _, record in matches]
        if query.limit is not None:
            records = records[: max(0, query.limit)]
        return records


def _matches_text(record: CuratedParkRecord, needle: str) -> bool:
    for value in (record.name, record.road_address, record.lot_address):
        if value and needle in value.casefold():
            return True
    return False


def record_to_place(record: CuratedParkRecord, distance_m: Optional[float] = None) -> Optional[Place]:
    """Surface a curated record as a :class:`Place`; ``None`` without coordinates."""

    if not record.has_coordinates:
        return None
    return Place(
        place_id=record.id,
        name=record.name,
        latitude=float(record.lat),  # type: ignore[arg-type]
        longitude=float(record.lng),  # type: ignore[arg-type]
        address=record.address or "",
        category="park",
        source="curated",
        distance_m=distance_m,
        tags=facility_tags(record.flags),
        phone=record.phone,
        facilities=record.facilities,
    )


def search_nearby_parks(
    store: ParkStore,
    lat: float,
    lng: float,
    *,
    radius_m: float = 2000.0,
    limit: int = 50,
    park_type: Optional[str] = None,
    flags: Optional[Mapping[str, bool]] = None,
) -> List[Place]:
    """List curated parks within ``radius_m`` of a point, nearest first."""

    unknown = set(flags or {}) - set(_FLAG_FILTERS)
    if unknown:
        raise ValueError(f"Unknown facility filters: {', '.join(sorted(unknown))}")

    query = ParkQuery(lat=lat, lng=lng, radius_m=radius_m, park_type=park_type, limit=limit, **dict(flags or {}))
    places: List[Place] = []
    for record in store.query(query):
        place = record_to_place(record, haversine_m(lat, lng, record.lat, record.lng))  # type: ignore[arg-type]
        if place is not None:
            places.append(place)
    return places


def get_park_place(store: ParkStore, record_id: str) -> Optional[Place]:
    record = store.get(record_id)
    if record is None:
        return None
    return record_to_place(record, 0.0)
