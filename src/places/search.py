"""Search orchestration: external results enriched with curated park data."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from threading import Lock
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from ..parks.convert import CuratedParkRecord
from .match import MatchConfig, find_match
from .models import Place
from .normalize import haversine_m

__all__ = [
    "CURATED_CATEGORIES",
    "CuratedStore",
    "PlaceSearch",
    "PlaceSource",
    "SearchContext",
    "SearchRequest",
]

LOGGER = logging.getLogger("places.search")

# Categories backed by a curated registry.
CURATED_CATEGORIES = frozenset({"park"})

CacheKey = Tuple[str, float, float]


class PlaceSource(Protocol):
    def search(self, category: str, lat: float, lng: float, radius_m: Optional[int] = None) -> List[Place]:
        ...


class CuratedStore(Protocol):
    def all_records(self) -> List[CuratedParkRecord]:
        ...


@dataclass(frozen=True)
class SearchRequest:
    category: str
    lat: float
    lng: float

    @property
    def cache_key(self) -> CacheKey:
        return (self.category, round(self.lat, 4), round(self.lng, 4))


class SearchContext:
    """Per-session search state owned by the caller.

    Holds the result cache (keyed by category and user location rounded to
    four decimals, never evicted) and the last request for :meth:`PlaceSearch.refresh`.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._cache: Dict[CacheKey, List[Place]] = {}
        self.last_request: Optional[SearchRequest] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def cached(self, request: SearchRequest) -> Optional[List[Place]]:
        with self._lock:
            places = self._cache.get(request.cache_key)
            return list(places) if places is not None else None

    def store(self, request: SearchRequest, places: Sequence[Place]) -> None:
        with self._lock:
            self._cache[request.cache_key] = list(places)


class PlaceSearch:
    """Runs a category search and reconciles results with the curated store."""

    def __init__(
        self,
        source: PlaceSource,
        store: Optional[CuratedStore],
        *,
        match_config: Optional[MatchConfig] = None,
        max_workers: int = 8,
        radius_m: Optional[int] = None,
    ) -> None:
        self._source = source
        self._store = store
        self._match_config = match_config or MatchConfig()
        self._max_workers = max(1, max_workers)
        self._radius_m = radius_m

    def search(self, category: str, lat: float, lng: float, context: SearchContext) -> List[Place]:
        """Return places of ``category`` around the user, nearest-distance attached.

        Errors from the external source propagate; a failing curated store
        only disables enrichment.
        """

        request = SearchRequest(category=category, lat=lat, lng=lng)
        context.last_request = request

        cached = context.cached(request)
        if cached is not None:
            LOGGER.debug("Cache hit for %s", request.cache_key)
            return [self._with_user_distance(place, lat, lng) for place in cached]

        places = self._source.search(category, lat, lng, self._radius_m)

        if category in CURATED_CATEGORIES and places:
            candidates = self._load_candidates()
            if candidates:
                places = self._enrich(places, candidates)

        results = [self._with_user_distance(place, lat, lng) for place in places]
        context.store(request, results)
        LOGGER.info(
            "Search %s at %.4f/%.4f: %d places, %d enriched",
            category,
            lat,
            lng,
            len(results),
            sum(1 for place in results if place.facilities is not None),
        )
        return results

    def refresh(self, context: SearchContext) -> List[Place]:
        """Repeat the most recent search of ``context``."""

        request = context.last_request
        if request is None:
            return []
        return self.search(request.category, request.lat, request.lng, context)

    def _load_candidates(self) -> List[CuratedParkRecord]:
        if self._store is None:
            return []
        try:
            return list(self._store.all_records())
        except Exception as exc:
            LOGGER.warning("Curated park data unavailable, returning external results only: %s", exc)
            return []

    def _enrich(self, places: Sequence[Place], candidates: Sequence[CuratedParkRecord]) -> List[Place]:
        def _match_one(place: Place) -> Place:
            result = find_match(place, candidates, self._match_config)
            return result.merged_place() if result is not None else place

        workers = min(self._max_workers, len(places))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="place-match") as executor:
            # ``map`` yields in submission order, which keeps the external ranking.
            return list(executor.map(_match_one, places))

    @staticmethod
    def _with_user_distance(place: Place, lat: float, lng: float) -> Place:
        return place.with_distance(haversine_m(lat, lng, place.latitude, place.longitude))
