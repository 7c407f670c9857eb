"""Client abstraction for the Kakao Local keyword search API."""

from __future__ import annotations

import logging
import os
import random
import time
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

import requests

from ..utils.logging import sanitize_log_message
from .models import Place
from .normalize import is_valid_coordinate

__all__ = [
    "CATEGORY_QUERY_MAP",
    "KakaoLocalClient",
    "KakaoLocalConfig",
    "KakaoLocalError",
    "KakaoLocalPermissionError",
    "get_kakao_rest_key",
]

LOGGER = logging.getLogger("places.kakao")

_API_URL = "https://dapi.kakao.com/v2/local/search/keyword.json"
MAX_RADIUS_M = 20000
MAX_PAGE_SIZE = 15
MAX_PAGES = 45

# Keyword sent to the search API per category; ``etc`` has no keyword.
CATEGORY_QUERY_MAP: Mapping[str, str] = {
    "park": "공원",
    "museum": "미술관",
    "library": "도서관",
    "cultural_center": "문화센터",
    "etc": "",
}


class KakaoLocalError(RuntimeError):
    """Raised for unrecoverable errors when talking to Kakao Local."""


class KakaoLocalPermissionError(KakaoLocalError):
    """Raised when the API rejects the REST key."""


@dataclass(frozen=True)
class KakaoLocalConfig:
    rest_key: str
    radius_m: int = 2000
    timeout_s: float = 10.0
    max_retries: int = 2
    page_size: int = MAX_PAGE_SIZE
    max_pages: int = 1


class KakaoLocalClient:
    """Keyword search client with retry and pagination support."""

    def __init__(self, config: KakaoLocalConfig, *, session: Optional[requests.Session] = None) -> None:
        self._config = config
        self._session = session or requests.Session()
        self.request_count = 0
        self._radius_m = self._clamp(config.radius_m, 0, MAX_RADIUS_M)
        self._page_size = self._clamp(config.page_size, 1, MAX_PAGE_SIZE)
        self._max_pages = self._clamp(config.max_pages, 1, MAX_PAGES)

    def search(
        self,
        category: str,
        lat: float,
        lng: float,
        radius_m: Optional[int] = None,
    ) -> List[Place]:
        """Return places of ``category`` around ``lat``/``lng``.

        Categories without a search keyword yield an empty list. Transport
        and API failures raise :class:`KakaoLocalError`.
        """

        query = CATEGORY_QUERY_MAP.get(category)
        if query is None:
            raise ValueError(f"Unknown place category: {category!r}")
        if not query:
            LOGGER.warning("No search keyword defined for category %s", category)
            return []

        radius = self._radius_m if radius_m is None else self._clamp(int(radius_m), 0, MAX_RADIUS_M)
        places: List[Place] = []
        seen: set[str] = set()
        for page in range(1, self._max_pages + 1):
            params: Dict[str, object] = {
                "query": query,
                "x": f"{lng}",
                "y": f"{lat}",
                "radius": radius,
                "page": page,
                "size": self._page_size,
            }
            payload = self._get(params)
            documents = payload.get("documents")
            if not isinstance(documents, list):
                raise KakaoLocalError(f"Unexpected payload for {category!r}: missing documents")

            for raw in documents:
                place = self._parse_place(raw, category)
                if place is not None and place.place_id not in seen:
                    seen.add(place.place_id)
                    places.append(place)

            meta = payload.get("meta")
            if not isinstance(meta, dict) or meta.get("is_end", True):
                break

        LOGGER.debug(
            "Kakao search category=%s lat=%.6f lng=%.6f radius=%d got %d places",
            category,
            lat,
            lng,
            radius,
            len(places),
        )
        return places

    def _parse_place(self, raw: object, category: str) -> Optional[Place]:
        if not isinstance(raw, dict):
            LOGGER.warning("Ignoring unexpected place payload: %r", raw)
            return None
        place_id = raw.get("id")
        if not isinstance(place_id, str) or not place_id:
            LOGGER.warning("Skipping place without valid id: %r", raw.get("place_name"))
            return None
        name = raw.get("place_name")
        if not isinstance(name, str) or not name.strip():
            LOGGER.warning("Skipping place without valid name: %s", place_id)
            return None
        try:
            lat = float(raw.get("y"))  # type: ignore[arg-type]
            lng = float(raw.get("x"))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            LOGGER.warning("Skipping place with unparsable coordinates: %s", place_id)
            return None
        if not is_valid_coordinate(lat, lng):
            LOGGER.warning("Skipping place with invalid coordinates: %s", place_id)
            return None

        address = _text(raw.get("address_name")) or _text(raw.get("road_address_name")) or ""
        category_name = _text(raw.get("category_name"))
        tags = [part.strip() for part in category_name.split(" > ") if part.strip()] if category_name else []
        return Place(
            place_id=place_id,
            name=name.strip(),
            latitude=lat,
            longitude=lng,
            address=address,
            category=category,
            source="external",
            tags=tags,
            phone=_text(raw.get("phone")),
            url=_text(raw.get("place_url")),
        )

    def _get(self, params: Dict[str, object]) -> Dict[str, object]:
        headers = {"Authorization": f"KakaoAK {self._config.rest_key}"}
        attempt = 0
        last_error: Optional[Exception] = None
        while attempt <= self._config.max_retries:
            attempt += 1
            try:
                response = self._session.get(
                    _API_URL,
                    headers=headers,
                    params=params,
                    timeout=self._config.timeout_s,
                )
                self.request_count += 1
            except requests.RequestException as exc:
                last_error = exc
                LOGGER.warning(
                    "Request error (attempt %s/%s): %s",
                    attempt,
                    self._config.max_retries + 1,
                    self._sanitize(str(exc)),
                )
            else:
                if response.status_code == 200:
                    try:
                        payload = response.json()
                    except ValueError as exc:
                        raise KakaoLocalError("Invalid JSON payload received from Kakao Local") from exc
                    if not isinstance(payload, dict):
                        raise KakaoLocalError("Unexpected JSON payload received from Kakao Local")
                    return payload
                if response.status_code in {429, 500, 502, 503, 504}:
                    last_error = KakaoLocalError(
                        f"HTTP {response.status_code}: {self._sanitize(response.text[:200])}"
                    )
                elif response.status_code in {401, 403}:
                    raise KakaoLocalPermissionError(self._format_error_message(response))
                else:
                    raise KakaoLocalError(
                        f"Failed to search places ({response.status_code}): {self._format_error_message(response)}"
                    )

            if attempt > self._config.max_retries:
                break
            sleep_for = self._backoff(attempt)
            LOGGER.info("Retrying keyword search in %.2fs", sleep_for)
            time.sleep(sleep_for)

        if last_error is None:
            raise KakaoLocalError("Unknown error during Kakao Local call")
        if isinstance(last_error, KakaoLocalError):
            raise last_error
        raise KakaoLocalError(self._sanitize(str(last_error))) from last_error

    def _format_error_message(self, response: requests.Response) -> str:
        default = f"Request failed with status {response.status_code}: {self._sanitize(response.text[:200])}"
        try:
            payload = response.json()
        except ValueError:
            return default
        if not isinstance(payload, dict):
            return default
        error_type = payload.get("errorType")
        message = payload.get("message")
        if isinstance(message, str) and message:
            formatted = f"{error_type}: {message}" if isinstance(error_type, str) and error_type else message
            return self._sanitize(formatted)
        return default

    def _sanitize(self, text: str) -> str:
        return sanitize_log_message(text, secrets=[self._config.rest_key])

    @staticmethod
    def _clamp(value: int, low: int, high: int) -> int:
        return max(low, min(high, value))

    def _backoff(self, attempt: int) -> float:
        base = 0.5 * (2 ** (attempt - 1))
        jitter = random.uniform(0, 0.5)
        return base + jitter


def _text(value: object) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def get_kakao_rest_key() -> str:
    """Return the configured Kakao REST API key.

    ``KAKAO_REST_KEY`` is preferred. The front-end style
    ``NEXT_PUBLIC_KAKAO_REST_KEY`` is accepted as a deprecated fallback and
    emits a warning. Aborts with ``SystemExit`` (status ``2``) when neither
    variable is defined.
    """

    env = os.environ
    key = (env.get("KAKAO_REST_KEY") or "").strip()
    if key:
        return key

    legacy_key = (env.get("NEXT_PUBLIC_KAKAO_REST_KEY") or "").strip()
    if legacy_key:
        LOGGER.warning("DEPRECATED: use KAKAO_REST_KEY instead of NEXT_PUBLIC_KAKAO_REST_KEY")
        return legacy_key

    message = "Missing KAKAO_REST_KEY (preferred) or NEXT_PUBLIC_KAKAO_REST_KEY."
    LOGGER.error(message)
    exc = SystemExit(2)
    exc.args = (message,)
    raise exc
