#!/usr/bin/env python3
"""Compare Kakao search results with curated park records around a location.

For every external park the script reports the production match (if any)
next to the weighted pair scores of the diagnostics module, which helps
when tuning the MATCH_* thresholds.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


if str(_project_root()) not in sys.path:
    sys.path.insert(0, str(_project_root()))

from src.config import load_settings  # noqa: E402
from src.parks.convert import CuratedParkRecord  # noqa: E402
from src.parks.store import ParkQuery, ParkStore, ParkStoreError  # noqa: E402
from src.places.client import (  # noqa: E402
    KakaoLocalClient,
    KakaoLocalConfig,
    KakaoLocalError,
    KakaoLocalPermissionError,
    get_kakao_rest_key,
)
from src.places.diagnostics import assess_pair, permission_hint  # noqa: E402
from src.places.match import MatchConfig, find_match  # noqa: E402
from src.places.models import Place  # noqa: E402
from src.utils.logging import configure_logging  # noqa: E402

LOGGER = logging.getLogger("places.compare")

# 면목동, Jungnang-gu, Seoul
DEFAULT_LAT = 37.5889
DEFAULT_LNG = 127.0833


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--lat", type=float, default=DEFAULT_LAT)
    parser.add_argument("--lng", type=float, default=DEFAULT_LNG)
    parser.add_argument("--radius", type=int, default=2000, help="Search radius in metres")
    parser.add_argument("--text", help="Restrict curated parks to a name/address fragment")
    parser.add_argument("--limit", type=int, default=10, help="Maximum parks per source")
    parser.add_argument("--store", type=Path, help="Park store path (default: PARKS_STORE_PATH)")
    return parser.parse_args(argv)


def compare(
    places: Sequence[Place],
    records: Sequence[CuratedParkRecord],
    config: Optional[MatchConfig] = None,
) -> List[Dict[str, object]]:
    """Build one report row per external place."""

    rows: List[Dict[str, object]] = []
    for place in places:
        match = find_match(place, records, config)
        candidates = []
        for record in records:
            assessment = assess_pair(place, record)
            if assessment.is_match:
                candidates.append(
                    {
                        "park_id": record.id,
                        "park_name": record.name,
                        "confidence": assessment.confidence,
                        "reasons": assessment.reasons,
                    }
                )
        candidates.sort(key=lambda item: -int(item["confidence"]))  # type: ignore[call-overload]
        rows.append(
            {
                "place_id": place.place_id,
                "name": place.name,
                "address": place.address,
                "match": None
                if match is None
                else {
                    "park_id": match.record.id,
                    "park_name": match.record.name,
                    "stage": match.stage,
                    "confidence": match.confidence,
                    "reasons": match.reasons,
                },
                "scored_candidates": candidates,
            }
        )
    return rows


def main(argv: Sequence[str] | None = None) -> int:
    settings = load_settings()
    configure_logging(settings.log_level)
    args = _parse_args(argv)

    try:
        store = ParkStore.load(args.store or settings.parks_store_path)
    except ParkStoreError as exc:
        LOGGER.error("Failed to load park store: %s", exc)
        return 1

    records = store.query(
        ParkQuery(lat=args.lat, lng=args.lng, radius_m=args.radius, text=args.text, limit=args.limit)
    )
    LOGGER.info("Curated parks in range: %d", len(records))

    client = KakaoLocalClient(
        KakaoLocalConfig(
            rest_key=get_kakao_rest_key(),
            radius_m=args.radius,
            timeout_s=settings.request_timeout_s,
            max_retries=settings.request_max_retries,
        )
    )
    try:
        places = client.search("park", args.lat, args.lng)[: max(0, args.limit)]
    except KakaoLocalPermissionError as exc:
        LOGGER.error("Kakao rejected the request: %s", exc)
        hint = permission_hint(str(exc))
        if hint:
            LOGGER.error("Hint: %s", hint)
        return 1
    except KakaoLocalError as exc:
        LOGGER.error("Kakao search failed: %s", exc)
        return 1
    LOGGER.info("Kakao parks in range: %d", len(places))

    rows = compare(places, records, settings.match)
    matched = sum(1 for row in rows if row["match"] is not None)
    LOGGER.info("Matched %d of %d external parks", matched, len(rows))
    print(json.dumps(rows, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
