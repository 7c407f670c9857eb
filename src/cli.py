"""Unified command-line entry point for park finder tasks."""
from __future__ import annotations

import argparse
import json
import logging
import math
import runpy
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from .config import Settings, load_settings
from .parks.store import ParkStore, ParkStoreError
from .places.client import (
    KakaoLocalClient,
    KakaoLocalConfig,
    KakaoLocalError,
    KakaoLocalPermissionError,
    get_kakao_rest_key,
)
from .places.diagnostics import permission_hint
from .places.match import find_match
from .places.models import PLACE_CATEGORIES, Place
from .places.search import PlaceSearch, SearchContext
from .utils.logging import configure_logging

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SCRIPTS_DIR = PROJECT_ROOT / "scripts"

LOGGER = logging.getLogger("parkfinder.cli")


class CLIError(RuntimeError):
    """Raised when the CLI cannot execute the requested command."""


@contextmanager
def _patched_argv(script_path: Path, arguments: Sequence[str] | None) -> Iterator[None]:
    original = sys.argv[:]
    sys.argv = [str(script_path)] + list(arguments or [])
    try:
        yield
    finally:
        sys.argv = original


def _clean_remainder(values: list[str] | None) -> list[str]:
    cleaned = list(values or [])
    while cleaned and cleaned[0] == "--":
        cleaned.pop(0)
    return cleaned


def _run_script(script_name: str, extra_args: Sequence[str] | None = None) -> int:
    script_path = SCRIPTS_DIR / script_name
    if not script_path.exists():
        raise CLIError(f"Script not found: {script_path}")

    namespace = runpy.run_path(str(script_path), run_name="__cli__")
    entry = namespace.get("main")
    if not callable(entry):
        raise CLIError(f"Script has no main(): {script_path}")
    with _patched_argv(script_path, extra_args):
        return int(entry(list(extra_args or [])))


def _load_store(settings: Settings, override: Path | None) -> ParkStore:
    path = override or settings.parks_store_path
    try:
        return ParkStore.load(path)
    except ParkStoreError as exc:
        raise CLIError(f"Invalid park store {path}: {exc}") from exc


def _print_json(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _handle_search(args: argparse.Namespace) -> int:
    settings: Settings = args.settings
    radius = args.radius if args.radius is not None else settings.search_radius_m
    client = KakaoLocalClient(
        KakaoLocalConfig(
            rest_key=get_kakao_rest_key(),
            radius_m=radius,
            timeout_s=settings.request_timeout_s,
            max_retries=settings.request_max_retries,
            max_pages=settings.kakao_max_pages,
        )
    )
    store_path = args.store or settings.parks_store_path
    store: ParkStore | None
    try:
        store = ParkStore.load(store_path)
    except ParkStoreError as exc:
        LOGGER.warning("Park store %s unusable, returning external results only: %s", store_path, exc)
        store = None
    search = PlaceSearch(
        client,
        store,
        match_config=settings.match,
        max_workers=settings.search_max_workers,
        radius_m=radius,
    )

    try:
        places = search.search(args.category, args.lat, args.lng, SearchContext())
    except KakaoLocalPermissionError as exc:
        LOGGER.error("Kakao rejected the request: %s", exc)
        hint = permission_hint(str(exc))
        if hint:
            LOGGER.error("Hint: %s", hint)
        return 1
    except KakaoLocalError as exc:
        LOGGER.error("Place search failed: %s", exc)
        return 1

    _print_json([place.to_dict() for place in places])
    return 0


def _handle_match(args: argparse.Namespace) -> int:
    settings: Settings = args.settings
    store = _load_store(settings, args.store)
    try:
        place = Place(
            place_id="manual",
            name=args.name,
            latitude=args.lat,
            longitude=args.lng,
            address=args.address or "",
            category="park",
            source="manual",
        )
    except ValueError as exc:
        raise CLIError(str(exc)) from exc

    result = find_match(place, store.all_records(), settings.match)
    if result is None:
        print("No matching curated park.")
        return 1

    _print_json(
        {
            "park_id": result.record.id,
            "park_name": result.record.name,
            "stage": result.stage,
            "confidence": result.confidence,
            "similarity": result.similarity,
            "distance_m": None if math.isinf(result.distance_m) else round(result.distance_m, 1),
            "reasons": result.reasons,
            "facilities": result.facilities.to_dict(),
        }
    )
    return 0


def _handle_import_parks(args: argparse.Namespace) -> int:
    return _run_script("import_urban_parks.py", _clean_remainder(args.script_args))


def _handle_compare_sources(args: argparse.Namespace) -> int:
    return _run_script("compare_sources.py", _clean_remainder(args.script_args))


def _add_store_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--store",
        type=Path,
        help="Park store JSON file (default: PARKS_STORE_PATH or data/urban_parks.json).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parkfinder",
        description="Search places around a location and reconcile them with curated park data.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="Search places of a category around a location")
    search_parser.add_argument("category", choices=PLACE_CATEGORIES)
    search_parser.add_argument("lat", type=float)
    search_parser.add_argument("lng", type=float)
    search_parser.add_argument("--radius", type=int, help="Search radius in metres (default: SEARCH_RADIUS_M).")
    _add_store_argument(search_parser)
    search_parser.set_defaults(func=_handle_search)

    match_parser = subparsers.add_parser("match", help="Match a single location/address against the park store")
    match_parser.add_argument("lat", type=float)
    match_parser.add_argument("lng", type=float)
    match_parser.add_argument("--address", help="Address of the place to match.")
    match_parser.add_argument("--name", default="", help="Optional place name (informational).")
    _add_store_argument(match_parser)
    match_parser.set_defaults(func=_handle_match)

    import_parser = subparsers.add_parser("import-parks", help="Import the urban park dataset")
    import_parser.add_argument(
        "script_args",
        nargs=argparse.REMAINDER,
        help="Arguments forwarded to scripts/import_urban_parks.py.",
    )
    import_parser.set_defaults(func=_handle_import_parks)

    compare_parser = subparsers.add_parser("compare-sources", help="Compare Kakao results with curated parks")
    compare_parser.add_argument(
        "script_args",
        nargs=argparse.REMAINDER,
        help="Arguments forwarded to scripts/compare_sources.py.",
    )
    compare_parser.set_defaults(func=_handle_compare_sources)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 1

    settings = load_settings()
    configure_logging(settings.log_level, error_log=settings.error_log_path)
    args.settings = settings
    try:
        return handler(args)
    except CLIError as exc:
        parser.error(str(exc))


if __name__ == "__main__":  # pragma: no cover - manual execution
    raise SystemExit(main())
