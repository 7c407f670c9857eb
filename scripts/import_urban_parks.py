#!/usr/bin/env python3
"""Import the national urban park dataset (JSON export) into the park store.

The dataset file has the shape ``{"fields": [...], "records": [{...}]}`` with
Korean column names. Every record is converted field by field; malformed
values degrade to empty fields instead of aborting the import.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


if str(_project_root()) not in sys.path:
    sys.path.insert(0, str(_project_root()))

from src.config import load_settings  # noqa: E402
from src.parks.convert import CuratedParkRecord, convert_record  # noqa: E402
from src.parks.store import ParkStore  # noqa: E402
from src.utils.logging import configure_logging  # noqa: E402

LOGGER = logging.getLogger("parks.import")


@dataclass(frozen=True)
class ImportSummary:
    total: int
    imported: int
    skipped: int
    without_coordinates: int
    without_address: int


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("dataset", type=Path, help="Path to the urban park JSON export")
    parser.add_argument(
        "--out",
        type=Path,
        help="Target park store (default: PARKS_STORE_PATH or data/urban_parks.json)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Convert and report without writing")
    return parser.parse_args(argv)


def load_raw_records(path: Path) -> List[Mapping[str, Any]]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict) and isinstance(payload.get("records"), list):
        raw_records = payload["records"]
    elif isinstance(payload, list):
        raw_records = payload
    else:
        raise ValueError("dataset must contain a 'records' list")
    return [raw for raw in raw_records if isinstance(raw, Mapping)]


def convert_records(raw_records: Sequence[Mapping[str, Any]]) -> tuple[List[CuratedParkRecord], ImportSummary]:
    records: List[CuratedParkRecord] = []
    skipped = 0
    for raw in raw_records:
        record = convert_record(raw)
        if not record.id or not record.name:
            skipped += 1
            continue
        records.append(record)

    summary = ImportSummary(
        total=len(raw_records),
        imported=len(records),
        skipped=skipped,
        without_coordinates=sum(1 for record in records if not record.has_coordinates),
        without_address=sum(1 for record in records if not record.address),
    )
    return records, summary


def main(argv: Sequence[str] | None = None) -> int:
    settings = load_settings()
    configure_logging(settings.log_level)
    args = _parse_args(argv)

    dataset: Path = args.dataset
    if not dataset.exists():
        LOGGER.error("Dataset not found: %s", dataset)
        return 1

    try:
        raw_records = load_raw_records(dataset)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        LOGGER.error("Failed to read dataset %s: %s", dataset, exc)
        return 1

    records, summary = convert_records(raw_records)
    LOGGER.info(
        "Converted %d of %d records (skipped %d without id/name, %d without coordinates, %d without address)",
        summary.imported,
        summary.total,
        summary.skipped,
        summary.without_coordinates,
        summary.without_address,
    )

    store = ParkStore(records)
    if args.dry_run:
        LOGGER.info("Dry-run completed; %d parks not written", len(store))
        return 0

    out_path: Optional[Path] = args.out or settings.parks_store_path
    try:
        store.save(out_path)
    except OSError as exc:
        LOGGER.error("Failed to write park store %s: %s", out_path, exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
