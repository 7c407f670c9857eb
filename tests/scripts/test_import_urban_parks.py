"""Tests for the urban park dataset import script."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from scripts import import_urban_parks as importer
from src.parks.store import ParkStore


def _write_dataset(path: Path, rows) -> Path:
    path.write_text(json.dumps({"fields": [], "records": rows}, ensure_ascii=False), encoding="utf-8")
    return path


def test_import_writes_store(tmp_path: Path, raw_park_rows) -> None:
    dataset = _write_dataset(tmp_path / "dataset.json", raw_park_rows)
    out = tmp_path / "store" / "parks.json"

    assert importer.main([str(dataset), "--out", str(out)]) == 0

    store = ParkStore.load(out)
    assert len(store) == 2
    assert store.get("11260-00001").has_playground
    assert store.get("11260-00002").lat is None


def test_import_uses_configured_store_path(tmp_path: Path, raw_park_rows, monkeypatch) -> None:
    dataset = _write_dataset(tmp_path / "dataset.json", raw_park_rows)
    out = tmp_path / "configured.json"
    monkeypatch.setenv("PARKS_STORE_PATH", str(out))

    assert importer.main([str(dataset)]) == 0
    assert out.exists()


def test_import_skips_rows_without_id_or_name(raw_park_rows) -> None:
    rows = raw_park_rows + [{"관리번호": "", "공원명": "이름만"}, {"관리번호": "X"}]

    records, summary = importer.convert_records(rows)

    assert [record.id for record in records] == ["11260-00001", "11260-00002"]
    assert summary.total == 4
    assert summary.imported == 2
    assert summary.skipped == 2
    assert summary.without_coordinates == 1
    assert summary.without_address == 0


def test_load_raw_records_accepts_plain_list(tmp_path: Path) -> None:
    path = tmp_path / "rows.json"
    path.write_text(json.dumps([{"관리번호": "1"}, "noise"]), encoding="utf-8")

    assert importer.load_raw_records(path) == [{"관리번호": "1"}]


def test_load_raw_records_rejects_other_shapes(tmp_path: Path) -> None:
    path = tmp_path / "rows.json"
    path.write_text(json.dumps({"data": []}), encoding="utf-8")

    with pytest.raises(ValueError):
        importer.load_raw_records(path)


def test_dry_run_does_not_write(tmp_path: Path, raw_park_rows, caplog) -> None:
    dataset = _write_dataset(tmp_path / "dataset.json", raw_park_rows)
    out = tmp_path / "parks.json"

    with caplog.at_level(logging.INFO, logger="parks.import"):
        assert importer.main([str(dataset), "--out", str(out), "--dry-run"]) == 0

    assert not out.exists()
    assert "Dry-run completed" in caplog.text


def test_missing_dataset_fails(tmp_path: Path, caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="parks.import"):
        assert importer.main([str(tmp_path / "missing.json")]) == 1
    assert "Dataset not found" in caplog.text


def test_malformed_dataset_fails(tmp_path: Path) -> None:
    dataset = tmp_path / "dataset.json"
    dataset.write_text("{broken", encoding="utf-8")

    assert importer.main([str(dataset), "--out", str(tmp_path / "parks.json")]) == 1
