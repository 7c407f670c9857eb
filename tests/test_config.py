import logging
from pathlib import Path

from src.config import DEFAULT_PARKS_STORE_PATH, load_settings


def test_defaults():
    settings = load_settings(load_env_files=False)

    assert settings.parks_store_path == Path(DEFAULT_PARKS_STORE_PATH)
    assert settings.search_radius_m == 2000
    assert settings.search_max_workers == 8
    assert settings.request_timeout_s == 10.0
    assert settings.request_max_retries == 2
    assert settings.kakao_max_pages == 1
    assert settings.log_level == "INFO"
    assert settings.error_log_path is None
    assert settings.match.min_address_similarity == 0.5
    assert settings.match.similarity_tie_threshold == 0.1
    assert settings.match.max_distance_m == 500.0


def test_overrides_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("PARKS_STORE_PATH", str(tmp_path / "parks.json"))
    monkeypatch.setenv("SEARCH_RADIUS_M", "1500")
    monkeypatch.setenv("SEARCH_MAX_WORKERS", "2")
    monkeypatch.setenv("MATCH_MIN_ADDRESS_SIMILARITY", "0.6")
    monkeypatch.setenv("MATCH_TIE_THRESHOLD", "0.05")
    monkeypatch.setenv("MATCH_MAX_DISTANCE_M", "250")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("ERROR_LOG_PATH", str(tmp_path / "errors.log"))

    settings = load_settings(load_env_files=False)

    assert settings.parks_store_path == tmp_path / "parks.json"
    assert settings.search_radius_m == 1500
    assert settings.search_max_workers == 2
    assert settings.match.min_address_similarity == 0.6
    assert settings.match.similarity_tie_threshold == 0.05
    assert settings.match.max_distance_m == 250.0
    assert settings.log_level == "DEBUG"
    assert settings.error_log_path == tmp_path / "errors.log"


def test_out_of_range_values_are_clamped(monkeypatch):
    monkeypatch.setenv("MATCH_MIN_ADDRESS_SIMILARITY", "1.7")
    monkeypatch.setenv("MATCH_TIE_THRESHOLD", "-1")
    monkeypatch.setenv("MATCH_MAX_DISTANCE_M", "0")
    monkeypatch.setenv("SEARCH_MAX_WORKERS", "0")
    monkeypatch.setenv("KAKAO_MAX_PAGES", "-3")

    settings = load_settings(load_env_files=False)

    assert settings.match.min_address_similarity == 1.0
    assert settings.match.similarity_tie_threshold == 0.0
    assert settings.match.max_distance_m == 500.0
    assert settings.search_max_workers == 1
    assert settings.kakao_max_pages == 1


def test_invalid_values_fall_back_with_warning(monkeypatch, caplog):
    monkeypatch.setenv("SEARCH_RADIUS_M", "two km")

    with caplog.at_level(logging.WARNING, logger="parkfinder.env"):
        settings = load_settings(load_env_files=False)

    assert settings.search_radius_m == 2000
    assert "Invalid value for SEARCH_RADIUS_M" in caplog.text
