"""Environment-driven settings for the park finder."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .places.match import MatchConfig
from .utils.env import get_float_env, get_int_env, load_default_env_files

DEFAULT_PARKS_STORE_PATH = "data/urban_parks.json"
DEFAULT_SEARCH_RADIUS_M = 2000
DEFAULT_SEARCH_MAX_WORKERS = 8
DEFAULT_REQUEST_TIMEOUT_S = 10.0
DEFAULT_REQUEST_MAX_RETRIES = 2
DEFAULT_KAKAO_MAX_PAGES = 1
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    parks_store_path: Path
    search_radius_m: int
    search_max_workers: int
    request_timeout_s: float
    request_max_retries: int
    kakao_max_pages: int
    match: MatchConfig
    log_level: str
    error_log_path: Path | None


def _match_config_from_env() -> MatchConfig:
    defaults = MatchConfig()
    min_similarity = get_float_env("MATCH_MIN_ADDRESS_SIMILARITY", defaults.min_address_similarity)
    tie_threshold = get_float_env("MATCH_TIE_THRESHOLD", defaults.similarity_tie_threshold)
    max_distance = get_float_env("MATCH_MAX_DISTANCE_M", defaults.max_distance_m)
    return MatchConfig(
        min_address_similarity=min(max(min_similarity, 0.0), 1.0),
        similarity_tie_threshold=max(tie_threshold, 0.0),
        max_distance_m=max_distance if max_distance > 0 else defaults.max_distance_m,
    )


def load_settings(*, load_env_files: bool = True) -> Settings:
    """Assemble settings from environment variables (and ``.env`` files)."""

    if load_env_files:
        load_default_env_files()

    error_log = os.getenv("ERROR_LOG_PATH", "").strip()
    return Settings(
        parks_store_path=Path(os.getenv("PARKS_STORE_PATH", "").strip() or DEFAULT_PARKS_STORE_PATH),
        search_radius_m=max(get_int_env("SEARCH_RADIUS_M", DEFAULT_SEARCH_RADIUS_M), 0),
        search_max_workers=max(get_int_env("SEARCH_MAX_WORKERS", DEFAULT_SEARCH_MAX_WORKERS), 1),
        request_timeout_s=max(get_float_env("REQUEST_TIMEOUT_S", DEFAULT_REQUEST_TIMEOUT_S), 0.1),
        request_max_retries=max(get_int_env("REQUEST_MAX_RETRIES", DEFAULT_REQUEST_MAX_RETRIES), 0),
        kakao_max_pages=max(get_int_env("KAKAO_MAX_PAGES", DEFAULT_KAKAO_MAX_PAGES), 1),
        match=_match_config_from_env(),
        log_level=(os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper(),
        error_log_path=Path(error_log) if error_log else None,
    )


__all__ = ["Settings", "load_settings"]
