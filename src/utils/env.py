#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Helpers for reading environment variables in a safe way.

Numeric settings (search radius, matching thresholds, retry
counts) are read through the typed getters below, which fall back to the
given default and log a warning instead of failing on malformed values.
Local development setups can keep the Kakao REST key in a ``.env`` style
file; :func:`load_default_env_files` populates ``os.environ`` from it.
"""

from __future__ import annotations

import logging
import math
import os
import re
from pathlib import Path
from typing import Dict, Iterable, Mapping, MutableMapping

__all__ = [
    "get_float_env",
    "get_int_env",
    "load_env_file",
    "load_default_env_files",
]

log = logging.getLogger("parkfinder.env")


def get_int_env(name: str, default: int) -> int:
    """Read integer environment variables safely."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except (ValueError, TypeError) as e:
        log.warning(
            "Invalid value for %s=%r, using default %d (%s: %s)",
            name,
            raw,
            default,
            type(e).__name__,
            e,
        )
        return default


def get_float_env(name: str, default: float) -> float:
    """Read float environment variables safely.

    Non-finite values (``nan``, ``inf``) are rejected like unparsable ones.
    """

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except (ValueError, TypeError) as e:
        log.warning(
            "Invalid value for %s=%r, using default %s (%s: %s)",
            name,
            raw,
            default,
            type(e).__name__,
            e,
        )
        return default
    if not math.isfinite(value):
        log.warning("Non-finite value for %s=%r, using default %s", name, raw, default)
        return default
    return value


ENV_ASSIGNMENT_RE = re.compile(
    r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$"
)


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def _strip_inline_comment(value: str) -> str:
    """Remove ``# comment`` tails from unquoted values."""

    if not value or value[0] in {'"', "'"}:
        return value

    for idx, char in enumerate(value):
        if char == "#" and (idx == 0 or value[idx - 1].isspace()):
            return value[:idx].rstrip()
    return value


def _parse_env_file(content: str) -> Dict[str, str]:
    parsed: Dict[str, str] = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        match = ENV_ASSIGNMENT_RE.match(line)
        if not match:
            continue

        key, value = match.groups()
        cleaned = _strip_inline_comment(value.strip())
        parsed[key] = _strip_quotes(cleaned.strip())

    return parsed


def load_env_file(
    path: Path,
    *,
    override: bool = False,
    environ: MutableMapping[str, str] | None = None,
) -> Dict[str, str]:
    """Load environment variables from ``path`` into ``environ``.

    Returns the parsed assignments. Existing variables are left untouched
    unless ``override`` is set.
    """

    env: MutableMapping[str, str]
    env = environ if environ is not None else os.environ

    if not path.exists() or not path.is_file():
        return {}

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log.warning(
            "Cannot read env file %s, skipping it (%s: %s)",
            path,
            type(exc).__name__,
            exc,
        )
        return {}
    parsed = _parse_env_file(content)

    for key, value in parsed.items():
        if override or key not in env:
            env[key] = value

    return parsed


def _default_env_file_candidates(base_dir: Path) -> Iterable[Path]:
    candidates = [
        base_dir / ".env",
        base_dir / ".env.local",
        base_dir / "data" / "secrets.env",
        base_dir / "config" / "secrets.env",
    ]

    extra = os.getenv("PARKFINDER_ENV_FILES")
    if extra:
        for part in extra.split(os.pathsep):
            item = part.strip()
            if not item:
                continue
            candidate = Path(item).expanduser()
            if not candidate.is_absolute():
                candidate = base_dir / candidate
            candidates.append(candidate)

    return candidates


def load_default_env_files(
    *,
    override: bool = False,
    environ: MutableMapping[str, str] | None = None,
) -> Mapping[Path, Dict[str, str]]:
    """Load standard env files relative to the project root."""

    base_dir = Path(__file__).resolve().parents[2]

    loaded: Dict[Path, Dict[str, str]] = {}
    for candidate in _default_env_file_candidates(base_dir):
        parsed = load_env_file(candidate, override=override, environ=environ)
        if parsed:
            loaded[candidate] = parsed

    return loaded
