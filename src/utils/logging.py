"""Logging utilities for sanitizing inputs and configuring handlers."""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

__all__ = ["configure_logging", "sanitize_log_message"]

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_FILE_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_ANSI_ESCAPE_RE = re.compile(r"\x1b(?:\[[0-?]*[ -/]*[@-~]|\][^\x07\x1b]*(?:\x07|\x1b\\)|[@-Z\\^_])")

# (pattern, replacement) pairs; the Authorization scheme used by Kakao comes first.
_SECRET_PATTERNS = [
    (re.compile(r"(?i)(KakaoAK\s+)[^\s\"',]+"), r"\1***"),
    (re.compile(r"(?i)(authorization\s*[:=]\s*)[^\s\"',]+(?:\s+[^\s\"',]+)?"), r"\1***"),
    (re.compile(r"(?i)((?:api[-_]?key|rest[-_]?key|service[-_]?role[-_]?key|token)\s*[:=]\s*)[^\s&\"',]+"), r"\1***"),
]


def sanitize_log_message(text: str, secrets: List[str] | None = None, strip_control_chars: bool = True) -> str:
    """Mask credentials and neutralise control characters in ``text``.

    Upstream error bodies are echoed into log lines, so they are passed
    through here to avoid leaking the REST key and to prevent log
    injection via embedded newlines or ANSI sequences.
    """
    if not text:
        return ""

    sanitized = _ANSI_ESCAPE_RE.sub("", text)
    for pattern, replacement in _SECRET_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)

    if secrets:
        for secret in secrets:
            if secret:
                sanitized = sanitized.replace(secret, "***")

    if strip_control_chars:
        sanitized = sanitized.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
        sanitized = _CONTROL_CHARS_RE.sub("", sanitized)

    return sanitized


def _level_from_name(name: str | None, default: int = logging.INFO) -> int:
    level = getattr(logging, (name or "").strip().upper(), default)
    return level if isinstance(level, int) else default


def configure_logging(
    level: str | None = None,
    *,
    error_log: Optional[Path] = None,
    max_bytes: int = 1_000_000,
    backup_count: int = 5,
) -> None:
    """Configure console logging and, optionally, a rotating error log."""

    resolved = _level_from_name(level)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(resolved)

    if error_log is None:
        return

    target = error_log.resolve()
    for handler in root.handlers:
        if isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename).resolve() == target:
            return

    target.parent.mkdir(parents=True, exist_ok=True)
    error_handler = RotatingFileHandler(
        target,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(logging.Formatter(_FILE_LOG_FORMAT))
    root.addHandler(error_handler)
