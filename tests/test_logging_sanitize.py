import logging
from logging.handlers import RotatingFileHandler

import pytest

from src.utils.logging import configure_logging, sanitize_log_message


@pytest.mark.parametrize(
    "raw, leaked",
    [
        ("Authorization: KakaoAK SECRET123", "SECRET123"),
        ("authorization=Bearer SECRET123", "SECRET123"),
        ("https://example.com?api_key=SECRET123&x=1", "SECRET123"),
        ("rest_key: SECRET123", "SECRET123"),
        ("service_role_key=SECRET123", "SECRET123"),
        ("token=SECRET123", "SECRET123"),
    ],
)
def test_sanitize_masks_credentials(raw, leaked):
    sanitized = sanitize_log_message(raw)
    assert leaked not in sanitized
    assert "***" in sanitized


def test_sanitize_keeps_parameter_names():
    assert sanitize_log_message("api_key=SECRET123&x=1") == "api_key=***&x=1"
    assert sanitize_log_message("header KakaoAK abc.def") == "header KakaoAK ***"


def test_sanitize_masks_explicit_secrets():
    assert sanitize_log_message("key is plain-secret!", secrets=["plain-secret", ""]) == "key is ***!"


def test_sanitize_escapes_control_characters():
    sanitized = sanitize_log_message("line1\nline2\r\tend\x07\x1b[31mred\x1b[0m")
    assert sanitized == "line1\\nline2\\r\\tendred"


def test_sanitize_can_keep_control_characters():
    assert sanitize_log_message("a\nb", strip_control_chars=False) == "a\nb"


def test_sanitize_empty():
    assert sanitize_log_message("") == ""


def test_configure_logging_adds_single_error_handler(tmp_path):
    root = logging.getLogger()
    previous_level = root.level
    target = tmp_path / "logs" / "errors.log"
    try:
        configure_logging("warning", error_log=target)
        configure_logging("warning", error_log=target)

        handlers = [
            handler
            for handler in root.handlers
            if isinstance(handler, RotatingFileHandler) and handler.baseFilename == str(target.resolve())
        ]
        assert len(handlers) == 1
        assert handlers[0].level == logging.ERROR
        assert root.level == logging.WARNING

        logging.getLogger("places.test").error("boom %s", "here")
        handlers[0].flush()
        assert "ERROR places.test: boom here" in target.read_text(encoding="utf-8")
    finally:
        for handler in list(root.handlers):
            if isinstance(handler, RotatingFileHandler):
                root.removeHandler(handler)
                handler.close()
        root.setLevel(previous_level)


def test_configure_logging_unknown_level_defaults_to_info():
    root = logging.getLogger()
    previous_level = root.level
    try:
        configure_logging("chatty")
        assert root.level == logging.INFO
    finally:
        root.setLevel(previous_level)
