"""Tests for credential redaction in log text, URLs and structured args."""

from __future__ import annotations

from packager_dashboard.redaction import (
    REDACTED,
    redact_url,
    sanitize_for_logging,
    sanitize_text,
)


def test_sanitize_text_masks_bearer_and_inline_secrets() -> None:
    text = sanitize_text("Authorization: Bearer abc.def api_key=xyz ok=1")
    assert "abc.def" not in text
    assert "xyz" not in text
    assert "ok=1" in text


def test_redact_url_masks_only_sensitive_params() -> None:
    url = redact_url("/index.bundle?platform=ios&access_token=s3cr3t&dev=true")
    assert url == f"/index.bundle?platform=ios&access_token={REDACTED}&dev=true"


def test_redact_url_leaves_plain_urls_untouched() -> None:
    assert redact_url("/index.bundle?platform=android") == "/index.bundle?platform=android"
    assert redact_url("/status") == "/status"


def test_sanitize_for_logging_walks_nested_values() -> None:
    value = {"headers": {"Authorization": "Bearer x"}, "items": [("password=p",)]}
    cleaned = sanitize_for_logging(value)
    assert cleaned["headers"]["Authorization"] == REDACTED
    assert cleaned["items"][0][0] == f"password={REDACTED}"
