"""Helpers for redacting credentials from logs and rendered request lines."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

REDACTED = "[REDACTED]"

_SENSITIVE_KEY_RE = re.compile(
    r"(authorization|token|secret|signature|password|private[_-]?key|bearer|api[_-]?key)",
    re.IGNORECASE,
)
_BEARER_RE = re.compile(r"(?i)\b(bearer)\s+[A-Za-z0-9\-._~+/]+=*")
_INLINE_SECRET_RE = re.compile(
    r"(?i)\b([a-z_]*token|secret|signature|password|api[_-]?key|authorization)"
    r"\s*[:=]\s*([^\s,;&]+)"
)


def is_sensitive_key(key: str) -> bool:
    return _SENSITIVE_KEY_RE.search(key) is not None


def sanitize_text(text: str) -> str:
    """Mask bearer tokens and `key=value` credentials embedded in free text."""
    masked = _BEARER_RE.sub(r"\1 " + REDACTED, text)
    return _INLINE_SECRET_RE.sub(lambda m: f"{m.group(1)}={REDACTED}", masked)


def redact_url(url: str) -> str:
    """Mask credential-looking query parameters while keeping the rest of the URL."""
    parts = urlsplit(url)
    if not parts.query:
        return sanitize_text(url)
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    if not any(is_sensitive_key(key) for key, _ in pairs):
        return url
    query = urlencode(
        [(key, REDACTED if is_sensitive_key(key) else value) for key, value in pairs],
        safe="[]",
    )
    return urlunsplit(parts._replace(query=query))


def sanitize_for_logging(value: Any) -> Any:
    """Recursively redact sensitive values in runtime log arguments."""
    if isinstance(value, Mapping):
        return {
            key: REDACTED if is_sensitive_key(str(key)) else sanitize_for_logging(child)
            for key, child in value.items()
        }
    if isinstance(value, list):
        return [sanitize_for_logging(item) for item in value]
    if isinstance(value, tuple):
        return tuple(sanitize_for_logging(item) for item in value)
    if isinstance(value, str):
        return sanitize_text(value)
    return value
