"""Input sanitization helpers for request payloads."""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")


def _strip_control_chars(value: str) -> str:
    return "".join(ch for ch in value if unicodedata.category(ch) != "Cc")


def clean_single_line(value: object) -> object:
    # Non-strings pass through untouched so the schema type check rejects them.
    if not isinstance(value, str):
        return value
    value = value.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")
    value = _strip_control_chars(value).strip()
    return _WHITESPACE_RE.sub(" ", value)


def clean_email(value: object) -> object:
    cleaned = clean_single_line(value)
    return cleaned.lower() if isinstance(cleaned, str) else cleaned
