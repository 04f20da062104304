from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(value: str | None) -> str:
    return _WHITESPACE.sub(" ", value or "").strip()


def display_name_pattern(user_name: str, suffix: str = "님") -> re.Pattern[str]:
    """Pattern for a rendered ``{name} 님`` label, tolerant of padding and line breaks."""

    return re.compile(rf"^\s*{re.escape(user_name)}\s*{re.escape(suffix)}\s*$")


def text_matches(actual: str | None, expected: str | re.Pattern[str]) -> bool:
    if isinstance(expected, re.Pattern):
        return expected.search(actual or "") is not None
    return normalize_whitespace(actual) == normalize_whitespace(expected)


def describe_pattern(expected: str | re.Pattern[str]) -> str:
    if isinstance(expected, re.Pattern):
        return f"/{expected.pattern}/"
    return expected
