from __future__ import annotations

import re

# Characters that must be escaped in both Python and JavaScript regex sources.
_REGEX_SPECIALS = set(".^$+()[]{}|\\/")


def glob_to_regex(glob: str) -> str:
    """Translates a URL glob into an anchored regex source.

    ``**`` matches any run of characters, ``*`` any run without ``/`` and
    ``?`` a single character. The result is valid for both ``re`` and
    JavaScript ``RegExp`` so the same pattern can be evaluated in the page.
    """

    parts: list[str] = ["^"]
    index = 0
    while index < len(glob):
        char = glob[index]
        if char == "*":
            if glob.startswith("**", index):
                parts.append(".*")
                index += 2
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append(".")
        elif char in _REGEX_SPECIALS:
            parts.append("\\" + char)
        else:
            parts.append(char)
        index += 1
    parts.append("$")
    return "".join(parts)


def url_matches_glob(url: str, glob: str) -> bool:
    return re.match(glob_to_regex(glob), url) is not None


def compile_url_pattern(pattern: str | re.Pattern[str]) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)
