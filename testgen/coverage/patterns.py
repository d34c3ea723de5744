"""Glob-like include/exclude matching over fully-qualified class names."""

from __future__ import annotations

import re
from typing import Iterable


def matches(name: str, pattern: str) -> bool:
    """Return True when ``name`` matches the glob-like ``pattern``.

    ``*`` matches any run of characters, including package separators, so it
    plays the role ``**`` has in path globs. ``/`` in a pattern is read as the
    package separator, which lets path-style patterns such as
    ``**/*Application`` apply to dotted class names.
    """
    pattern = pattern.strip().replace("/", ".")
    if not pattern:
        return False
    if pattern.endswith("*"):
        prefix = pattern[:-1]
        if "*" not in prefix:
            return name.startswith(prefix)
    elif pattern.startswith("*"):
        suffix = pattern[1:]
        if "*" not in suffix:
            return name.endswith(suffix)
    elif "*" not in pattern:
        return name == pattern
    return _compile(pattern).fullmatch(name) is not None


def is_included(name: str, patterns: Iterable[str]) -> bool:
    """Empty pattern sets include everything; otherwise any match includes."""
    pattern_list = list(patterns)
    if not pattern_list:
        return True
    return any(matches(name, pattern) for pattern in pattern_list)


def is_excluded(name: str, patterns: Iterable[str]) -> bool:
    return any(matches(name, pattern) for pattern in patterns)


def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")))


__all__ = ["is_excluded", "is_included", "matches"]
