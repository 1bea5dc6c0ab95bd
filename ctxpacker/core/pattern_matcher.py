# ctxpacker/core/pattern_matcher.py
"""
Gitignore-style matching of a single relative path against a single pattern.

Supported syntax: literal names, ``*``, ``?``, ``[...]``, trailing ``/``
(directory pattern), leading ``/`` (rooted pattern) and ``**``. Negated
patterns (``!foo``) never match. All comparisons ignore case.
"""

from __future__ import annotations

import os
import re
from functools import lru_cache
from typing import Optional, Pattern

_WILDCARD_CHARS = ("*", "?", "[")


def normalize_path(path: str) -> str:
    """Forward slashes only."""
    path = path.replace("\\", "/")
    if os.sep != "/":
        path = path.replace(os.sep, "/")
    return path


@lru_cache(maxsize=4096)
def _compile_glob(pattern: str) -> Optional[Pattern[str]]:
    """Translate a single-level glob into an anchored, case-insensitive regex."""
    parts = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        elif c == "[":
            close = pattern.find("]", i + 1)
            if close > i:
                # character class goes to the regex engine untouched
                parts.append(pattern[i:close + 1])
                i = close
            else:
                parts.append(re.escape(c))
        else:
            parts.append(re.escape(c))
        i += 1
    try:
        return re.compile("^" + "".join(parts) + "$", re.IGNORECASE)
    except re.error:
        return None


@lru_cache(maxsize=1024)
def _compile_double_star(pattern: str) -> Optional[Pattern[str]]:
    regex = (
        re.escape(pattern)
        .replace(r"\*\*", ".*")
        .replace(r"\*", "[^/]*")
        .replace(r"\?", "[^/]")
    )
    try:
        return re.compile("^" + regex + "$", re.IGNORECASE)
    except re.error:
        return None


def matches_glob(text: str, pattern: str) -> bool:
    compiled = _compile_glob(pattern)
    return bool(compiled and compiled.match(text))


def has_wildcards(pattern: str) -> bool:
    return any(ch in pattern for ch in _WILDCARD_CHARS)


def matches(relative_path: str, pattern: str) -> bool:
    """Return True if ``relative_path`` is matched by the gitignore-style ``pattern``."""
    if not pattern or not pattern.strip():
        return False

    pattern = pattern.strip()

    # negation is not supported: a "!" pattern never ignores anything
    if pattern.startswith("!"):
        return False

    path = normalize_path(relative_path).rstrip("/")
    clean = pattern.rstrip("/")

    rooted = clean.startswith("/")
    if rooted:
        clean = clean.lstrip("/")

    path_l = path.lower()
    clean_l = clean.lower()

    if "**/" in clean:
        clean = clean.replace("**/", "")
        clean_l = clean.lower()
        return (
            matches_glob(path, clean)
            or ("/" + clean_l) in path_l
            or path_l.endswith("/" + clean_l)
        )

    if "**" in clean:
        compiled = _compile_double_star(clean)
        return bool(compiled and compiled.match(path))

    if has_wildcards(clean):
        if matches_glob(path, clean):
            return True
        if not rooted:
            return any(matches_glob(part, clean) for part in path.split("/"))
        return False

    if rooted:
        return path_l == clean_l or path_l.startswith(clean_l + "/")

    if path_l == clean_l:
        return True
    if any(part == clean_l for part in path_l.split("/")):
        return True
    return (
        ("/" + clean_l + "/") in path_l
        or path_l.endswith("/" + clean_l)
        or path_l.startswith(clean_l + "/")
    )


def matches_any(relative_path: str, patterns) -> bool:
    return any(matches(relative_path, p) for p in patterns)
