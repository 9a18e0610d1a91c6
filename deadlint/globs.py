"""Glob matching for project-relative paths.

Patterns follow the usual JavaScript tooling conventions:

* ``*`` and ``?`` never cross a ``/`` boundary;
* a ``**`` segment matches zero or more whole path segments;
* ``[abc]`` / ``[!abc]`` character classes;
* ``{a,b}`` brace alternatives, which may nest.

A leading ``./`` is ignored on both the pattern and the path.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Pattern


def matches(path: str, pattern: str) -> bool:
    """Return True when the ``/``-separated ``path`` matches ``pattern``."""
    normalized = _strip_dot_prefix(path.replace("\\", "/"))
    return any(regex.fullmatch(normalized) for regex in _compile(pattern))


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    return any(matches(path, pattern) for pattern in patterns)


@lru_cache(maxsize=512)
def _compile(pattern: str) -> tuple[Pattern[str], ...]:
    return tuple(re.compile(_translate(expanded)) for expanded in expand_braces(pattern))


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternatives into separate patterns."""
    start = _find_brace_group(pattern)
    if start is None:
        return [pattern]
    open_index, close_index, options = start
    prefix = pattern[:open_index]
    suffix = pattern[close_index + 1 :]
    expanded: List[str] = []
    for option in options:
        expanded.extend(expand_braces(prefix + option + suffix))
    return expanded


def _find_brace_group(pattern: str) -> tuple[int, int, List[str]] | None:
    index = 0
    while index < len(pattern):
        if pattern[index] != "{":
            index += 1
            continue
        depth = 0
        options: List[str] = []
        current: List[str] = []
        for cursor in range(index, len(pattern)):
            char = pattern[cursor]
            if char == "{":
                depth += 1
                if depth == 1:
                    continue
            elif char == "}":
                depth -= 1
                if depth == 0:
                    options.append("".join(current))
                    if len(options) > 1:
                        return index, cursor, options
                    break
            elif char == "," and depth == 1:
                options.append("".join(current))
                current = []
                continue
            current.append(char)
        index += 1
    return None


def _translate(pattern: str) -> str:
    segments = _strip_dot_prefix(pattern).split("/")
    if segments == ["**"]:
        return ".*"

    regex = ""
    last = len(segments) - 1
    for position, segment in enumerate(segments):
        if segment == "**":
            if position == last:
                # "dir/**" matches the directory itself and everything below it.
                regex = regex[:-1] + "(?:/.*)?"
            else:
                regex += "(?:[^/]+/)*"
            continue
        regex += _translate_segment(segment)
        if position != last:
            regex += "/"
    return regex


def _translate_segment(segment: str) -> str:
    parts: List[str] = []
    index = 0
    length = len(segment)
    while index < length:
        char = segment[index]
        if char == "*":
            while index + 1 < length and segment[index + 1] == "*":
                index += 1
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            close = segment.find("]", index + 2)
            if close == -1:
                parts.append(re.escape(char))
            else:
                body = segment[index + 1 : close]
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append("[" + body.replace("\\", "\\\\") + "]")
                index = close
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


def _strip_dot_prefix(value: str) -> str:
    while value.startswith("./"):
        value = value[2:]
    return value


__all__ = ["expand_braces", "matches", "matches_any"]
