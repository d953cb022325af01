"""Duration parsing and pretty printing helpers."""

from __future__ import annotations

import re

from core.errors import InvalidInputError

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h|d)")


def parse_duration(value: str) -> float:
    """Parse a compact duration such as ``"1h30m"`` or ``"45s"`` into seconds.

    Parts must be written back to back with no separators; a bare number or
    any trailing garbage is rejected.
    """

    text = (value or "").strip()
    if not text:
        raise InvalidInputError("empty duration")

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            raise InvalidInputError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise InvalidInputError(f"invalid duration: {value!r}")
    return total


def pretty_format_duration(seconds: float) -> str:
    """Render an age using the largest whole unit, e.g. ``"5m"`` or ``"3d"``."""

    seconds = max(0, int(seconds))
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"
