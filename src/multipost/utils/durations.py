"""
Module: durations.py
Description: Parsing of Go-style duration strings.

Accepts the same spellings as the flags of the original command line
tool, e.g. "30s", "15m", "1h30m", "1.5h", "250ms", as well as plain
numbers, which are taken as seconds.
"""

import re
from typing import Union

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Convert a duration to seconds.

    Args:
        value: Number of seconds, or a duration string like "1m30s"

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the string is not a valid duration
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip()
    if not text:
        raise ValueError("invalid duration: empty string")

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return 0.0

    try:
        return sign * float(text)
    except ValueError:
        pass

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()

    return sign * total
