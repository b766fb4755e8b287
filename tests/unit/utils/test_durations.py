"""
Module: test_durations.py
Description: Unit tests for Go-style duration parsing.
"""

import pytest

from multipost.utils.durations import parse_duration


@pytest.mark.parametrize("value,expected", [
    ("30s", 30.0),
    ("15m", 900.0),
    ("1h30m", 5400.0),
    ("1.5h", 5400.0),
    ("250ms", 0.25),
    ("2m3.5s", 123.5),
    ("0", 0.0),
    ("45", 45.0),
    (12, 12.0),
    (0.5, 0.5),
    ("-1s", -1.0),
])
def test_parse_duration(value, expected):
    """Test valid durations."""
    assert parse_duration(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", ["", "s", "10x", "1h 30m", "abc", True])
def test_parse_duration_invalid(value):
    """Test invalid durations raise ValueError."""
    with pytest.raises(ValueError):
        parse_duration(value)
