"""Tests for duration parsing and formatting."""

import pytest

from btlr.config import ConfigError, format_duration, parse_duration


@pytest.mark.parametrize(
    ("value", "seconds"),
    [
        ("1s", 1.0),
        ("500ms", 0.5),
        ("1m30s", 90.0),
        ("2h", 7200.0),
        ("1.5h", 5400.0),
        ("250us", 0.00025),
        ("0", 0.0),
        ("12", 12.0),
        ("2.5", 2.5),
        (" 3s ", 3.0),
        (4, 4.0),
        (0.25, 0.25),
    ],
)
def test_parse_duration(value: str | int | float, seconds: float) -> None:
    assert parse_duration(value) == pytest.approx(seconds)


@pytest.mark.parametrize("value", ["", "s", "1x", "1s2", "-1s", "-3", "nan", "inf", "1 s", True])
def test_parse_duration_rejects_invalid(value: str | bool) -> None:
    with pytest.raises(ConfigError):
        _ = parse_duration(value)


@pytest.mark.parametrize(
    ("seconds", "rendered"),
    [(1.0, "1s"), (0.2, "0.2s"), (90.0, "1m30s"), (3600.0, "1h0m"), (3725.0, "1h2m5s")],
)
def test_format_duration(seconds: float, rendered: str) -> None:
    assert format_duration(seconds) == rendered
