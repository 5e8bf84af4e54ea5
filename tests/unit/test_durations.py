from __future__ import annotations

import pytest

from randomkarma.data.durations import DurationParseError, format_ms, parse_lap_time, parse_time_to_ms


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("150000", 150_000),
        ("2:30", 150_000),
        ("2m30s", 150_000),
        ("2m 30s", 150_000),
        ("150s", 150_000),
        ("2:30.5", 150_500),
        (" 47:30.000 ", 2_850_000),
    ],
)
def test_parse_time_to_ms_accepts_supported_forms(text, expected):
    assert parse_time_to_ms(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "1:61", "1m61s", "1:61.000", "2:30.1234"])
def test_parse_time_to_ms_rejects_invalid_input(text):
    with pytest.raises(DurationParseError):
        parse_time_to_ms(text)


def test_format_and_parse_agree():
    assert format_ms(150_000) == "02:30.000"
    assert parse_time_to_ms(format_ms(150_000)) == 150_000
    assert format_ms(3_723_004) == "62:03.004"


def test_format_ms_rejects_negative():
    with pytest.raises(ValueError):
        format_ms(-1)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("01:23.456", 83_456),
        ("1:23.4", 83_400),
        ("1:23.45", 83_450),
        ("0:00.000", 0),
    ],
)
def test_parse_lap_time(text, expected):
    assert parse_lap_time(text) == expected


@pytest.mark.parametrize("text", ["1:23", "1:23.4567", "1:75.000", "a:23.000", "1:2:3.000", "1:xx.000"])
def test_parse_lap_time_rejects_malformed_values(text):
    with pytest.raises(DurationParseError):
        parse_lap_time(text)
