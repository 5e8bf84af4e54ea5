"""Duration text parsing and formatting (milliseconds)."""

from __future__ import annotations

import re

_MIN_SEC_RE = re.compile(r"^(\d+)m\s*(\d+)s$")
_COLON_RE = re.compile(r"^(\d+):(\d+)$")
_SECONDS_RE = re.compile(r"^(\d+)s$")
_COLON_MSEC_RE = re.compile(r"^(\d+):(\d{2})\.(\d{1,3})$")

MAX_SECONDS = 59


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed."""


def _scale_fraction(digits: str) -> int:
    """Interpret 1-3 fractional digits as milliseconds (``4`` → 400, ``43`` → 430)."""
    return int(digits) * (10 ** (3 - len(digits)))


def _check_seconds(seconds: int) -> None:
    if seconds > MAX_SECONDS:
        raise DurationParseError(f"Invalid seconds: {seconds} (must be 0-59)")


def parse_lap_time(text: str) -> int:
    """Parse the strict ``MM:SS.mmm`` field format used by item files."""
    parts = text.split(":")
    if len(parts) != 2:
        raise DurationParseError(f"Invalid lap time format: '{text}', expected MM:SS.mmm")

    minutes_text = parts[0].strip()
    if not minutes_text.isdecimal():
        raise DurationParseError(f"Failed to parse minutes part: '{parts[0]}'")

    seconds_parts = parts[1].split(".")
    if len(seconds_parts) != 2:
        raise DurationParseError(f"Invalid seconds format: '{parts[1]}', expected SS.mmm")

    seconds_text = seconds_parts[0].strip()
    if not seconds_text.isdecimal():
        raise DurationParseError(f"Failed to parse seconds part: '{seconds_parts[0]}'")
    seconds = int(seconds_text)
    _check_seconds(seconds)

    fraction_text = seconds_parts[1].strip()
    if not fraction_text.isdecimal() or len(fraction_text) > 3:
        raise DurationParseError(f"Failed to parse milliseconds part: '{fraction_text}'")

    return int(minutes_text) * 60_000 + seconds * 1_000 + _scale_fraction(fraction_text)


def parse_time_to_ms(text: str) -> int:
    """Parse a user-entered duration into milliseconds.

    Accepted forms: ``150000`` (ms), ``2:30.500``, ``2m30s`` / ``2m 30s``,
    ``2:30`` and ``150s``. Seconds fields above 59 are rejected.
    """
    trimmed = text.strip()
    if not trimmed:
        raise DurationParseError("Time cannot be empty")

    if trimmed.isdecimal():
        return int(trimmed)

    match = _COLON_MSEC_RE.match(trimmed)
    if match:
        seconds = int(match.group(2))
        _check_seconds(seconds)
        return int(match.group(1)) * 60_000 + seconds * 1_000 + _scale_fraction(match.group(3))

    match = _MIN_SEC_RE.match(trimmed) or _COLON_RE.match(trimmed)
    if match:
        seconds = int(match.group(2))
        _check_seconds(seconds)
        return int(match.group(1)) * 60_000 + seconds * 1_000

    match = _SECONDS_RE.match(trimmed)
    if match:
        return int(match.group(1)) * 1_000

    raise DurationParseError("Invalid time format. Use: 2:30, 2m30s, 150s, or 150000")


def format_ms(ms: int) -> str:
    """Format milliseconds as ``MM:SS.mmm``."""
    if ms < 0:
        raise ValueError("ms must be >= 0.")
    total_seconds, milliseconds = divmod(int(ms), 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}.{milliseconds:03d}"
