"""Input parsing: durations, numeric inputs and item files."""

from .durations import DurationParseError, format_ms, parse_lap_time, parse_time_to_ms
from .inputs import (
    InputValidationError,
    validate_lap_count,
    validate_numeric_input,
    validate_player_count,
)
from .loader import ItemLoadError, ItemPoolLoader

__all__ = [
    "DurationParseError",
    "InputValidationError",
    "ItemLoadError",
    "ItemPoolLoader",
    "format_ms",
    "parse_lap_time",
    "parse_time_to_ms",
    "validate_lap_count",
    "validate_numeric_input",
    "validate_player_count",
]
