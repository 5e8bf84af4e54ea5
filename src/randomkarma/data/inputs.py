"""Validation for numeric text inputs."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T", int, float)

MAX_PLAYER_COUNT = 250


class InputValidationError(ValueError):
    """Raised when a text input is not an acceptable number."""


def validate_numeric_input(
    text: str,
    *,
    field_name: str,
    cast: Callable[[str], T] = int,
    minimum: T | None = None,
    maximum: T | None = None,
) -> T:
    """Parse ``text`` with ``cast`` and check optional inclusive bounds."""
    trimmed = text.strip()
    if not trimmed:
        raise InputValidationError(f"{field_name} cannot be empty")

    try:
        value = cast(trimmed)
    except ValueError as exc:
        raise InputValidationError(f"{field_name} must be a valid number") from exc

    if minimum is not None and value < minimum:
        raise InputValidationError(f"{field_name} must be at least {minimum}")
    if maximum is not None and value > maximum:
        raise InputValidationError(f"{field_name} cannot exceed {maximum}")
    return value


def validate_lap_count(text: str, max_items: int) -> int:
    return validate_numeric_input(text, field_name="Lap count", minimum=1, maximum=max_items)


def validate_player_count(text: str, max_players: int = MAX_PLAYER_COUNT) -> int:
    return validate_numeric_input(text, field_name="Player count", minimum=0, maximum=max_players)
