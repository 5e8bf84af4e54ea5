from __future__ import annotations

import pytest

from randomkarma.data.inputs import (
    InputValidationError,
    validate_lap_count,
    validate_numeric_input,
    validate_player_count,
)


def test_numeric_input_is_trimmed_and_cast():
    assert validate_numeric_input(" 5 ", field_name="Laps") == 5
    assert validate_numeric_input("2.5", field_name="Tolerance", cast=float, minimum=0.1, maximum=5.0) == 2.5


def test_numeric_input_errors_name_the_field():
    with pytest.raises(InputValidationError, match="Laps cannot be empty"):
        validate_numeric_input("", field_name="Laps")
    with pytest.raises(InputValidationError, match="Laps must be a valid number"):
        validate_numeric_input("abc", field_name="Laps")
    with pytest.raises(InputValidationError, match="at least 1"):
        validate_numeric_input("0", field_name="Laps", minimum=1)


def test_lap_count_bounded_by_pool_size():
    assert validate_lap_count("10", 10) == 10
    with pytest.raises(InputValidationError):
        validate_lap_count("0", 10)
    with pytest.raises(InputValidationError, match="cannot exceed 10"):
        validate_lap_count("11", 10)


def test_player_count_allows_zero_and_caps_maximum():
    assert validate_player_count("0") == 0
    assert validate_player_count("250") == 250
    with pytest.raises(InputValidationError):
        validate_player_count("251")
