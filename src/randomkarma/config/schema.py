"""Pydantic schemas for engine and calculation configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_TIMEOUT_MS = 5000.0
DEFAULT_TOLERANCE_PERCENT = 0.5


class SubsetCalculationConfig(BaseModel):
    """Parameters of a single multi-run calculation.

    Zero counts and a zero target are accepted; the engine gives them a
    degenerate but well-defined result.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    target: int = Field(default=0, ge=0)
    lap_count: int = Field(default=0, ge=0)
    player_count: int = Field(default=0, ge=0)
    timeout_ms: float = Field(default=DEFAULT_TIMEOUT_MS, ge=0.0)
    tolerance_percent: float = Field(default=DEFAULT_TOLERANCE_PERCENT, ge=0.0)


class EngineConfig(BaseModel):
    """Validated runtime configuration with defaults."""

    model_config = ConfigDict(extra="forbid")

    items_csv: str = "items.csv"
    id_column: int = Field(default=0, ge=0)
    time_column: int = Field(default=1, ge=0)
    start_line: int = Field(default=1, ge=0)

    default_lap_count: int = Field(default=25, ge=1)
    default_player_count: int = Field(default=32, ge=0)
    default_target_ms: int = Field(default=2_800_000, ge=0)
    default_timeout_sec: float = Field(default=5.0, ge=1.0, le=30.0)
    default_tolerance_pct: float = Field(default=0.5, ge=0.1, le=5.0)

    max_player_count: int = Field(default=250, ge=1)
    slider_max_index: int = Field(default=99, ge=1)
    workers: int = Field(default=4, ge=1)
    seed: int | None = None

    @model_validator(mode="after")
    def _check_columns(self) -> EngineConfig:
        if self.id_column == self.time_column:
            raise ValueError("id_column and time_column must differ.")
        if self.default_player_count > self.max_player_count:
            raise ValueError("default_player_count cannot exceed max_player_count.")
        return self

    def calculation(
        self,
        *,
        target: int | None = None,
        lap_count: int | None = None,
        player_count: int | None = None,
        timeout_sec: float | None = None,
        tolerance_pct: float | None = None,
    ) -> SubsetCalculationConfig:
        """Build a calculation config, falling back to the configured defaults."""
        seconds = self.default_timeout_sec if timeout_sec is None else timeout_sec
        return SubsetCalculationConfig(
            target=self.default_target_ms if target is None else target,
            lap_count=self.default_lap_count if lap_count is None else lap_count,
            player_count=self.default_player_count if player_count is None else player_count,
            timeout_ms=seconds * 1000.0,
            tolerance_percent=self.default_tolerance_pct if tolerance_pct is None else tolerance_pct,
        )
