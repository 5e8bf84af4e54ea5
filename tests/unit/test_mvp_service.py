"""Tests for calculation service behavior."""

from __future__ import annotations

import pytest

from randomkarma.config import EngineConfig
from randomkarma.engine.models import ItemPool
from randomkarma.mvp.service import CalculationFailedError, CalculationService


def _make_service(**overrides) -> CalculationService:
    settings = dict(
        default_lap_count=3,
        default_player_count=2,
        default_target_ms=60,
        default_tolerance_pct=5.0,
        workers=1,
        seed=1,
    )
    settings.update(overrides)
    pool = ItemPool.from_durations(range(10, 101, 10))
    return CalculationService(config=EngineConfig(**settings), pool=pool)


def test_calculate_builds_response_and_caches_it() -> None:
    service = _make_service()

    first = service.calculate()
    second = service.calculate()

    assert first["meta"]["target"] == 60
    assert first["meta"]["cached"] is False
    assert first["meta"]["similarity"] == 1.0
    assert len(first["subsets"]) == 2
    assert first["subsets"][0]["sum_ms"] == 60
    assert first["subsets"][0]["accuracy"] == 100.0
    assert {item["id"] for item in first["subsets"][0]["items"]} == {"item-0", "item-1", "item-2"}
    assert first["analysis"]["total_runs"] == 2
    assert second["meta"]["cached"] is True
    assert second["subsets"] == first["subsets"]


def test_target_range_and_slider_resolution() -> None:
    service = _make_service()

    payload = service.target_range(3)

    assert payload["min"] == 60
    assert payload["max"] == 270
    assert payload["step"] == 3
    assert payload["min_label"] == "00:00.060"
    assert service.resolve_target(3, slider_index=0) == 60
    assert service.resolve_target(3, slider_index=99) == 270
    assert service.resolve_target(3, target_ms=123) == 123
    assert service.resolve_target(3) == 60


def test_invalid_counts_raise_value_error() -> None:
    service = _make_service()

    with pytest.raises(ValueError, match="lap_count"):
        service.calculate(lap_count=11)
    with pytest.raises(ValueError, match="player_count"):
        service.calculate(player_count=251)
    with pytest.raises(ValueError, match="slider_index"):
        service.calculate(slider_index=100)


def test_engine_failure_raises_and_is_not_cached() -> None:
    service = _make_service()

    with pytest.raises(CalculationFailedError, match="Calculation failed"):
        service.calculate(target_ms=1_000)
    assert len(service.cache) == 0


def test_zero_players_returns_empty_result() -> None:
    service = _make_service()

    result = service.calculate(player_count=0)

    assert result["subsets"] == []
    assert result["analysis"] is None
    assert result["meta"]["similarity"] == 0.0


def test_cache_status_and_clear() -> None:
    service = _make_service()
    service.calculate()

    assert service.cache_status() == {"entries": 1}
    assert service.cache_status(3, 2)["cached_targets"] == 1
    assert service.clear_cache() == 1
    assert service.cache_status() == {"entries": 0}


def test_precache_reports_sweep() -> None:
    config = EngineConfig(slider_max_index=4, workers=1, seed=7)
    service = CalculationService(config=config, pool=ItemPool.from_durations([10, 20, 30, 40]))

    report = service.precache(lap_count=2, player_count=1)

    assert report["completed"] == 5
    assert report["failed_targets"] == []
    assert service.cache_status(2, 1)["cached_targets"] == 5


def test_service_loads_items_from_csv(tmp_path) -> None:
    csv_path = tmp_path / "items.csv"
    csv_path.write_text("id,time\na,00:01.000\nb,00:02.000\n", encoding="utf-8")

    service = CalculationService(csv_path, config=EngineConfig(default_lap_count=1))

    assert len(service.pool) == 2
    assert service.target_range(1)["max"] == 2_000
