"""FastAPI app exposing the subset calculator."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, model_validator

from randomkarma.config import EngineConfig, load_config
from randomkarma.data.durations import DurationParseError, format_ms, parse_time_to_ms
from randomkarma.engine.errors import SubsetError

from .service import CalculationFailedError, CalculationService


class CalculateRequest(BaseModel):
    """Request payload for the calculate endpoint.

    ``target`` accepts any supported time text ("47:30.000", "2m30s", raw ms).
    At most one of ``target``, ``target_ms`` and ``slider_index`` may be set.
    """

    lap_count: int | None = Field(default=None, ge=1)
    player_count: int | None = Field(default=None, ge=0)
    target: str | None = None
    target_ms: int | None = Field(default=None, ge=0)
    slider_index: int | None = Field(default=None, ge=0)
    timeout_sec: float | None = Field(default=None, ge=1.0, le=30.0)
    tolerance_pct: float | None = Field(default=None, ge=0.1, le=5.0)
    seed: int | None = Field(default=None, ge=0, le=2_147_483_647)

    @model_validator(mode="after")
    def _single_target_source(self) -> CalculateRequest:
        given = [value for value in (self.target, self.target_ms, self.slider_index) if value is not None]
        if len(given) > 1:
            raise ValueError("Use only one of target, target_ms and slider_index.")
        return self


class PrecacheRequest(BaseModel):
    """Request payload for the precache endpoint."""

    lap_count: int = Field(ge=1)
    player_count: int = Field(ge=0)
    timeout_sec: float | None = Field(default=None, ge=1.0, le=30.0)
    tolerance_pct: float | None = Field(default=None, ge=0.1, le=5.0)


class SubsetItem(BaseModel):
    """One selected item."""

    id: str
    duration_ms: int = Field(ge=0)
    duration: str


class SubsetResult(BaseModel):
    """One run's subset with its totals."""

    run: int = Field(ge=1)
    items: list[SubsetItem]
    sum_ms: int
    sum: str
    accuracy: float


class CalculateMeta(BaseModel):
    """Metadata for calculate response."""

    target: int
    target_label: str
    lap_count: int
    player_count: int
    similarity: float = Field(ge=0.0, le=1.0)
    similarity_pct: float
    cached: bool


class CalculateResponse(BaseModel):
    """Response payload for the calculate endpoint."""

    meta: CalculateMeta
    subsets: list[SubsetResult]
    analysis: dict[str, Any] | None = None


class RangeResponse(BaseModel):
    """Reachable targets for a lap count."""

    lap_count: int
    min: int
    max: int
    step: int
    min_label: str
    max_label: str
    slider_max_index: int


class PrecachePoint(BaseModel):
    """Similarity reached for one swept target."""

    target: int
    similarity: float = Field(ge=0.0, le=1.0)


class PrecacheResponse(BaseModel):
    """Summary of a precache sweep."""

    completed: int
    skipped: int
    failed_targets: list[int]
    points: list[PrecachePoint]


app = FastAPI(title="RandomKarma", version="0.1.0")


def get_cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env."""

    raw = os.getenv("CORS_ALLOW_ORIGINS", "*").strip()
    if raw == "*":
        return ["*"]
    return [item.strip() for item in raw.split(",") if item.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_service() -> CalculationService:
    """Return singleton calculation service."""

    config_path = os.getenv("RANDOMKARMA_CONFIG", "").strip()
    config = load_config(config_path) if config_path else EngineConfig()
    items_csv = os.getenv("RANDOMKARMA_ITEMS_CSV", "").strip() or config.items_csv
    return CalculationService(items_csv, config=config)


@app.get("/api/range", response_model=RangeResponse)
def target_range(lap_count: int = Query(ge=1)) -> RangeResponse:
    """Return the reachable target range for ``lap_count``."""

    try:
        return RangeResponse.model_validate(get_service().target_range(lap_count))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/api/calculate", response_model=CalculateResponse)
def calculate(payload: CalculateRequest) -> CalculateResponse:
    """Compute (or serve cached) subsets for the payload."""

    try:
        target_ms = payload.target_ms
        if payload.target is not None:
            target_ms = parse_time_to_ms(payload.target)
        result = get_service().calculate(
            lap_count=payload.lap_count,
            player_count=payload.player_count,
            target_ms=target_ms,
            slider_index=payload.slider_index,
            timeout_sec=payload.timeout_sec,
            tolerance_pct=payload.tolerance_pct,
            seed=payload.seed,
        )
        return CalculateResponse.model_validate(result)
    except (CalculationFailedError, SubsetError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except FileNotFoundError as exc:
        raise HTTPException(status_code=500, detail=f"Item file not found: {exc}") from exc


@app.post("/api/precache", response_model=PrecacheResponse)
def precache(payload: PrecacheRequest) -> PrecacheResponse:
    """Sweep every slider target for the payload's parameters into the cache."""

    try:
        result = get_service().precache(
            lap_count=payload.lap_count,
            player_count=payload.player_count,
            timeout_sec=payload.timeout_sec,
            tolerance_pct=payload.tolerance_pct,
        )
        return PrecacheResponse.model_validate(result)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/api/cache")
def cache_status(
    lap_count: int | None = Query(default=None, ge=1),
    player_count: int | None = Query(default=None, ge=0),
) -> dict[str, object]:
    """Inspect the result cache."""

    return {"cache": get_service().cache_status(lap_count, player_count)}


@app.delete("/api/cache")
def clear_cache() -> dict[str, object]:
    """Drop every cached result."""

    return {"cleared": get_service().clear_cache()}


@app.get("/api/parse-time")
def parse_time(value: str) -> dict[str, object]:
    """Parse a time string into milliseconds."""

    try:
        ms = parse_time_to_ms(value)
    except DurationParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ms": ms, "formatted": format_ms(ms)}
