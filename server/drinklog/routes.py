"""
HTTP routes for the drink log API.
"""

from __future__ import annotations

from contextlib import contextmanager

from fastapi import APIRouter, Depends

from drinklog import services
from drinklog.config import Settings
from drinklog.dependencies import get_app_settings, get_document_store
from drinklog.errors import DrinkLogError, utc_timestamp
from drinklog.rate_limiter import rate_limit_api
from drinklog.schemas import (
    HealthResponse,
    ImportRequest,
    ImportResponse,
    LoadResponse,
    SaveRequest,
    SaveResponse,
    StatsResponse,
)
from drinklog.storage import DocumentStore

health_router = APIRouter()
router = APIRouter(dependencies=[Depends(rate_limit_api)])


def available_endpoints(api_prefix: str) -> list[str]:
    return [
        "GET /health",
        f"GET {api_prefix}/load",
        f"POST {api_prefix}/save",
        f"GET {api_prefix}/stats",
        f"POST {api_prefix}/import",
    ]


@contextmanager
def _failure_message(message: str):
    try:
        yield
    except DrinkLogError as exc:
        if exc.operation is None:
            exc.operation = message
        raise


@health_router.get("/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_app_settings)):
    return HealthResponse(
        status="healthy", timestamp=utc_timestamp(), service=settings.service_name
    )


@router.get("/load", response_model=LoadResponse)
def load(store: DocumentStore = Depends(get_document_store)):
    with _failure_message("Failed to load data"):
        data = services.load_document(store)
    return LoadResponse(timestamp=utc_timestamp(), data=data)


@router.post("/save", response_model=SaveResponse)
def save(payload: SaveRequest, store: DocumentStore = Depends(get_document_store)):
    with _failure_message("Failed to save data"):
        date = services.save_day(store, payload.date, payload.data)
    return SaveResponse(
        message="Data saved successfully", timestamp=utc_timestamp(), date=date
    )


@router.get("/stats", response_model=StatsResponse)
def stats(store: DocumentStore = Depends(get_document_store)):
    with _failure_message("Failed to compute statistics"):
        derived = services.compute_stats(store)
    return StatsResponse(timestamp=utc_timestamp(), stats=derived.as_dict())


@router.post("/import", response_model=ImportResponse)
def import_data(
    payload: ImportRequest, store: DocumentStore = Depends(get_document_store)
):
    with _failure_message("Failed to import data"):
        count = services.import_days(store, payload.data)
    return ImportResponse(
        message=f"Imported {count} days of data",
        timestamp=utc_timestamp(),
        imported=count,
    )
