"""Location registration API."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from location_service.exceptions import DependencyUnavailableError, LocationValidationError, PrimaryStoreError
from location_service.firestore import build_location_record
from location_service.schemas import ErrorResponse, LocationRegisteredResponse, LocationReport
from location_service.stores import DocumentStore
from location_service.validation import validate_location_body

logger = logging.getLogger(__name__)

router = APIRouter(tags=["locations"])

HEALTH_GATE_TIMEOUT_SECONDS = 3.0
BODY_READ_ERROR_MESSAGE = "error reading request data"


def _json(status_code: int, model: BaseModel) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=model.model_dump(by_alias=True, mode="json", exclude_none=True),
    )


async def check_primary_health(store: DocumentStore) -> None:
    """Probe the document store, raising when it is slow or unreachable."""

    try:
        await asyncio.wait_for(store.probe(), timeout=HEALTH_GATE_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as exc:
        logger.warning("Firestore health check timeout (%.0fms)", HEALTH_GATE_TIMEOUT_SECONDS * 1000)
        raise DependencyUnavailableError("firestore timeout") from exc
    except Exception as exc:
        logger.error("Firestore health check failed: %s", exc)
        raise DependencyUnavailableError(f"firestore unavailable: {exc}") from exc


async def save_primary(store: DocumentStore, report: LocationReport) -> None:
    try:
        await store.upsert(report.vehicle_id, build_location_record(report))
    except PrimaryStoreError:
        raise
    except Exception as exc:
        raise PrimaryStoreError(f"database error: {exc}") from exc

    logger.info(
        "Location stored - vehicle: %s, lat: %s, lon: %s",
        report.vehicle_id,
        report.latitude,
        report.longitude,
    )


@router.post("/location", summary="Register a vehicle location")
async def register_location(request: Request) -> JSONResponse:
    """Validate a location, store it in Firestore and mirror it to SQL."""

    state = request.app.state
    logger.info("Processing location registration")

    if state.settings.enable_health_check:
        try:
            await check_primary_health(state.document_store)
        except DependencyUnavailableError as exc:
            logger.warning("Service health check failed: %s", exc)
            return _json(503, ErrorResponse(error=f"service temporarily unavailable: {exc}"))

    try:
        body = await request.body()
    except Exception:
        logger.exception("Failed to read request body")
        return _json(400, ErrorResponse(error="validation failed", errors=[BODY_READ_ERROR_MESSAGE]))

    try:
        report = validate_location_body(body)
        await save_primary(state.document_store, report)
    except LocationValidationError as exc:
        logger.warning("Location rejected: %s", exc)
        return _json(400, ErrorResponse(error="validation failed", errors=exc.errors))
    except PrimaryStoreError as exc:
        logger.error("Firestore save failed: %s", exc)
        return _json(500, ErrorResponse(error="failed to save to primary store", details=str(exc)))
    except Exception:
        logger.exception("Unexpected error registering location")
        return _json(500, ErrorResponse(error="internal server error"))

    writer = state.secondary_writer
    if writer is None:
        logger.debug("SQL connection string not configured, skipping SQL write")
    else:
        writer.submit(report)

    logger.info("Location registered for vehicle %s", report.vehicle_id)
    return _json(
        200,
        LocationRegisteredResponse(vehicle_id=report.vehicle_id, timestamp=datetime.now(tz=timezone.utc)),
    )
