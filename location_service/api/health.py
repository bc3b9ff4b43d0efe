"""Backing store health API."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from location_service.services.health import combined_health, status_code_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", summary="Service health check")
async def health(request: Request) -> JSONResponse:
    """Return aggregated store health, 503 when Firestore is down."""

    logger.info("Health check initiated")
    state = request.app.state

    try:
        report = await combined_health(state.document_store, state.relational_store)
        status_code = status_code_for(report.status)
    except Exception:
        logger.exception("Health check aggregation failed")
        return JSONResponse(status_code=500, content={"error": "internal server error"})

    logger.info("Health check completed: %s", report.status.value)
    return JSONResponse(status_code=status_code, content=report.model_dump(by_alias=True, mode="json"))
