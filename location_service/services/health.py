"""Health check helpers."""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Mapping

from sqlalchemy.exc import SQLAlchemyError

from location_service.schemas import HealthReport, OverallStatus, ServiceHealthStatus
from location_service.stores import DocumentStore, RelationalStore

logger = logging.getLogger(__name__)

FIRESTORE_SERVICE = "firestore"
RELATIONAL_SERVICE = "sql"

NOT_CONFIGURED_MESSAGE = "Not configured (optional service)"
FIRESTORE_SLOW_THRESHOLD = timedelta(seconds=5)
RELATIONAL_SLOW_THRESHOLD = timedelta(seconds=3)
# must stay above FIRESTORE_SLOW_THRESHOLD
FIRESTORE_PROBE_TIMEOUT = timedelta(seconds=10)

_STATUS_CODES = {
    OverallStatus.HEALTHY: 200,
    OverallStatus.DEGRADED: 200,
    OverallStatus.UNHEALTHY: 503,
}


async def _timed_probe(
    probe: Callable[[], Awaitable[None]],
    *,
    label: str,
    slow_threshold: timedelta,
    connection_errors: tuple[type[BaseException], ...],
) -> ServiceHealthStatus:
    started = time.perf_counter()

    def elapsed() -> timedelta:
        return timedelta(seconds=time.perf_counter() - started)

    try:
        logger.info("Checking %s connectivity...", label)
        await probe()
    except connection_errors as exc:
        logger.error("%s health check failed: %s", label, exc)
        return ServiceHealthStatus(healthy=False, message=f"Connection failed: {exc}", response_time=elapsed())
    except Exception as exc:
        logger.exception("Unexpected error in %s health check", label)
        return ServiceHealthStatus(healthy=False, message=f"Unexpected error: {exc}", response_time=elapsed())

    response_time = elapsed()
    if response_time > slow_threshold:
        logger.warning("%s response time is slow: %.3fs", label, response_time.total_seconds())
        millis = response_time.total_seconds() * 1000
        return ServiceHealthStatus(
            healthy=True,
            message=f"Connected but slow response ({millis:.0f}ms)",
            response_time=response_time,
        )

    return ServiceHealthStatus(healthy=True, message="Connected and responsive", response_time=response_time)


async def document_store_health(store: DocumentStore) -> ServiceHealthStatus:
    """Probe Firestore; every failure counts as a connection failure."""

    async def bounded_probe() -> None:
        timeout = FIRESTORE_PROBE_TIMEOUT.total_seconds()
        try:
            await asyncio.wait_for(store.probe(), timeout=timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(f"no response within {timeout:g}s") from None

    return await _timed_probe(
        bounded_probe,
        label="Firestore",
        slow_threshold=FIRESTORE_SLOW_THRESHOLD,
        connection_errors=(Exception,),
    )


async def relational_store_health(store: RelationalStore | None) -> ServiceHealthStatus:
    """Probe the relational store, which is optional."""

    if store is None:
        logger.warning("SQL connection string not configured")
        return ServiceHealthStatus(healthy=True, message=NOT_CONFIGURED_MESSAGE)

    return await _timed_probe(
        store.probe,
        label="SQL",
        slow_threshold=RELATIONAL_SLOW_THRESHOLD,
        connection_errors=(SQLAlchemyError, OSError, asyncio.TimeoutError),
    )


def aggregate_status(services: Mapping[str, ServiceHealthStatus]) -> OverallStatus:
    """Fold per-service results into one status, first matching rule wins."""

    # Firestore is the only mandatory dependency
    if not services[FIRESTORE_SERVICE].healthy:
        return OverallStatus.UNHEALTHY

    relational = services.get(RELATIONAL_SERVICE)
    if relational is not None and not relational.healthy and relational.message != NOT_CONFIGURED_MESSAGE:
        return OverallStatus.DEGRADED

    if any("slow" in status.message for status in services.values()):
        return OverallStatus.DEGRADED

    return OverallStatus.HEALTHY


def status_code_for(status: OverallStatus) -> int:
    return _STATUS_CODES.get(status, 500)


async def combined_health(
    document_store: DocumentStore,
    relational_store: RelationalStore | None,
) -> HealthReport:
    """Probe both stores concurrently and aggregate the results."""

    started_at = datetime.now(tz=timezone.utc)
    started = time.perf_counter()

    firestore_result, relational_result = await asyncio.gather(
        document_store_health(document_store),
        relational_store_health(relational_store),
    )
    services = {
        FIRESTORE_SERVICE: firestore_result,
        RELATIONAL_SERVICE: relational_result,
    }

    return HealthReport(
        status=aggregate_status(services),
        timestamp=started_at,
        services=services,
        total_duration=timedelta(seconds=time.perf_counter() - started),
    )
