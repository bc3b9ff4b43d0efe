"""Background writer mirroring locations into the relational store."""
from __future__ import annotations

import asyncio
import contextlib
import logging

from location_service.exceptions import SecondaryWriteError
from location_service.schemas import LocationReport
from location_service.stores import RelationalStore

logger = logging.getLogger(__name__)


class SecondaryWriter:
    """Fire-and-forget queue in front of the relational store.

    Requests hand reports over with :meth:`submit` and never wait for the
    write. Failures only reach the log.
    """

    def __init__(self, store: RelationalStore, procedure: str, *, max_pending: int = 1000) -> None:
        self._store = store
        self._procedure = procedure
        self._queue: asyncio.Queue[LocationReport] = asyncio.Queue(maxsize=max_pending)
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def submit(self, report: LocationReport) -> bool:
        try:
            self._queue.put_nowait(report)
        except asyncio.QueueFull:
            logger.warning("Secondary write queue full, dropping location for %s", report.vehicle_id)
            return False
        return True

    async def write(self, report: LocationReport) -> None:
        await self._store.exec_procedure(
            self._procedure,
            {
                "camion_id": report.vehicle_id,
                "latitud": report.latitude,
                "longitud": report.longitude,
            },
        )
        logger.info("Location saved to SQL for vehicle %s", report.vehicle_id)

    async def _run(self) -> None:
        while True:
            report = await self._queue.get()
            try:
                await self.write(report)
            except SecondaryWriteError as exc:
                logger.warning("SQL error saving location for %s (non critical): %s", report.vehicle_id, exc)
            except Exception:
                logger.warning(
                    "Unexpected error saving location for %s to SQL (non critical)",
                    report.vehicle_id,
                    exc_info=True,
                )
            finally:
                self._queue.task_done()

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="secondary-writer")

    async def stop(self, drain_timeout: float = 5.0) -> None:
        if self._task is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=drain_timeout)
        except asyncio.TimeoutError:
            logger.warning("Stopping with %d secondary writes still pending", self._queue.qsize())
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
