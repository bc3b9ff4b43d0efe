"""Application entrypoint."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from location_service.api.health import router as health_router
from location_service.api.locations import router as locations_router
from location_service.config import Settings, get_settings
from location_service.db import SqlLocationStore, create_sql_store
from location_service.firestore import FirestoreLocationStore, create_firestore_store
from location_service.stores import DocumentStore, RelationalStore
from location_service.workers.secondary_writer import SecondaryWriter

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    document_store: DocumentStore | None = None,
    relational_store: RelationalStore | None = None,
) -> FastAPI:
    """Build the API. Stores passed in replace the real clients.

    The relational path only runs when a SQL connection string is configured,
    whether or not a store is injected.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resolved = settings or get_settings()
        app.state.settings = resolved
        owned_firestore: FirestoreLocationStore | None = None
        if document_store is None:
            app.state.document_store = owned_firestore = create_firestore_store(resolved)
        else:
            app.state.document_store = document_store

        owned_sql: SqlLocationStore | None = None
        sql_store: RelationalStore | None = None
        if resolved.relational_configured:
            sql_store = relational_store
            if sql_store is None:
                sql_store = owned_sql = create_sql_store(resolved.sql_connection_string)
        app.state.relational_store = sql_store

        writer: SecondaryWriter | None = None
        if sql_store is not None:
            writer = SecondaryWriter(
                sql_store,
                resolved.sql_location_procedure,
                max_pending=resolved.secondary_queue_size,
            )
            writer.start()
        app.state.secondary_writer = writer

        try:
            yield
        finally:
            if writer is not None:
                await writer.stop()
            if owned_sql is not None:
                await owned_sql.close()
            if owned_firestore is not None:
                await owned_firestore.close()

    app = FastAPI(title="Location Registry", version="0.1.0", lifespan=lifespan)
    app.include_router(locations_router)
    app.include_router(health_router)
    return app


app = create_app()


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="[%(asctime)s] %(levelname)s %(name)s %(message)s",
    )
    logger.info("Starting location API on %s:%s", settings.api_host, settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
