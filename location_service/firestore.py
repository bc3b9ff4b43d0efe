"""Firestore backed document store for vehicle locations."""
from __future__ import annotations

import inspect
import logging
from typing import Any, Mapping

from google.cloud import firestore

from location_service.config import Settings
from location_service.credentials import load_firestore_credentials
from location_service.exceptions import ConfigurationError, PrimaryStoreError
from location_service.schemas import LocationReport

logger = logging.getLogger(__name__)


def build_location_record(report: LocationReport) -> dict[str, Any]:
    """Map a report to the stored document fields.

    ``timestamp`` is a sentinel resolved by Firestore at write time.
    """

    return {
        "fltLatitud": report.latitude,
        "fltLongitud": report.longitude,
        "vchNombre": report.name or "",
        "timestamp": firestore.SERVER_TIMESTAMP,
    }


class FirestoreLocationStore:
    """One document per vehicle in a single collection."""

    def __init__(self, client: firestore.AsyncClient, collection: str = "locations") -> None:
        self._client = client
        self._collection = collection

    async def upsert(self, key: str, fields: Mapping[str, Any]) -> None:
        try:
            doc_ref = self._client.collection(self._collection).document(key)
            await doc_ref.set(dict(fields), merge=True)
        except Exception as exc:
            raise PrimaryStoreError(f"database error: {exc}") from exc

        logger.info("Location saved to Firestore for vehicle %s", key)

    async def probe(self) -> None:
        await self._client.collection(self._collection).limit(1).get()

    async def close(self) -> None:
        # AsyncClient.close() is a coroutine on recent releases only
        result = self._client.close()
        if inspect.isawaitable(result):
            await result


def create_firestore_store(settings: Settings) -> FirestoreLocationStore:
    if not settings.firestore_project_id:
        raise ConfigurationError("FIRESTORE_PROJECT_ID is not configured")

    credentials = load_firestore_credentials(settings)
    client = firestore.AsyncClient(project=settings.firestore_project_id, credentials=credentials)
    return FirestoreLocationStore(client, collection=settings.firestore_collection)
