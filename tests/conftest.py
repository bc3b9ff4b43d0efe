from __future__ import annotations

import asyncio
from typing import Any, Mapping

import pytest

from location_service.config import Settings


class FakeDocumentStore:
    def __init__(self, *, probe_delay: float = 0.0, probe_error: Exception | None = None,
                 upsert_error: Exception | None = None) -> None:
        self.upserts: list[tuple[str, dict[str, Any]]] = []
        self.probes = 0
        self.probe_delay = probe_delay
        self.probe_error = probe_error
        self.upsert_error = upsert_error

    async def upsert(self, key: str, fields: Mapping[str, Any]) -> None:
        if self.upsert_error is not None:
            raise self.upsert_error
        self.upserts.append((key, dict(fields)))

    async def probe(self) -> None:
        self.probes += 1
        if self.probe_delay:
            await asyncio.sleep(self.probe_delay)
        if self.probe_error is not None:
            raise self.probe_error


class FakeRelationalStore:
    def __init__(self, *, error: Exception | None = None, probe_error: Exception | None = None) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.probes = 0
        self.error = error
        self.probe_error = probe_error

    async def exec_procedure(self, name: str, params: Mapping[str, Any]) -> None:
        self.calls.append((name, dict(params)))
        if self.error is not None:
            raise self.error

    async def probe(self) -> None:
        self.probes += 1
        if self.probe_error is not None:
            raise self.probe_error


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {"FIRESTORE_PROJECT_ID": "demo-project"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in (
        "SQL_CONNECTION_STRING",
        "ENABLE_HEALTH_CHECK",
        "KEY_VAULT_URL",
        "GOOGLE_APPLICATION_CREDENTIALS_CONTENT",
    ):
        monkeypatch.delenv(name, raising=False)


class FakeDocument:
    def __init__(self, client: "FakeFirestoreClient", key: str) -> None:
        self._client = client
        self._key = key

    async def set(self, fields, merge=False):
        if self._client.error is not None:
            raise self._client.error
        self._client.writes.append((self._key, fields, merge))


class FakeQuery:
    def __init__(self, client: "FakeFirestoreClient") -> None:
        self._client = client

    async def get(self):
        self._client.reads += 1
        return []


class FakeCollection:
    def __init__(self, client: "FakeFirestoreClient", name: str) -> None:
        self._client = client
        client.collections.append(name)

    def document(self, key: str) -> FakeDocument:
        return FakeDocument(self._client, key)

    def limit(self, count: int) -> FakeQuery:
        return FakeQuery(self._client)


class FakeFirestoreClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.writes: list = []
        self.collections: list[str] = []
        self.reads = 0
        self.closed = False

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    async def close(self) -> None:
        self.closed = True


class SyncCloseFirestoreClient(FakeFirestoreClient):
    def close(self) -> None:
        self.closed = True
