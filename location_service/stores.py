"""Capability interfaces for the two backing stores."""
from __future__ import annotations

from typing import Any, Mapping, Protocol


class DocumentStore(Protocol):
    """Per-key document database with merge upserts."""

    async def upsert(self, key: str, fields: Mapping[str, Any]) -> None:
        ...

    async def probe(self) -> None:
        """Cheap read that raises when the store is unreachable."""
        ...


class RelationalStore(Protocol):
    """SQL database reached through stored procedures."""

    async def exec_procedure(self, name: str, params: Mapping[str, Any]) -> None:
        ...

    async def probe(self) -> None:
        ...
