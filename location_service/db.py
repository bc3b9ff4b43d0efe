"""Relational store utilities."""
from __future__ import annotations

import re
from typing import Any, Mapping

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from location_service.exceptions import ConfigurationError, SecondaryWriteError

DEFAULT_CONNECT_TIMEOUT_SECONDS = 5
COMMAND_TIMEOUT_SECONDS = 10

_TIMEOUT_PARAM = re.compile(r"[?&](?:connect_)?timeout=", re.IGNORECASE)
_TIMEOUT_KEYS = ("timeout", "connect_timeout")


def normalize_postgres_dsn(dsn: str) -> str:
    for prefix in ("postgresql://", "postgres://"):
        if dsn.startswith(prefix):
            return dsn.replace(prefix, "postgresql+asyncpg://", 1)
    return dsn


def with_connect_timeout(dsn: str, seconds: int = DEFAULT_CONNECT_TIMEOUT_SECONDS) -> str:
    """Append a connect timeout to ``dsn`` unless one is already present."""

    if _TIMEOUT_PARAM.search(dsn):
        return dsn
    separator = "&" if "?" in dsn else "?"
    if dsn.endswith(("?", "&")):
        separator = ""
    return f"{dsn}{separator}timeout={seconds}"


def create_relational_engine(dsn: str) -> AsyncEngine:
    url = make_url(normalize_postgres_dsn(with_connect_timeout(dsn)))

    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    for key, value in url.query.items():
        if key.lower() in _TIMEOUT_KEYS:
            raw = value[-1] if isinstance(value, tuple) else value
            try:
                connect_timeout = float(raw)
            except ValueError as exc:
                raise ConfigurationError(f"SQL connection {key} must be a number, got {raw!r}") from exc
    url = url.difference_update_query([key for key in url.query if key.lower() in _TIMEOUT_KEYS])

    return create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        connect_args={"timeout": connect_timeout, "command_timeout": COMMAND_TIMEOUT_SECONDS},
    )


class SqlLocationStore:
    """Stored procedure access to the relational location history."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def exec_procedure(self, name: str, params: Mapping[str, Any]) -> None:
        placeholders = ", ".join(f":{key}" for key in params)
        stmt = text(f"CALL {name}({placeholders})")
        try:
            async with self._engine.begin() as conn:
                await conn.execute(stmt, dict(params))
        except SQLAlchemyError as exc:
            raise SecondaryWriteError(f"procedure {name} failed: {exc}") from exc

    async def probe(self) -> None:
        async with self._engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        await self._engine.dispose()


def create_sql_store(dsn: str) -> SqlLocationStore:
    return SqlLocationStore(create_relational_engine(dsn))
