# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""PostgreSQL connection management and the JSONB document store.

Each collection is a table ``(id uuid, seq bigserial, doc jsonb, ...)``
created by the Alembic migration, with unique expression indexes backing
:data:`~lifesure.core.document_store.UNIQUE_KEYS`.
"""

import contextlib
import json
from collections.abc import AsyncIterator, Mapping
from typing import Any
from uuid import UUID

import asyncpg
from attrs import field, frozen
from beartype import beartype

from .config import Settings
from .document_store import (
    UNIQUE_KEYS,
    Collection,
    Document,
    DocumentStore,
    DuplicateKeyError,
    Filter,
    SortSpec,
)
from .errors import ServiceError
from .ids import new_id
from .logging_utils import get_logger
from .result_types import Err, Ok, Result

logger = get_logger(__name__)


@frozen
class PoolConfig:
    """Immutable pool configuration."""

    url: str = field()
    min_size: int = field(default=2)
    max_size: int = field(default=10)
    command_timeout: float = field(default=30.0)
    server_settings: dict[str, str] = field(factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PoolConfig":
        """Derive pool sizing from application settings."""
        return cls(
            url=settings.database_url,
            min_size=settings.database_pool_min,
            max_size=settings.database_pool_max,
            command_timeout=settings.database_command_timeout,
            server_settings={
                "application_name": settings.app_name,
                "timezone": "UTC",
            },
        )


class Database:
    """asyncpg pool manager whose lifetime is owned by the application."""

    def __init__(self, config: PoolConfig) -> None:
        """Initialize without connecting; call :meth:`connect` at startup."""
        self._config = config
        self._pool: asyncpg.Pool | None = None

    @beartype
    async def _init_connection(self, conn: asyncpg.Connection) -> None:
        """Register the JSONB codec on every new connection."""
        await conn.set_type_codec(
            "jsonb",
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )

    @beartype
    async def connect(self) -> None:
        """Create the connection pool."""
        if self._pool is not None:
            return

        self._pool = await asyncpg.create_pool(
            self._config.url,
            min_size=self._config.min_size,
            max_size=self._config.max_size,
            command_timeout=self._config.command_timeout,
            server_settings=self._config.server_settings,
            init=self._init_connection,
        )
        logger.info(
            "Database pool ready (min=%d, max=%d)",
            self._config.min_size,
            self._config.max_size,
        )

    @beartype
    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database pool closed")

    @contextlib.asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Borrow a connection from the pool."""
        if self._pool is None:
            raise RuntimeError("Database pool not initialized")
        async with self._pool.acquire() as conn:
            yield conn

    @beartype
    async def execute(self, query: str, *args: Any) -> str:
        """Execute a query without returning rows."""
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    @beartype
    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Execute a query and fetch all rows."""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    @beartype
    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        """Execute a query and fetch a single row."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    @beartype
    async def fetchval(self, query: str, *args: Any) -> Any:
        """Execute a query and fetch a single value."""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)

    @beartype
    async def health_check(self) -> Result[bool, ServiceError]:
        """Run a trivial query against the pool."""
        try:
            value = await self.fetchval("SELECT 1")
        except (asyncpg.PostgresError, OSError, RuntimeError) as e:
            return Err(ServiceError.internal(f"Health check failed: {e}"))
        return Ok(value == 1)

    @property
    def is_connected(self) -> bool:
        """Check if the pool exists."""
        return self._pool is not None


class _Query:
    """Positional-parameter builder for asyncpg."""

    def __init__(self) -> None:
        self.params: list[Any] = []

    def bind(self, value: Any) -> str:
        self.params.append(value)
        return f"${len(self.params)}"

    def where(self, filter: Filter, exclude: Filter | None = None) -> str:
        clauses = ["TRUE"]
        contained: dict[str, Any] = {}
        for key, value in filter.items():
            if key == "id":
                clauses.append(f"id = {self.bind(UUID(str(value)))}::uuid")
            else:
                contained[key] = value
        if contained:
            clauses.append(f"doc @> {self.bind(contained)}::jsonb")
        if exclude:
            clauses.append(f"NOT (doc @> {self.bind(dict(exclude))}::jsonb)")
        return " AND ".join(clauses)

    def patch(
        self, set: Mapping[str, Any] | None, inc: Mapping[str, int] | None
    ) -> str:
        expr = "doc"
        for path, value in (set or {}).items():
            expr = (
                f"jsonb_set({expr}, {self.bind(path.split('.'))}::text[], "
                f"COALESCE({self.bind(value)}::jsonb, 'null'::jsonb), true)"
            )
        for key, amount in (inc or {}).items():
            key_param = self.bind(key)
            expr = (
                f"jsonb_set({expr}, ARRAY[{key_param}::text], "
                f"to_jsonb(COALESCE((doc->>{key_param}::text)::numeric, 0) "
                f"+ {self.bind(amount)}::numeric), true)"
            )
        return expr


def _row_to_document(row: asyncpg.Record) -> Document:
    return {"id": str(row["id"]), **row["doc"]}


class PostgresDocumentStore(DocumentStore):
    """Document store over JSONB tables, one per collection."""

    def __init__(self, database: Database) -> None:
        """Wrap an (unconnected) database pool manager."""
        self._db = database

    async def connect(self) -> None:
        """Open the pool."""
        await self._db.connect()

    async def disconnect(self) -> None:
        """Close the pool."""
        await self._db.disconnect()

    async def health_check(self) -> bool:
        """Ping the pool."""
        return (await self._db.health_check()).unwrap_or(False)

    @staticmethod
    def _duplicate(
        collection: Collection, error: asyncpg.UniqueViolationError
    ) -> DuplicateKeyError:
        keys = UNIQUE_KEYS.get(collection, (("id",),))[0]
        logger.warning(
            "Unique constraint %s violated on %s",
            getattr(error, "constraint_name", None),
            collection.value,
        )
        return DuplicateKeyError(collection.value, keys)

    @beartype
    async def find_one(self, collection: Collection, filter: Filter) -> Document | None:
        """Return the first document matching ``filter``."""
        q = _Query()
        row = await self._db.fetchrow(
            f"SELECT id, doc FROM {collection.value} WHERE {q.where(filter)} "
            "ORDER BY seq LIMIT 1",
            *q.params,
        )
        return _row_to_document(row) if row else None

    @beartype
    async def find(
        self,
        collection: Collection,
        filter: Filter | None = None,
        *,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        """Return matching documents, in storage order unless sorted."""
        q = _Query()
        sql = f"SELECT id, doc FROM {collection.value} WHERE {q.where(filter or {})}"
        order = [
            f"doc->{q.bind(key)}::text {'DESC' if direction < 0 else 'ASC'} NULLS LAST"
            for key, direction in (sort or ())
        ]
        order.append("seq")
        sql += " ORDER BY " + ", ".join(order)
        if limit is not None:
            sql += f" LIMIT {q.bind(limit)}::int"
        rows = await self._db.fetch(sql, *q.params)
        return [_row_to_document(row) for row in rows]

    @beartype
    async def insert_one(self, collection: Collection, document: Document) -> UUID:
        """Insert a document and return its id."""
        doc_id = UUID(str(document["id"])) if document.get("id") else new_id()
        body = {k: v for k, v in document.items() if k != "id"}
        try:
            await self._db.execute(
                f"INSERT INTO {collection.value} (id, doc) VALUES ($1, $2::jsonb)",
                doc_id,
                body,
            )
        except asyncpg.UniqueViolationError as e:
            raise self._duplicate(collection, e) from e
        return doc_id

    async def _update(
        self,
        collection: Collection,
        filter: Filter,
        set: Mapping[str, Any] | None,
        inc: Mapping[str, int] | None,
        exclude: Filter | None,
    ) -> asyncpg.Record | None:
        q = _Query()
        where = q.where(filter, exclude)
        patch = q.patch(set, inc)
        # The outer WHERE repeats the predicate so a row changed by a
        # concurrent writer is re-checked after the row lock is granted.
        sql = (
            f"UPDATE {collection.value} SET doc = {patch}, updated_at = NOW() "
            f"WHERE id = (SELECT id FROM {collection.value} WHERE {where} "
            f"ORDER BY seq LIMIT 1 FOR UPDATE) AND {where} "
            "RETURNING id, doc"
        )
        try:
            return await self._db.fetchrow(sql, *q.params)
        except asyncpg.UniqueViolationError as e:
            raise self._duplicate(collection, e) from e

    @beartype
    async def update_one(
        self,
        collection: Collection,
        filter: Filter,
        *,
        set: Mapping[str, Any] | None = None,
        inc: Mapping[str, int] | None = None,
        exclude: Filter | None = None,
    ) -> int:
        """Update one document and return the matched count."""
        row = await self._update(collection, filter, set, inc, exclude)
        return 0 if row is None else 1

    @beartype
    async def find_one_and_update(
        self,
        collection: Collection,
        filter: Filter,
        *,
        set: Mapping[str, Any] | None = None,
        inc: Mapping[str, int] | None = None,
        exclude: Filter | None = None,
    ) -> Document | None:
        """Update one document and return it as written."""
        row = await self._update(collection, filter, set, inc, exclude)
        return _row_to_document(row) if row else None

    @beartype
    async def delete_one(self, collection: Collection, filter: Filter) -> int:
        """Delete one document and return the deleted count."""
        q = _Query()
        status = await self._db.execute(
            f"DELETE FROM {collection.value} WHERE id = "
            f"(SELECT id FROM {collection.value} WHERE {q.where(filter)} "
            "ORDER BY seq LIMIT 1)",
            *q.params,
        )
        return int(status.split()[-1])

    @beartype
    async def count(self, collection: Collection, filter: Filter | None = None) -> int:
        """Count documents matching ``filter``."""
        q = _Query()
        value = await self._db.fetchval(
            f"SELECT count(*) FROM {collection.value} WHERE {q.where(filter or {})}",
            *q.params,
        )
        return int(value)
