"""Generic table-oriented data store over SQLAlchemy Core.

Services address storage by table name with plain dict records and
filters, never through ORM sessions. Driver errors are translated into the
storage error taxonomy:

- uniqueness violation -> StorageConflictError
- missing relation or unreachable database -> StorageUnavailableError

SQLite connections are not safe for interleaved transactions, so every
store over a SQLite engine runs its calls one at a time.

Filters map column names to values. A key may carry an operator suffix:
``score__gte``, ``status__in``, ``reviewed_at__lt``, ``status__ne``.
"""

import asyncio
import uuid
import weakref
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import (
    Column,
    ColumnElement,
    MetaData,
    Table,
    Uuid,
    delete,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from curator.core.exceptions import DatabaseError, StorageConflictError, StorageUnavailableError
from curator.core.logging import get_logger

logger = get_logger(__name__)

Record = dict[str, Any]
Filters = Mapping[str, Any]

_OPERATORS = {
    "eq": lambda col, v: col == v,
    "ne": lambda col, v: col != v,
    "lt": lambda col, v: col < v,
    "lte": lambda col, v: col <= v,
    "gt": lambda col, v: col > v,
    "gte": lambda col, v: col >= v,
    "in": lambda col, v: col.in_(list(v)),
}

_MISSING_RELATION_MARKERS = ("no such table", "undefinedtable", "does not exist")
_UNIQUE_MARKERS = ("unique", "duplicate key")

_SQLITE_LOCKS: "weakref.WeakKeyDictionary[Any, asyncio.Lock]" = weakref.WeakKeyDictionary()


def engine_lock(engine: AsyncEngine) -> asyncio.Lock | None:
    """Lock shared by every store over a SQLite engine, None for other dialects."""
    if engine.dialect.name != "sqlite":
        return None
    sync_engine = engine.sync_engine
    lock = _SQLITE_LOCKS.get(sync_engine)
    if lock is None:
        lock = _SQLITE_LOCKS[sync_engine] = asyncio.Lock()
    return lock


class DataStore:
    """Table-name based CRUD client.

    Each call runs in its own transaction unless the store was obtained
    from ``transaction()``, in which case every call shares that
    transaction and commits or rolls back with it.

    Example:
        store = DataStore(engine)
        rows = await store.select("queue_projects", {"status": "pending_review"}, limit=10)

        async with store.transaction() as tx:
            await tx.insert("projects", record)
            await tx.update("queue_projects", {"id": item_id}, {"status": "approved"})
    """

    def __init__(
        self,
        engine: AsyncEngine,
        metadata: MetaData | None = None,
        *,
        connection: AsyncConnection | None = None,
    ) -> None:
        """Initialize data store.

        Args:
            engine: Async engine
            metadata: Table metadata (default: application models)
            connection: Open connection to run every call on
        """
        if metadata is None:
            import curator.models  # noqa: F401
            from curator.core.database import Base

            metadata = Base.metadata
        self._engine = engine
        self._metadata = metadata
        self._connection = connection
        self._lock = engine_lock(engine)

    # ============================================
    # Public API
    # ============================================

    async def select(
        self,
        table: str,
        filters: Filters | None = None,
        columns: Sequence[str] | None = None,
        order_by: str | Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        """Select rows.

        Args:
            table: Table name
            filters: Column filters
            columns: Projection (default: all columns)
            order_by: Column name(s); prefix with "-" for descending
            limit: Maximum rows

        Returns:
            Rows as dicts keyed by column name
        """
        t = self._table(table)
        cols = [self._column(t, c) for c in columns] if columns else list(t.c)
        stmt = select(*cols).where(*self._where(t, filters))
        if order_by:
            keys = [order_by] if isinstance(order_by, str) else list(order_by)
            for key in keys:
                desc = key.startswith("-")
                col = self._column(t, key.lstrip("-"))
                stmt = stmt.order_by(col.desc() if desc else col.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._begin(table, "select") as conn:
            result = await conn.execute(stmt)
            return [dict(row._mapping) for row in result]

    async def get(self, table: str, filters: Filters) -> Record | None:
        """Select the first row matching filters, or None."""
        rows = await self.select(table, filters, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, record: Mapping[str, Any]) -> Record:
        """Insert one row.

        An ``id`` is generated when the table has one and the record does not.

        Returns:
            The inserted values including the id

        Raises:
            StorageConflictError: On uniqueness violation
        """
        t = self._table(table)
        values = {k: self._coerce(self._column(t, k), v) for k, v in record.items()}
        if "id" in t.c and values.get("id") is None:
            values["id"] = uuid.uuid4()

        async with self._begin(table, "insert") as conn:
            await conn.execute(insert(t).values(**values))
        return values

    async def update(self, table: str, filters: Filters, patch: Mapping[str, Any]) -> int:
        """Update rows matching filters.

        Returns:
            Number of rows updated
        """
        t = self._table(table)
        values = {k: self._coerce(self._column(t, k), v) for k, v in patch.items()}
        stmt = update(t).where(*self._where(t, filters)).values(**values)
        async with self._begin(table, "update") as conn:
            result = await conn.execute(stmt)
            return result.rowcount or 0

    async def delete(self, table: str, filters: Filters) -> int:
        """Delete rows matching filters.

        Returns:
            Number of rows deleted
        """
        t = self._table(table)
        stmt = delete(t).where(*self._where(t, filters))
        async with self._begin(table, "delete") as conn:
            result = await conn.execute(stmt)
            return result.rowcount or 0

    async def count(self, table: str, filters: Filters | None = None) -> int:
        """Count rows matching filters."""
        t = self._table(table)
        stmt = select(func.count()).select_from(t).where(*self._where(t, filters))
        async with self._begin(table, "count") as conn:
            result = await conn.execute(stmt)
            return int(result.scalar_one())

    async def count_by(
        self, table: str, column: str, filters: Filters | None = None
    ) -> dict[Any, int]:
        """Count rows grouped by one column."""
        t = self._table(table)
        col = self._column(t, column)
        stmt = select(col, func.count()).where(*self._where(t, filters)).group_by(col)
        async with self._begin(table, "count") as conn:
            result = await conn.execute(stmt)
            return {row[0]: int(row[1]) for row in result}

    async def max_value(self, table: str, column: str) -> Any:
        """Largest value of a column, or None for an empty table."""
        t = self._table(table)
        stmt = select(func.max(self._column(t, column)))
        async with self._begin(table, "select") as conn:
            result = await conn.execute(stmt)
            return result.scalar_one_or_none()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["DataStore"]:
        """Run several calls atomically.

        Yields:
            DataStore bound to one transaction
        """
        if self._connection is not None:
            yield self
            return

        try:
            async with self._serialized(), self._engine.begin() as conn:
                yield DataStore(self._engine, self._metadata, connection=conn)
        except (DBAPIError, OSError) as e:
            raise self._translate(e, None, "transaction") from e

    # ============================================
    # Private Methods
    # ============================================

    @asynccontextmanager
    async def _begin(self, table: str, operation: str) -> AsyncIterator[AsyncConnection]:
        """Yield a connection, translating driver errors."""
        try:
            if self._connection is not None:
                yield self._connection
            else:
                async with self._serialized(), self._engine.begin() as conn:
                    yield conn
        except (DBAPIError, OSError) as e:
            raise self._translate(e, table, operation) from e

    @asynccontextmanager
    async def _serialized(self) -> AsyncIterator[None]:
        if self._lock is None:
            yield
            return
        async with self._lock:
            yield

    def _table(self, name: str) -> Table:
        table = self._metadata.tables.get(name)
        if table is None:
            raise StorageUnavailableError(
                f"Relation '{name}' does not exist", table=name, missing_relation=True
            )
        return table

    @staticmethod
    def _column(table: Table, name: str) -> Column[Any]:
        if name not in table.c:
            raise DatabaseError(
                f"Unknown column '{name}' on {table.name}",
                context={"table": table.name, "column": name},
            )
        return table.c[name]

    def _where(self, table: Table, filters: Filters | None) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = []
        for key, value in (filters or {}).items():
            name, _, op = key.partition("__")
            op = op or "eq"
            if op not in _OPERATORS:
                raise DatabaseError(f"Unknown filter operator '{op}'", context={"filter": key})
            col = self._column(table, name)
            if op == "in":
                value = [self._coerce(col, v) for v in value]
            else:
                value = self._coerce(col, value)
            if value is None and op == "eq":
                clauses.append(col.is_(None))
            else:
                clauses.append(_OPERATORS[op](col, value))
        return clauses

    @staticmethod
    def _coerce(column: Column[Any], value: Any) -> Any:
        """Accept string ids for UUID columns."""
        if isinstance(column.type, Uuid) and isinstance(value, str):
            return uuid.UUID(value)
        return value

    @staticmethod
    def _translate(exc: BaseException, table: str | None, operation: str) -> DatabaseError:
        message = str(getattr(exc, "orig", None) or exc)
        lowered = message.lower()

        if isinstance(exc, IntegrityError):
            if any(marker in lowered for marker in _UNIQUE_MARKERS):
                return StorageConflictError(
                    table or "unknown", message, context={"operation": operation}
                )
            return DatabaseError(message, context={"table": table}, operation=operation)

        missing = any(
            marker in lowered for marker in _MISSING_RELATION_MARKERS
        )
        logger.error(
            "Data store unavailable",
            table=table,
            operation=operation,
            missing_relation=missing,
            error=message,
        )
        return StorageUnavailableError(
            message,
            table=table,
            missing_relation=missing,
            context={"operation": operation},
        )


__all__ = ["DataStore", "Record", "Filters", "engine_lock"]
