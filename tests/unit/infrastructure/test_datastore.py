"""Unit tests for DataStore.

Tests cover:
- CRUD by table name with dict records
- Filter operators and ordering
- Error translation (conflict, missing relation, unknown column)
- Transactions
- Serialized access on SQLite engines
"""

import asyncio
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from curator.core.exceptions import DatabaseError, StorageConflictError, StorageUnavailableError
from curator.infrastructure.datastore import DataStore, engine_lock
from curator.models.content import ReviewStatus

QUEUE = "queue_projects"


def create_record(n: int = 1, **overrides: Any) -> dict[str, Any]:
    """Create a queue record with unique URL and title."""
    record = {
        "title": f"Project {n}",
        "description": f"Description of project {n}",
        "url": f"https://example.com/p/{n}",
        "normalized_url": f"https://example.com/p/{n}",
        "source": "test",
        "score": 10 * n,
        "category": "low-fit",
        "confidence": 0.5,
        "score_factors": {},
        "metadata": {"stars": n},
        "status": ReviewStatus.PENDING_REVIEW,
    }
    record.update(overrides)
    return record


class TestCrud:
    """Tests for basic operations."""

    @pytest.mark.asyncio
    async def test_insert_generates_id(self, store: DataStore):
        """Test that insert fills in a UUID id."""
        inserted = await store.insert(QUEUE, create_record())

        assert isinstance(inserted["id"], uuid.UUID)
        row = await store.get(QUEUE, {"id": inserted["id"]})
        assert row is not None
        assert row["title"] == "Project 1"
        assert row["metadata"] == {"stars": 1}
        assert row["status"] == ReviewStatus.PENDING_REVIEW
        assert row["created_at"] is not None

    @pytest.mark.asyncio
    async def test_get_accepts_string_id(self, store: DataStore):
        """Test that string ids are coerced for UUID columns."""
        inserted = await store.insert(QUEUE, create_record())

        row = await store.get(QUEUE, {"id": str(inserted["id"])})

        assert row is not None
        assert row["id"] == inserted["id"]

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store: DataStore):
        """Test get with no match."""
        assert await store.get(QUEUE, {"id": uuid.uuid4()}) is None

    @pytest.mark.asyncio
    async def test_update_returns_rowcount(self, store: DataStore):
        """Test update with a filter that matches one row."""
        inserted = await store.insert(QUEUE, create_record())

        updated = await store.update(
            QUEUE, {"id": inserted["id"]}, {"status": ReviewStatus.UNDER_REVIEW}
        )
        missed = await store.update(
            QUEUE,
            {"id": inserted["id"], "status": ReviewStatus.PENDING_REVIEW},
            {"status": ReviewStatus.APPROVED},
        )

        assert updated == 1
        assert missed == 0
        row = await store.get(QUEUE, {"id": inserted["id"]})
        assert row["status"] == ReviewStatus.UNDER_REVIEW

    @pytest.mark.asyncio
    async def test_delete(self, store: DataStore):
        """Test delete by filter."""
        for n in range(1, 4):
            await store.insert(QUEUE, create_record(n))

        deleted = await store.delete(QUEUE, {"score__lt": 30})

        assert deleted == 2
        assert await store.count(QUEUE) == 1


class TestQueries:
    """Tests for filters, ordering and aggregates."""

    @pytest.fixture
    def records(self) -> list[dict[str, Any]]:
        """Five records with mixed statuses."""
        statuses = [
            ReviewStatus.PENDING_REVIEW,
            ReviewStatus.PENDING_REVIEW,
            ReviewStatus.APPROVED,
            ReviewStatus.REJECTED,
            ReviewStatus.NEEDS_INFO,
        ]
        return [create_record(n, status=s) for n, s in enumerate(statuses, start=1)]

    @pytest.mark.asyncio
    async def test_select_order_and_limit(self, store: DataStore, records):
        """Test descending order with limit."""
        for record in records:
            await store.insert(QUEUE, record)

        rows = await store.select(QUEUE, order_by="-score", limit=2)

        assert [r["score"] for r in rows] == [50, 40]

    @pytest.mark.asyncio
    async def test_select_operators(self, store: DataStore, records):
        """Test __in, __gte and __ne filters."""
        for record in records:
            await store.insert(QUEUE, record)

        open_rows = await store.select(
            QUEUE,
            {"status__in": [ReviewStatus.PENDING_REVIEW, ReviewStatus.NEEDS_INFO]},
            order_by="score",
        )
        high = await store.select(QUEUE, {"score__gte": 40})
        not_pending = await store.count(QUEUE, {"status__ne": ReviewStatus.PENDING_REVIEW})

        assert [r["score"] for r in open_rows] == [10, 20, 50]
        assert len(high) == 2
        assert not_pending == 3

    @pytest.mark.asyncio
    async def test_select_projection(self, store: DataStore, records):
        """Test selecting a subset of columns."""
        await store.insert(QUEUE, records[0])

        rows = await store.select(QUEUE, columns=["title", "score"])

        assert rows == [{"title": "Project 1", "score": 10}]

    @pytest.mark.asyncio
    async def test_count_by(self, store: DataStore, records):
        """Test grouped counts."""
        for record in records:
            await store.insert(QUEUE, record)

        counts = await store.count_by(QUEUE, "status")

        assert counts[ReviewStatus.PENDING_REVIEW] == 2
        assert counts[ReviewStatus.APPROVED] == 1
        assert sum(counts.values()) == 5

    @pytest.mark.asyncio
    async def test_datetime_filter(self, store: DataStore):
        """Test comparison filters on timestamp columns."""
        now = datetime.now(UTC)
        await store.insert(QUEUE, create_record(1, reviewed_at=now - timedelta(days=40)))
        await store.insert(QUEUE, create_record(2, reviewed_at=now))

        old = await store.select(QUEUE, {"reviewed_at__lt": now - timedelta(days=30)})

        assert [r["title"] for r in old] == ["Project 1"]

    @pytest.mark.asyncio
    async def test_max_value_empty_table(self, store: DataStore):
        """Test max_value on an empty table."""
        assert await store.max_value(QUEUE, "created_at") is None

    @pytest.mark.asyncio
    async def test_null_filter(self, store: DataStore):
        """Test that a None value filters with IS NULL."""
        await store.insert(QUEUE, create_record(1))
        await store.insert(QUEUE, create_record(2, reviewed_by="alice"))

        rows = await store.select(QUEUE, {"reviewed_by": None})

        assert [r["title"] for r in rows] == ["Project 1"]


class TestErrors:
    """Tests for error translation."""

    @pytest.mark.asyncio
    async def test_unique_violation(self, store: DataStore):
        """Test that a duplicate normalized_url raises StorageConflictError."""
        await store.insert(QUEUE, create_record(1))

        with pytest.raises(StorageConflictError) as exc_info:
            await store.insert(QUEUE, create_record(1, title="Other title"))

        assert exc_info.value.table == QUEUE
        assert await store.count(QUEUE) == 1

    @pytest.mark.asyncio
    async def test_unknown_table(self, store: DataStore):
        """Test that an unmapped table is reported as a missing relation."""
        with pytest.raises(StorageUnavailableError) as exc_info:
            await store.select("no_such_table")

        assert exc_info.value.missing_relation is True
        assert exc_info.value.table == "no_such_table"

    @pytest.mark.asyncio
    async def test_unprovisioned_table(self, bare_store: DataStore):
        """Test that a mapped table missing in the database is a missing relation."""
        with pytest.raises(StorageUnavailableError) as exc_info:
            await bare_store.get(QUEUE, {"normalized_url": "https://example.com"})

        assert exc_info.value.missing_relation is True

    @pytest.mark.asyncio
    async def test_unknown_column(self, store: DataStore):
        """Test that unknown columns raise DatabaseError."""
        with pytest.raises(DatabaseError, match="Unknown column"):
            await store.select(QUEUE, {"nope": 1})

    @pytest.mark.asyncio
    async def test_unknown_operator(self, store: DataStore):
        """Test that unknown filter operators raise DatabaseError."""
        with pytest.raises(DatabaseError, match="operator"):
            await store.select(QUEUE, {"score__between": (1, 2)})


class TestTransaction:
    """Tests for transaction scoping."""

    @pytest.mark.asyncio
    async def test_commit(self, store: DataStore):
        """Test that writes inside a transaction are committed together."""
        async with store.transaction() as tx:
            first = await tx.insert(QUEUE, create_record(1))
            await tx.update(QUEUE, {"id": first["id"]}, {"score": 99})

        row = await store.get(QUEUE, {"id": first["id"]})
        assert row["score"] == 99

    @pytest.mark.asyncio
    async def test_rollback_on_error(self, store: DataStore):
        """Test that an exception rolls back every write."""
        with pytest.raises(RuntimeError):
            async with store.transaction() as tx:
                await tx.insert(QUEUE, create_record(1))
                await tx.insert(QUEUE, create_record(2))
                raise RuntimeError("abort")

        assert await store.count(QUEUE) == 0

    @pytest.mark.asyncio
    async def test_nested_transaction_reuses_connection(self, store: DataStore):
        """Test that transaction() on a bound store yields itself."""
        async with store.transaction() as tx:
            async with tx.transaction() as inner:
                assert inner is tx


class TestSqliteSerialization:
    """Tests for serialized access on SQLite engines."""

    @pytest.mark.asyncio
    async def test_stores_share_engine_lock(self, engine):
        """Test that every store over one SQLite engine shares a single lock."""
        lock = engine_lock(engine)

        assert lock is not None
        assert engine_lock(engine) is lock

    @pytest.mark.asyncio
    async def test_concurrent_inserts_all_persist(self, engine):
        """Test that concurrent inserts from separate stores are all committed."""
        stores = [DataStore(engine) for _ in range(3)]

        await asyncio.gather(
            *(stores[n % 3].insert(QUEUE, create_record(n)) for n in range(1, 9))
        )

        assert await stores[0].count(QUEUE) == 8

    @pytest.mark.asyncio
    async def test_concurrent_transaction_and_insert(self, store: DataStore):
        """Test that a rolled back transaction does not discard a concurrent insert."""

        async def failing_transaction() -> None:
            async with store.transaction() as tx:
                await tx.insert(QUEUE, create_record(1))
                await asyncio.sleep(0.01)
                raise RuntimeError("abort")

        results = await asyncio.gather(
            failing_transaction(),
            store.insert(QUEUE, create_record(2)),
            return_exceptions=True,
        )

        assert isinstance(results[0], RuntimeError)
        assert [r["title"] for r in await store.select(QUEUE)] == ["Project 2"]
