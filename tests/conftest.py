"""Pytest configuration and fixtures.

This module provides common fixtures used across all tests. Storage
fixtures run against an in-memory SQLite database created per test.
"""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from curator.core.database import create_engine, init_db
from curator.core.logging import setup_logging
from curator.infrastructure.datastore import DataStore
from curator.models.content import ContentType
from curator.services.collector.base import ContentItem, ScoreComponents, ScoredItem

# Setup logging for tests
setup_logging()

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory engine with every table created.

    Yields:
        Async engine, disposed after the test
    """
    test_engine = create_engine(url=TEST_DATABASE_URL)
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def store(engine: AsyncEngine) -> DataStore:
    """Create a data store over the test database."""
    return DataStore(engine)


@pytest_asyncio.fixture
async def bare_store() -> AsyncGenerator[DataStore, None]:
    """Create a data store whose tables were never provisioned.

    Yields:
        DataStore over an empty database
    """
    test_engine = create_engine(url=TEST_DATABASE_URL)
    yield DataStore(test_engine)
    await test_engine.dispose()


@pytest.fixture
def make_item() -> Callable[..., ContentItem]:
    """Factory for ContentItem instances with sensible defaults."""

    def _make(
        title: str = "Launchpad for indie founders",
        url: str = "https://example.com/launchpad",
        description: str = "A small tool that helps founders ship faster.",
        source: str = "test",
        content_type: ContentType = ContentType.PROJECT,
        metadata: dict[str, Any] | None = None,
        fetched_at: datetime | None = None,
    ) -> ContentItem:
        return ContentItem(
            title=title,
            url=url,
            description=description,
            source=source,
            type=content_type,
            metadata=metadata or {},
            fetched_at=fetched_at or datetime.now(UTC),
        )

    return _make


@pytest.fixture
def make_scored(make_item: Callable[..., ContentItem]) -> Callable[..., ScoredItem]:
    """Factory for ScoredItem instances with a fixed score."""

    def _make(score: int = 70, category: str = "medium-fit", **item_kwargs: Any) -> ScoredItem:
        item = make_item(**item_kwargs)
        return ScoredItem(
            **item.model_dump(),
            score=score,
            category=category,
            confidence=0.8,
            rule_score=score,
            components=ScoreComponents(quality=20, relevance=20, freshness=15, completeness=15),
        )

    return _make


@pytest.fixture
def anyio_backend() -> str:
    """Specify backend for anyio.

    Returns:
        Backend name
    """
    return "asyncio"
