"""Database configuration and engine management.

This module provides the SQLAlchemy 2.0 declarative Base, the async engine
factory and lifecycle helpers. Engines are created lazily so that tests and
scripts can point the application at a different database URL.
"""

import re
from typing import Any, ClassVar

from sqlalchemy import MetaData, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase, declared_attr
from sqlalchemy.pool import StaticPool

from curator.core.config import Config, get_config
from curator.core.logging import get_logger

logger = get_logger(__name__)

# ============================================
# Naming Convention
# ============================================
# Consistent naming for constraints and indexes
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",  # Index
    "uq": "uq_%(table_name)s_%(column_0_name)s",  # Unique constraint
    "ck": "ck_%(table_name)s_%(constraint_name)s",  # Check constraint
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",  # Foreign key
    "pk": "pk_%(table_name)s",  # Primary key
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ============================================
# Base Model
# ============================================


class Base(DeclarativeBase):
    """Base class for all ORM models.

    Provides common functionality for all models including:
    - Consistent table naming (snake_case)
    - Metadata with naming conventions
    - __repr__ implementation
    """

    metadata: ClassVar[MetaData] = metadata

    @declared_attr.directive
    @classmethod
    def __tablename__(cls) -> str:
        """Generate table name from class name.

        Converts CamelCase to snake_case automatically.

        Returns:
            Snake case table name
        """
        return re.sub(r"(?<!^)(?=[A-Z])", "_", cls.__name__).lower()

    def __repr__(self) -> str:
        """String representation of model instance."""
        columns = ", ".join(
            f"{k}={v!r}"
            for k, v in self.__dict__.items()
            if not k.startswith("_") and k != "metadata"
        )
        return f"{self.__class__.__name__}({columns})"


# ============================================
# Engine
# ============================================


def create_engine(config: Config | None = None, url: str | None = None) -> AsyncEngine:
    """Create an async engine for the configured database.

    SQLite URLs get a StaticPool so an in-memory database is shared by
    every connection of the engine.

    Args:
        config: Application config (default: global config)
        url: Explicit database URL overriding the config

    Returns:
        AsyncEngine instance
    """
    config = config or get_config()
    database_url = url or config.database_url

    kwargs: dict[str, Any] = {"echo": config.database_echo}
    if database_url.startswith("sqlite"):
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=config.database_pool_size,
            max_overflow=config.database_max_overflow,
            pool_pre_ping=True,  # Verify connections before using
            pool_recycle=3600,  # Recycle connections after 1 hour
        )

    return create_async_engine(database_url, **kwargs)


_engine: AsyncEngine | None = None


def get_engine() -> AsyncEngine:
    """Get the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Initialize database (create all tables).

    This is for development and tests only. Production schemas are
    provisioned out of band.

    Args:
        engine: Engine to use (default: process-wide engine)
    """
    # Register models on the metadata
    import curator.models  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized")


async def close_db(engine: AsyncEngine | None = None) -> None:
    """Close database connections.

    Call this when shutting down the application.
    """
    global _engine
    target = engine or _engine
    if target is None:
        return
    await target.dispose()
    if target is _engine:
        _engine = None
    logger.info("Database connections closed")


# ============================================
# Health Check
# ============================================


async def check_db_connection(engine: AsyncEngine | None = None) -> bool:
    """Check if database connection is healthy.

    Returns:
        True if connection is successful, False otherwise
    """
    try:
        async with (engine or get_engine()).begin() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database health check failed", error=str(e), exc_info=True)
        return False
