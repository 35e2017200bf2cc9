# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Local store connection management using SQLAlchemy async.

The local store keeps learner assessment records, learner content summaries
and locally created profiles.

Uses SQLAlchemy 2.0 async API with the asyncpg driver.

Example:
    from src.infrastructure.database.connection import (
        init_local_store,
        get_local_session,
    )

    # Initialize at SDK startup
    await init_local_store(settings)

    async with get_local_session() as session:
        result = await session.execute(select(ProfileRecord))
        profiles = result.scalars().all()
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.infrastructure.database.models import Base

if TYPE_CHECKING:
    from src.core.config.settings import Settings

# Module-level state for the local store connection
_local_engine: Optional[AsyncEngine] = None
_local_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None


class DatabaseError(Exception):
    """Base exception for local store operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying SQLAlchemy or database error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the database error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


async def init_local_store(settings: "Settings", create_tables: bool = True) -> None:
    """Initialize the local store connection pool.

    Args:
        settings: Settings containing the local store configuration.
        create_tables: Create missing tables after connecting.

    Raises:
        DatabaseError: If connection pool creation fails.
    """
    global _local_engine, _local_sessionmaker

    try:
        _local_engine = create_async_engine(
            settings.local_store.url,
            pool_size=settings.local_store.pool_size,
            pool_pre_ping=True,
            echo=settings.debug and settings.log_level == "DEBUG",
        )

        _local_sessionmaker = async_sessionmaker(
            bind=_local_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        if create_tables:
            async with _local_engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to initialize local store connection", e) from e


async def close_local_store() -> None:
    """Close the local store connection pool."""
    global _local_engine, _local_sessionmaker

    if _local_engine is not None:
        await _local_engine.dispose()
        _local_engine = None
        _local_sessionmaker = None


def get_local_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the local store sessionmaker.

    Raises:
        DatabaseError: If the local store has not been initialized.
    """
    if _local_sessionmaker is None:
        raise DatabaseError(
            "Local store not initialized. Call init_local_store() first."
        )
    return _local_sessionmaker


@asynccontextmanager
async def get_local_session() -> AsyncIterator[AsyncSession]:
    """Get an async session for the local store.

    The session is committed on success and rolled back on exception.

    Yields:
        AsyncSession for database operations.

    Raises:
        DatabaseError: If the local store has not been initialized or
            if a database operation fails.
    """
    sessionmaker = get_local_sessionmaker()

    async with sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise DatabaseError("Local store operation failed", e) from e
        except Exception:
            await session.rollback()
            raise

