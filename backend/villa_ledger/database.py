"""Database plumbing for the ledger: engine, sessions, declarative base.

Every booking write goes through one ``AsyncSession`` per request. The ledger
commits or rolls back that session itself, so ``get_db`` only has to clean up
whatever a handler leaves behind.
"""

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from villa_ledger.config import settings

logger = logging.getLogger(__name__)


def engine_options(url: str) -> dict:
    """Keyword arguments for ``create_async_engine`` suited to the backend in ``url``."""
    if url.startswith("sqlite"):
        # aiosqlite ignores pool sizing; local runs share a single file
        return {"echo": settings.debug}
    return {
        "echo": settings.debug,
        "pool_pre_ping": True,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
    }


engine = create_async_engine(settings.async_database_url, **engine_options(settings.async_database_url))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for the ledger's tables."""


class TimestampMixin:
    """Adds created_at and updated_at columns maintained by the database."""

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )


class UUIDPrimaryKeyMixin:
    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Session that commits on a clean exit and rolls back if the block raises."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            logger.warning("Rolled back session after an error")
            raise


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield the request's session for FastAPI dependency injection.

    Villa edits only flush, so they are committed here. Booking writes have
    already been committed or rolled back by ``BookingLedger`` by the time
    the handler returns.
    """
    async with session_scope() as session:
        yield session
