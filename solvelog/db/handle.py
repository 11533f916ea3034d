"""Shared database handle guarded by a reader/writer lock.

Imports and queries hold the reader side for as long as they use the engine;
swapping the engine (reconfiguring the connection) takes the writer side and
waits for them to finish.
"""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiorwlock
from litestar.serialization import decode_json, encode_json
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from solvelog.config.settings import DatabaseSettings

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: DatabaseSettings) -> AsyncEngine:
    """SQLAlchemy async engine with connection pooling."""
    pool_options = (
        {"poolclass": NullPool}
        if settings.pool_disabled
        else {
            "pool_size": settings.pool_size,
            "max_overflow": settings.max_overflow,
            "pool_timeout": settings.pool_timeout,
            "pool_recycle": settings.pool_recycle,
            "pool_use_lifo": True,  # use lifo to reduce the number of idle connections
        }
    )
    return create_async_engine(
        url=settings.url,
        echo=settings.echo,
        echo_pool=settings.echo_pool,
        pool_pre_ping=settings.pool_pre_ping,
        json_serializer=encode_json,
        json_deserializer=decode_json,
        **pool_options,
    )


class StorageHandle:
    """The one engine every import and query goes through.

    Example:
        storage = StorageHandle(engine)
        async with storage.read() as session_maker:
            async with session_maker() as session:
                ...
        await storage.replace(new_engine)
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_maker = async_sessionmaker(engine, expire_on_commit=False)
        self._lock = aiorwlock.RWLock()

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def read(self) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
        """Hold the shared lock and yield the current session factory."""
        async with self._lock.reader_lock:
            yield self._session_maker

    async def replace(self, engine: AsyncEngine) -> None:
        """Swap in a new engine once every reader has released the handle."""
        async with self._lock.writer_lock:
            previous = self._engine
            self._engine = engine
            self._session_maker = async_sessionmaker(engine, expire_on_commit=False)
            logger.info("Database handle replaced (%s -> %s)", previous.url, engine.url)
        await previous.dispose()

    async def dispose(self) -> None:
        async with self._lock.writer_lock:
            await self._engine.dispose()
