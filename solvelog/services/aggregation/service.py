"""Aggregate query service for the convergence views of a job.

This service handles:
- Serving the serialized per-iteration and per-load-step views of a job
- Populating the result cache in the background after a miss
- Total solve time of a job
- Cache invalidation
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import astuple
from typing import TYPE_CHECKING

import aiorwlock
from advanced_alchemy.exceptions import AdvancedAlchemyError
from litestar.exceptions import SerializationException
from litestar.serialization import encode_msgpack
from sqlalchemy.exc import SQLAlchemyError

from solvelog.domain.errorlog.repositories import ErrorLogEntry, ErrorLogRepository, ErrorLogSummary
from solvelog.errors import SerializationError, StorageError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from solvelog.db.handle import StorageHandle
    from solvelog.services.cache.cache import ResultCache

logger = logging.getLogger(__name__)


def encode_payload(summary: list[ErrorLogSummary], entries: list[ErrorLogEntry]) -> bytes:
    """MessagePack ``[summary, entries]`` with every row packed as an array.

    Summary rows are ``[load, iters, cost]``; entries are
    ``[iters, load, error_u, error_phi]``.

    Raises:
        SerializationError: If encoding fails.
    """
    try:
        return encode_msgpack([[astuple(row) for row in summary], [astuple(row) for row in entries]])
    except SerializationException as e:
        raise SerializationError(f"failed to encode aggregate payload: {e}") from e


class AggregateQueryService:
    """Cached aggregate reads over the error log.

    The cache has its own reader/writer lock: lookups share it, while
    population, removal and clearing take it exclusively. Two concurrent
    misses on one job both query storage; the cache keeps the first payload.

    Example:
        service = AggregateQueryService(storage=storage, cache=ResultCache())
        payload = await service.query(666666)
        seconds = await service.total_time(666666)
    """

    def __init__(self, storage: "StorageHandle", cache: "ResultCache") -> None:
        """Initialize the aggregate query service.

        Args:
            storage: Shared database handle.
            cache: Result cache for serialized payloads.
        """
        self.storage = storage
        self.cache = cache
        self._cache_lock = aiorwlock.RWLock()
        self._pending: set[asyncio.Task[None]] = set()

        # Invalidation counters: a payload read before an invalidation is never cached
        self._generation: int = 0
        self._job_generations: dict[int, int] = {}

        # Statistics
        self.cache_hits: int = 0
        self.cache_misses: int = 0

    async def query(self, job_id: int) -> bytes:
        """Return the serialized aggregate views of a job.

        On a miss the two views are read concurrently, the payload is
        returned right away, and the cache is filled by a detached task.
        A job without any records is never cached, so a later import is
        visible on the next query.

        Raises:
            StorageError: A read failed.
            SerializationError: The payload could not be encoded.
        """
        generation = self._generation_of(job_id)
        async with self._cache_lock.reader_lock:
            cached = self.cache.get(job_id)
        if cached is not None:
            self.cache_hits += 1
            return cached

        self.cache_misses += 1
        async with self.storage.read() as session_maker:
            try:
                summary, entries = await asyncio.gather(
                    self._read_summary(session_maker, job_id),
                    self._read_entries(session_maker, job_id),
                )
            except (AdvancedAlchemyError, SQLAlchemyError) as e:
                raise StorageError(f"failed to query error log of job {job_id}: {e}") from e

        payload = encode_payload(summary, entries)
        if summary or entries:
            self._schedule_populate(job_id, payload, generation)
        return payload

    async def total_time(self, job_id: int) -> float | None:
        """Seconds between the earliest and latest record of a job.

        Returns ``None`` if the job has no records.
        """
        async with self.storage.read() as session_maker:
            async with session_maker() as session:
                try:
                    return await ErrorLogRepository(session=session).total_time(job_id)
                except (AdvancedAlchemyError, SQLAlchemyError) as e:
                    raise StorageError(f"failed to compute total time of job {job_id}: {e}") from e

    async def clear_cache(self) -> None:
        async with self._cache_lock.writer_lock:
            self._generation += 1
            self._job_generations.clear()
            self.cache.clear()
        logger.info("Cleared error log cache")

    async def forget(self, job_id: int) -> None:
        """Drop the cached payload of one job, including any population still in flight."""
        async with self._cache_lock.writer_lock:
            self._job_generations[job_id] = self._job_generations.get(job_id, 0) + 1
            self.cache.remove(job_id)

    async def drain(self) -> None:
        """Wait for every pending cache population to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _generation_of(self, job_id: int) -> tuple[int, int]:
        return self._generation, self._job_generations.get(job_id, 0)

    async def _read_summary(
        self, session_maker: "async_sessionmaker[AsyncSession]", job_id: int
    ) -> list[ErrorLogSummary]:
        async with session_maker() as session:
            return await ErrorLogRepository(session=session).list_summary(job_id)

    async def _read_entries(
        self, session_maker: "async_sessionmaker[AsyncSession]", job_id: int
    ) -> list[ErrorLogEntry]:
        async with session_maker() as session:
            return await ErrorLogRepository(session=session).list_entries(job_id)

    def _schedule_populate(self, job_id: int, payload: bytes, generation: tuple[int, int]) -> None:
        task = asyncio.create_task(
            self._populate(job_id, payload, generation), name=f"cache-populate-{job_id}"
        )
        # Keep a reference so the task is not garbage collected mid-flight
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _populate(self, job_id: int, payload: bytes, generation: tuple[int, int]) -> None:
        """Store a payload unless the job was invalidated since it was read.

        Failures are logged, never raised.
        """
        try:
            async with self._cache_lock.writer_lock:
                if self._generation_of(job_id) != generation:
                    logger.debug("Skipping cache of job %s: invalidated while reading", job_id)
                    return
                self.cache.set(job_id, payload)
        except Exception as e:
            logger.exception("Failed to cache error log of job %s: %s", job_id, e)
