"""Operations exposed to the API layer.

The Workbench is built once at startup and handed by reference to the
controllers; it is the only object they call.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from advanced_alchemy.exceptions import AdvancedAlchemyError, NotFoundError
from sqlalchemy.exc import SQLAlchemyError

from solvelog.db.handle import create_engine_from_settings
from solvelog.db.schema import create_schema
from solvelog.domain.jobs.repositories import JobInfoRepository
from solvelog.errors import JobNotFoundError, StorageError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from solvelog.config.settings import DatabaseSettings
    from solvelog.db.handle import StorageHandle
    from solvelog.domain.jobs.models import JobInfo
    from solvelog.services.aggregation.service import AggregateQueryService
    from solvelog.services.ingestion.service import BulkImporter

logger = logging.getLogger(__name__)


class Workbench:
    """Import, query and manage solver jobs."""

    def __init__(
        self,
        storage: "StorageHandle",
        importer: "BulkImporter",
        aggregates: "AggregateQueryService",
        database: "DatabaseSettings",
        *,
        engine_factory: "Callable[[DatabaseSettings], AsyncEngine]" = create_engine_from_settings,
    ) -> None:
        self.storage = storage
        self.importer = importer
        self.aggregates = aggregates
        self.database = database
        self.engine_factory = engine_factory

    async def import_log(self, path: Path | str) -> int:
        """Import a log, then drop anything cached for its job id."""
        job_id = await self.importer.import_log(path)
        await self.aggregates.forget(job_id)
        return job_id

    async def query_aggregate(self, job_id: int) -> bytes:
        return await self.aggregates.query(job_id)

    async def total_time(self, job_id: int) -> float | None:
        return await self.aggregates.total_time(job_id)

    async def clear_cache(self) -> None:
        await self.aggregates.clear_cache()

    async def list_jobs(self) -> list["JobInfo"]:
        async with self.storage.read() as session_maker:
            async with session_maker() as session:
                try:
                    return list(await JobInfoRepository(session=session).list())
                except (AdvancedAlchemyError, SQLAlchemyError) as e:
                    raise StorageError(f"failed to list jobs: {e}") from e

    async def find_job(self, job_id: int) -> "JobInfo":
        """Raises:
            JobNotFoundError: If no job has this id.
        """
        async with self.storage.read() as session_maker:
            async with session_maker() as session:
                try:
                    return await JobInfoRepository(session=session).get(job_id)
                except NotFoundError as e:
                    raise JobNotFoundError(f"job {job_id} not found") from e
                except (AdvancedAlchemyError, SQLAlchemyError) as e:
                    raise StorageError(f"failed to load job {job_id}: {e}") from e

    async def remove_job(self, job_id: int) -> None:
        """Delete a job with all its records and forget its cached payload.

        Raises:
            JobNotFoundError: If no job has this id.
        """
        async with self.storage.read() as session_maker:
            async with session_maker() as session:
                try:
                    await JobInfoRepository(session=session).delete(job_id, auto_commit=True)
                except NotFoundError as e:
                    raise JobNotFoundError(f"job {job_id} not found") from e
                except (AdvancedAlchemyError, SQLAlchemyError) as e:
                    raise StorageError(f"failed to remove job {job_id}: {e}") from e
        await self.aggregates.forget(job_id)
        logger.info("Removed job %s", job_id)

    async def reconfigure(self, settings: "DatabaseSettings") -> None:
        """Connect to another database and make it the shared handle.

        The new connection is verified and its schema created before any
        reader sees it; on failure the current handle stays in place.
        """
        engine = self.engine_factory(settings)
        try:
            await create_schema(engine)
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            raise StorageError(f"cannot use database {settings.host}:{settings.port}/{settings.database}: {e}") from e
        await self.storage.replace(engine)
        self.database = settings
        # Cached payloads describe the previous database
        await self.aggregates.clear_cache()
