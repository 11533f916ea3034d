"""Log import service - turns one solver log file into one committed job.

This service orchestrates:
- Reading the log file via aiofiles
- Parsing via LogParser (in a worker thread)
- Persisting the job row via JobInfoRepository
- Bulk-loading the metric rows via ErrorLogRepository (COPY)

Everything happens in a single transaction: a job is either fully visible
with all its records or not stored at all.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import aiofiles
import asyncpg
from advanced_alchemy.exceptions import AdvancedAlchemyError, DuplicateKeyError, IntegrityError
from sqlalchemy.exc import SQLAlchemyError

from solvelog.domain.errorlog.repositories import ErrorLogRepository
from solvelog.domain.jobs.models import JobInfo
from solvelog.domain.jobs.repositories import JobInfoRepository
from solvelog.errors import JobConflictError, LogReadError, StorageError
from solvelog.services.logparser.schemas import JobMetadata

if TYPE_CHECKING:
    from solvelog.db.handle import StorageHandle
    from solvelog.services.logparser.logparser import LogParser


logger = logging.getLogger(__name__)


class BulkImporter:
    """Imports solver log files into storage.

    Example:
        importer = BulkImporter(parser=parser, storage=storage)
        job_id = await importer.import_log(Path("run-666666.log"))
    """

    def __init__(self, parser: "LogParser", storage: "StorageHandle") -> None:
        """Initialize the importer.

        Args:
            parser: LogParser instance for transcoding log text.
            storage: Shared database handle.
        """
        self.parser: LogParser = parser
        self.storage: StorageHandle = storage

        # Statistics
        self.total_imported: int = 0
        self.total_rows: int = 0

    async def read_log(self, path: Path | str) -> str:
        """Read the whole log file as UTF-8 text.

        Raises:
            LogReadError: If the file cannot be opened or decoded.
        """
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as file:
                return await file.read()
        except (OSError, UnicodeDecodeError) as e:
            raise LogReadError(f"cannot read log file {path}: {e}") from e

    async def import_log(self, path: Path | str) -> int:
        """Parse a log file and store it as one job.

        Args:
            path: Location of the solver log.

        Returns:
            The imported job id.

        Raises:
            LogReadError: The file is unreadable.
            LogFormatError: The text does not follow the log layout, or the
                job id is not numeric.
            JobConflictError: A job with this id already exists.
            StorageError: Any other database failure; nothing is committed.
        """
        content = await self.read_log(path)
        metadata, rows = await asyncio.to_thread(self.parser.parse, content)
        job_id = metadata.numeric_id()

        logger.debug("Importing job %s from %s (%d bytes of rows)", job_id, path, len(rows))
        await self._store(job_id, metadata, rows)

        self.total_imported += 1
        self.total_rows += rows.count(b"\n")
        logger.info("Imported job %s (%s) from %s", job_id, metadata.name, path)
        return job_id

    async def _store(self, job_id: int, metadata: JobMetadata, rows: bytes) -> None:
        """Insert the job and COPY its rows inside one transaction."""
        async with self.storage.read() as session_maker:
            async with session_maker() as session:
                job_repo = JobInfoRepository(session=session)
                log_repo = ErrorLogRepository(session=session)
                try:
                    async with session.begin():
                        await job_repo.add(self._to_job_model(job_id, metadata), auto_commit=False)
                        await log_repo.copy_rows(rows)
                except (DuplicateKeyError, IntegrityError, asyncpg.UniqueViolationError) as e:
                    raise JobConflictError(f"job {job_id} has already been imported") from e
                except (AdvancedAlchemyError, SQLAlchemyError, asyncpg.PostgresError) as e:
                    raise StorageError(f"failed to import job {job_id}: {e}") from e

    def _to_job_model(self, job_id: int, metadata: JobMetadata) -> JobInfo:
        """Convert JobMetadata schema to ORM model."""
        return JobInfo(
            id=job_id,
            name=metadata.name,
            queue=metadata.queue,
            num_cpu=metadata.n,
            nodes=metadata.nodes,
            parameters=metadata.parameters,
        )
