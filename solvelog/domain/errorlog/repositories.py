"""Repository for error log records and their per-load-step summary."""

from __future__ import annotations

import io
from dataclasses import dataclass

from sqlalchemy import text
from advanced_alchemy.repository import SQLAlchemyAsyncRepository

from solvelog.domain.errorlog.models import ErrorLog

COPY_COLUMNS: tuple[str, ...] = ("timestamp", "load", "iter", "error_u", "error_phi", "job_id")

SUMMARY_VIEW = "error_log_summary"

# Start of each load step and the iterations it took to converge
CREATE_SUMMARY_VIEW = text(f"""
    CREATE OR REPLACE VIEW {SUMMARY_VIEW} AS
    SELECT
        job_id,
        load,
        max(iter) AS iters,
        min(timestamp) AS timestamp
    FROM error_log
    GROUP BY job_id, load
""")

DROP_SUMMARY_VIEW = text(f"DROP VIEW IF EXISTS {SUMMARY_VIEW}")


@dataclass
class ErrorLogEntry:
    """A single iteration of a job, numbered in time order."""

    iters: int
    load: float
    error_u: float
    error_phi: float


@dataclass
class ErrorLogSummary:
    """One load step: its iteration count and the seconds until the next step.

    ``cost`` is ``None`` for the last step.
    """

    load: float
    iters: int
    cost: float | None


class ErrorLogRepository(SQLAlchemyAsyncRepository[ErrorLog]):
    """Repository for ErrorLog model with bulk loading and aggregate reads."""

    model_type = ErrorLog

    async def copy_rows(self, rows: bytes) -> None:
        """Bulk-load CSV rows with ``COPY ... FROM STDIN``.

        Runs on the session's own connection, so the rows belong to the
        session's open transaction.

        Args:
            rows: ``timestamp,load,iter,error_u,error_phi,job_id`` lines.
        """
        if not rows:
            return
        connection = await self.session.connection()
        raw_connection = await connection.get_raw_connection()
        await raw_connection.driver_connection.copy_to_table(
            ErrorLog.__tablename__,
            source=io.BytesIO(rows),
            columns=list(COPY_COLUMNS),
            format="csv",
        )

    async def list_entries(self, job_id: int) -> list[ErrorLogEntry]:
        """Every iteration of a job, in time order."""
        stmt = text("""
            SELECT
                (ROW_NUMBER() OVER (ORDER BY timestamp))::INTEGER AS iters,
                load, error_u, error_phi
            FROM error_log
            WHERE job_id = :job_id
            ORDER BY timestamp
        """)
        result = await self.session.execute(stmt, {"job_id": job_id})
        return [ErrorLogEntry(*row) for row in result.all()]

    async def list_summary(self, job_id: int) -> list[ErrorLogSummary]:
        """Per-load-step iteration counts and elapsed seconds between steps."""
        stmt = text(f"""
            SELECT
                load,
                iters,
                extract(EPOCH FROM lead(timestamp) OVER (ORDER BY timestamp) - timestamp)::DOUBLE PRECISION AS cost
            FROM {SUMMARY_VIEW}
            WHERE job_id = :job_id
            ORDER BY timestamp
        """)
        result = await self.session.execute(stmt, {"job_id": job_id})
        return [ErrorLogSummary(*row) for row in result.all()]

    async def total_time(self, job_id: int) -> float | None:
        """Seconds between the first and last record of a job."""
        stmt = text("""
            SELECT
                extract(EPOCH FROM max(timestamp) - min(timestamp))::DOUBLE PRECISION AS total
            FROM error_log
            WHERE job_id = :job_id
        """)
        result = await self.session.execute(stmt, {"job_id": job_id})
        return result.scalar_one()
