"""Repository for imported jobs."""
from __future__ import annotations

from advanced_alchemy.repository import SQLAlchemyAsyncRepository

from solvelog.domain.jobs.models import JobInfo


class JobInfoRepository(SQLAlchemyAsyncRepository[JobInfo]):
    """Repository for JobInfo model."""

    model_type = JobInfo
