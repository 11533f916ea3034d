"""DTOs for job data transfer."""
from __future__ import annotations

from advanced_alchemy.extensions.litestar import SQLAlchemyDTO, SQLAlchemyDTOConfig

from solvelog.domain.jobs.models import JobInfo


class JobInfoDTO(SQLAlchemyDTO[JobInfo]):
    """Data transfer object for JobInfo model."""
    config = SQLAlchemyDTOConfig(rename_strategy="camel")
