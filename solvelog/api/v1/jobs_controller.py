"""Job API endpoints."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from litestar import Controller, delete, get, post
from litestar.di import Provide
from litestar.openapi.spec import Example
from litestar.params import Body
from litestar.status_codes import HTTP_201_CREATED

from solvelog.domain.jobs.models import JobInfo
from solvelog.domain.jobs.dtos import JobInfoDTO
from solvelog.services.workbench import Workbench

from solvelog.api.dependencies import provide_workbench


@dataclass
class ImportRequest:
    """Server-side location of a solver log to import."""

    path: str


class JobController(Controller):
    """Job endpoints

    Handles importing, listing and removing solver jobs.
    """
    path = "/api/v1/jobs"
    tags = ["Jobs"]

    dependencies = {
        "workbench": Provide(provide_workbench, sync_to_thread=False),
    }

    @post("/import", status_code=HTTP_201_CREATED, description="Import a solver log file as a new job.")
    async def import_log(
        self,
        workbench: Workbench,
        data: Annotated[
            ImportRequest,
            Body(examples=[Example(value={"path": "/data/logs/run-666666.log"})]),
        ],
    ) -> dict[str, int]:
        """Parse and store a log file; returns the new job id."""
        job_id = await workbench.import_log(data.path)
        return {"id": job_id}

    @get("/", return_dto=JobInfoDTO)
    async def list_jobs(self, workbench: Workbench) -> list[JobInfo]:
        """List all imported jobs."""
        return await workbench.list_jobs()

    @get("/{job_id:int}", return_dto=JobInfoDTO)
    async def get_job(self, workbench: Workbench, job_id: int) -> JobInfo:
        """Get a single job by id."""
        return await workbench.find_job(job_id)

    @delete("/{job_id:int}")
    async def remove_job(self, workbench: Workbench, job_id: int) -> None:
        """Delete a job and all of its error log records."""
        await workbench.remove_job(job_id)
