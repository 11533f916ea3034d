"""Error log API endpoints for convergence charts."""
from __future__ import annotations

from typing import Any

from litestar import Controller, Response, delete, get
from litestar.di import Provide

from solvelog.services.workbench import Workbench

from solvelog.api.dependencies import provide_workbench

MSGPACK_MEDIA_TYPE = "application/x-msgpack"


class ErrorLogController(Controller):
    """Aggregated error log views of a job."""

    path = "/api/v1"
    tags = ["Error Log"]

    dependencies = {
        "workbench": Provide(provide_workbench, sync_to_thread=False),
    }

    @get(
        "/jobs/{job_id:int}/error-log",
        media_type=MSGPACK_MEDIA_TYPE,
        description=(
            "MessagePack [summary, entries]: summary rows are [load, iters, cost], "
            "entries are [iters, load, error_u, error_phi]."
        ),
    )
    async def get_error_log(self, workbench: Workbench, job_id: int) -> Response[bytes]:
        """Per-load-step summary and per-iteration errors of a job."""
        payload = await workbench.query_aggregate(job_id)
        return Response(content=payload, media_type=MSGPACK_MEDIA_TYPE)

    @get("/jobs/{job_id:int}/total-time")
    async def get_total_time(self, workbench: Workbench, job_id: int) -> dict[str, Any]:
        """Total solving time in seconds (null when the job has no records)."""
        return {"job_id": job_id, "total": await workbench.total_time(job_id)}

    @delete("/error-log/cache")
    async def clear_cache(self, workbench: Workbench) -> None:
        """Drop every cached error log payload."""
        await workbench.clear_cache()
