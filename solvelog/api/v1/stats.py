"""Stats API endpoint for parser, import and cache statistics."""
from __future__ import annotations

from typing import Any

from litestar import Request, get
from litestar.di import Provide

from solvelog.services.logparser import LogParser
from solvelog.services.workbench import Workbench
from solvelog.api.dependencies import provide_parser


@get("/stats", dependencies={"log_parser": Provide(provide_parser, sync_to_thread=False)})
async def stats(request: Request, log_parser: LogParser) -> dict[str, Any]:
    """Get parser, import and cache statistics.

    Returns:
        Dictionary with parsing, import and cache statistics.
        Import and cache figures are zero if the workbench is not available.
    """
    workbench: Workbench | None = getattr(request.app.state, "workbench", None)
    result: dict[str, Any] = {
        "total_parsed_lines": log_parser.parsed_lines_count(),
        "total_skipped_lines": log_parser.skipped_lines_count(),
        "total_imported_jobs": 0,
        "total_imported_rows": 0,
        "cache_entries": 0,
        "cache_hits": 0,
        "cache_misses": 0,
    }
    if workbench is None:
        return result

    result.update(
        total_imported_jobs=workbench.importer.total_imported,
        total_imported_rows=workbench.importer.total_rows,
        cache_entries=len(workbench.aggregates.cache),
        cache_hits=workbench.aggregates.cache_hits,
        cache_misses=workbench.aggregates.cache_misses,
    )
    return result
