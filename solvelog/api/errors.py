"""Flattens core errors into ``{"message": ...}`` responses."""
from __future__ import annotations

import logging
from typing import Any

from litestar import Request, Response
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from solvelog.errors import (
    JobConflictError,
    JobNotFoundError,
    LogFormatError,
    LogReadError,
    SolveLogError,
)

logger = logging.getLogger(__name__)

# Most specific first
_EXCEPTION_STATUS: tuple[tuple[type[SolveLogError], int], ...] = (
    (JobNotFoundError, HTTP_404_NOT_FOUND),
    (JobConflictError, HTTP_409_CONFLICT),
    (LogFormatError, HTTP_422_UNPROCESSABLE_ENTITY),
    (LogReadError, HTTP_400_BAD_REQUEST),
)


def status_for(exc: SolveLogError) -> int:
    for exc_type, status in _EXCEPTION_STATUS:
        if isinstance(exc, exc_type):
            return status
    return HTTP_500_INTERNAL_SERVER_ERROR


def solvelog_exception_handler(request: Request, exc: SolveLogError) -> Response[dict[str, Any]]:
    """Render any SolveLogError as a single message field."""
    status_code = status_for(exc)
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    content: dict[str, Any] = {"message": str(exc)}
    if isinstance(exc, LogFormatError):
        content["stage"] = exc.stage
    return Response(content=content, status_code=status_code)
