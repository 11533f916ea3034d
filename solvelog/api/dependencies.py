"""Shared dependency providers for API layer."""
from __future__ import annotations

from litestar import Request
from litestar.exceptions import ServiceUnavailableException

from solvelog.services.logparser import LogParser
from solvelog.services.workbench import Workbench
from solvelog.server.plugins import parser


def provide_parser() -> LogParser:
    """Provide the global LogParser instance."""
    return parser


def provide_workbench(request: Request) -> Workbench:
    """Provide the Workbench built at startup."""
    workbench: Workbench | None = getattr(request.app.state, "workbench", None)
    if workbench is None:
        raise ServiceUnavailableException(detail="Workbench is not initialised")
    return workbench
