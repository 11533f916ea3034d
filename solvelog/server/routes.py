"""Central route registration."""
from litestar.types import ControllerRouterHandler

from solvelog.api.v1.jobs_controller import JobController
from solvelog.api.v1.error_log_controller import ErrorLogController
from solvelog.api.v1.settings import read_database_settings, write_database_settings
from solvelog.api.v1.stats import stats

def get_route_handlers() -> list[ControllerRouterHandler]:
    """Get all route handlers for the application."""
    return [
        JobController,
        ErrorLogController,
        read_database_settings,
        write_database_settings,
        stats,
    ]
