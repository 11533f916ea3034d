"""Litestar application factory."""

from __future__ import annotations

from litestar import Litestar
from litestar.config.compression import CompressionConfig
from litestar.middleware.logging import LoggingMiddlewareConfig
from litestar.openapi import OpenAPIConfig

from solvelog.api.errors import solvelog_exception_handler
from solvelog.config.settings import get_settings
from solvelog.errors import SolveLogError
from solvelog.server import plugins
from solvelog.server.lifecycle import on_shutdown, on_startup
from solvelog.server.routes import get_route_handlers


def create_app() -> Litestar:
    """Build the SolveLog application.

    The Workbench and database handle are created by ``on_startup``, so
    building the app never touches the database.
    """
    settings = get_settings()

    return Litestar(
        debug=settings.debug,
        route_handlers=get_route_handlers(),
        on_startup=[on_startup],
        on_shutdown=[on_shutdown],
        exception_handlers={SolveLogError: solvelog_exception_handler},
        logging_config=plugins.logging_config,
        openapi_config=OpenAPIConfig(
            title=settings.name,
            version=settings.version,
            description=settings.description,
            create_examples=True,
        ),
        # Job listings compress well; msgpack payloads are already compact
        compression_config=CompressionConfig(backend="brotli", minimum_size=1000, brotli_quality=4),
        middleware=[LoggingMiddlewareConfig().middleware],
    )
