"""Application lifecycle hooks for startup and shutdown."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from solvelog.config.settings import get_settings
from solvelog.db.handle import StorageHandle, create_engine_from_settings
from solvelog.db.schema import create_schema, database_available
from solvelog.server.plugins import parser
from solvelog.services.aggregation.service import AggregateQueryService
from solvelog.services.cache.cache import ResultCache
from solvelog.services.ingestion.service import BulkImporter
from solvelog.services.workbench import Workbench

if TYPE_CHECKING:
    from litestar import Litestar

logger = logging.getLogger(__name__)


async def on_startup(app: "Litestar") -> None:
    """Build the Workbench and create the schema when the database is reachable.

    If the database is unavailable the API still starts, in a degraded mode:
    requests fail with a storage error until the connection is reconfigured.
    """
    settings = get_settings()

    engine = create_engine_from_settings(settings.database)
    if await database_available(engine):
        await create_schema(engine, drop=settings.database.drop_on_startup)
    else:
        logger.warning("Starting without database: skipping schema creation.")

    storage = StorageHandle(engine)
    cache = ResultCache(
        capacity=settings.cache.capacity,
        quality=settings.cache.compression_quality,
    )
    workbench = Workbench(
        storage=storage,
        importer=BulkImporter(parser=parser, storage=storage),
        aggregates=AggregateQueryService(storage=storage, cache=cache),
        database=settings.database,
    )

    app.state.storage: StorageHandle = storage
    app.state.workbench: Workbench = workbench
    logger.info("Workbench ready (cache capacity=%d)", settings.cache.capacity)


async def on_shutdown(app: "Litestar") -> None:
    """Let background cache writes finish, then close the database handle."""
    workbench: Workbench | None = getattr(app.state, "workbench", None)
    if workbench:
        await workbench.aggregates.drain()

    storage: StorageHandle | None = getattr(app.state, "storage", None)
    if storage:
        await storage.dispose()
        logger.info("Closed database handle")
