"""Schema creation for the job and error log tables."""
from __future__ import annotations

import asyncio
import logging

from advanced_alchemy.extensions.litestar import base
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

# Registers the models on the shared metadata
from solvelog.domain import ErrorLog, JobInfo  # noqa: F401
from solvelog.domain.errorlog.repositories import CREATE_SUMMARY_VIEW, DROP_SUMMARY_VIEW

logger = logging.getLogger(__name__)


async def database_available(engine: AsyncEngine, timeout: float = 10.0) -> bool:
    """Return True if the database accepts connections; False otherwise."""
    try:
        async def _probe():
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

        await asyncio.wait_for(_probe(), timeout=timeout)
        return True
    except Exception as e:
        logger.warning("Database unavailable: %s", e)
        return False


async def create_schema(engine: AsyncEngine, *, drop: bool = False) -> None:
    """Create tables and the per-load-step summary view if missing."""
    async with engine.begin() as conn:
        if drop:
            logger.warning("Dropping all tables on startup as per configuration.")
            await conn.execute(DROP_SUMMARY_VIEW)
            await conn.run_sync(base.DefaultBase.metadata.drop_all)
        await conn.run_sync(base.DefaultBase.metadata.create_all)
        await conn.execute(CREATE_SUMMARY_VIEW)
    logger.info("Database schema ready")
