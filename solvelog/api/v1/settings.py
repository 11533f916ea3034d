from __future__ import annotations

import asyncio
from typing import Any

from litestar import get, put
from litestar.di import Provide
from litestar.exceptions import ValidationException
from pydantic import ValidationError

from solvelog.api.dependencies import provide_workbench
from solvelog.config.settings import DatabaseSettings, save_database_settings
from solvelog.services.workbench import Workbench

_dependencies = {"workbench": Provide(provide_workbench, sync_to_thread=False)}


@get("/api/v1/settings/database", dependencies=_dependencies)
async def read_database_settings(workbench: Workbench) -> dict[str, Any]:
    """Endpoint to read the database connection in use (password masked)."""
    return workbench.database.model_dump() | {"password": "********"}


@put("/api/v1/settings/database", status_code=204, dependencies=_dependencies)
async def write_database_settings(data: dict[str, Any], workbench: Workbench) -> None:
    """Switch to another database and keep it for later starts.

    Waits until in-flight requests release the current connection, then
    writes the new `DB_*` values to `.env`.
    """
    try:
        database = DatabaseSettings(**(workbench.database.model_dump() | data))
    except ValidationError as exc:
        raise ValidationException(detail=str(exc)) from exc
    await workbench.reconfigure(database)
    await asyncio.to_thread(save_database_settings, database)
