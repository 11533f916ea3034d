"""Process-wide instances shared by the app factory, lifecycle hooks and routes."""
from __future__ import annotations

from litestar.logging import LoggingConfig

from solvelog.config.settings import get_settings
from solvelog.services.logparser.logparser import LogParser

settings = get_settings()

# One parser for every import; it only keeps line counters
parser = LogParser(
    workers=settings.logparser.workers,
    chunk_size=settings.logparser.chunk_size,
)

logging_config = LoggingConfig(
    root={"level": settings.api.log_level, "handlers": ["queue_listener"]},
    formatters={
        "standard": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"}
    },
    log_exceptions="always",
)
