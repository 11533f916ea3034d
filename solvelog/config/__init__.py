"""Configuration module for SolveLog API."""

from solvelog.config.settings import (
    APISettings,
    CacheSettings,
    DatabaseSettings,
    LogParserSettings,
    Settings,
    get_settings,
    save_database_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "save_database_settings",
    "APISettings",
    "CacheSettings",
    "DatabaseSettings",
    "LogParserSettings",
]
