"""Tests for configuration management."""

import pytest
from dotenv import dotenv_values
from pydantic import ValidationError

from solvelog.config import (
    CacheSettings,
    DatabaseSettings,
    LogParserSettings,
    Settings,
    get_settings,
    save_database_settings,
)


def test_default_settings():
    """Defaults apply when nothing overrides them."""
    settings = Settings()

    assert settings.name == "SolveLog API"
    assert settings.version == "0.1.0"
    assert settings.environment == "development"
    assert settings.debug is False


def test_environment_override(monkeypatch):
    """APP_ variables override the defaults."""
    monkeypatch.setenv("APP_NAME", "Custom Name")
    monkeypatch.setenv("APP_DEBUG", "true")
    monkeypatch.setenv("APP_ENVIRONMENT", "production")

    settings = Settings()

    assert settings.name == "Custom Name"
    assert settings.debug is True
    assert settings.environment == "production"


def test_database_settings():
    """The database section targets PostgreSQL on asyncpg."""
    settings = Settings()

    assert settings.database.url.startswith("postgresql+asyncpg://")
    assert settings.database.pool_size == 5
    assert settings.database.echo is False
    assert settings.database.drop_on_startup is False


def test_database_url_components():
    """Test the URL is assembled from its parts."""
    db = DatabaseSettings(user="u", password="p", host="db.internal", port=6543, database="runs")

    assert db.url == "postgresql+asyncpg://u:p@db.internal:6543/runs"


def test_api_settings():
    """HTTP server defaults."""
    settings = Settings()

    assert settings.api.host == "0.0.0.0"
    assert settings.api.port == 8000
    assert settings.api.log_level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def test_api_log_level_rejects_unknown(monkeypatch):
    """Test an unknown log level is rejected."""
    monkeypatch.setenv("API_LOG_LEVEL", "VERBOSE")

    with pytest.raises(ValidationError):
        Settings()


def test_logparser_settings(monkeypatch):
    """Test log parser configuration and its lower bounds."""
    monkeypatch.setenv("LOGPARSER_WORKERS", "8")
    monkeypatch.setenv("LOGPARSER_CHUNK_SIZE", "100")

    settings = Settings()
    assert settings.logparser.workers == 8
    assert settings.logparser.chunk_size == 100

    with pytest.raises(ValidationError):
        LogParserSettings(workers=0)


def test_cache_settings():
    """Test cache configuration bounds."""
    settings = Settings()
    assert settings.cache.capacity == 8
    assert settings.cache.compression_quality == 5

    with pytest.raises(ValidationError):
        CacheSettings(capacity=0)
    with pytest.raises(ValidationError):
        CacheSettings(compression_quality=12)


def test_environment_properties():
    """is_production and is_development follow the environment."""
    dev_settings = Settings(environment="development")
    assert dev_settings.is_development is True
    assert dev_settings.is_production is False

    prod_settings = Settings(environment="production")
    assert prod_settings.is_development is False
    assert prod_settings.is_production is True


def test_get_settings_cached():
    """Test get_settings returns the same instance until cleared."""
    assert get_settings() is get_settings()


@pytest.mark.parametrize("field", [{"host": ""}, {"database": ""}, {"user": ""}, {"port": 0}, {"port": 70000}])
def test_database_settings_reject_unusable_connection(field: dict) -> None:
    """Test connection fields that cannot form a working URL."""
    with pytest.raises(ValidationError):
        DatabaseSettings(**field)


def test_save_database_settings(tmp_path) -> None:
    """Test the connection is written as DB_ entries next to existing keys."""
    env_file = tmp_path / ".env"
    env_file.write_text("APP_NAME=Kept\nDB_HOST=old-host\n", encoding="utf-8")

    save_database_settings(DatabaseSettings(host="db.internal", port=6543, pool_disabled=True), env_file)

    saved = dotenv_values(env_file)
    assert saved["APP_NAME"] == "Kept"
    assert saved["DB_HOST"] == "db.internal"
    assert saved["DB_PORT"] == "6543"
    assert saved["DB_POOL_DISABLED"] == "True"


def test_save_database_settings_creates_file(tmp_path) -> None:
    """Test a missing .env is created."""
    env_file = tmp_path / ".env"
    save_database_settings(DatabaseSettings(), env_file)
    assert dotenv_values(env_file)["DB_DATABASE"] == "solvelog"
