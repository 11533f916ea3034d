from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import set_key
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class DatabaseSettings(BaseSettings):
    """Connection to the PostgreSQL database holding jobs and error logs.

    Only PostgreSQL on asyncpg is supported: imports stream their rows with
    ``COPY ... FROM STDIN``, which other drivers do not expose.
    """

    model_config = SettingsConfigDict(env_prefix="DB_", env_file=ENV_FILE, extra="ignore")

    user: str = Field(default="solvelog", min_length=1, description="Role used to connect")
    password: str = Field(default="solvelog", description="Password of the role")
    host: str = Field(default="localhost", min_length=1, description="Server hostname")
    port: int = Field(default=5432, ge=1, le=65535, description="Server port")
    database: str = Field(default="solvelog", min_length=1, description="Database holding the job tables")

    echo: bool = Field(default=False, description="Log every SQL statement")
    echo_pool: bool = Field(default=False, description="Log pool checkouts and checkins")
    pool_size: int = Field(default=5, description="Connections kept open in the pool")
    max_overflow: int = Field(default=10, description="Extra connections allowed under load")
    pool_timeout: int = Field(default=30, description="Seconds to wait for a free connection")
    pool_recycle: int = Field(default=3600, description="Seconds before a connection is replaced")
    pool_disabled: bool = Field(default=False, description="Open a fresh connection per session")
    pool_pre_ping: bool = Field(default=True, description="Test connections before handing them out")
    drop_on_startup: bool = Field(
        default=False,
        description="Drop the job tables and summary view at startup (development only)",
    )

    @property
    def url(self) -> str:
        """SQLAlchemy URL assembled from the connection fields."""
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


class APISettings(BaseSettings):
    """HTTP server options."""

    model_config = SettingsConfigDict(env_prefix="API_", env_file=ENV_FILE, extra="ignore")

    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=8000, description="Port to bind")
    workers: int = Field(default=1, description="uvicorn worker processes")
    reload: bool = Field(default=False, description="Restart on source changes")
    log_level: LogLevel = Field(default="INFO", description="Root logger level")


class LogParserSettings(BaseSettings):
    """How metric lines are transcoded."""

    model_config = SettingsConfigDict(env_prefix="LOGPARSER_", env_file=ENV_FILE, extra="ignore")

    workers: int = Field(
        default=4,
        ge=1,
        description="Threads used to transcode metric lines. 1 disables the pool.",
    )
    chunk_size: int = Field(
        default=2048,
        ge=1,
        description="Number of body lines handed to a worker at once.",
    )


class CacheSettings(BaseSettings):
    """Aggregate result cache configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CACHE_", env_file=ENV_FILE, extra="ignore")

    capacity: int = Field(
        default=8,
        ge=1,
        description="Maximum number of jobs whose aggregate payload is kept.",
    )
    compression_quality: int = Field(
        default=5,
        ge=0,
        le=11,
        description="Brotli quality used when storing payloads (0-11).",
    )


class Settings(BaseSettings):
    """Every configuration section of the service.

    Values come from init arguments, then environment variables, then
    ``.env``, then the defaults below. Each section reads its own prefix:

        APP_DEBUG=true
        DB_HOST=db.internal
        LOGPARSER_WORKERS=8
        CACHE_CAPACITY=16
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    name: str = Field(default="SolveLog API", description="Title shown in the OpenAPI schema")
    version: str = Field(default="0.1.0", description="Version shown in the OpenAPI schema")
    description: str = Field(
        default="Solver error log import and convergence analytics API",
        description="Summary shown in the OpenAPI schema",
    )
    debug: bool = Field(default=False, description="Litestar debug mode")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment stage",
    )

    api: APISettings = Field(default_factory=APISettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logparser: LogParserSettings = Field(default_factory=LogParserSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Settings parsed once per process; call ``get_settings.cache_clear()`` to re-read."""
    return Settings()


def save_database_settings(settings: DatabaseSettings, env_file: str | Path = ENV_FILE) -> None:
    """Write the connection as ``DB_*`` entries so the next start uses it too.

    Other keys in the file are left alone.
    """
    path = Path(env_file)
    path.touch(exist_ok=True)
    for name, value in settings.model_dump().items():
        set_key(path, f"DB_{name.upper()}", str(value))
