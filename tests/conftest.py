import os
import pytest


@pytest.fixture(scope="session", autouse=True)
def baseline_settings_env():
    """Pin the environment so a developer's .env cannot change test outcomes.

    Environment variables outrank .env values in pydantic-settings.
    """
    os.environ.update({
        "APP_NAME": "SolveLog API",
        "APP_VERSION": "0.1.0",
        "APP_DEBUG": "false",
        "APP_ENVIRONMENT": "development",
        "API_HOST": "0.0.0.0",
        "API_PORT": "8000",
        "API_WORKERS": "1",
        "API_LOG_LEVEL": "INFO",
        "DB_USER": "solvelog",
        "DB_PASSWORD": "solvelog",
        "DB_HOST": "localhost",
        "DB_PORT": "5432",
        "DB_DATABASE": "solvelog",
        "DB_POOL_SIZE": "5",
        "DB_DROP_ON_STARTUP": "false",
        "LOGPARSER_WORKERS": "4",
        "LOGPARSER_CHUNK_SIZE": "2048",
        "CACHE_CAPACITY": "8",
        "CACHE_COMPRESSION_QUALITY": "5",
    })


@pytest.fixture(autouse=True)
def refresh_settings_cache():
    """Re-read settings in every test so monkeypatch.setenv() takes effect."""
    from solvelog.config.settings import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


SAMPLE_LOG = (
    "JobInfo(id='666666', name='test_job', queue='default', n=4, nodes=['node1','node2'])\n"
    "{param1: value1, param2: value2}\n"
    "2023-01-01 10:00:00.000 INFO step l=1.5 solve iter=1 residual err={ u=0.1 phi=0.2 }\n"
    "2023-01-01 10:01:00.000 INFO step l=1.2 solve iter=2 residual err={ u=0.05 phi=0.15 }\n"
)

SAMPLE_ROWS = (
    b"2023-01-01 10:00:00.000,1.5,1,0.1,0.2,666666\n"
    b"2023-01-01 10:01:00.000,1.2,2,0.05,0.15,666666\n"
)


@pytest.fixture
def sample_log() -> str:
    """A two-line solver log with header and parameters."""
    return SAMPLE_LOG


@pytest.fixture
def sample_log_file(tmp_path, sample_log: str):
    """The sample log written to disk."""
    path = tmp_path / "run-666666.log"
    path.write_text(sample_log, encoding="utf-8")
    return path
