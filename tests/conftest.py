import pytest

from with_defer.config.environment import Environment
from with_defer.config.logging_config import reset_logging


@pytest.fixture(autouse=True)
def reset_configuration(monkeypatch, tmp_path):
    """Isolate each test from the caller's logging environment and .env files."""
    for key in (
        "WITH_DEFER_LOG_LEVEL",
        "WITH_DEFER_LOG_FORMAT",
        "WITH_DEFER_LOG_DATEFMT",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    Environment.reset()
    reset_logging()
    yield
    Environment.reset()
    reset_logging()
