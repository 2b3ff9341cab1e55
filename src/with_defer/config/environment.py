"""
Environment Configuration Module

Provides the Environment class, the single place where with-defer reads its
settings. Values are resolved in this order:

- Environment variables (including those loaded from .env files)
- Default values from DEFAULT_ENV

Nothing here runs at import time. .env files are only read when the
application calls configure_logging(), so importing the library never
changes os.environ.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_ENV: Dict[str, Any] = {
    "ENV": "development",
    "WITH_DEFER_LOG_LEVEL": None,
    "WITH_DEFER_LOG_FORMAT": None,
    "WITH_DEFER_LOG_DATEFMT": None,
}

DEFAULT_LOG_LEVEL = "WARNING"


def load_dotenv_files(base_dir: Optional[Path] = None) -> list[Path]:
    """Load environment variables from .env files in ``base_dir``.

    Files are loaded in order of precedence, later files overriding earlier
    ones. Variables already present in the process environment are never
    overridden.

    Args:
        base_dir: Directory holding the .env files (default: current working directory).

    Returns:
        The list of files that were found and loaded.
    """
    from dotenv import load_dotenv

    base_dir = base_dir if base_dir is not None else Path.cwd()
    env_name = os.environ.get("ENV", DEFAULT_ENV["ENV"])

    env_files = [
        base_dir / ".env",
        base_dir / f".env.{env_name}",
        base_dir / f".env.{env_name}.local",
    ]

    loaded: list[Path] = []
    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file, override=False)
            loaded.append(env_file)
    return loaded


class Environment(object):
    """
    Class-level accessor for with-defer settings.
    """

    _dotenv_loaded: bool = False

    @classmethod
    def load_dotenv(cls, base_dir: Optional[Path] = None) -> list[Path]:
        """Load .env files once; later calls are no-ops until reset()."""
        if cls._dotenv_loaded:
            return []
        cls._dotenv_loaded = True
        return load_dotenv_files(base_dir)

    @classmethod
    def reset(cls) -> None:
        """Forget that .env files were loaded so the next load_dotenv() reloads them."""
        cls._dotenv_loaded = False

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        value = os.environ.get(key)
        if value is not None:
            return value
        if DEFAULT_ENV.get(key) is not None:
            return DEFAULT_ENV[key]
        return default

    @classmethod
    def get_log_level(cls) -> str:
        """Return the with-defer log level from WITH_DEFER_LOG_LEVEL (default "WARNING").

        Generic variables such as LOG_LEVEL or DEBUG belong to the host
        application and are ignored.
        """
        level = cls.get("WITH_DEFER_LOG_LEVEL")
        if level:
            return str(level).upper()
        return DEFAULT_LOG_LEVEL
