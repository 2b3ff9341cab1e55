import logging
import os
import sys
from pathlib import Path
from typing import ClassVar, Optional

_PACKAGE_LOGGER = "with_defer"
_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_COLOR_FORMAT = "\x1b[90m%(asctime)s\x1b[0m | %(levelname_color)s | \x1b[36m%(name)s\x1b[0m | %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"
_configured: str | int | None = None


def _supports_color() -> bool:
    try:
        return sys.stdout.isatty() and os.getenv("NO_COLOR") is None
    except Exception:
        return False


class _LevelColorFormatter(logging.Formatter):
    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\x1b[37m",  # light gray
        "INFO": "\x1b[32m",  # green
        "WARNING": "\x1b[33m",  # yellow
        "ERROR": "\x1b[31m",  # red
        "CRITICAL": "\x1b[41m",  # red background
    }

    RESET: ClassVar[str] = "\x1b[0m"

    def __init__(self, fmt: str, datefmt: str, use_color: bool):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        color = self.COLORS.get(levelname, "") if self.use_color else ""
        record.levelname_color = f"{color}{levelname}{self.RESET}" if color else levelname
        return super().format(record)


def _ensure_null_handler(logger: logging.Logger) -> None:
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())


def configure_logging(
    level: Optional[str | int] = None,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    dotenv_dir: Optional[Path] = None,
) -> str | int:
    """Give the ``with_defer`` logger its own stream handler.

    Applications opt in by calling this; the library never calls it. The
    package logger stops propagating once it has a handler, so records are
    not printed twice through the root logger.

    .env files in ``dotenv_dir`` (default: current working directory) are
    loaded first.

    Environment overrides:
    - `WITH_DEFER_LOG_LEVEL`
    - `WITH_DEFER_LOG_FORMAT`
    - `WITH_DEFER_LOG_DATEFMT`
    """
    from with_defer.config.environment import Environment

    global _configured

    Environment.load_dotenv(dotenv_dir)

    if isinstance(level, str):
        level = level.upper()

    if level is None:
        level = Environment.get_log_level()

    if _configured is not None and _configured == level:
        return level
    _configured = level

    use_color = _supports_color()
    if fmt is None:
        fmt = Environment.get("WITH_DEFER_LOG_FORMAT")
    if fmt is None:
        fmt = _COLOR_FORMAT if use_color else _DEFAULT_FORMAT
    if datefmt is None:
        datefmt = Environment.get("WITH_DEFER_LOG_DATEFMT", _DEFAULT_DATEFMT)

    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    handler = next(
        (h for h in logger.handlers if getattr(h, "_with_defer_handler", False)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler()
        handler._with_defer_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    handler.setLevel(level)
    handler.setFormatter(_LevelColorFormatter(fmt=fmt, datefmt=datefmt, use_color=use_color))
    return level


def reset_logging() -> None:
    """Undo configure_logging(): drop the stream handler and propagate to the root logger again."""
    global _configured

    logger = logging.getLogger(_PACKAGE_LOGGER)
    for h in list(logger.handlers):
        if getattr(h, "_with_defer_handler", False):
            logger.removeHandler(h)
    _ensure_null_handler(logger)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _configured = None


def get_logger(name: str) -> logging.Logger:
    """Return a module-scoped logger.

    Only a NullHandler is attached to the package logger, so output is left
    to the application's logging setup.
    """
    _ensure_null_handler(logging.getLogger(_PACKAGE_LOGGER))
    return logging.getLogger(name)
