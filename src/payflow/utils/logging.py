"""Logging setup shared by the API process and the async engine.

structlog renders every event; standard library handlers carry the output
to stdout and, when a log directory is configured, to a rotating file.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LOG_FILE_NAME = "payflow.log"

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
_JSON_ENVIRONMENTS = frozenset({"production", "staging"})


def _environment() -> str:
    return os.getenv("PROTEAN_ENV", "development").lower()


def _handlers(level: str, log_dir: Path | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=log_dir / LOG_FILE_NAME,
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def configure_logging(log_dir: str | Path | None = None) -> None:
    """Configure stdlib and structlog output for the current PROTEAN_ENV.

    ``log_dir`` falls back to ``PAYFLOW_LOG_DIR``; with neither set, logs
    only go to stdout. ``LOG_LEVEL`` overrides the per-environment level.
    """
    environment = _environment()
    level = os.getenv("LOG_LEVEL", _LEVELS.get(environment, "INFO")).upper()
    log_dir = log_dir or os.getenv("PAYFLOW_LOG_DIR")

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = _handlers(level, Path(log_dir) if log_dir else None)
    logging.getLogger("protean").setLevel(logging.WARNING)

    if environment in _JSON_ENVIRONMENTS:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def add_context(**kwargs: Any) -> None:
    """Bind request-scoped values onto every following log event."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
