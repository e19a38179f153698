"""Central logging configuration shared by the API, scraper and wizard.

Installs one root console handler so module loggers emit without per-module
setup. The API keeps uvicorn's loggers on the same handler; the interactive
wizard logs to stderr so diagnostics never interleave with prompts.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def build_logging_config(level: str = "INFO", stream: str = "ext://sys.stdout") -> Dict[str, Any]:
    """Return a `dictConfig` mapping for the given level and output stream."""
    loggers: Dict[str, Any] = {
        name: {"level": level, "handlers": ["console"], "propagate": False}
        for name in _UVICORN_LOGGERS
    }
    loggers.update({name: {"level": "WARNING"} for name in _QUIET_LOGGERS})
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": stream,
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": loggers,
    }


def configure_logging(level: str = "INFO", *, stream: str = "ext://sys.stdout") -> None:
    """Configure process-wide logging once.

    Returns early when the root logger already has handlers, which happens
    under reloaders and under pytest's capture handlers.
    """
    if logging.getLogger().handlers:
        return
    dictConfig(build_logging_config(level.upper(), stream))
