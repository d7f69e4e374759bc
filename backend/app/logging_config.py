"""Logging setup applied once at application startup."""

import logging.config
from typing import Optional

from app.config import settings

# Third-party loggers that are only interesting when something breaks
QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore")


def configure_logging(level: Optional[str] = None) -> None:
    level = (level or settings.LOG_LEVEL).upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
        "loggers": {
            "app": {"level": level},
            **{name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        },
    })
