"""Logging configuration applied once at application start."""
import logging
import logging.config

from app.core.config import settings


def setup_logging() -> None:
    level = settings.LOG_LEVEL.upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "app": {"handlers": ["console"], "level": level, "propagate": False},
                "uvicorn.error": {"level": level},
            },
            "root": {"handlers": ["console"], "level": "WARNING"},
        }
    )
