"""Process-wide logging configuration.

A single stdout handler on the root logger serves every module logger;
uvicorn's loggers are routed to the same handler. Safe to call repeatedly.
"""
from __future__ import annotations
import copy
import logging
from logging.config import dictConfig

_DICT_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        }
    },
    "root": {"level": "INFO", "handlers": ["console"]},
    "loggers": {
        "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "sqlalchemy.engine": {"level": "WARNING"},
    },
}


def configure_logging(level: str = "INFO") -> None:
    """Configure logging once; later calls only adjust the root level.

    Existing root handlers mean a reloader or test harness already set up
    output, so no second handler is attached.
    """
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level.upper())
        return
    config = copy.deepcopy(_DICT_CONFIG)
    config["root"]["level"] = level.upper()
    dictConfig(config)
