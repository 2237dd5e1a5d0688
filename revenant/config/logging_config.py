from __future__ import annotations

import logging
import os
from logging.config import dictConfig
from typing import Any


def _default_logging_dict(level: str) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)-8s %(threadName)s %(name)s - %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "default",
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            "revenant": {"level": level, "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(level_name: str | int | None = None) -> None:
    """Configure console logging for the ``revenant`` package.

    - If `level_name` is a string like 'INFO' it will be resolved to the numeric level.
    - If None, tries `LOG_LEVEL` env var, otherwise defaults to INFO.
    Handlers accept DEBUG so the package logger alone controls the effective
    output level. Applications that configure logging themselves need not
    call this.
    """
    if level_name is None:
        level_name = os.getenv("LOG_LEVEL", "INFO")

    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    else:
        level = level_name

    dictConfig(_default_logging_dict(logging.getLevelName(level)))

