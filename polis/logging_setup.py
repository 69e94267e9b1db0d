"""Logging configuration for command-line entry points."""

from __future__ import annotations

import json
import logging

from polis.config.models import PolisConfig

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(config: PolisConfig) -> None:
    """Point the ``polis`` logger at stderr using *config*'s level and format."""
    handler = logging.StreamHandler()
    if config.log_format == "json":
        handler.setFormatter(JsonLineFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    logger = logging.getLogger("polis")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(_LEVELS[config.log_level])
    logger.propagate = False
