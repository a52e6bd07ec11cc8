""" Logging setup: plain text by default, JSON lines when log_json is set. """
import logging
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from arazzo_builder.config.settings import BuilderSettings, get_settings

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Optional[BuilderSettings] = None) -> logging.Handler:
    """Install a single stderr handler on the ``arazzo_builder`` logger."""
    settings = settings or get_settings()

    handler = logging.StreamHandler(sys.stderr)
    if settings.log_json:
        handler.setFormatter(JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
        ))
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    logger = logging.getLogger("arazzo_builder")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
    return handler
