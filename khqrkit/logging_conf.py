"""Logging setup: JSON lines for services, plain text for local runs."""
from __future__ import annotations

import json
import logging
from logging.config import dictConfig
from typing import Any

from .config import LoggingConfig, settings

TEXT_FORMAT = "%(levelname)s %(name)s %(message)s"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` keys merged in."""

    def __init__(self, fmt: str | None = None, *, static_fields: dict[str, Any] | None = None) -> None:
        super().__init__(fmt)
        self.static_fields = static_fields or {}

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - overrides base
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **self.static_fields,
        }
        payload.update({k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Install the root handler described by ``config`` (defaults to settings)."""

    config = config or settings.logging
    if config.json_logs:
        formatter: dict[str, Any] = {
            "()": JsonFormatter,
            "static_fields": {"app": settings.app_name, "environment": settings.environment},
        }
    else:
        formatter = {"format": TEXT_FORMAT}

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": formatter},
            "handlers": {
                "default": {
                    "level": config.level,
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                }
            },
            "root": {"handlers": ["default"], "level": config.level},
        }
    )
