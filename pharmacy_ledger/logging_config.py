"""
Logging configuration.

Two output formats, picked by the LOG_FORMAT setting:
- console: human-readable lines for local development
- json: one JSON object per line for log aggregation
"""

import json
import logging
import logging.config
from datetime import datetime, timezone

from pharmacy_ledger.config import get_settings


class JsonFormatter(logging.Formatter):
    """Render a log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def get_logging_config(level: str, log_format: str) -> dict:
    """Build a dictConfig mapping for the given level and format."""
    if log_format == "json":
        formatter = {"()": "pharmacy_ledger.logging_config.JsonFormatter"}
    else:
        formatter = {
            "format": "[{asctime}] {levelname} {name} {message}",
            "style": "{",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            "pharmacy_ledger": {
                "handlers": ["console"],
                "level": level,
                "propagate": True,
            },
        },
    }


def configure_logging() -> None:
    """Apply the logging configuration from application settings."""
    settings = get_settings()
    logging.config.dictConfig(
        get_logging_config(settings.LOG_LEVEL, settings.LOG_FORMAT)
    )
