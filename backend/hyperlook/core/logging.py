"""Logging utilities for Hyperlook.

Log lines are JSON objects by default. Anything passed through ``extra``
with a ``ctx_`` prefix (hit ids, URLs, cycle stats) is copied into the line
so failures can be filtered by field.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from hyperlook.core.config import Settings

# connection-level chatter, held at INFO when the root runs at DEBUG
_QUIET_LOGGERS = ("urllib3",)


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key.startswith("ctx_"):
                payload[key] = value
        return orjson.dumps(payload, default=str).decode("utf-8")


def configure_logging(level: str | int | None = None, use_json: bool = True) -> None:
    """Configure the root logger; ``level`` falls back to ``HYPERLOOK_LOG_LEVEL``."""
    if level is None:
        level = os.environ.get("HYPERLOOK_LOG_LEVEL", "INFO").upper()
    logging.captureWarnings(True)
    root = logging.getLogger()
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    if use_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.handlers = [handler]
    if root.level <= logging.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.INFO)


def configure_from_settings(settings: Settings) -> None:
    configure_logging(settings.log_level, use_json=settings.log_json)


def get_logger(name: str = "hyperlook") -> logging.Logger:
    """Return a logger, configuring the root on first use."""
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


__all__ = ["JsonFormatter", "configure_logging", "configure_from_settings", "get_logger"]
