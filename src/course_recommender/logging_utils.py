from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, Optional


# Structured fields copied from `extra={...}` into the JSON payload.
STRUCTURED_FIELDS = (
    "event",
    "user_id",
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "count",
    "strategy",
    "cache",
    "num_recommendations",
    "num_neighbors",
    "shape",
    "code",
    "exception_type",
)


class JsonFormatter(logging.Formatter):
    """
    A structured JSON formatter for production-grade logging systems.

    Ensures logs are machine-readable and easy to index in systems such as
    Datadog, Splunk, CloudWatch, and ELK.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Additional metadata passed via logger.info(..., extra={})
        for attr in STRUCTURED_FIELDS:
            if hasattr(record, attr):
                log_payload[attr] = getattr(record, attr)

        # Include exception details when available
        if record.exc_info:
            log_payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_payload, ensure_ascii=False, default=str)


def resolve_log_level(default: int = logging.INFO) -> int:
    """Return the level named by LOG_LEVEL, or `default` when unset or unknown."""
    level = logging.getLevelName((os.getenv("LOG_LEVEL") or "").upper())
    return level if isinstance(level, int) else default


def configure_logger(name: str = "course_recommender", level: Optional[int] = None) -> logging.Logger:
    """
    Configure and return a logger with JSON formatting.

    Prevents duplicate handlers and ensures clean structured logs.
    Without an explicit level, LOG_LEVEL (default INFO) applies.
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_log_level() if level is None else level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    logger.propagate = False
    return logger
