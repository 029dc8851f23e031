"""Structured Logging - JSON formatter and setup for embedding applications.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields are exactly the keys DomainGuardError.log_extra() can emit
      (LOG_FIELDS); they are surfaced only when present
    - JSON format in production, human-readable text otherwise

Design Decisions:
    - JSONFormatter on stdlib logging: no extra dependency for the host application
    - configure_logging() reads Settings; setup_logging() stays usable without them
"""

import json
import logging
from datetime import datetime, timezone

from domainguard.config import Settings, get_settings
from domainguard.core.errors import LOG_FIELDS

EXTRA_FIELDS = LOG_FIELDS


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Attach a domainguard handler to the root logger. Returns the handler."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler


def configure_logging(settings: Settings | None = None) -> logging.Handler:
    settings = settings or get_settings()
    return setup_logging(settings.log_level, settings.log_format)
