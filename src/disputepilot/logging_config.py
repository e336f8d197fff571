"""
DisputePilot Logging

JSON log formatting for the "disputepilot" logger hierarchy. Modules log
through logging.getLogger(__name__) and attach context with extra=.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Optional

ROOT_LOGGER = "disputepilot"

# extra= fields copied into the JSON entry when present
CONTEXT_FIELDS = (
    "reclamation_id",
    "booking_id",
    "user_id",
    "party",
    "pool",
    "amount",
    "points",
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(
    level: str = "INFO",
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """
    Install the JSON handler on the disputepilot logger.

    Calling it again replaces the previously installed handler rather than
    stacking another one.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    logger.setLevel(numeric)

    for existing in list(logger.handlers):
        if getattr(existing, "_disputepilot", False):
            logger.removeHandler(existing)

    handler = handler or logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    handler._disputepilot = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
