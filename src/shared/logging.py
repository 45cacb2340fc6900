"""Structured JSON logging with run_id support."""
from __future__ import annotations

import contextvars
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any

# Context variable for the current generation run
run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "run_id", default=""
)


class JSONFormatter(logging.Formatter):
    """Custom JSON log formatter."""

    def __init__(self, tool_name: str = "unknown") -> None:
        super().__init__()
        self.tool_name = tool_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "tool_name": self.tool_name,
            "logger": record.name,
            "run_id": run_id_var.get(""),
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = str(record.exc_info[1])
        return json.dumps(log_entry)


def setup_logging(
    tool_name: str, level: str = "INFO", logger_name: str | None = None
) -> logging.Logger:
    """Configure structured JSON logging for the generator.

    Args:
        tool_name: Name recorded on every log entry.
        level: Log level string (e.g. "INFO", "DEBUG").
        logger_name: Logger to configure; defaults to *tool_name*.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(logger_name or tool_name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter(tool_name=tool_name))
    logger.addHandler(handler)

    return logger


def new_run_id() -> str:
    """Start a new generation run and return its id."""
    run_id = str(uuid.uuid4())
    run_id_var.set(run_id)
    return run_id
