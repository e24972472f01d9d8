"""
bincache - Structured Logging

JSON log formatting for the ``bincache`` logger hierarchy.

Every module logs through ``logging.getLogger(__name__)`` and attaches
structured context via ``extra={...}``; this formatter folds those extra
fields into a single JSON object per line.
"""

import contextvars
import json
import logging
import sys
from datetime import UTC, datetime
from typing import IO, Any
from uuid import uuid4

# Identifies one process invocation so log lines from a run can be grouped
_run_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar("run_id", default=None)

_RESERVED_ATTRS = frozenset(
    (
        "args",
        "msg",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
        "message",
    )
)


def bind_run_id(run_id: str | None = None) -> str:
    """
    Set the run id attached to every subsequent log line.

    Args:
        run_id: Explicit id (a random one is generated when omitted)

    Returns:
        The run id now in effect
    """
    value = run_id or uuid4().hex
    _run_id_ctx.set(value)
    return value


def get_run_id() -> str | None:
    """Return the run id bound to the current context, if any."""
    return _run_id_ctx.get()


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        run_id = _run_id_ctx.get()
        if run_id:
            log_data["run_id"] = run_id

        # Add any extra fields from record.__dict__
        for key, value in record.__dict__.items():
            if key not in log_data and not key.startswith("_") and key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str | int | None = None,
    stream: IO[str] | None = None,
    json_format: bool = True,
) -> logging.Logger:
    """
    Configure the ``bincache`` logger.

    Replaces any handlers previously installed on it, so calling this twice
    does not duplicate output.

    Args:
        level: Log level name or number (defaults to the configured LOG_LEVEL)
        stream: Output stream (defaults to stderr, keeping stdout for command output)
        json_format: Emit JSON lines instead of plain text

    Returns:
        The configured logger
    """
    if level is None:
        from ..config import get_config

        level = get_config().log_level.value

    logger = logging.getLogger("bincache")
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    return logger
