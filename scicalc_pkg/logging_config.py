"""Structured logging configuration for SciCalc."""

import logging
import sys
from datetime import datetime
from typing import Optional

# Evaluation context passed through ``extra=`` and rendered as key=value pairs
CONTEXT_FIELDS = ("expression", "angle_mode", "error_code", "elapsed_ms")


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs `<timestamp> [LEVEL] name: message key=value ...`."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        line = f"{timestamp} [{record.levelname}] {record.name}: {record.getMessage()}"
        context = [
            f"{field}={getattr(record, field)!r}"
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        ]
        if context:
            line = f"{line} {' '.join(context)}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    level: str = "INFO", log_file: Optional[str] = None, server: bool = False
) -> logging.Logger:
    """Set up structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path to write logs (if None, logs to stderr)
        server: Also route Werkzeug's request log through the same handlers

    Returns:
        The configured ``scicalc`` logger
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(StructuredFormatter())

    names = ["scicalc", "werkzeug"] if server else ["scicalc"]
    for name in names:
        target = logging.getLogger(name)
        target.setLevel(getattr(logging, level.upper(), logging.INFO))
        target.handlers.clear()
        for handler in handlers:
            target.addHandler(handler)

    return logging.getLogger("scicalc")


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``scicalc`` namespace, e.g. ``scicalc.server``."""
    return logging.getLogger(f"scicalc.{name}")


def evaluation_context(
    expression: str,
    angle_mode: Optional[str] = None,
    error_code: Optional[str] = None,
    elapsed_ms: Optional[float] = None,
) -> dict:
    """Build the ``extra=`` mapping for an evaluation log record."""
    return {
        "expression": expression,
        "angle_mode": angle_mode,
        "error_code": error_code,
        "elapsed_ms": round(elapsed_ms, 1) if elapsed_ms is not None else None,
    }
