"""Structured logging configuration.

Supports two modes via LINKPREVIEW_LOG_FORMAT:
- "json" (default for production): JSON-formatted log lines with request_id
  and preview_id
- "text" (for development): Human-readable log lines
"""

import contextvars
import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from linkpreview.middleware.request_id import get_request_id

# Set by the orchestrator for the lifetime of one preview() task
preview_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "preview_id", default=""
)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s:%(preview_id)s] %(message)s"


class ContextIDFilter(logging.Filter):
    """Inject request_id and preview_id into every log record."""

    def filter(self, record):
        record.request_id = get_request_id()
        record.preview_id = preview_id_var.get()
        return True


def configure_logging(log_format: str = "json", log_level: str = "INFO"):
    """Configure root logger with the specified format.

    Args:
        log_format: "json" or "text"
        log_level: Python log level name
    """
    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ContextIDFilter())

    if log_format == "json":
        formatter = JsonFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s %(request_id)s %(preview_id)s",
            rename_fields={
                "levelname": "level",
                "name": "logger",
                "asctime": "timestamp",
            },
        )
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
