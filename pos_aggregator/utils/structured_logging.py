"""
Structured Logging Configuration: JSON formatting for production, colored for development.

Usage:
    from pos_aggregator.utils.structured_logging import configure_logging
    configure_logging()  # Call once at startup
"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict
from pos_aggregator.utils.config import settings

# Context fields copied from LogRecord extras into JSON output
CONTEXT_FIELDS = ("shop_id", "order_id", "vendor", "duration_ms")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production - machine-parseable logs."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        return json.dumps(log_entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for development - human-readable logs."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.now().strftime("%H:%M:%S")

        msg = record.getMessage()
        if len(msg) > 500:
            msg = msg[:497] + "..."

        context = " ".join(
            f"{field}={getattr(record, field)}" for field in CONTEXT_FIELDS if hasattr(record, field)
        )
        if context:
            msg = f"{msg} [{context}]"

        return f"{color}[{timestamp}] {record.levelname:8} {record.name:30} | {msg}{self.RESET}"


def configure_logging():
    """Configure structured logging based on environment."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)

    if settings.ENVIRONMENT == "production":
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ColoredFormatter())

    root_logger.addHandler(console_handler)

    # Reduce noise from chatty libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    root_logger.info(
        f"Logging configured: env={settings.ENVIRONMENT}, level={settings.LOG_LEVEL}"
    )


class ContextLogger:
    """Logger that automatically includes context (shop_id, order_id, vendor)."""

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)
        self._context: Dict[str, Any] = {}

    def bind(self, **context) -> "ContextLogger":
        """Bind context to logger."""
        new_logger = ContextLogger(self._logger.name)
        new_logger._context = {**self._context, **context}
        return new_logger

    def _log(self, level: int, msg: str, *args, **kwargs):
        extra = kwargs.pop("extra", {})
        extra.update(self._context)
        self._logger.log(level, msg, *args, extra=extra, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._log(logging.ERROR, msg, *args, **kwargs)


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger."""
    return ContextLogger(name)
