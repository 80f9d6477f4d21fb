"""
Structured logging for the stats core.

Provides:
- JSON log formatting for deployed environments
- Coloured console output for local development
- A request-scoped correlation ID carried in a context variable
"""
import logging
import json
import sys
from datetime import datetime
from typing import Any
from contextvars import ContextVar

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# LogRecord attributes that are never copied into the "extra" payload
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "asctime", "taskName",
})

# Third-party loggers that are too chatty at INFO
_NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "redis", "asyncio")


class JSONFormatter(logging.Formatter):
    """
    Render each record as one JSON object.

    Fields: timestamp, level, logger, message, correlation_id, and
    optionally exception and extra (anything passed through ``extra=``).
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": correlation_id_var.get(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Human-readable coloured output for development consoles."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        line = f"{color}[{record.levelname}]{self.RESET} {record.name}: {record.getMessage()}"

        correlation_id = correlation_id_var.get()
        if correlation_id:
            line += f" | correlation_id={correlation_id}"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    handler: logging.Handler | None = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines when True, coloured console output otherwise
        handler: Optional handler to install instead of a stdout StreamHandler
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)

    handler.setFormatter(JSONFormatter() if json_output else ColoredFormatter())
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_from_settings() -> None:
    """Configure logging from the application settings."""
    from esports_stats.core.config import settings

    configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically ``get_logger(__name__)``)."""
    return logging.getLogger(name)


def set_correlation_id(correlation_id: str) -> Any:
    """Set the correlation ID; returns the token for ``clear_correlation_id``."""
    return correlation_id_var.set(correlation_id)


def get_correlation_id() -> str:
    return correlation_id_var.get()


def clear_correlation_id(token: Any) -> None:
    correlation_id_var.reset(token)
