"""Logging configuration using Loguru.

This module provides:
- Structured JSON logging for production hosts
- Human-readable colorized output for development
- Transaction-scoped context (provider, request id) via ContextVar
- Interception of standard library logging (httpx, authlib)
- File rotation and retention policies
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
from loguru import logger

if TYPE_CHECKING:
    from typing import Any


# Context variable for transaction-scoped data (provider, request_id, etc.)
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

# Third-party loggers that are chatty at INFO/DEBUG
_NOISY_LOGGERS = ("httpx", "httpcore", "authlib")


class InterceptHandler(logging.Handler):
    """Redirect standard library log records to Loguru.

    httpx and authlib log through the standard library; this handler makes
    their records go through the same sinks as the resource servers' own.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record by forwarding to Loguru."""
        # Map onto the Loguru level of the same name, if there is one
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging module frames to report the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _format_record(record: dict[str, Any]) -> str:
    """Serialize a log record, including bound context, as a JSON line."""
    # Merge transaction context into the record's bound kwargs
    record["extra"].update(_log_context.get())

    serialize_fields = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
        **record["extra"],
    }

    # Exception type and value only; tracebacks go to the dev format
    if record["exception"]:
        serialize_fields["exception"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else None,
            "value": str(record["exception"].value) if record["exception"].value else None,
        }

    # Loguru treats the returned string as a format template
    line = orjson.dumps(serialize_fields, default=str).decode()
    return line.replace("{", "{{").replace("}", "}}") + "\n"


def _format_record_dev(record: dict[str, Any]) -> str:
    """Format log record for development (human-readable with context)."""
    context = _log_context.get()

    # Build context string, escaped for the same reason as the JSON line
    context_str = ""
    if context:
        context_str = " | " + " ".join(f"{k}={v}" for k, v in context.items())
        context_str = context_str.replace("{", "{{").replace("}", "}}")

    # Standard format with optional context
    fmt = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
        f"{context_str} - "
        "<level>{message}</level>\n"
    )

    if record["exception"]:
        fmt += "{exception}\n"

    return fmt


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    *,
    is_development: bool = False,
    log_file: Path | str | None = None,
) -> None:
    """Configure Loguru logging.

    Hosts call this once at startup, usually with the values of
    ``Settings.logging``.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" or "text")
        is_development: Enable development-friendly formatting
        log_file: Optional file path for log output with rotation
    """
    # Remove default handler
    logger.remove()

    use_json = log_format == "json" and not is_development

    if use_json:
        # JSON lines for production hosts
        logger.add(
            sys.stdout,
            format=_format_record,
            level=log_level.upper(),
            colorize=False,
            backtrace=True,
            diagnose=False,  # Variable values may include tokens
        )
    else:
        # Human-readable format for development
        logger.add(
            sys.stdout,
            format=_format_record_dev,
            level=log_level.upper(),
            colorize=True,
            backtrace=True,
            diagnose=True,
        )

    # Optional file logging with rotation
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format=_format_record,
            level=log_level.upper(),
            rotation="100 MB",
            retention="7 days",
            compression="gz",
            backtrace=True,
            diagnose=False,
        )

    # Intercept standard library logging
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Request lines of every token exchange and lookup are noise at INFO
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> "logger":  # type: ignore[valid-type]
    """Get a logger instance bound to a name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        A Loguru logger instance
    """
    return logger.bind(name=name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables for structured logging.

    Context variables are included in every subsequent log entry within
    the same context, e.g. one authentication transaction.

    Args:
        **kwargs: Key-value pairs to bind to the logging context

    Example:
        bind_context(provider="github", request_id="abc-123")
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def clear_context() -> None:
    """Clear all context variables.

    Hosts call this when a new authentication transaction starts.
    """
    _log_context.set({})


def unbind_context(*keys: str) -> None:
    """Remove specific context variables.

    Args:
        *keys: Keys to remove from the logging context
    """
    current = _log_context.get().copy()
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


def get_context() -> dict[str, Any]:
    """Get the current logging context.

    Returns:
        Copy of the current context variables
    """
    return _log_context.get().copy()


# Re-export the main logger for convenience
__all__ = [
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "setup_logging",
    "unbind_context",
]
