"""
Structured Logging Configuration
Session-aware logging with structlog.
"""

import logging
import sys
from enum import Enum
from typing import TYPE_CHECKING, Any, MutableMapping

import structlog
from pythonjsonlogger import jsonlogger

if TYPE_CHECKING:
    from .config import Settings

# Per-request chatter from the HTTP stack
NOISY_LOGGERS = ("httpx", "httpcore")


def _enum_values(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Render enum fields (fault kinds, session states) by value."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure structured logging for the host process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: One JSON object per line instead of console output
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if json_logs:
        handler.setFormatter(jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logging.basicConfig(level=log_level, handlers=[handler])

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _enum_values,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_settings(settings: "Settings") -> None:
    """Apply ``log_level`` and ``json_logs`` from settings."""
    configure_logging(settings.log_level, settings.json_logs)


def get_logger(name: str) -> structlog.BoundLogger:
    """Structured logger for a module (pass ``__name__``)."""
    return structlog.get_logger(name)


class LogContext:
    """
    Bind fields to every log line emitted in scope.

    Session tasks run in their own context copy, so fields bound inside a
    task never leak into the caller or into other sessions.
    """

    def __init__(self, **fields: Any):
        self.fields = fields

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.fields)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.fields)
