"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .logging_config import configure_from_settings, configure_logging, get_logger, LogContext
from .json import (
    decode_line,
    encode_bytes,
    serialized_size,
    JSONParseError,
)
from .ids import SessionID, new_session_id


def create_container(settings: Settings | None = None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "LogContext",
    # JSON
    "decode_line",
    "encode_bytes",
    "serialized_size",
    "JSONParseError",
    # IDs
    "SessionID",
    "new_session_id",
    # DI
    "create_container",
]
