"""ID Generation.

ULID-based identifiers for streaming sessions. ULIDs sort by creation time,
so session ids in logs read in the order sessions were opened.
"""

from typing import NewType
from ulid import ULID

SessionID = NewType("SessionID", str)
"""Streaming session identifier"""


class Prefix:
    """ID prefix constants."""

    SESSION = "sess"


def generate() -> str:
    """Generate a new ULID."""
    return str(ULID())


def generate_with_prefix(prefix: str) -> str:
    """Generate ULID with type prefix."""
    return f"{prefix}_{generate()}"


def new_session_id() -> SessionID:
    """Generate new session ID."""
    return SessionID(generate_with_prefix(Prefix.SESSION))

