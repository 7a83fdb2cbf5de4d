"""Fault taxonomy for stream parsing."""

from dataclasses import dataclass
from enum import Enum


class FaultKind(str, Enum):
    """Why a record was dropped or ignored."""

    DECODE = "decode"  # malformed JSON line
    SCHEMA = "schema"  # well-formed JSON, wrong shape
    LIMIT = "limit"  # would exceed a resource limit
    MISSING_TARGET = "missing_target"  # update for an unknown id
    BACKEND = "backend"  # error message sent by the backend
    INVARIANT = "invariant"  # tree invariant would be violated


@dataclass(frozen=True)
class ParseWarning:
    """A recoverable parser fault; the offending record has been dropped."""

    kind: FaultKind
    message: str
    line: str | None = None
    errors: tuple[str, ...] = ()
    limit: str | None = None

    def __str__(self) -> str:
        return self.message


class BackendError(Exception):
    """Fault reported by the backend through an ``error`` message."""

    def __init__(self, message: str, recoverable: bool = False) -> None:
        super().__init__(message)
        self.recoverable = recoverable


class TreeInvariantError(Exception):
    """A mutation would break the tree shape (e.g. a node becoming its own ancestor)."""

    pass
