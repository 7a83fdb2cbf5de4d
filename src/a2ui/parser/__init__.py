"""
Stream Parser
Incremental NDJSON parsing into a flat component tree.
"""

from .errors import BackendError, FaultKind, ParseWarning, TreeInvariantError
from .state import TreeState
from .stream_parser import StreamParser, parse_document, parse_stream

__all__ = [
    "BackendError",
    "FaultKind",
    "ParseWarning",
    "TreeInvariantError",
    "TreeState",
    "StreamParser",
    "parse_document",
    "parse_stream",
]
