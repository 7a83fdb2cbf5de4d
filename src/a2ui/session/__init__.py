"""
Streaming Sessions
Transport, cancellation, and session lifecycle.
"""

from .cancellation import CancellationToken
from .transport import (
    ConnectionFailedError,
    HttpTransport,
    ResponseBody,
    ResponseStream,
    Transport,
)
from .orchestrator import SessionOrchestrator, SessionSnapshot, SessionStatus

__all__ = [
    "CancellationToken",
    "ConnectionFailedError",
    "HttpTransport",
    "ResponseBody",
    "ResponseStream",
    "Transport",
    "SessionOrchestrator",
    "SessionSnapshot",
    "SessionStatus",
]
