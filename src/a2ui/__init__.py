"""
A2UI Engine
Streams NDJSON component messages into a live, renderable component tree.
"""

from .core.config import Settings, get_settings
from .core.logging_config import configure_logging, get_logger
from .core.container import create_container
from .monitoring.metrics import MetricsCollector, metrics_collector
from .parser.errors import BackendError, FaultKind, ParseWarning, TreeInvariantError
from .parser.state import TreeState
from .parser.stream_parser import StreamParser, parse_document, parse_stream
from .protocol.limits import DEFAULT_LIMITS, ResourceLimits
from .protocol.models import (
    Action,
    ActionMessage,
    ComponentMessage,
    ComponentNode,
    ErrorMessage,
    Layout,
    RemoveMessage,
    StreamMessage,
    UpdateMessage,
)
from .protocol.schema import (
    ValidationOutcome,
    validate_action,
    validate_component_node,
    validate_message,
)
from .registry.registry import Category, ComponentRegistry, RegistryEntry, get_registry
from .registry.defaults import register_default_components
from .renderer.dispatcher import RenderedNode, TreeRenderer
from .renderer.elements import Element, RenderContext
from .renderer.layout import to_flex_style
from .session.cancellation import CancellationToken
from .session.transport import ConnectionFailedError, HttpTransport, Transport
from .session.orchestrator import SessionOrchestrator, SessionSnapshot, SessionStatus

__version__ = "0.1.0"

__all__ = [
    # Config & logging
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "create_container",
    "MetricsCollector",
    "metrics_collector",
    # Protocol
    "Action",
    "ActionMessage",
    "ComponentMessage",
    "ComponentNode",
    "ErrorMessage",
    "Layout",
    "RemoveMessage",
    "StreamMessage",
    "UpdateMessage",
    "DEFAULT_LIMITS",
    "ResourceLimits",
    "ValidationOutcome",
    "validate_action",
    "validate_component_node",
    "validate_message",
    # Parser
    "BackendError",
    "FaultKind",
    "ParseWarning",
    "TreeInvariantError",
    "TreeState",
    "StreamParser",
    "parse_document",
    "parse_stream",
    # Registry
    "Category",
    "ComponentRegistry",
    "RegistryEntry",
    "get_registry",
    "register_default_components",
    # Rendering
    "Element",
    "RenderContext",
    "RenderedNode",
    "TreeRenderer",
    "to_flex_style",
    # Sessions
    "CancellationToken",
    "ConnectionFailedError",
    "HttpTransport",
    "Transport",
    "SessionOrchestrator",
    "SessionSnapshot",
    "SessionStatus",
]
