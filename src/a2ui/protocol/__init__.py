"""A2UI wire protocol: message models, validation, and resource limits."""

from .models import (
    ACTION_TYPES,
    Action,
    ActionMessage,
    ActionType,
    ComponentMessage,
    ComponentNode,
    ErrorMessage,
    Layout,
    RemoveMessage,
    StreamMessage,
    UpdateMessage,
    stream_message_adapter,
)
from .limits import DEFAULT_LIMITS, ResourceLimits
from .schema import (
    Issue,
    ValidationOutcome,
    check_component_node,
    check_message,
    validate_action,
    validate_component_node,
    validate_message,
)

__all__ = [
    # Models
    "ACTION_TYPES",
    "Action",
    "ActionMessage",
    "ActionType",
    "ComponentMessage",
    "ComponentNode",
    "ErrorMessage",
    "Layout",
    "RemoveMessage",
    "StreamMessage",
    "UpdateMessage",
    "stream_message_adapter",
    # Limits
    "DEFAULT_LIMITS",
    "ResourceLimits",
    # Validation
    "Issue",
    "ValidationOutcome",
    "check_component_node",
    "check_message",
    "validate_action",
    "validate_component_node",
    "validate_message",
]
