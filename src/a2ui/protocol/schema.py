"""Structural validation of wire messages with resource-limit checks."""

from dataclasses import dataclass, field
from typing import Any, Iterable

import pydantic
from returns.pipeline import is_successful
from returns.result import Result, Success, Failure

from ..core.json import serialized_size
from .limits import DEFAULT_LIMITS, ResourceLimits
from .models import (
    Action,
    ComponentMessage,
    ComponentNode,
    StreamMessage,
    UpdateMessage,
    stream_message_adapter,
)


@dataclass(frozen=True)
class Issue:
    """One field-level validation problem."""

    path: str
    message: str
    limit: str | None = None  # set when a resource limit caused the rejection

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class ValidationOutcome:
    """Public validation result: never raised, always returned."""

    valid: bool
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_issues(cls, issues: Iterable[Issue]) -> "ValidationOutcome":
        errors = [str(issue) for issue in issues]
        return cls(valid=not errors, errors=errors)


def _format_loc(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "root"


def _pydantic_issues(exc: pydantic.ValidationError) -> list[Issue]:
    return [Issue(_format_loc(err["loc"]), err["msg"]) for err in exc.errors()]


def _raw_depth(raw: Any) -> int:
    """Nesting depth of a raw node via ``children``, computed without recursion."""
    if not isinstance(raw, dict):
        return 0
    deepest = 0
    stack: list[tuple[Any, int]] = [(raw, 1)]
    while stack:
        node, depth = stack.pop()
        deepest = max(deepest, depth)
        children = node.get("children") if isinstance(node, dict) else None
        if isinstance(children, list):
            stack.extend((child, depth + 1) for child in children if isinstance(child, dict))
    return deepest


def _node_limit_issues(node: ComponentNode, path: str, limits: ResourceLimits) -> list[Issue]:
    issues: list[Issue] = []
    seen: set[str] = set()
    # Paths mirror the wire layout: data.children.0.children.1 ...
    stack: list[tuple[ComponentNode, str]] = [(node, path)]
    while stack:
        current, current_path = stack.pop()
        if current.id in seen:
            issues.append(Issue(f"{current_path}.id", f"Duplicate component id '{current.id}'"))
        seen.add(current.id)

        if not limits.allows(current.type):
            issues.append(
                Issue(
                    f"{current_path}.type",
                    f"Component type '{current.type}' is not allowed",
                    limit="allowed_component_types",
                )
            )

        size = serialized_size(current.props)
        if size > limits.max_props_size:
            issues.append(
                Issue(
                    f"{current_path}.props",
                    f"Props size {size} bytes exceeds maximum {limits.max_props_size} bytes",
                    limit="max_props_size",
                )
            )

        for index, child in enumerate(current.child_list()):
            stack.append((child, f"{current_path}.children.{index}"))
    return issues


def _depth_issue(raw_node: Any, path: str, limits: ResourceLimits) -> Issue | None:
    depth = _raw_depth(raw_node)
    if depth > limits.max_depth:
        return Issue(
            path,
            f"Component nesting depth {depth} exceeds maximum {limits.max_depth}",
            limit="max_depth",
        )
    return None


def check_component_node(
    raw: Any, limits: ResourceLimits | None = None, path: str = "root"
) -> Result[ComponentNode, tuple[Issue, ...]]:
    """
    Validate a raw component node and its inline children.

    Depth is checked on the raw value first, so an adversarially deep tree is
    rejected before model construction walks it.
    """
    limits = limits or DEFAULT_LIMITS

    if (issue := _depth_issue(raw, path, limits)) is not None:
        return Failure((issue,))

    try:
        node = ComponentNode.model_validate(raw)
    except pydantic.ValidationError as e:
        return Failure(tuple(_pydantic_issues(e)))

    issues = _node_limit_issues(node, path, limits)
    return Failure(tuple(issues)) if issues else Success(node)


def check_message(
    raw: Any, limits: ResourceLimits | None = None
) -> Result[StreamMessage, tuple[Issue, ...]]:
    """
    Validate a decoded NDJSON record against the closed set of message shapes.

    Args:
        raw: Decoded JSON value
        limits: Resource limits (defaults are used when omitted)

    Returns:
        Success with the typed message, or Failure with every issue found
    """
    limits = limits or DEFAULT_LIMITS

    if not isinstance(raw, dict):
        return Failure((Issue("root", f"Expected a JSON object, got {type(raw).__name__}"),))

    if raw.get("type") == "component":
        issue = _depth_issue(raw.get("data"), "data", limits)
        if issue is not None:
            return Failure((issue,))

    try:
        message = stream_message_adapter.validate_python(raw)
    except pydantic.ValidationError as e:
        return Failure(tuple(_pydantic_issues(e)))

    issues: list[Issue] = []
    if isinstance(message, ComponentMessage):
        issues = _node_limit_issues(message.data, "data", limits)
    elif isinstance(message, UpdateMessage):
        size = serialized_size(message.props)
        if size > limits.max_props_size:
            issues.append(
                Issue(
                    "props",
                    f"Props size {size} bytes exceeds maximum {limits.max_props_size} bytes",
                    limit="max_props_size",
                )
            )

    return Failure(tuple(issues)) if issues else Success(message)


def _outcome(result: Result[Any, tuple[Issue, ...]]) -> ValidationOutcome:
    if is_successful(result):
        return ValidationOutcome(valid=True)
    return ValidationOutcome.from_issues(result.failure())


def validate_message(raw: Any, limits: ResourceLimits | None = None) -> ValidationOutcome:
    """Validate one stream message; errors are ``path: message`` strings."""
    return _outcome(check_message(raw, limits))


def validate_component_node(raw: Any, limits: ResourceLimits | None = None) -> ValidationOutcome:
    """Validate a component node recursively, including depth and props size."""
    return _outcome(check_component_node(raw, limits))


def validate_action(raw: Any) -> ValidationOutcome:
    """Validate an action payload."""
    try:
        Action.model_validate(raw)
    except pydantic.ValidationError as e:
        return ValidationOutcome.from_issues(_pydantic_issues(e))
    return ValidationOutcome(valid=True)
