"""Tests for wire models and message validation."""

import pytest
from hypothesis import given, strategies as st
from pydantic import ValidationError
from returns.pipeline import is_successful

from a2ui.protocol.limits import ResourceLimits
from a2ui.protocol.models import (
    Action,
    ComponentMessage,
    ComponentNode,
    ErrorMessage,
    RemoveMessage,
    UpdateMessage,
    stream_message_adapter,
)
from a2ui.protocol.schema import (
    check_message,
    validate_action,
    validate_component_node,
    validate_message,
)


def nested(depth: int) -> dict:
    node = {"id": f"n{depth}", "type": "Card", "props": {}}
    for level in range(depth - 1, 0, -1):
        node = {"id": f"n{level}", "type": "Card", "props": {}, "children": [node]}
    return node


# ============================================================================
# Models
# ============================================================================


@pytest.mark.unit
def test_discriminated_union_resolves_each_type():
    """Test every message tag maps to its model."""
    cases = [
        ({"type": "component", "data": {"id": "a", "type": "Text", "props": {}}}, ComponentMessage),
        ({"type": "update", "id": "a", "props": {"text": "x"}}, UpdateMessage),
        ({"type": "remove", "id": "a"}, RemoveMessage),
        ({"type": "error", "message": "boom"}, ErrorMessage),
    ]
    for raw, model in cases:
        assert isinstance(stream_message_adapter.validate_python(raw), model)


@pytest.mark.unit
def test_action_wire_shape():
    """Test actions serialize with the camelCase component id."""
    action = Action(type="click", component_id="btn", timestamp=5)
    assert action.to_wire() == {"type": "click", "componentId": "btn", "timestamp": 5}

    parsed = Action.model_validate({"type": "submit", "componentId": "f", "payload": {"a": 1}, "timestamp": 1})
    assert parsed.component_id == "f"
    assert parsed.payload == {"a": 1}


@pytest.mark.unit
def test_unknown_fields_are_ignored():
    """Test forward-compatible extra keys."""
    message = stream_message_adapter.validate_python(
        {"type": "remove", "id": "a", "trace": "xyz"}
    )
    assert message.id == "a"


@pytest.mark.unit
def test_component_walk_is_depth_first():
    """Test subtree traversal order."""
    node = ComponentNode.model_validate(
        {
            "id": "root",
            "type": "Card",
            "props": {},
            "children": [
                {"id": "a", "type": "Text", "props": {}, "children": [{"id": "a1", "type": "Text", "props": {}}]},
                {"id": "b", "type": "Text", "props": {}},
            ],
        }
    )
    assert [each.id for each in node.walk()] == ["root", "a", "a1", "b"]


@pytest.mark.unit
def test_nodes_are_immutable():
    """Test frozen wire models."""
    node = ComponentNode(id="a", type="Text", props={})
    with pytest.raises(ValidationError):
        node.id = "b"


# ============================================================================
# Message validation
# ============================================================================


@pytest.mark.unit
def test_validate_message_accepts_valid_component():
    """Test a well-formed component message."""
    outcome = validate_message({"type": "component", "data": {"id": "a", "type": "Text", "props": {"text": "hi"}}})
    assert outcome.valid
    assert outcome.errors == []


@pytest.mark.unit
def test_unknown_tag_is_rejected():
    """Test messages outside the closed set."""
    outcome = validate_message({"type": "explode", "id": "a"})
    assert not outcome.valid
    assert outcome.errors


@pytest.mark.unit
def test_non_object_record_is_rejected():
    """Test arrays and scalars are not messages."""
    outcome = validate_message([1, 2, 3])
    assert not outcome.valid
    assert "Expected a JSON object" in outcome.errors[0]


@pytest.mark.unit
def test_missing_fields_report_paths():
    """Test field-level diagnostics."""
    outcome = validate_message({"type": "component", "data": {"id": "a", "props": {}}})
    assert not outcome.valid
    assert any(error.startswith("component.data.type") for error in outcome.errors)


@pytest.mark.unit
def test_wrong_field_types_are_rejected():
    """Test strict typing of known fields."""
    assert not validate_message({"type": "update", "id": 7, "props": {}}).valid
    assert not validate_message({"type": "component", "data": {"id": "a", "type": "Text", "props": "x"}}).valid


@pytest.mark.unit
def test_depth_limit():
    """Test nesting beyond max_depth is rejected with the limit named."""
    limits = ResourceLimits(max_depth=3)

    assert validate_component_node(nested(3), limits).valid

    result = check_message({"type": "component", "data": nested(4)}, limits)
    assert not is_successful(result)
    issue = result.failure()[0]
    assert issue.limit == "max_depth"


@pytest.mark.unit
def test_props_size_limit():
    """Test oversized props on components and updates."""
    limits = ResourceLimits(max_props_size=50)
    big = {"text": "x" * 100}

    result = check_message({"type": "component", "data": {"id": "a", "type": "Text", "props": big}}, limits)
    assert not is_successful(result)
    assert result.failure()[0].limit == "max_props_size"

    result = check_message({"type": "update", "id": "a", "props": big}, limits)
    assert not is_successful(result)
    assert result.failure()[0].limit == "max_props_size"


@pytest.mark.unit
def test_allowed_component_types():
    """Test the component type allow-list, applied to inline children too."""
    limits = ResourceLimits(allowed_component_types=frozenset({"Card", "Text"}))
    node = {
        "id": "root",
        "type": "Card",
        "props": {},
        "children": [{"id": "x", "type": "Script", "props": {}}],
    }
    result = check_message({"type": "component", "data": node}, limits)
    assert not is_successful(result)
    issue = result.failure()[0]
    assert issue.limit == "allowed_component_types"
    assert issue.path == "data.children.0.type"


@pytest.mark.unit
def test_duplicate_ids_in_subtree():
    """Test a subtree repeating an id."""
    node = {
        "id": "root",
        "type": "Card",
        "props": {},
        "children": [{"id": "root", "type": "Text", "props": {}}],
    }
    outcome = validate_component_node(node)
    assert not outcome.valid
    assert "Duplicate component id" in outcome.errors[0]


@pytest.mark.unit
def test_validate_action():
    """Test action payload validation."""
    assert validate_action({"type": "click", "componentId": "b", "timestamp": 1}).valid

    outcome = validate_action({"type": "hover", "componentId": "b", "timestamp": 1})
    assert not outcome.valid

    outcome = validate_action({"type": "click", "timestamp": 1})
    assert not outcome.valid
    assert any("componentId" in error for error in outcome.errors)


@pytest.mark.unit
@given(depth=st.integers(min_value=1, max_value=25))
def test_depth_check_matches_limit(depth):
    """Property: a chain is valid iff its depth is within the limit."""
    limits = ResourceLimits(max_depth=10)
    assert validate_component_node(nested(depth), limits).valid == (depth <= 10)
