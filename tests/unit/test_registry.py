"""Component registry tests."""

from unittest.mock import patch

import pytest
from pydantic import BaseModel

from a2ui.registry.defaults import DEFAULT_COMPONENTS, register_default_components
from a2ui.registry.registry import Category, ComponentRegistry, get_registry


class GreetingProps(BaseModel):
    name: str
    excited: bool = False


def render_greeting(props, ctx):
    return f"Hello {props['name']}"


@pytest.mark.unit
def test_register_and_get():
    """Test registering a component type."""
    registry = ComponentRegistry()
    entry = registry.register("Greeting", render_greeting, GreetingProps, description="Says hi")

    assert registry.get("Greeting") is entry
    assert entry.category is Category.GENERATIVE
    assert "Greeting" in registry
    assert len(registry) == 1
    assert registry.get("Missing") is None


@pytest.mark.unit
def test_overwrite_warns_and_replaces():
    """Test re-registration replaces the entry and logs a warning."""
    registry = ComponentRegistry()
    registry.register("Greeting", render_greeting)

    with patch("a2ui.registry.registry.logger") as mock_logger:
        replacement = registry.register("Greeting", lambda props, ctx: "hi", category="interactable")

    mock_logger.warning.assert_called_once()
    assert mock_logger.warning.call_args[0][0] == "component_overwritten"
    assert registry.get("Greeting") is replacement
    assert len(registry) == 1


@pytest.mark.unit
def test_list_by_category():
    """Test category filtering keeps registration order."""
    registry = ComponentRegistry()
    registry.register("A", render_greeting, category=Category.INTERACTABLE)
    registry.register("B", render_greeting)
    registry.register("C", render_greeting, category="interactable")

    assert [entry.name for entry in registry.list_by_category("interactable")] == ["A", "C"]
    assert [entry.name for entry in registry.list_by_category(Category.GENERATIVE)] == ["B"]


@pytest.mark.unit
def test_invalid_category_is_rejected():
    """Test unknown categories fail fast."""
    with pytest.raises(ValueError):
        ComponentRegistry().register("A", render_greeting, category="decorative")


@pytest.mark.unit
def test_snapshot_is_stable():
    """Test a snapshot does not change when the registry does."""
    registry = ComponentRegistry()
    registry.register("A", render_greeting)
    snapshot = registry.snapshot()

    registry.register("B", render_greeting)
    registry.unregister("A")

    assert list(snapshot) == ["A"]
    assert registry.names == ["B"]
    with pytest.raises(TypeError):
        snapshot["C"] = None


@pytest.mark.unit
def test_unregister_and_clear():
    """Test removal for hot reload."""
    registry = ComponentRegistry()
    registry.register("A", render_greeting)

    assert registry.unregister("A") is True
    assert registry.unregister("A") is False

    registry.register("B", render_greeting)
    registry.clear()
    assert len(registry) == 0


@pytest.mark.unit
def test_describe_lists_vocabulary():
    """Test the vocabulary sent to the backend."""
    registry = ComponentRegistry()
    registry.register("Greeting", render_greeting, description="Says hi", category="interactable")
    assert registry.describe() == [
        {"name": "Greeting", "description": "Says hi", "category": "interactable"}
    ]


@pytest.mark.unit
def test_validate_props():
    """Test schema validation returns validated props or raw props with errors."""
    entry = ComponentRegistry().register("Greeting", render_greeting, GreetingProps)

    props, errors = entry.validate_props({"name": "Ada", "extra": 1})
    assert errors == []
    assert props == {"name": "Ada"}

    raw = {"excited": "very"}
    props, errors = entry.validate_props(raw)
    assert props == raw
    assert any(error.startswith("name") for error in errors)


@pytest.mark.unit
def test_validate_props_without_schema():
    """Test schemaless entries pass props through."""
    entry = ComponentRegistry().register("Free", render_greeting)
    assert entry.validate_props({"anything": [1]}) == ({"anything": [1]}, [])


@pytest.mark.unit
def test_default_vocabulary():
    """Test the default components and their categories."""
    registry = register_default_components(ComponentRegistry())

    assert set(registry.names) == set(DEFAULT_COMPONENTS)
    assert len(registry) == 13
    interactable = {entry.name for entry in registry.list_by_category(Category.INTERACTABLE)}
    assert interactable == {"Button", "TextInput", "Checkbox", "Select"}
    assert all(entry["description"] for entry in registry.describe())


@pytest.mark.unit
def test_default_registration_is_repeatable():
    """Test registering defaults twice does not crash."""
    registry = register_default_components(ComponentRegistry())
    register_default_components(registry)
    assert len(registry) == 13


@pytest.mark.unit
def test_process_registry_is_shared():
    """Test the process-wide registry accessor."""
    assert get_registry() is get_registry()
