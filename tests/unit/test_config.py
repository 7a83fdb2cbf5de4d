"""Configuration and container tests."""

import pytest

from a2ui.core.config import Settings
from a2ui.protocol.limits import ResourceLimits
from a2ui.registry.registry import ComponentRegistry
from a2ui.session.orchestrator import SessionOrchestrator
from a2ui.session.transport import HttpTransport


@pytest.mark.unit
def test_settings_defaults(settings):
    """Test default settings load correctly."""
    assert settings.endpoint == "http://testserver/api/a2ui"
    assert settings.log_level == "DEBUG"
    assert settings.max_components == 100
    assert settings.max_depth == 10
    assert settings.max_props_size == 10_000
    assert settings.allowed_components == []
    assert settings.enable_action_logging is True
    assert settings.stream_actions is True


@pytest.mark.unit
def test_settings_from_environment(monkeypatch):
    """Test A2UI_ prefixed variables."""
    monkeypatch.setenv("A2UI_MAX_COMPONENTS", "5")
    monkeypatch.setenv("A2UI_ALLOWED_COMPONENTS", '["Text", "Card"]')
    settings = Settings()
    assert settings.max_components == 5
    assert settings.allowed_components == ["Text", "Card"]


@pytest.mark.unit
def test_settings_validation():
    """Test settings validation."""
    assert Settings(max_depth=3).max_depth == 3

    with pytest.raises(Exception):
        Settings(max_components=0)

    with pytest.raises(Exception):
        Settings(request_timeout=-1)


@pytest.mark.unit
def test_settings_limits():
    """Test resource limits derived from settings."""
    limits = Settings(max_components=7, allowed_components=["Text"]).limits()
    assert limits == ResourceLimits(max_components=7, allowed_component_types=frozenset({"Text"}))
    assert limits.allows("Text")
    assert not limits.allows("Card")


@pytest.mark.unit
def test_limits_reject_zero():
    """Test limits are bounded and non-zero."""
    with pytest.raises(Exception):
        ResourceLimits(max_depth=0)


@pytest.mark.unit
def test_container_wiring(di_container, settings):
    """Test the container provides the engine graph."""
    registry = di_container.get(ComponentRegistry)
    assert "Button" in registry
    assert di_container.get(ComponentRegistry) is registry

    transport = di_container.get(HttpTransport)
    assert transport.endpoint == settings.endpoint

    session = di_container.get(SessionOrchestrator)
    assert session.registry is registry
    assert session.transport is transport
    assert session.limits == settings.limits()
    assert session.log_actions is settings.enable_action_logging
    assert di_container.get(SessionOrchestrator) is not session
