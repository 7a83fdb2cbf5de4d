"""Metrics and logging tests."""

import logging

import pytest
import structlog
from prometheus_client import CollectorRegistry

from a2ui.core.config import Settings
from a2ui.core.logging_config import LogContext, configure_from_settings, get_logger
from a2ui.monitoring.metrics import MetricsCollector


@pytest.fixture
def collector():
    """Collector on an isolated Prometheus registry."""
    return MetricsCollector(registry=CollectorRegistry())


def sample(collector, name, **labels):
    return collector.registry.get_sample_value(name, labels or None)


@pytest.mark.unit
def test_stream_counters(collector):
    """Test message, warning, and byte counters."""
    collector.record_stream_message("component")
    collector.record_stream_message("component")
    collector.record_parser_warning("decode")
    collector.record_bytes(128)

    assert sample(collector, "a2ui_stream_messages_total", type="component") == 2
    assert sample(collector, "a2ui_parser_warnings_total", kind="decode") == 1
    assert sample(collector, "a2ui_stream_bytes_total") == 128


@pytest.mark.unit
def test_track_session(collector):
    """Test active gauge and the duration callback."""
    durations = []
    with collector.track_session(durations.append):
        assert sample(collector, "a2ui_active_sessions") == 1

    assert sample(collector, "a2ui_active_sessions") == 0
    assert len(durations) == 1 and durations[0] >= 0

    collector.record_session("completed", durations[0])
    assert sample(collector, "a2ui_sessions_total", outcome="completed") == 1


@pytest.mark.unit
def test_action_and_render_counters(collector):
    """Test action and placeholder counters."""
    collector.record_action("stream", "applied")
    collector.record_placeholder("unknown_type")
    collector.record_props_validation_failure("Text")

    assert sample(collector, "a2ui_actions_total", mode="stream", status="applied") == 1
    assert sample(collector, "a2ui_render_placeholders_total", reason="unknown_type") == 1
    assert sample(collector, "a2ui_props_validation_failures_total", type="Text") == 1


@pytest.mark.unit
def test_exposition_format(collector):
    """Test Prometheus text output."""
    collector.record_stream_message("remove")
    assert b'a2ui_stream_messages_total{type="remove"} 1.0' in collector.get_metrics()


@pytest.mark.unit
def test_configure_from_settings_quiets_http_loggers():
    """Test logging configuration from settings."""
    configure_from_settings(Settings(log_level="DEBUG", json_logs=True))

    assert get_logger("a2ui.test") is not None
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING


@pytest.mark.unit
def test_log_context_binds_and_unbinds():
    """Test session fields are bound only inside the context."""
    with LogContext(session_id="sess_1", generation=2):
        assert structlog.contextvars.get_contextvars() == {"session_id": "sess_1", "generation": 2}
    assert structlog.contextvars.get_contextvars() == {}
