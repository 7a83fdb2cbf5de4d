"""
Metrics Collection
Prometheus metrics for stream parsing, rendering, and sessions
"""

import time
from contextlib import contextmanager
from typing import Callable

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the engine.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        self.registry = registry

        # Stream metrics
        self.stream_messages = Counter(
            "a2ui_stream_messages_total",
            "Stream messages applied, by message type",
            ["type"],
            registry=registry,
        )
        self.parser_warnings = Counter(
            "a2ui_parser_warnings_total",
            "Records dropped or ignored by the stream parser, by fault kind",
            ["kind"],
            registry=registry,
        )
        self.stream_bytes = Counter(
            "a2ui_stream_bytes_total",
            "Response bytes received from the backend",
            registry=registry,
        )

        # Session metrics
        self.sessions_total = Counter(
            "a2ui_sessions_total",
            "Streaming sessions, by outcome",
            ["outcome"],
            registry=registry,
        )
        self.session_duration = Histogram(
            "a2ui_session_duration_seconds",
            "Streaming session duration in seconds",
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
            registry=registry,
        )
        self.active_sessions = Gauge(
            "a2ui_active_sessions",
            "Sessions currently streaming",
            registry=registry,
        )

        # Action metrics
        self.actions_total = Counter(
            "a2ui_actions_total",
            "User actions sent to the backend",
            ["mode", "status"],
            registry=registry,
        )

        # Render metrics
        self.render_placeholders = Counter(
            "a2ui_render_placeholders_total",
            "Nodes rendered as placeholders, by reason",
            ["reason"],
            registry=registry,
        )
        self.props_validation_failures = Counter(
            "a2ui_props_validation_failures_total",
            "Nodes rendered with unvalidated props",
            ["type"],
            registry=registry,
        )

    def record_stream_message(self, msg_type: str) -> None:
        """Record an applied stream message."""
        self.stream_messages.labels(type=msg_type).inc()

    def record_parser_warning(self, kind: str) -> None:
        """Record a parser warning."""
        self.parser_warnings.labels(kind=kind).inc()

    def record_bytes(self, count: int) -> None:
        """Record received response bytes."""
        self.stream_bytes.inc(count)

    def record_session(self, outcome: str, duration: float) -> None:
        """Record a finished session."""
        self.sessions_total.labels(outcome=outcome).inc()
        self.session_duration.observe(duration)

    def record_action(self, mode: str, status: str) -> None:
        """Record an outgoing action."""
        self.actions_total.labels(mode=mode, status=status).inc()

    def record_placeholder(self, reason: str) -> None:
        """Record a placeholder render."""
        self.render_placeholders.labels(reason=reason).inc()

    def record_props_validation_failure(self, component_type: str) -> None:
        """Record a props validation failure."""
        self.props_validation_failures.labels(type=component_type).inc()

    @contextmanager
    def track_session(self, callback: Callable[[float], None]):
        """Track an active session and report its duration."""
        start = time.time()
        self.active_sessions.inc()
        try:
            yield
        finally:
            self.active_sessions.dec()
            callback(time.time() - start)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        return generate_latest(self.registry)


# Global metrics collector instance
metrics_collector = MetricsCollector()
