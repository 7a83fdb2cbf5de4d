"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from ..protocol.limits import ResourceLimits
from ..registry.defaults import register_default_components
from ..registry.registry import ComponentRegistry
from ..session.orchestrator import SessionOrchestrator
from ..session.transport import HttpTransport
from .config import Settings, get_settings


class EngineModule(Module):
    """Engine dependencies."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        return self.settings

    @singleton
    @provider
    def provide_limits(self, settings: Settings) -> ResourceLimits:
        """Provide resource limits from settings."""
        return settings.limits()

    @singleton
    @provider
    def provide_registry(self) -> ComponentRegistry:
        """Provide registry populated with the default vocabulary."""
        return register_default_components(ComponentRegistry())

    @singleton
    @provider
    def provide_transport(self, settings: Settings) -> HttpTransport:
        """Provide HTTP transport with circuit breaker."""
        return HttpTransport(
            endpoint=settings.endpoint,
            timeout=settings.request_timeout,
            connect_timeout=settings.connect_timeout,
            fail_max=settings.breaker_fail_max,
            reset_timeout=settings.breaker_reset_timeout,
        )

    @provider
    def provide_session(
        self,
        registry: ComponentRegistry,
        transport: HttpTransport,
        limits: ResourceLimits,
        settings: Settings,
    ) -> SessionOrchestrator:
        """Provide a new session bound to the shared registry and transport."""
        return SessionOrchestrator(
            registry,
            transport,
            limits,
            stream_actions=settings.stream_actions,
            log_actions=settings.enable_action_logging,
        )


def create_container(settings: Settings | None = None) -> Injector:
    """Create configured injector."""
    return Injector([EngineModule(settings)])
