"""Configuration Management."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from ..protocol.limits import ResourceLimits

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Engine settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="A2UI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Backend
    endpoint: str = Field(
        default="http://localhost:8000/api/a2ui", description="Streaming endpoint URL"
    )
    request_timeout: float = Field(default=30.0, gt=0, description="Read timeout (seconds)")
    connect_timeout: float = Field(default=5.0, gt=0, description="Connect timeout (seconds)")

    # Circuit breaker
    breaker_fail_max: int = Field(default=5, gt=0, description="Failures before opening")
    breaker_reset_timeout: int = Field(default=30, gt=0, description="Open state duration")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Resource limits
    max_components: int = Field(default=100, gt=0, description="Max components per tree")
    max_depth: int = Field(default=10, gt=0, description="Max component nesting depth")
    max_props_size: int = Field(default=10_000, gt=0, description="Max serialized props bytes")
    allowed_components: list[str] = Field(
        default_factory=list, description="Allowed component types (empty = all)"
    )

    # Actions
    enable_action_logging: bool = Field(default=True, description="Log outgoing actions")
    stream_actions: bool = Field(
        default=True, description="Actions expect a streamed tree update by default"
    )

    def limits(self) -> ResourceLimits:
        """Resource limits for the stream parser."""
        return ResourceLimits(
            max_components=self.max_components,
            max_depth=self.max_depth,
            max_props_size=self.max_props_size,
            allowed_component_types=frozenset(self.allowed_components),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
