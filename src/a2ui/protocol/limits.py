"""Resource limits applied while parsing model output."""

from pydantic import BaseModel, ConfigDict, Field


class ResourceLimits(BaseModel):
    """
    Bounds enforced by the stream parser.

    The message source is a probabilistic generator, so every limit is
    bounded and non-zero by default.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_components: int = Field(default=100, gt=0)
    max_depth: int = Field(default=10, gt=0)
    max_props_size: int = Field(default=10_000, gt=0)
    allowed_component_types: frozenset[str] = Field(default_factory=frozenset)

    def allows(self, type_name: str) -> bool:
        """Whether a component type may enter the tree."""
        return not self.allowed_component_types or type_name in self.allowed_component_types


DEFAULT_LIMITS = ResourceLimits()
