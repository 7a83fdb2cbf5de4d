"""Wire models for the A2UI streaming protocol."""

from typing import Annotated, Any, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


ActionType = Literal["click", "input", "select", "scroll", "submit", "custom"]
ACTION_TYPES: tuple[str, ...] = ("click", "input", "select", "scroll", "submit", "custom")


class WireModel(BaseModel):
    """Base model: exact types for known fields, unknown keys tolerated."""

    model_config = ConfigDict(strict=True, extra="ignore", frozen=True, populate_by_name=True)


class Layout(WireModel):
    """Flex layout hints for the host renderer."""

    flex: float | None = Field(default=None, description="Flex grow factor")
    align: Literal["start", "center", "end", "stretch", "baseline"] | None = None
    justify: Literal["start", "center", "end", "between", "around", "evenly"] | None = None
    gap: float | None = Field(default=None, description="Gap in pixels")
    direction: Literal["row", "column", "row-reverse", "column-reverse"] | None = None
    wrap: bool | None = None


class ComponentNode(WireModel):
    """A typed UI component with optional inline children."""

    id: str = Field(..., description="Unique component identifier")
    type: str = Field(..., description="Registered component type name")
    props: dict[str, Any] = Field(..., description="Component properties")
    layout: Layout | None = None
    style: dict[str, str | int | float] | None = None
    children: list["ComponentNode"] | None = None

    def child_list(self) -> list["ComponentNode"]:
        return list(self.children or [])

    def walk(self):
        """Yield this node and every inline descendant, depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.child_list()))

    def depth(self) -> int:
        """Levels in the inline subtree; a leaf is 1."""
        deepest = 0
        stack: list[tuple[ComponentNode, int]] = [(self, 1)]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            stack.extend((child, level + 1) for child in node.child_list())
        return deepest


ComponentNode.model_rebuild()


class Action(WireModel):
    """A user interaction sent back toward the message source."""

    type: ActionType
    component_id: str = Field(..., alias="componentId")
    payload: dict[str, Any] | None = None
    timestamp: int

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ComponentMessage(WireModel):
    """Insert or replace a component (and its inline subtree)."""

    type: Literal["component"]
    data: ComponentNode
    complete: bool | None = Field(default=None, description="Final message of the stream")


class UpdateMessage(WireModel):
    """Shallow-merge a props patch into an existing component."""

    type: Literal["update"]
    id: str
    props: dict[str, Any]


class RemoveMessage(WireModel):
    """Delete a component and its descendants."""

    type: Literal["remove"]
    id: str


class ActionMessage(WireModel):
    """User action envelope."""

    type: Literal["action"]
    data: Action


class ErrorMessage(WireModel):
    """Fault reported by the backend."""

    type: Literal["error"]
    message: str
    recoverable: bool | None = None


StreamMessage = Annotated[
    Union[ComponentMessage, UpdateMessage, RemoveMessage, ActionMessage, ErrorMessage],
    Field(discriminator="type"),
]

stream_message_adapter: TypeAdapter[StreamMessage] = TypeAdapter(StreamMessage)
