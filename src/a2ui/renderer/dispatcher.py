"""
Tree Renderer
Resolves component nodes against the registry and dispatches to renderers.
"""

import itertools
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from pydantic import ValidationError

from ..core.logging_config import get_logger
from ..monitoring.metrics import metrics_collector
from ..protocol.models import Action, ComponentNode
from ..registry.registry import ComponentRegistry, RegistryEntry
from .elements import ActionHandler, Element, RenderContext
from .layout import to_flex_style

logger = get_logger(__name__)

ActionCallback = Callable[[Action], Any]


@dataclass
class RenderedNode:
    """Result of rendering one node; ``output`` is whatever the host renderer returned."""

    id: str
    type: str
    props: dict[str, Any]
    layout: dict[str, Any]
    output: Any
    children: list["RenderedNode"] = field(default_factory=list)
    placeholder: bool = False
    errors: list[str] = field(default_factory=list)

    def find(self, node_id: str) -> "RenderedNode | None":
        """Depth-first lookup by component id."""
        if self.id == node_id:
            return self
        for child in self.children:
            found = child.find(node_id)
            if found is not None:
                return found
        return None


def placeholder_element(message: str, children: list[Any]) -> Element:
    return Element(
        "div",
        attrs={"role": "note", "placeholder": True},
        children=[Element("span", attrs={"color": "red"}, text=message), *children],
    )


class ActionClock:
    """Strictly increasing action timestamps seeded from wall-clock milliseconds."""

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        clock = clock or time.time
        self._counter = itertools.count(int(clock() * 1000))

    def __call__(self) -> int:
        return next(self._counter)


class TreeRenderer:
    """
    Renders component trees through the registry.

    A node never takes its siblings down with it: unknown types and failing
    renderers become visible placeholders, and props that fail their schema
    are passed through unvalidated.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        on_action: ActionCallback | None = None,
        clock: Callable[[], float] | None = None,
        timestamps: ActionClock | None = None,
    ) -> None:
        self.registry = registry
        self.on_action = on_action
        # Renderers of one session share its clock
        self._timestamps = timestamps or ActionClock(clock)

    def next_timestamp(self) -> int:
        """Monotonic action timestamp."""
        return self._timestamps()

    def render(self, node: ComponentNode) -> RenderedNode:
        """Render one node and its children."""
        return self._render(node, self.registry.snapshot())

    def render_all(self, nodes: Iterable[ComponentNode]) -> list[RenderedNode]:
        """Render several root nodes against the same registry snapshot."""
        entries = self.registry.snapshot()
        return [self._render(node, entries) for node in nodes]

    def _emitter(self, node_id: str) -> ActionHandler:
        def emit(action_type: str, payload: dict[str, Any] | None = None) -> None:
            try:
                action = Action(
                    type=action_type,
                    component_id=node_id,
                    payload=payload,
                    timestamp=self.next_timestamp(),
                )
            except ValidationError as e:
                # Unvalidated props can carry an event type or payload the wire rejects
                logger.warning("action_invalid", type=action_type, component=node_id, error=str(e))
                metrics_collector.record_action("render", "invalid")
                return
            if self.on_action is None:
                logger.debug("action_unhandled", type=action.type, component=node_id)
                return
            self.on_action(action)

        return emit

    def _render(self, node: ComponentNode, entries: Mapping[str, RegistryEntry]) -> RenderedNode:
        layout = to_flex_style(node.layout, node.style)
        children = [self._render(child, entries) for child in node.child_list()]
        child_outputs = [child.output for child in children]

        entry = entries.get(node.type)
        if entry is None:
            logger.warning("unknown_component", type=node.type, id=node.id)
            metrics_collector.record_placeholder("unknown_type")
            return RenderedNode(
                id=node.id,
                type=node.type,
                props=dict(node.props),
                layout=layout,
                output=placeholder_element(f"Unknown component: {node.type}", child_outputs),
                children=children,
                placeholder=True,
            )

        props, errors = entry.validate_props(node.props)
        if errors:
            logger.warning("props_validation_failed", type=node.type, id=node.id, errors=errors)
            metrics_collector.record_props_validation_failure(node.type)

        context = RenderContext(
            node_id=node.id,
            type=node.type,
            layout=layout,
            children=child_outputs,
            emit=self._emitter(node.id),
        )

        try:
            output = entry.renderer(props, context)
        except Exception as e:
            logger.error("render_failed", type=node.type, id=node.id, error=str(e), exc_info=True)
            metrics_collector.record_placeholder("render_error")
            return RenderedNode(
                id=node.id,
                type=node.type,
                props=props,
                layout=layout,
                output=placeholder_element(f"Failed to render: {node.type}", child_outputs),
                children=children,
                placeholder=True,
                errors=[*errors, str(e)],
            )

        return RenderedNode(
            id=node.id,
            type=node.type,
            props=props,
            layout=layout,
            output=output,
            children=children,
            errors=errors,
        )
