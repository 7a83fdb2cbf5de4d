"""Host-neutral virtual elements produced by the default renderers."""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

# (action type, payload) -> None
ActionHandler = Callable[[str, dict[str, Any] | None], None]


@dataclass
class Element:
    """A minimal virtual DOM node a host can translate to native widgets."""

    tag: str
    attrs: dict[str, Any] = field(default_factory=dict)
    text: str | None = None
    children: list[Any] = field(default_factory=list)
    handlers: dict[str, Callable[..., None]] = field(default_factory=dict)

    def trigger(self, event: str, *args: Any) -> None:
        """Invoke an event handler as the host would on user interaction."""
        self.handlers[event](*args)

    def iter(self) -> Iterator["Element"]:
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter()

    def find(self, tag: str) -> "Element | None":
        """First element with ``tag`` in this subtree."""
        return next((el for el in self.iter() if el.tag == tag), None)


@dataclass(frozen=True)
class RenderContext:
    """Everything a component renderer receives besides its props."""

    node_id: str
    type: str
    layout: dict[str, Any]
    children: list[Any]
    emit: ActionHandler
