"""
Component Registry
Maps component type names to renderers and props schemas.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping

import pydantic

from ..core.logging_config import get_logger

logger = get_logger(__name__)

# Host renderer: (validated props, render context) -> host-native output
ComponentRenderer = Callable[[dict[str, Any], Any], Any]


class Category(str, Enum):
    """Component categories advertised to the backend."""

    GENERATIVE = "generative"
    INTERACTABLE = "interactable"


@dataclass(frozen=True)
class RegistryEntry:
    """A registered component type."""

    name: str
    renderer: ComponentRenderer
    schema: type[pydantic.BaseModel] | None = None
    description: str = ""
    category: Category = Category.GENERATIVE

    def validate_props(self, props: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
        """
        Validate props against the entry schema.

        Returns:
            (validated props, errors); on failure the raw props are returned
            together with the error list.
        """
        if self.schema is None:
            return dict(props), []
        try:
            model = self.schema.model_validate(props)
        except pydantic.ValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc']) or 'root'}: {err['msg']}"
                for err in e.errors()
            ]
            return dict(props), errors
        return model.model_dump(exclude_unset=True), []

    def describe(self) -> dict[str, str]:
        return {"name": self.name, "description": self.description, "category": self.category.value}


class ComponentRegistry:
    """
    Registry of renderable component types.

    Populated by the host at startup and read by every session afterwards.
    Writes replace the whole mapping, so a snapshot taken by a reader never
    changes underneath it.
    """

    def __init__(self) -> None:
        self._entries: Mapping[str, RegistryEntry] = MappingProxyType({})
        self._lock = threading.Lock()

    def register(
        self,
        name: str,
        renderer: ComponentRenderer,
        schema: type[pydantic.BaseModel] | None = None,
        *,
        description: str = "",
        category: Category | str = Category.GENERATIVE,
    ) -> RegistryEntry:
        """
        Register a component type. Re-registering a name replaces the entry.

        Args:
            name: Type name used by ``ComponentNode.type``
            renderer: Host render capability
            schema: Optional pydantic model validating props
            description: Human-readable description sent to the backend
            category: generative or interactable

        Returns:
            The stored entry
        """
        entry = RegistryEntry(
            name=name,
            renderer=renderer,
            schema=schema,
            description=description,
            category=Category(category),
        )

        with self._lock:
            if name in self._entries:
                logger.warning("component_overwritten", name=name)
            entries = dict(self._entries)
            entries[name] = entry
            self._entries = MappingProxyType(entries)

        logger.debug("component_registered", name=name, category=entry.category.value)
        return entry

    def unregister(self, name: str) -> bool:
        """Remove a component type; returns whether it was present."""
        with self._lock:
            if name not in self._entries:
                return False
            entries = dict(self._entries)
            del entries[name]
            self._entries = MappingProxyType(entries)
        logger.debug("component_unregistered", name=name)
        return True

    def clear(self) -> None:
        """Drop every entry (hot reload and tests)."""
        with self._lock:
            self._entries = MappingProxyType({})

    def get(self, name: str) -> RegistryEntry | None:
        """Look up a component type."""
        return self._entries.get(name)

    def list_by_category(self, category: Category | str) -> list[RegistryEntry]:
        """Entries of one category, in registration order."""
        wanted = Category(category)
        return [entry for entry in self._entries.values() if entry.category == wanted]

    def snapshot(self) -> Mapping[str, RegistryEntry]:
        """Immutable view of the current entries."""
        return self._entries

    def describe(self) -> list[dict[str, str]]:
        """Vocabulary advertised to the backend with every streaming request."""
        return [entry.describe() for entry in self._entries.values()]

    @property
    def names(self) -> list[str]:
        return list(self._entries.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


_default_registry: ComponentRegistry | None = None
_default_lock = threading.Lock()


def get_registry() -> ComponentRegistry:
    """Process-wide default registry (empty until the host initializes it)."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = ComponentRegistry()
        return _default_registry
