"""
Component Registry
Renderable component types with validation schemas.
"""

from .registry import (
    Category,
    ComponentRegistry,
    ComponentRenderer,
    RegistryEntry,
    get_registry,
)
from .defaults import DEFAULT_COMPONENTS, register_default_components

__all__ = [
    "Category",
    "ComponentRegistry",
    "ComponentRenderer",
    "RegistryEntry",
    "get_registry",
    "DEFAULT_COMPONENTS",
    "register_default_components",
]
