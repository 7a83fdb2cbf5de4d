"""
Tree Renderer
Registry dispatch, layout translation, and action wiring.
"""

from .elements import ActionHandler, Element, RenderContext
from .layout import ALIGN_ITEMS, JUSTIFY_CONTENT, to_flex_style
from .dispatcher import ActionClock, RenderedNode, TreeRenderer, placeholder_element

__all__ = [
    "ActionHandler",
    "Element",
    "RenderContext",
    "ALIGN_ITEMS",
    "JUSTIFY_CONTENT",
    "to_flex_style",
    "ActionClock",
    "RenderedNode",
    "TreeRenderer",
    "placeholder_element",
]
