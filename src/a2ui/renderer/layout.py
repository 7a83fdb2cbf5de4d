"""Translate layout hints into flexbox primitives."""

from typing import Any, Mapping

from ..protocol.models import Layout

ALIGN_ITEMS = {
    "start": "flex-start",
    "center": "center",
    "end": "flex-end",
    "stretch": "stretch",
    "baseline": "baseline",
}

JUSTIFY_CONTENT = {
    "start": "flex-start",
    "center": "center",
    "end": "flex-end",
    "between": "space-between",
    "around": "space-around",
    "evenly": "space-evenly",
}

DEFAULT_DIRECTION = "column"


def to_flex_style(
    layout: Layout | None, style: Mapping[str, str | int | float] | None = None
) -> dict[str, Any]:
    """
    Build a host layout mapping from a node's layout hints and style.

    Unset hints are omitted so the host falls back to its default flow;
    ``style`` entries override the translated hints.

    Args:
        layout: Layout hints from the component node
        style: Raw style overrides

    Returns:
        CSS-like flexbox properties
    """
    result: dict[str, Any] = {
        "display": "flex",
        "flexDirection": layout.direction if layout and layout.direction else DEFAULT_DIRECTION,
    }

    if layout is not None:
        if layout.flex is not None:
            result["flexGrow"] = layout.flex
        if layout.align is not None:
            result["alignItems"] = ALIGN_ITEMS[layout.align]
        if layout.justify is not None:
            result["justifyContent"] = JUSTIFY_CONTENT[layout.justify]
        if layout.gap is not None:
            result["gap"] = layout.gap
        if layout.wrap:
            result["flexWrap"] = "wrap"

    if style:
        result.update(style)
    return result
