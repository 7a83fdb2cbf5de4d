"""Default component vocabulary."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from ..protocol.models import ActionType
from ..renderer.elements import Element, RenderContext
from .registry import Category, ComponentRegistry


class PropsSchema(BaseModel):
    """Base props schema: unknown props are dropped, known ones coerced."""

    model_config = ConfigDict(extra="ignore")


# ============================================================================
# Props Schemas
# ============================================================================


class TextProps(PropsSchema):
    text: str


class HeadingProps(PropsSchema):
    text: str
    level: Literal[1, 2, 3, 4, 5, 6] | None = None


class ButtonProps(PropsSchema):
    label: str
    eventType: ActionType | None = None
    payload: dict[str, Any] | None = None
    disabled: bool | None = None
    variant: Literal["primary", "secondary"] | None = None


class TextInputProps(PropsSchema):
    label: str | None = None
    placeholder: str | None = None
    value: str | None = None
    multiline: bool | None = None


class ImageProps(PropsSchema):
    src: str
    alt: str | None = None


class KeyValueItem(PropsSchema):
    key: str
    value: str


class KeyValueListProps(PropsSchema):
    items: list[KeyValueItem]


class CardProps(PropsSchema):
    title: str | None = None
    subtitle: str | None = None
    variant: Literal["outlined", "elevated", "filled"] | None = None


class AlertProps(PropsSchema):
    message: str
    severity: Literal["info", "success", "warning", "error"] | None = None
    dismissible: bool | None = None


class BadgeProps(PropsSchema):
    text: str
    color: Literal["gray", "red", "yellow", "green", "blue", "purple"] | None = None
    size: Literal["sm", "md", "lg"] | None = None


class TableColumn(PropsSchema):
    key: str
    label: str


class TableProps(PropsSchema):
    columns: list[TableColumn]
    rows: list[dict[str, str | int | float]]
    striped: bool | None = None


class CheckboxProps(PropsSchema):
    label: str
    checked: bool | None = None
    disabled: bool | None = None


class SelectOption(PropsSchema):
    value: str
    label: str


class SelectProps(PropsSchema):
    label: str | None = None
    options: list[SelectOption]
    value: str | None = None
    placeholder: str | None = None
    disabled: bool | None = None


class ProgressProps(PropsSchema):
    value: float
    max: float | None = None
    label: str | None = None
    showValue: bool | None = None
    color: Literal["blue", "green", "yellow", "red"] | None = None


# ============================================================================
# Renderers
# ============================================================================


def render_text(props: dict[str, Any], ctx: RenderContext) -> Element:
    return Element("div", text=str(props.get("text", "")), children=ctx.children)


def render_heading(props: dict[str, Any], ctx: RenderContext) -> Element:
    level = props.get("level") or 2
    return Element(f"h{level}", text=str(props.get("text", "")))


def render_button(props: dict[str, Any], ctx: RenderContext) -> Element:
    label = props.get("label", "")
    event_type = props.get("eventType") or "click"
    payload = props.get("payload") or {"label": label}
    disabled = bool(props.get("disabled"))

    def on_click() -> None:
        if not disabled:
            ctx.emit(event_type, payload)

    return Element(
        "button",
        attrs={"disabled": disabled, "variant": props.get("variant") or "primary"},
        text=label,
        handlers={"click": on_click},
    )


def render_text_input(props: dict[str, Any], ctx: RenderContext) -> Element:
    field = Element(
        "textarea" if props.get("multiline") else "input",
        attrs={"value": props.get("value"), "placeholder": props.get("placeholder")},
        handlers={"change": lambda value: ctx.emit("input", {"value": value})},
    )
    children: list[Any] = [field]
    if props.get("label"):
        children.insert(0, Element("span", text=props["label"]))
    return Element("label", children=children)


def render_image(props: dict[str, Any], ctx: RenderContext) -> Element:
    return Element("img", attrs={"src": props.get("src"), "alt": props.get("alt") or ""})


def render_key_value_list(props: dict[str, Any], ctx: RenderContext) -> Element:
    rows = []
    for item in props.get("items") or []:
        rows.append(
            Element("div", children=[Element("dt", text=item["key"]), Element("dd", text=item["value"])])
        )
    return Element("dl", children=rows)


def render_card(props: dict[str, Any], ctx: RenderContext) -> Element:
    header = []
    if props.get("title"):
        header.append(Element("h3", text=props["title"]))
    if props.get("subtitle"):
        header.append(Element("p", text=props["subtitle"]))
    return Element(
        "section",
        attrs={"variant": props.get("variant") or "outlined"},
        children=header + list(ctx.children),
    )


def render_alert(props: dict[str, Any], ctx: RenderContext) -> Element:
    children: list[Any] = [Element("span", text=props.get("message", ""))]
    if props.get("dismissible"):
        children.append(
            Element(
                "button",
                text="×",
                handlers={"click": lambda: ctx.emit("click", {"action": "dismiss"})},
            )
        )
    return Element("div", attrs={"role": "alert", "severity": props.get("severity") or "info"}, children=children)


def render_badge(props: dict[str, Any], ctx: RenderContext) -> Element:
    return Element(
        "span",
        attrs={"color": props.get("color") or "gray", "size": props.get("size") or "md"},
        text=props.get("text", ""),
    )


def render_table(props: dict[str, Any], ctx: RenderContext) -> Element:
    columns = props.get("columns") or []
    head = Element("tr", children=[Element("th", text=col["label"]) for col in columns])
    body = []
    for index, row in enumerate(props.get("rows") or []):
        cells = [Element("td", text=str(row.get(col["key"], ""))) for col in columns]
        striped = bool(props.get("striped")) and index % 2 == 1
        body.append(Element("tr", attrs={"striped": striped}, children=cells))
    return Element("table", children=[Element("thead", children=[head]), Element("tbody", children=body)])


def render_checkbox(props: dict[str, Any], ctx: RenderContext) -> Element:
    box = Element(
        "input",
        attrs={"type": "checkbox", "checked": bool(props.get("checked")), "disabled": bool(props.get("disabled"))},
        handlers={"change": lambda checked: ctx.emit("select", {"checked": bool(checked)})},
    )
    return Element("label", children=[box, Element("span", text=props.get("label", ""))])


def render_select(props: dict[str, Any], ctx: RenderContext) -> Element:
    options = []
    if props.get("placeholder"):
        options.append(Element("option", attrs={"value": "", "disabled": True}, text=props["placeholder"]))
    for opt in props.get("options") or []:
        options.append(Element("option", attrs={"value": opt["value"]}, text=opt["label"]))
    select = Element(
        "select",
        attrs={"value": props.get("value"), "disabled": bool(props.get("disabled"))},
        children=options,
        handlers={"change": lambda value: ctx.emit("select", {"value": value})},
    )
    children: list[Any] = [select]
    if props.get("label"):
        children.insert(0, Element("span", text=props["label"]))
    return Element("label", children=children)


def render_progress(props: dict[str, Any], ctx: RenderContext) -> Element:
    maximum = props.get("max") or 100
    percentage = min(100.0, max(0.0, float(props.get("value", 0)) / maximum * 100))
    children: list[Any] = []
    if props.get("label"):
        children.append(Element("span", text=props["label"]))
    if props.get("showValue"):
        children.append(Element("span", text=f"{round(percentage)}%"))
    children.append(
        Element("div", attrs={"width": f"{percentage}%", "color": props.get("color") or "blue"})
    )
    return Element("div", attrs={"role": "progressbar", "value": percentage}, children=children)


# name -> (renderer, schema, category, description)
DEFAULT_COMPONENTS: dict[str, tuple[Any, type[PropsSchema], Category, str]] = {
    "Text": (render_text, TextProps, Category.GENERATIVE, "Plain text block"),
    "Heading": (render_heading, HeadingProps, Category.GENERATIVE, "Section heading (level 1-6)"),
    "Button": (
        render_button,
        ButtonProps,
        Category.INTERACTABLE,
        "Clickable button that sends an action (default 'click') with an optional payload",
    ),
    "TextInput": (
        render_text_input,
        TextInputProps,
        Category.INTERACTABLE,
        "Single or multi-line text field; sends 'input' actions with the value",
    ),
    "Image": (render_image, ImageProps, Category.GENERATIVE, "Image from a URL"),
    "KeyValueList": (render_key_value_list, KeyValueListProps, Category.GENERATIVE, "List of key/value pairs"),
    "Card": (render_card, CardProps, Category.GENERATIVE, "Container card with optional title and subtitle"),
    "Alert": (
        render_alert,
        AlertProps,
        Category.GENERATIVE,
        "Status message (info, success, warning, error), optionally dismissible",
    ),
    "Badge": (render_badge, BadgeProps, Category.GENERATIVE, "Small colored label"),
    "Table": (render_table, TableProps, Category.GENERATIVE, "Data table with columns and rows"),
    "Checkbox": (
        render_checkbox,
        CheckboxProps,
        Category.INTERACTABLE,
        "Checkbox; sends 'select' actions with the checked state",
    ),
    "Select": (
        render_select,
        SelectProps,
        Category.INTERACTABLE,
        "Dropdown of options; sends 'select' actions with the chosen value",
    ),
    "Progress": (render_progress, ProgressProps, Category.GENERATIVE, "Progress bar"),
}


def register_default_components(registry: ComponentRegistry) -> ComponentRegistry:
    """Register the default vocabulary into ``registry``."""
    for name, (renderer, schema, category, description) in DEFAULT_COMPONENTS.items():
        registry.register(name, renderer, schema, description=description, category=category)
    return registry
