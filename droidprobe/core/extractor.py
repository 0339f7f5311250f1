"""Element descriptor extraction from live UI nodes."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

from .models import Bounds, ElementDescriptor, ElementKind
from .selectors import synthesize_selectors

T = TypeVar("T")


async def _read(reader: Callable[[], Awaitable[Any]], convert: Callable[[Any], T], default: T, what: str) -> T:
    """Run one attribute read, substituting ``default`` on any failure."""
    try:
        return convert(await reader())
    except Exception as e:
        logger.debug(f"Attribute read '{what}' failed: {e}")
        return default


def _as_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _as_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _as_bounds(value: Any) -> Bounds:
    return Bounds(
        x=int(round(float(value["x"]))),
        y=int(round(float(value["y"]))),
        width=int(round(float(value["width"]))),
        height=int(round(float(value["height"]))),
    )


async def extract_descriptor(
    node: Any,
    kind: ElementKind,
    *,
    position: int = 0,
    source_query: str = "",
) -> ElementDescriptor:
    """Build an :class:`ElementDescriptor` from a live node.

    Every attribute is read independently; a failed read leaves that field at
    its default and extraction carries on.  Never raises.

    Args:
        node: Live node exposing ``text()``, ``attribute(name)`` and ``rect()``.
        kind: Category the node was discovered under.
        position: 1-based index of the node in ``source_query`` results.
        source_query: Query that found the node, used for positional locators.

    """
    text = await _read(lambda: node.text(), _as_text, "", "text")
    label = await _read(lambda: node.attribute("content-desc"), _as_text, "", "content-desc")
    identifier = await _read(lambda: node.attribute("resource-id"), _as_text, "", "resource-id")
    class_name = await _read(lambda: node.attribute("class"), _as_text, "", "class")
    bounds = await _read(lambda: node.rect(), _as_bounds, Bounds(), "rect")
    enabled = await _read(lambda: node.attribute("enabled"), _as_flag, False, "enabled")
    clickable = await _read(lambda: node.attribute("clickable"), _as_flag, False, "clickable")

    checked = False
    if kind is ElementKind.CHECKBOX:
        checked = await _read(lambda: node.attribute("checked"), _as_flag, False, "checked")

    hint = ""
    if kind is ElementKind.INPUT:
        hint = await _read(lambda: node.attribute("hint"), _as_text, "", "hint")

    try:
        selectors = synthesize_selectors(
            kind,
            identifier=identifier,
            text=text,
            accessibility_label=label,
            hint=hint,
            source_query=source_query,
            position=position,
        )
    except Exception as e:
        logger.debug(f"Selector synthesis failed: {e}")
        selectors = ()

    return ElementDescriptor(
        kind=kind,
        text=text,
        accessibility_label=label,
        identifier=identifier,
        class_name=class_name,
        bounds=bounds,
        enabled=enabled,
        clickable=clickable,
        checked=checked,
        hint=hint,
        selectors=selectors,
    )
