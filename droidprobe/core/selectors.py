"""Locator synthesis and ordered re-location.

Locators come in two families that encode the same attribute: a structural
XPath expression (canonical) and a UiAutomator ``UiSelector`` expression
prefixed with ``android=`` (alternate).
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from loguru import logger

from .models import ElementKind
from .session import SessionError

__all__ = [
    "label_selectors",
    "synthesize_selectors",
    "try_locate",
    "uiselector_literal",
    "xpath_literal",
]


def xpath_literal(value: str) -> str:
    """Quote ``value`` as an XPath 1.0 string literal."""
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    parts = value.split('"')
    return "concat(" + ", '\"', ".join(f'"{part}"' for part in parts) + ")"


def uiselector_literal(value: str) -> str:
    """Quote ``value`` as a Java string literal for ``UiSelector``."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _tier(attribute: str, method: str, value: str) -> list[str]:
    return [
        f"//*[@{attribute}={xpath_literal(value)}]",
        f"android=new UiSelector().{method}({uiselector_literal(value)})",
    ]


def synthesize_selectors(
    kind: ElementKind,
    *,
    identifier: str = "",
    text: str = "",
    accessibility_label: str = "",
    hint: str = "",
    source_query: str = "",
    position: int = 0,
) -> tuple[str, ...]:
    """Return locators ordered by decreasing stability.

    Tiers: resource id, exact text, content description, then for inputs the
    hint and finally a positional fallback ``(<query>)[n]`` used only when no
    other tier applies.  Empty attributes never produce a locator.
    """
    selectors: list[str] = []

    identifier = identifier.strip()
    text = text.strip()
    label = accessibility_label.strip()
    hint = hint.strip()

    if identifier:
        selectors += _tier("resource-id", "resourceId", identifier)
    if text:
        selectors += _tier("text", "text", text)
    if label:
        selectors += _tier("content-desc", "description", label)

    if kind is ElementKind.INPUT:
        if hint:
            selectors += [
                f"//android.widget.EditText[@hint={xpath_literal(hint)}]",
                f"android=new UiSelector().textContains({uiselector_literal(hint)})",
            ]
        if not selectors and source_query and position > 0:
            selectors.append(f"({source_query})[{position}]")

    return tuple(selectors)


def label_selectors(label: str) -> tuple[str, ...]:
    """Locators for a hand-written flow step naming a visible label.

    Content descriptions in composed views often carry icon glyphs around the
    label, so the description match is a containment test.
    """
    label = label.strip()
    if not label:
        return ()
    literal = xpath_literal(label)
    return (
        f"//*[@content-desc={literal}]",
        f"//*[contains(@content-desc, {literal})]",
        f"//*[@text={literal}]",
        f"android=new UiSelector().descriptionContains({uiselector_literal(label)})",
        f"android=new UiSelector().text({uiselector_literal(label)})",
    )


async def try_locate(session: Any, selectors: Sequence[str]) -> Optional[Any]:
    """Return the first displayed node matched by ``selectors``, in order.

    Evaluation stops at the first locator yielding a displayed node.  A
    locator that errors counts as not found; only a lost session escapes.
    """
    for selector in selectors:
        try:
            nodes = await session.find_elements(selector)
            for node in nodes:
                if await node.is_displayed():
                    logger.debug(f"Located node with {selector}")
                    return node
        except SessionError:
            raise
        except Exception as e:
            logger.debug(f"Locator {selector} failed: {e}")
    return None
