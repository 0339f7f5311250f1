"""Structural duplicate suppression for discovered elements.

Alternative queries for one kind routinely return the same node twice (a
``Button`` that is also ``clickable="true"``).  Two descriptors are the same
element when identifier, text and class name all match; bounds and state
flags are ignored because a re-layout moves a node without changing it.
"""

from __future__ import annotations

from typing import Sequence

from loguru import logger

from .models import ElementDescriptor


def is_duplicate(existing: Sequence[ElementDescriptor], candidate: ElementDescriptor) -> bool:
    """Return ``True`` if ``candidate`` matches any descriptor in ``existing``."""
    key = candidate.structural_key()
    return any(item.structural_key() == key for item in existing)


def append_unique(existing: list[ElementDescriptor], candidate: ElementDescriptor) -> bool:
    """Append ``candidate`` unless it is a duplicate; return whether it was kept."""
    if is_duplicate(existing, candidate):
        logger.debug(f"Dropped duplicate {candidate.kind.value} element: {candidate.display_name!r}")
        return False
    existing.append(candidate)
    return True
