"""Single-screen discovery: one full pass over the loaded screen."""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Optional

from loguru import logger

from ..utils.file_utils import timestamped_filename
from .element_filter import append_unique
from .extractor import extract_descriptor
from .logger import log
from .models import ElementDescriptor, ElementKind, ScreenSnapshot
from .session import SessionError

# Alternative structural queries per kind, tried in order to improve recall.
KIND_QUERIES: dict[ElementKind, tuple[str, ...]] = {
    ElementKind.CLICKABLE: (
        '//*[@clickable="true"]',
        "//android.widget.Button",
        '//*[contains(@resource-id, "button")]',
        '//*[contains(@resource-id, "btn")]',
    ),
    ElementKind.INPUT: (
        "//android.widget.EditText",
        '//*[contains(@resource-id, "edit")]',
        '//*[contains(@resource-id, "input")]',
    ),
    ElementKind.TEXT: ("//android.widget.TextView",),
    ElementKind.IMAGE: (
        "//android.widget.ImageView",
        "//android.widget.ImageButton",
    ),
    ElementKind.LIST: (
        "//android.widget.ListView",
        "//android.widget.RecyclerView",
        "//androidx.recyclerview.widget.RecyclerView",
    ),
    ElementKind.CHECKBOX: (
        "//android.widget.CheckBox",
        '//*[@checkable="true"]',
    ),
    ElementKind.SCROLLABLE: ('//*[@scrollable="true"]',),
    ElementKind.CUSTOM: ("//*[@resource-id]",),
}

_PLATFORM_CLASS_PREFIXES = ("android.widget.", "android.view.")


def _accepts(kind: ElementKind, descriptor: ElementDescriptor) -> bool:
    """Kind-specific acceptance after extraction."""
    if kind is ElementKind.TEXT:
        return bool(descriptor.text)
    if kind is ElementKind.CUSTOM:
        return bool(descriptor.identifier) and not descriptor.class_name.startswith(_PLATFORM_CLASS_PREFIXES)
    return True


class ScreenSnapshotBuilder:
    """Builds a fresh :class:`ScreenSnapshot` per call.

    The builder holds no discovery state between calls; only the session
    handle and the capture settings are kept.
    """

    def __init__(
        self,
        session: Any,
        *,
        max_per_kind: int = 20,
        screenshot_dir: str = "screenshots",
        capture_page_source: bool = False,
    ) -> None:
        if max_per_kind <= 0:
            raise ValueError("max_per_kind must be positive")
        self.session = session
        self.max_per_kind = max_per_kind
        self.screenshot_dir = screenshot_dir
        self.capture_page_source = capture_page_source

    async def capture_screen(self, name: Optional[str] = None) -> ScreenSnapshot:
        """Discover every element kind on the current screen."""
        screen_id = await self._read_screen_id()
        log.info(f"Capturing screen {screen_id}")

        elements_by_kind: dict[ElementKind, tuple[ElementDescriptor, ...]] = {}
        for kind in ElementKind:
            elements_by_kind[kind] = tuple(await self._discover_kind(kind))

        base_name = name or f"screen_{screen_id.rsplit('.', 1)[-1]}"
        screenshot_ref = await self._capture_screenshot(base_name)
        page_source_ref = await self._capture_page_source(base_name) if self.capture_page_source else None

        snapshot = ScreenSnapshot(
            screen_id=screen_id,
            captured_at=datetime.now(),
            elements_by_kind=elements_by_kind,
            screenshot_ref=screenshot_ref,
            page_source_ref=page_source_ref,
        )
        log.info(f"Screen {screen_id}: {snapshot.element_count()} elements discovered")
        return snapshot

    async def _read_screen_id(self) -> str:
        try:
            return await self.session.current_screen_id() or "unknown"
        except SessionError:
            raise
        except Exception as e:
            logger.debug(f"Could not read screen id: {e}")
            return "unknown"

    async def _discover_kind(self, kind: ElementKind) -> list[ElementDescriptor]:
        found: list[ElementDescriptor] = []
        processed = 0

        for query in KIND_QUERIES[kind]:
            if processed >= self.max_per_kind:
                break
            try:
                nodes = await self.session.find_elements(query)
            except SessionError:
                raise
            except Exception as e:
                logger.debug(f"Query {query} for {kind.value} failed: {e}")
                continue

            for position, node in enumerate(nodes, start=1):
                if processed >= self.max_per_kind:
                    break
                processed += 1
                try:
                    if not await node.is_displayed():
                        continue
                except SessionError:
                    raise
                except Exception as e:
                    logger.debug(f"Visibility check failed for {kind.value} node: {e}")
                    continue

                descriptor = await extract_descriptor(node, kind, position=position, source_query=query)
                if _accepts(kind, descriptor):
                    append_unique(found, descriptor)

        log.log_discovery(kind.value, len(found), processed)
        return found

    async def _capture_screenshot(self, name: str) -> Optional[str]:
        path = os.path.join(self.screenshot_dir, timestamped_filename(name, "png"))
        try:
            await self.session.save_screenshot(path)
            return os.path.basename(path)
        except SessionError:
            raise
        except Exception as e:
            log.warning(f"Screenshot capture failed: {e}")
            return None

    async def _capture_page_source(self, name: str) -> Optional[str]:
        path = os.path.join(self.screenshot_dir, timestamped_filename(name, "xml"))
        try:
            source = await self.session.page_source()
            os.makedirs(self.screenshot_dir, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(source)
            return os.path.basename(path)
        except SessionError:
            raise
        except Exception as e:
            log.warning(f"Page source capture failed: {e}")
            return None
