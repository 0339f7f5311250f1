"""Shallow navigation explorer - click, re-snapshot, navigate back.

Exploration is depth-1 only: every candidate is clicked from the starting
screen, the resulting screen is captured, and the platform back action is
issued.  There is no cycle detection and no revisiting of discovered
screens.  Back navigation is checked by comparing screen ids; a mismatch is
recorded on the click edge and exploration continues.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from loguru import logger

from ..utils.file_utils import safe_name
from .config import Config
from .logger import log
from .models import ClickEdge, ClickOutcome, ElementDescriptor, ElementKind, ExplorationRun, ScreenSnapshot
from .selectors import try_locate
from .session import SessionError, open_session
from .snapshot import ScreenSnapshotBuilder


def select_click_candidates(snapshot: ScreenSnapshot, limit: int) -> list[ElementDescriptor]:
    """Clickable descriptors with text or label, in discovery order, at most ``limit``."""
    if limit <= 0:
        return []
    labelled = [d for d in snapshot.elements(ElementKind.CLICKABLE) if d.has_human_label()]
    return labelled[:limit]


class ShallowExplorer:
    """Depth-1 explorer driving one live session."""

    def __init__(self, session: Any, builder: ScreenSnapshotBuilder, *, settle_interval: float = 3.0) -> None:
        self.session = session
        self.builder = builder
        self.settle_interval = settle_interval

    async def explore(self, max_clicks_to_try: int) -> ExplorationRun:
        """Run the exploration; never raises.

        A lost session ends the run early with ``session_error`` set, and
        whatever was captured up to that point is returned.
        """
        run = ExplorationRun()

        try:
            start = await self.builder.capture_screen("screen_start")
        except Exception as e:
            log.error(f"Starting screen capture failed: {e}")
            run.session_error = str(e)
            return run
        run.add_screen(start)

        candidates = select_click_candidates(start, max_clicks_to_try)
        log.info(f"Exploring {len(candidates)} clickable elements from {start.screen_id}")

        for descriptor in candidates:
            edge = ClickEdge(from_screen_index=0, descriptor=descriptor)
            try:
                await self._click_through(run, edge)
            except SessionError as e:
                log.error(f"Session lost while exploring {descriptor.display_name!r}: {e}")
                edge.error = str(e)
                run.session_error = str(e)
            run.add_edge(edge)
            log.log_click(descriptor.display_name, edge.outcome.value, {"to": edge.to_screen_index})
            if run.session_error:
                break

        log.success(
            f"Exploration finished: {len(run.visited_screens)} screens, {len(run.click_edges)} clicks"
        )
        return run

    async def _click_through(self, run: ExplorationRun, edge: ClickEdge) -> None:
        """Locate, click, capture and navigate back for one edge.

        Fills ``edge`` in place.  Only :class:`SessionError` escapes.
        """
        descriptor = edge.descriptor
        origin_id = run.visited_screens[edge.from_screen_index].screen_id

        try:
            node = await try_locate(self.session, descriptor.selectors)
            if node is None:
                edge.outcome = ClickOutcome.NOT_FOUND
                edge.error = "No selector matched a displayed node"
                return

            await node.click()
            await self._settle()

            snapshot = await self.builder.capture_screen(f"after_{safe_name(descriptor.display_name)}")
            edge.to_screen_index = run.add_screen(snapshot)
            edge.outcome = (
                ClickOutcome.NAVIGATED if snapshot.screen_id != origin_id else ClickOutcome.SAME_SCREEN
            )

            await self.session.back()
            await self._settle()
        except SessionError:
            raise
        except Exception as e:
            logger.debug(f"Click through {descriptor.display_name!r} failed: {e}")
            edge.error = str(e)
            if edge.to_screen_index is None:
                edge.outcome = ClickOutcome.FAILED
            return

        edge.back_screen_id = await self._screen_id_after_back()
        if edge.back_screen_id is not None and edge.back_screen_id != origin_id:
            edge.back_anomaly = True
            log.warning(
                f"Back from {descriptor.display_name!r} landed on {edge.back_screen_id}, expected {origin_id}"
            )

    async def _screen_id_after_back(self) -> Optional[str]:
        try:
            return await self.session.current_screen_id()
        except SessionError:
            raise
        except Exception as e:
            logger.debug(f"Could not verify back navigation: {e}")
            return None

    async def _settle(self) -> None:
        await asyncio.sleep(self.settle_interval)


def _builder_for(session: Any, settings: Config) -> ScreenSnapshotBuilder:
    return ScreenSnapshotBuilder(
        session,
        max_per_kind=settings.max_per_kind,
        screenshot_dir=settings.screenshot_dir,
        capture_page_source=settings.capture_page_source,
    )


async def discover_screen(settings: Config) -> tuple[ScreenSnapshot, dict[str, Any]]:
    """Open a session, capture the launch screen, release the session."""
    async with open_session(settings) as session:
        log.info(f"Waiting {settings.launch_wait}s for the app to load...")
        await asyncio.sleep(settings.launch_wait)
        app_info = await session.app_info()
        snapshot = await _builder_for(session, settings).capture_screen("element_discovery")
    return snapshot, app_info


async def inspect_app(
    settings: Config, max_clicks_to_try: Optional[int] = None
) -> tuple[ExplorationRun, dict[str, Any]]:
    """Open a session, run a shallow exploration, release the session."""
    limit = settings.max_clicks_to_try if max_clicks_to_try is None else max_clicks_to_try
    async with open_session(settings) as session:
        log.info(f"Waiting {settings.launch_wait}s for the app to load...")
        await asyncio.sleep(settings.launch_wait)
        app_info = await session.app_info()
        explorer = ShallowExplorer(session, _builder_for(session, settings), settle_interval=settings.settle_interval)
        run = await explorer.explore(limit)
    return run, app_info
