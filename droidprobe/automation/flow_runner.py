"""Fixed interaction flow execution with per-step screenshots and results."""

from __future__ import annotations

import asyncio
import os
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..core.config import Config
from ..core.logger import log
from ..core.selectors import label_selectors, try_locate
from ..core.session import SessionError, open_session
from ..utils.file_utils import load_json, timestamped_filename


class FlowStepError(Exception):
    """Raised when a flow step's expectation is not met."""


class FlowAction(str, Enum):
    VERIFY_LAUNCH = "verify_launch"
    VERIFY = "verify"
    CLICK = "click"
    SCROLL = "scroll"


@dataclass(slots=True)
class FlowStep:
    """One scripted interaction.

    ``reveal_with`` names a toggle clicked first when the target is not
    visible (e.g. an expandable section).  Each ``expect_visible`` entry is a
    selector group that must resolve after the action.  ``direction``
    (``down`` or ``up``) applies to scroll steps only.
    """

    name: str
    action: FlowAction = FlowAction.CLICK
    selectors: tuple[str, ...] = ()
    reveal_with: tuple[str, ...] = ()
    expect_visible: tuple[tuple[str, ...], ...] = ()
    navigate_back: bool = False
    direction: str = "down"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FlowStep:
        def _selectors(selectors: Any, label: Any) -> tuple[str, ...]:
            if selectors:
                return tuple(selectors)
            return label_selectors(label) if label else ()

        return cls(
            name=data["name"],
            action=FlowAction(data.get("action", FlowAction.CLICK.value)),
            selectors=_selectors(data.get("selectors"), data.get("label")),
            reveal_with=_selectors(data.get("revealWithSelectors"), data.get("revealWith")),
            expect_visible=tuple(label_selectors(label) for label in data.get("expectVisible", [])),
            navigate_back=bool(data.get("navigateBack", False)),
            direction=data.get("direction", "down"),
        )


@dataclass(slots=True)
class Flow:
    name: str
    steps: tuple[FlowStep, ...]


@dataclass(slots=True)
class StepResult:
    name: str
    status: str = "running"
    error: Optional[str] = None
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    duration_ms: float = 0.0
    screen_id_before: Optional[str] = None
    screen_id_after: Optional[str] = None
    screenshots: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status == "passed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "error": self.error,
            "startTime": self.started_at.isoformat(),
            "endTime": self.finished_at.isoformat() if self.finished_at else None,
            "duration": round(self.duration_ms),
            "screenIdBefore": self.screen_id_before,
            "screenIdAfter": self.screen_id_after,
            "screenshots": list(self.screenshots),
        }


@dataclass(slots=True)
class FlowResults:
    suite_name: str
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    steps: list[StepResult] = field(default_factory=list)
    session_error: Optional[str] = None

    def summary(self) -> dict[str, Any]:
        total = len(self.steps)
        passed = sum(1 for step in self.steps if step.passed)
        return {
            "total": total,
            "passed": passed,
            "failed": total - passed,
            "successRate": round(passed / total * 100, 1) if total else 0.0,
        }

    @property
    def all_passed(self) -> bool:
        return bool(self.steps) and all(step.passed for step in self.steps)

    def to_dict(self) -> dict[str, Any]:
        return {
            "suiteName": self.suite_name,
            "startTime": self.started_at.isoformat(),
            "endTime": self.finished_at.isoformat() if self.finished_at else None,
            "tests": [step.to_dict() for step in self.steps],
            "summary": self.summary(),
            "sessionError": self.session_error,
        }


PRODUCTION_DATA_FLOW = Flow(
    name="Production Data Collection App - Comprehensive Test",
    steps=(
        FlowStep("App Launch Verification", FlowAction.VERIFY_LAUNCH),
        FlowStep(
            "Specimen Button Navigation Test",
            selectors=label_selectors("Specimen"),
            navigate_back=True,
        ),
        FlowStep("Scroll To Dome Section", FlowAction.SCROLL, direction="down"),
        FlowStep(
            "Dome Button Expansion Test",
            selectors=label_selectors("Dome"),
            expect_visible=(label_selectors("Harvesting"), label_selectors("Media Moisture")),
        ),
        FlowStep(
            "Harvesting Button Navigation Test",
            selectors=label_selectors("Harvesting"),
            reveal_with=label_selectors("Dome"),
            navigate_back=True,
        ),
        FlowStep(
            "Media Moisture Button Navigation Test",
            selectors=label_selectors("Media Moisture"),
            reveal_with=label_selectors("Dome"),
            navigate_back=True,
        ),
    ),
)


def load_flow(path: str) -> Flow:
    """Load a flow definition from JSON.

    Format: ``{"name": str, "steps": [{"name", "action", "label" | "selectors",
    "revealWith", "expectVisible": [labels], "navigateBack", "direction"}]}``.
    """
    data = load_json(path)
    if not isinstance(data, dict) or not data.get("steps"):
        raise ValueError(f"Invalid flow definition: {path}")
    return Flow(
        name=data.get("name", os.path.splitext(os.path.basename(path))[0]),
        steps=tuple(FlowStep.from_dict(step) for step in data["steps"]),
    )


class FlowRunner:
    """Executes flow steps sequentially against one session."""

    def __init__(
        self,
        session: Any,
        *,
        settle_interval: float = 2.0,
        screenshot_dir: str = "screenshots",
        expected_package: Optional[str] = None,
    ) -> None:
        self.session = session
        self.settle_interval = settle_interval
        self.screenshot_dir = screenshot_dir
        self.expected_package = expected_package

    async def run(self, flow: Flow) -> FlowResults:
        """Run every step; a failing step never stops the following ones."""
        results = FlowResults(suite_name=flow.name)
        log.info(f"Starting flow: {flow.name} ({len(flow.steps)} steps)")

        for step in flow.steps:
            result = StepResult(name=step.name)
            start = time.time()

            if results.session_error:
                result.status = "failed"
                result.error = f"Skipped, session lost: {results.session_error}"
            else:
                try:
                    await self._execute(step, result)
                    result.status = "passed"
                except SessionError as e:
                    results.session_error = str(e)
                    result.status = "failed"
                    result.error = str(e)
                except Exception as e:
                    result.status = "failed"
                    result.error = str(e)

                if not results.session_error:
                    try:
                        await self._screenshot(f"test_{step.name}_{result.status}", result)
                    except SessionError as e:
                        results.session_error = str(e)

            result.finished_at = datetime.now()
            result.duration_ms = (time.time() - start) * 1000
            results.steps.append(result)
            log.log_flow_step(step.name, result.status, {"error": result.error} if result.error else None)

        results.finished_at = datetime.now()
        summary = results.summary()
        log.info(f"Flow finished: {summary['passed']}/{summary['total']} passed")
        return results

    async def _execute(self, step: FlowStep, result: StepResult) -> None:
        result.screen_id_before = await self.session.current_screen_id()

        if step.action is FlowAction.VERIFY_LAUNCH:
            package = await self.session.current_package()
            if self.expected_package and package != self.expected_package:
                raise FlowStepError(f"Expected package {self.expected_package}, got {package}")
            if step.selectors and await try_locate(self.session, step.selectors) is None:
                raise FlowStepError(f"{step.name}: launch screen marker is not displayed")
            result.screen_id_after = result.screen_id_before
            return

        if step.action is FlowAction.SCROLL:
            await self._scroll(step.direction)
            result.screen_id_after = await self.session.current_screen_id()
            return

        node = await self._locate(step)

        if step.action is FlowAction.CLICK:
            await self._screenshot(f"before_{step.name}", result)
            await node.click()
            await self._settle()
            result.screen_id_after = await self.session.current_screen_id()
            await self._screenshot(f"after_{step.name}", result)
        else:
            result.screen_id_after = result.screen_id_before

        for group in step.expect_visible:
            if await try_locate(self.session, group) is None:
                raise FlowStepError(f"{step.name}: expected element {group[0]} is not displayed")

        if step.navigate_back:
            await self.session.back()
            await self._settle()

    async def _locate(self, step: FlowStep) -> Any:
        node = await try_locate(self.session, step.selectors)
        if node is None and step.reveal_with:
            toggle = await try_locate(self.session, step.reveal_with)
            if toggle is not None:
                log.debug(f"{step.name}: revealing target via toggle")
                await toggle.click()
                await self._settle()
                node = await try_locate(self.session, step.selectors)
        if node is None:
            raise FlowStepError(f"{step.name}: element is not displayed")
        return node

    async def _scroll(self, direction: str) -> None:
        """Swipe vertically through the middle 40% of the screen."""
        size = await self.session.window_size()
        x = size["width"] // 2
        low, high = round(size["height"] * 0.7), round(size["height"] * 0.3)
        if direction == "down":
            await self.session.swipe(x, low, x, high, duration_ms=1000)
        elif direction == "up":
            await self.session.swipe(x, high, x, low, duration_ms=1000)
        else:
            raise FlowStepError(f"Unknown scroll direction: {direction}")
        await self._settle()

    async def _screenshot(self, name: str, result: StepResult) -> None:
        path = os.path.join(self.screenshot_dir, timestamped_filename(name, "png"))
        try:
            await self.session.save_screenshot(path)
            result.screenshots.append(os.path.basename(path))
        except SessionError:
            raise
        except Exception as e:
            log.warning(f"Screenshot {name} failed: {e}")

    async def _settle(self) -> None:
        await asyncio.sleep(self.settle_interval)


async def run_flow(settings: Config, flow: Flow = PRODUCTION_DATA_FLOW) -> FlowResults:
    """Open a session, run ``flow``, release the session."""
    async with open_session(settings) as session:
        log.info(f"Waiting {settings.launch_wait}s for the app to load...")
        await asyncio.sleep(settings.launch_wait)
        runner = FlowRunner(
            session,
            settle_interval=settings.settle_interval,
            screenshot_dir=settings.screenshot_dir,
            expected_package=settings.expected_app_package,
        )
        return await runner.run(flow)
