"""Remote automation session wrapper for Android devices.

Everything the discovery core needs from the Appium server goes through
:class:`AppiumSession` and :class:`AppiumNode`.  Both expose coroutine
methods so discovery code reads the same whether it talks to a live device
or to a test double.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional, TypeVar

from appium import webdriver
from appium.options.android import UiAutomator2Options
from appium.webdriver.common.appiumby import AppiumBy
from selenium.common.exceptions import InvalidSessionIdException, WebDriverException
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.actions import interaction
from selenium.webdriver.common.actions.action_builder import ActionBuilder
from selenium.webdriver.common.actions.pointer_input import PointerInput
from urllib3.exceptions import MaxRetryError, ProtocolError

from .config import Config
from .logger import log

T = TypeVar("T")

# Failures that mean the session itself is gone rather than one command failing.
_SESSION_FAILURES = (InvalidSessionIdException, MaxRetryError, ProtocolError, ConnectionError)


class SessionError(RuntimeError):
    """Raised when the automation session is lost or cannot be created."""


def _guarded(func: Callable[..., T], *args: Any) -> T:
    try:
        return func(*args)
    except _SESSION_FAILURES as e:
        raise SessionError(f"Automation session failure: {e}") from e


def locator_strategy(locator: str) -> tuple[str, str]:
    """Map a locator string onto an Appium ``(by, value)`` pair.

    ``android=`` selects UiAutomator selector-builder expressions, ``id=`` a
    resource id, ``~`` an accessibility id; anything else is XPath.
    """
    if locator.startswith("android="):
        return AppiumBy.ANDROID_UIAUTOMATOR, locator[len("android="):]
    if locator.startswith("id="):
        return AppiumBy.ID, locator[len("id="):]
    if locator.startswith("~"):
        return AppiumBy.ACCESSIBILITY_ID, locator[1:]
    return AppiumBy.XPATH, locator


class AppiumNode:
    """Live reference to one located UI node."""

    def __init__(self, element: Any) -> None:
        self._element = element

    async def text(self) -> str:
        return _guarded(lambda: self._element.text) or ""

    async def attribute(self, name: str) -> Optional[str]:
        return _guarded(self._element.get_attribute, name)

    async def rect(self) -> dict[str, int]:
        return _guarded(lambda: self._element.rect)

    async def is_displayed(self) -> bool:
        return bool(_guarded(self._element.is_displayed))

    async def click(self) -> None:
        _guarded(self._element.click)

    def __repr__(self) -> str:  # pragma: no cover - string representation only
        return f"<AppiumNode id={getattr(self._element, 'id', '?')!r}>"


class AppiumSession:
    """Async facade over an ``appium.webdriver.Remote`` driver."""

    def __init__(self, driver: Any) -> None:
        self.driver = driver

    # ---------------------------------------------------------------------
    # Factory helpers
    # ---------------------------------------------------------------------
    @classmethod
    def create(cls, settings: Config) -> AppiumSession:
        """Start a new automation session from configured capabilities.

        Raises:
            SessionError: If the server refuses or cannot be reached.

        """
        options = UiAutomator2Options().load_capabilities(settings.capabilities())
        server_url = settings.appium_server_url()
        log.info(f"Creating Appium session at {server_url} ({settings.device_name})")
        try:
            driver = webdriver.Remote(command_executor=server_url, options=options)
        except (WebDriverException, *_SESSION_FAILURES) as e:
            raise SessionError(f"Could not create session at {server_url}: {e}") from e
        log.success(f"Session {driver.session_id} started")
        return cls(driver)

    # ---------------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------------
    async def find_elements(self, locator: str) -> list[AppiumNode]:
        by, value = locator_strategy(locator)
        elements = _guarded(self.driver.find_elements, by, value)
        return [AppiumNode(element) for element in elements]

    async def current_package(self) -> str:
        return _guarded(lambda: self.driver.current_package) or ""

    async def current_activity(self) -> str:
        return _guarded(lambda: self.driver.current_activity) or ""

    async def current_screen_id(self) -> str:
        """Opaque screen identifier, ``package/activity``."""
        package = await self.current_package()
        activity = await self.current_activity()
        return f"{package}/{activity}"

    async def window_size(self) -> dict[str, int]:
        return _guarded(self.driver.get_window_size)

    async def page_source(self) -> str:
        return _guarded(lambda: self.driver.page_source)

    # ---------------------------------------------------------------------
    # Actions
    # ---------------------------------------------------------------------
    async def back(self) -> None:
        _guarded(self.driver.back)

    async def swipe(self, start_x: int, start_y: int, end_x: int, end_y: int, duration_ms: int = 1000) -> None:
        """Perform a one-finger swipe using W3C touch actions."""
        def _perform() -> None:
            actions = ActionChains(self.driver)
            actions.w3c_actions = ActionBuilder(
                self.driver, mouse=PointerInput(interaction.POINTER_TOUCH, "finger1")
            )
            pointer = actions.w3c_actions.pointer_action
            pointer.move_to_location(start_x, start_y)
            pointer.pointer_down()
            pointer.pause(0.1)
            pointer.move_to_location(end_x, end_y)
            pointer.pause(duration_ms / 1000)
            pointer.release()
            actions.perform()

        _guarded(_perform)

    # ---------------------------------------------------------------------
    # Capture
    # ---------------------------------------------------------------------
    async def save_screenshot(self, path: str) -> str:
        """Save a PNG screenshot and return its path."""
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if not _guarded(self.driver.get_screenshot_as_file, path):
            raise OSError(f"Screenshot could not be written to {path}")
        return path

    async def close(self) -> None:
        """Delete the remote session; failures are logged, never raised."""
        try:
            self.driver.quit()
            log.info("Session closed")
        except Exception as e:
            log.warning(f"Failed to close session cleanly: {e}")

    async def app_info(self) -> dict[str, Any]:
        """Package, activity and window size, each defaulting on failure."""
        info: dict[str, Any] = {"package": "unknown", "activity": "unknown", "windowSize": {}}
        for key, getter in (
            ("package", self.current_package),
            ("activity", self.current_activity),
            ("windowSize", self.window_size),
        ):
            try:
                info[key] = await getter()
            except SessionError:
                raise
            except Exception as e:
                log.debug(f"Could not read {key}: {e}")
        return info


@asynccontextmanager
async def open_session(settings: Config) -> AsyncIterator[AppiumSession]:
    """Context manager that always releases the remote session."""
    session = AppiumSession.create(settings)
    try:
        yield session
    finally:
        await session.close()
