"""Test case planning and pytest suite generation from inspection data.

``build_test_cases`` turns an exploration run into plain test-case records
for the inspection report.  ``SuiteGenerator`` writes a runnable pytest
project (page object, tests, conftest) that drives the app through the
Appium Python client using the synthesized locators.
"""

from __future__ import annotations

import os
import re
from typing import Any, Optional

from loguru import logger

from ..core.config import Config
from ..core.models import ElementDescriptor, ElementKind, ExplorationRun, ScreenSnapshot
from ..utils.file_utils import save_text

__all__ = ["SuiteGenerator", "build_test_cases", "pascal_case", "snake_case"]


def snake_case(value: str) -> str:
    """Identifier-safe snake_case form of a visible label."""
    words = re.findall(r"[A-Za-z0-9]+", value)
    name = "_".join(word.lower() for word in words)
    if not name:
        return "element"
    if name[0].isdigit():
        name = f"element_{name}"
    return name


def pascal_case(value: str) -> str:
    return "".join(word.capitalize() for word in snake_case(value).split("_"))


def build_test_cases(run: ExplorationRun) -> list[dict[str, Any]]:
    """Derive test case records from every visited screen."""
    test_cases: list[dict[str, Any]] = []

    for screen in run.visited_screens:
        screen_name = screen.screen_name
        test_cases.append({
            "name": f"Test {screen_name} Screen Loading",
            "type": "screen_load",
            "description": f"Verify that {screen_name} screen loads correctly",
            "steps": [
                "Launch the app",
                f"Navigate to {screen_name} screen",
                "Verify screen elements are displayed",
            ],
            "elements": [d.to_dict() for d in screen.elements(ElementKind.TEXT)[:3]],
        })

        for descriptor in screen.elements(ElementKind.CLICKABLE):
            if not descriptor.has_human_label():
                continue
            label = descriptor.text or descriptor.accessibility_label
            test_cases.append({
                "name": f"Test Click {label}",
                "type": "click_interaction",
                "description": f"Test clicking on {label}",
                "element": descriptor.to_dict(),
                "steps": [
                    "Launch the app",
                    f"Locate element: {label}",
                    "Click the element",
                    "Verify expected behavior",
                ],
            })

        for index, descriptor in enumerate(screen.elements(ElementKind.INPUT), start=1):
            label = descriptor.hint or f"Input {index}"
            test_cases.append({
                "name": f"Test Input Field {label}",
                "type": "input_interaction",
                "description": f"Test input functionality for {descriptor.hint or 'input field'}",
                "element": descriptor.to_dict(),
                "steps": [
                    "Launch the app",
                    f"Locate input field: {descriptor.hint or 'input field'}",
                    "Enter test data",
                    "Verify input is accepted",
                ],
            })

    return test_cases


class _NameRegistry:
    """Hands out unique snake_case names."""

    def __init__(self) -> None:
        self._used: set[str] = set()

    def claim(self, label: str) -> str:
        base = snake_case(label)
        name, suffix = base, 2
        while name in self._used:
            name = f"{base}_{suffix}"
            suffix += 1
        self._used.add(name)
        return name


class SuiteGenerator:
    """Writes a pytest suite for the starting screen of a run."""

    def __init__(self, output_dir: str, settings: Optional[Config] = None, max_text_checks: int = 3) -> None:
        self.output_dir = output_dir
        self.settings = settings or Config()
        self.max_text_checks = max_text_checks

    def generate(self, run: ExplorationRun, app_package: str = "") -> list[str]:
        """Generate page object, tests and conftest; return written paths."""
        screen = run.start_screen
        if screen is None:
            raise ValueError("Exploration run has no captured screens")

        app_name = snake_case((app_package or screen.screen_id.split("/", 1)[0]).rsplit(".", 1)[-1] or "app")
        class_name = f"{pascal_case(app_name)}Page"
        elements = self._page_elements(screen)

        files = {
            os.path.join(self.output_dir, "pages", "__init__.py"): "",
            os.path.join(self.output_dir, "pages", f"{app_name}_page.py"): self._page_object(class_name, screen, elements),
            os.path.join(self.output_dir, "tests", f"test_{app_name}_basic.py"): self._test_module(
                app_name, class_name, elements, scrollable=bool(screen.elements(ElementKind.SCROLLABLE))
            ),
            os.path.join(self.output_dir, "conftest.py"): self._conftest(),
        }

        written: list[str] = []
        for path, content in files.items():
            if save_text(content, path):
                written.append(path)
        logger.info(f"Generated {len(written)} suite files in {self.output_dir}")
        return written

    def _page_elements(self, screen: ScreenSnapshot) -> list[tuple[str, str, ElementDescriptor]]:
        """``(role, name, descriptor)`` for each element worth a page member."""
        registry = _NameRegistry()
        elements: list[tuple[str, str, ElementDescriptor]] = []

        for descriptor in screen.elements(ElementKind.TEXT)[: self.max_text_checks]:
            elements.append(("text", registry.claim(f"{descriptor.text} text"), descriptor))
        for descriptor in screen.elements(ElementKind.CLICKABLE):
            if descriptor.has_human_label() and descriptor.selectors:
                elements.append(("clickable", registry.claim(descriptor.display_name), descriptor))
        for index, descriptor in enumerate(screen.elements(ElementKind.INPUT), start=1):
            if descriptor.selectors:
                label = descriptor.hint or descriptor.identifier.rsplit("/", 1)[-1] or f"input {index}"
                elements.append(("input", registry.claim(f"{label} field"), descriptor))
        return elements

    def _page_object(
        self, class_name: str, screen: ScreenSnapshot, elements: list[tuple[str, str, ElementDescriptor]]
    ) -> str:
        lines = [
            f'"""{class_name} page object.',
            "",
            f"Generated from UI inspection of {screen.screen_id}.",
            '"""',
            "",
            "from appium.webdriver.common.appiumby import AppiumBy",
            "",
            "LOCATORS = {",
        ]
        for _, name, descriptor in elements:
            lines.append(f"    {name!r}: (")
            lines.extend(f"        {selector!r}," for selector in descriptor.selectors)
            lines.append("    ),")
        lines += [
            "}",
            "",
            "",
            "def _strategy(locator):",
            '    if locator.startswith("android="):',
            '        return AppiumBy.ANDROID_UIAUTOMATOR, locator[len("android="):]',
            "    return AppiumBy.XPATH, locator",
            "",
            "",
            f"class {class_name}:",
            "    def __init__(self, driver):",
            "        self.driver = driver",
            "",
            "    def find(self, name):",
            '        """Return the first displayed match, trying locators in order."""',
            "        for locator in LOCATORS[name]:",
            "            for element in self.driver.find_elements(*_strategy(locator)):",
            "                if element.is_displayed():",
            "                    return element",
            '        raise LookupError(f"{name} is not displayed")',
            "",
            "    def is_displayed(self, name):",
            "        try:",
            "            self.find(name)",
            "            return True",
            "        except LookupError:",
            "            return False",
        ]
        for role, name, _ in elements:
            if role == "clickable":
                lines += ["", f"    def tap_{name}(self):", f"        self.find({name!r}).click()"]
            elif role == "input":
                lines += [
                    "",
                    f"    def enter_{name}(self, text):",
                    f"        element = self.find({name!r})",
                    "        element.clear()",
                    "        element.send_keys(text)",
                ]
        if screen.elements(ElementKind.SCROLLABLE):
            lines += [
                "",
                "    def _swipe_vertical(self, from_ratio, to_ratio):",
                "        size = self.driver.get_window_size()",
                '        x = size["width"] // 2',
                '        start, end = round(size["height"] * from_ratio), round(size["height"] * to_ratio)',
                "        self.driver.swipe(x, start, x, end, 1000)",
                "",
                "    def scroll_down(self):",
                "        self._swipe_vertical(0.7, 0.3)",
                "",
                "    def scroll_up(self):",
                "        self._swipe_vertical(0.3, 0.7)",
            ]
        return "\n".join(lines) + "\n"

    def _test_module(
        self,
        app_name: str,
        class_name: str,
        elements: list[tuple[str, str, ElementDescriptor]],
        scrollable: bool = False,
    ) -> str:
        texts = [name for role, name, _ in elements if role == "text"]
        clickables = [name for role, name, _ in elements if role == "clickable"]
        inputs = [name for role, name, _ in elements if role == "input"]

        lines = [
            f'"""Basic tests for {app_name}, generated from UI inspection."""',
            "",
            "import pytest",
            "",
            f"from pages.{app_name}_page import {class_name}",
            "",
            "",
            "@pytest.fixture",
            "def page(driver):",
            f"    return {class_name}(driver)",
            "",
            "",
            "def test_main_screen_loads(page):",
        ]
        if texts:
            lines += [f"    assert page.is_displayed({name!r})" for name in texts]
        else:
            lines.append("    assert page.driver.current_activity")

        for name in clickables[:3]:
            lines += [
                "",
                "",
                f"def test_can_tap_{name}(page):",
                f"    assert page.is_displayed({name!r})",
                f"    page.tap_{name}()",
            ]
        for name in inputs[:2]:
            lines += [
                "",
                "",
                f"def test_can_enter_{name}(page):",
                f'    page.enter_{name}("Test Input")',
                f'    assert page.find({name!r}).text == "Test Input"',
            ]
        if scrollable:
            lines += [
                "",
                "",
                "def test_basic_gestures(page):",
                "    activity = page.driver.current_activity",
                "    page.scroll_down()",
                "    page.scroll_up()",
                "    assert page.driver.current_activity == activity",
            ]
        return "\n".join(lines) + "\n"

    def _conftest(self) -> str:
        return "\n".join([
            '"""Appium driver fixture for the generated suite."""',
            "",
            "import pytest",
            "from appium import webdriver",
            "from appium.options.android import UiAutomator2Options",
            "",
            f"APPIUM_SERVER = {self.settings.appium_server_url()!r}",
            f"CAPABILITIES = {self.settings.capabilities()!r}",
            "",
            "",
            "@pytest.fixture",
            "def driver():",
            "    options = UiAutomator2Options().load_capabilities(CAPABILITIES)",
            "    session = webdriver.Remote(command_executor=APPIUM_SERVER, options=options)",
            "    session.implicitly_wait(5)",
            "    yield session",
            "    session.quit()",
        ]) + "\n"
