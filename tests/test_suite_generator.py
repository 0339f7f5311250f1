"""Unit tests for test case planning and pytest suite generation."""

from datetime import datetime

import pytest

from droidprobe.automation.suite_generator import SuiteGenerator, build_test_cases, pascal_case, snake_case
from droidprobe.core.config import Config
from droidprobe.core.models import ElementDescriptor, ElementKind, ExplorationRun, ScreenSnapshot
from droidprobe.core.selectors import synthesize_selectors


def _descriptor(kind, text="", label="", identifier="", hint="", position=0):
    selectors = synthesize_selectors(
        kind, identifier=identifier, text=text, accessibility_label=label, hint=hint,
        source_query="//android.widget.EditText", position=position,
    )
    return ElementDescriptor(kind, text=text, accessibility_label=label, identifier=identifier, hint=hint, selectors=selectors)


def _run():
    elements = {kind: () for kind in ElementKind}
    elements[ElementKind.CLICKABLE] = (
        _descriptor(ElementKind.CLICKABLE, text="Dome"),
        _descriptor(ElementKind.CLICKABLE, label='Say "Specimen"'),
        _descriptor(ElementKind.CLICKABLE, identifier="com.app:id/icon"),
    )
    elements[ElementKind.TEXT] = (_descriptor(ElementKind.TEXT, text="Welcome back"),)
    elements[ElementKind.INPUT] = (
        _descriptor(ElementKind.INPUT, hint="Batch number"),
        _descriptor(ElementKind.INPUT, position=2),
    )
    run = ExplorationRun()
    run.add_screen(ScreenSnapshot("com.eekifoods.dev/com.eekifoods.MainActivity", datetime.now(), elements))
    return run


def test_name_helpers():
    assert snake_case("Media Moisture!") == "media_moisture"
    assert snake_case("2nd step") == "element_2nd_step"
    assert snake_case("\U000f0e62") == "element"
    assert pascal_case("eekifoods dev") == "EekifoodsDev"


def test_build_test_cases_covers_screens_clicks_and_inputs():
    cases = build_test_cases(_run())
    types = [case["type"] for case in cases]

    assert types.count("screen_load") == 1
    assert types.count("click_interaction") == 2
    assert types.count("input_interaction") == 2
    assert cases[0]["name"] == "Test MainActivity Screen Loading"
    assert "Test Click Dome" in [case["name"] for case in cases]
    assert "Test Input Field Batch number" in [case["name"] for case in cases]


def test_generated_suite_is_valid_python(tmp_path):
    generator = SuiteGenerator(str(tmp_path), Config(app_path="app.apk"))

    written = generator.generate(_run(), "com.eekifoods.dev")

    assert len(written) == 4
    for path in written:
        with open(path, encoding="utf-8") as f:
            compile(f.read(), path, "exec")

    page = (tmp_path / "pages" / "dev_page.py").read_text(encoding="utf-8")
    assert "class DevPage:" in page
    assert "def tap_dome(self):" in page
    assert "def tap_say_specimen(self):" in page
    assert "def enter_batch_number_field(self, text):" in page
    assert "(//android.widget.EditText)[2]" in page
    assert "icon" not in page

    tests = (tmp_path / "tests" / "test_dev_basic.py").read_text(encoding="utf-8")
    assert "assert page.is_displayed('welcome_back_text')" in tests
    assert "def test_can_tap_dome(page):" in tests

    conftest = (tmp_path / "conftest.py").read_text(encoding="utf-8")
    assert "http://localhost:4723/" in conftest
    assert "UiAutomator2Options" in conftest


def test_generate_requires_a_screen(tmp_path):
    with pytest.raises(ValueError):
        SuiteGenerator(str(tmp_path)).generate(ExplorationRun())


def test_scrollable_screen_gets_scroll_helpers_and_gesture_test(tmp_path):
    run = _run()
    screen = run.visited_screens[0]
    elements = dict(screen.elements_by_kind)
    elements[ElementKind.SCROLLABLE] = (
        ElementDescriptor(ElementKind.SCROLLABLE, class_name="android.widget.ScrollView"),
    )
    run.visited_screens[0] = ScreenSnapshot(screen.screen_id, screen.captured_at, elements)

    SuiteGenerator(str(tmp_path)).generate(run, "com.eekifoods.dev")

    page = (tmp_path / "pages" / "dev_page.py").read_text(encoding="utf-8")
    tests = (tmp_path / "tests" / "test_dev_basic.py").read_text(encoding="utf-8")
    compile(page, "dev_page.py", "exec")
    compile(tests, "test_dev_basic.py", "exec")
    assert "def scroll_down(self):" in page
    assert "def scroll_up(self):" in page
    assert "self.driver.swipe(x, start, x, end, 1000)" in page
    assert "def test_basic_gestures(page):" in tests
    assert "page.scroll_down()" in tests


def test_screen_without_scrollables_has_no_gesture_test(tmp_path):
    SuiteGenerator(str(tmp_path)).generate(_run(), "com.eekifoods.dev")

    assert "scroll_down" not in (tmp_path / "pages" / "dev_page.py").read_text(encoding="utf-8")
    assert "test_basic_gestures" not in (tmp_path / "tests" / "test_dev_basic.py").read_text(encoding="utf-8")
