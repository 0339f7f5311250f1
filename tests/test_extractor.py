"""Unit tests for descriptor extraction."""

import asyncio

from droidprobe.core.extractor import extract_descriptor
from droidprobe.core.models import Bounds, ElementKind

from .fakes import FakeNode


def test_extract_reads_every_attribute():
    """Attributes are trimmed, flags parsed and bounds rounded."""

    async def run_test():
        node = FakeNode(
            "  Specimen  ",
            label="Specimen",
            resource_id="com.app:id/specimen",
            rect={"x": 10.4, "y": 20.6, "width": 100, "height": 48},
            extra={"enabled": "true", "clickable": "false"},
        )
        descriptor = await extract_descriptor(node, ElementKind.CLICKABLE)

        assert descriptor.kind is ElementKind.CLICKABLE
        assert descriptor.text == "Specimen"
        assert descriptor.accessibility_label == "Specimen"
        assert descriptor.identifier == "com.app:id/specimen"
        assert descriptor.class_name == "android.widget.Button"
        assert descriptor.bounds == Bounds(10, 21, 100, 48)
        assert descriptor.enabled is True
        assert descriptor.clickable is False
        assert descriptor.selectors[0] == '//*[@resource-id="com.app:id/specimen"]'

    asyncio.run(run_test())


def test_extract_degrades_when_every_read_fails():
    """A node whose every getter throws yields a default descriptor."""

    async def run_test():
        descriptor = await extract_descriptor(FakeNode("Gone", fail=True), ElementKind.CHECKBOX)

        assert descriptor.text == ""
        assert descriptor.accessibility_label == ""
        assert descriptor.identifier == ""
        assert descriptor.class_name == ""
        assert descriptor.bounds == Bounds()
        assert descriptor.enabled is False
        assert descriptor.clickable is False
        assert descriptor.checked is False
        assert descriptor.selectors == ()

    asyncio.run(run_test())


def test_extract_is_idempotent_for_unchanged_node():
    async def run_test():
        node = FakeNode("Dome", label="Dome toggle")
        first = await extract_descriptor(node, ElementKind.CLICKABLE)
        second = await extract_descriptor(node, ElementKind.CLICKABLE)
        assert first == second

    asyncio.run(run_test())


def test_checked_and_hint_only_read_for_their_kinds():
    async def run_test():
        node = FakeNode("Accept", extra={"checked": "true", "hint": "Batch number"})

        checkbox = await extract_descriptor(node, ElementKind.CHECKBOX)
        clickable = await extract_descriptor(node, ElementKind.CLICKABLE)
        field = await extract_descriptor(node, ElementKind.INPUT)

        assert checkbox.checked is True
        assert clickable.checked is False
        assert clickable.hint == ""
        assert field.hint == "Batch number"

    asyncio.run(run_test())


def test_bare_input_gets_positional_selector():
    async def run_test():
        node = FakeNode(class_name="android.widget.EditText")
        descriptor = await extract_descriptor(
            node, ElementKind.INPUT, position=2, source_query="//android.widget.EditText"
        )
        assert descriptor.selectors == ("(//android.widget.EditText)[2]",)

    asyncio.run(run_test())


class _StaleNode(FakeNode):
    """Node whose text and rect are properties that raise on access."""

    @property
    def text(self):
        raise RuntimeError("stale")

    @property
    def rect(self):
        raise RuntimeError("stale")


def test_raising_text_and_rect_properties_are_absorbed():
    async def run_test():
        descriptor = await extract_descriptor(_StaleNode(label="Dome"), ElementKind.CLICKABLE)

        assert descriptor.text == ""
        assert descriptor.bounds == Bounds()
        assert descriptor.accessibility_label == "Dome"
        assert descriptor.selectors[0] == '//*[@content-desc="Dome"]'

    asyncio.run(run_test())
