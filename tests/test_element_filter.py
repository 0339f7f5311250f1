"""Unit tests for structural duplicate suppression."""

from droidprobe.core.element_filter import append_unique, is_duplicate
from droidprobe.core.models import Bounds, ElementDescriptor, ElementKind


def _descriptor(**kwargs):
    defaults = {"kind": ElementKind.CLICKABLE, "text": "Dome", "identifier": "dome", "class_name": "android.widget.Button"}
    defaults.update(kwargs)
    return ElementDescriptor(**defaults)


def test_same_structure_different_bounds_keeps_first():
    found = []
    first = _descriptor(bounds=Bounds(0, 0, 10, 10))
    moved = _descriptor(bounds=Bounds(50, 50, 10, 10), enabled=True)

    assert append_unique(found, first) is True
    assert append_unique(found, moved) is False
    assert found == [first]


def test_any_key_difference_is_a_new_element():
    existing = [_descriptor()]
    assert not is_duplicate(existing, _descriptor(class_name="android.widget.TextView"))
    assert not is_duplicate(existing, _descriptor(text="Dome 2"))
    assert not is_duplicate(existing, _descriptor(identifier="dome2"))
    assert is_duplicate(existing, _descriptor(accessibility_label="ignored"))
