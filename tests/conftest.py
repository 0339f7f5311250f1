"""Shared fixtures for droidprobe unit tests."""

import pytest

from droidprobe.core.snapshot import ScreenSnapshotBuilder

from .fakes import CLICKABLE_QUERY, FakeNode, FakeScreen, FakeSession


@pytest.fixture
def dome_session() -> FakeSession:
    """Main screen with a Dome toggle leading to Harvesting/Media Moisture."""
    dome_screen = FakeScreen(
        "com.eekifoods.dev/.DomeActivity",
        queries={
            CLICKABLE_QUERY: [
                FakeNode("Harvesting", resource_id="harvesting"),
                FakeNode("Media Moisture", resource_id="media-moisture"),
            ]
        },
    )
    dome = FakeNode("Dome", class_name="android.view.ViewGroup")
    main = FakeScreen("com.eekifoods.dev/com.eekifoods.MainActivity", queries={CLICKABLE_QUERY: [dome]})
    session = FakeSession(main)
    dome.on_click = lambda: session.navigate(dome_screen)
    return session


@pytest.fixture
def builder_factory(tmp_path):
    """Build a snapshot builder writing artifacts under ``tmp_path``."""

    def _factory(session, **kwargs) -> ScreenSnapshotBuilder:
        kwargs.setdefault("screenshot_dir", str(tmp_path / "screenshots"))
        return ScreenSnapshotBuilder(session, **kwargs)

    return _factory
