"""Pytest configuration and fixtures."""

import os
import pytest
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from geofilter_editor.core.config import AppConfig  # noqa: E402
from geofilter_editor.core.editor import GeoFilterEditor  # noqa: E402
from geofilter_editor.core.map_provider import (  # noqa: E402
    CircleOverlay, MapProvider, MapProviderError, RectangleOverlay
)
from geofilter_editor.core.models import GeoPoint, ShapeKind  # noqa: E402


class FakeCircleOverlay(CircleOverlay):
    """In-memory circle overlay that counts programmatic updates."""

    def __init__(self, slot, center, radius):
        super().__init__(slot)
        self.center = center
        self.radius = radius
        self.set_calls = 0
        self.detached = False

    def get_center(self):
        return self.center

    def set_center(self, center):
        self.set_calls += 1
        self.center = center

    def get_radius(self):
        return self.radius

    def set_radius(self, radius):
        self.set_calls += 1
        self.radius = radius

    def drag_to(self, center, radius=None):
        """Simulate a user gesture: change geometry, then report completion."""
        self.center = center
        if radius is not None:
            self.radius = radius
        self.finish_edit()

    def _detach(self):
        self.detached = True


class FakeRectangleOverlay(RectangleOverlay):
    """In-memory rectangle overlay that counts programmatic updates."""

    def __init__(self, slot, south_west, north_east):
        super().__init__(slot)
        self.south_west = south_west
        self.north_east = north_east
        self.set_calls = 0
        self.detached = False

    def get_bounds(self):
        return self.south_west, self.north_east

    def set_bounds(self, south_west, north_east):
        self.set_calls += 1
        self.south_west = south_west
        self.north_east = north_east

    def drag_to(self, south_west, north_east):
        """Simulate a user resize gesture."""
        self.south_west = south_west
        self.north_east = north_east
        self.finish_edit()

    def _detach(self):
        self.detached = True


class FakeMapProvider(MapProvider):
    """MapProvider that records everything the engine asks of it."""

    def __init__(self, fail_with=None):
        super().__init__()
        self.fail_with = fail_with
        self.created = []
        self.drawing_mode = (None, None)
        self.origin_marker = None
        self.origin_marker_calls = 0
        self.unloaded = False

    def _load(self):
        if self.fail_with is not None:
            raise MapProviderError(self.fail_with)

    def _unload(self):
        self.unloaded = True

    def create_circle(self, slot, center, radius):
        overlay = FakeCircleOverlay(slot, center, radius)
        self.created.append(overlay)
        return overlay

    def create_rectangle(self, slot, south_west, north_east):
        overlay = FakeRectangleOverlay(slot, south_west, north_east)
        self.created.append(overlay)
        return overlay

    def set_drawing_mode(self, kind, slot):
        self.drawing_mode = (kind, slot)

    def set_origin_marker(self, point):
        self.origin_marker_calls += 1
        self.origin_marker = point

    def get_origin_marker(self):
        return self.origin_marker

    def draw(self, *geometry):
        """Simulate the drawing surface finishing a shape of the armed kind."""
        kind, slot = self.drawing_mode
        if kind is ShapeKind.CIRCLE:
            overlay = FakeCircleOverlay(slot, *geometry)
        elif kind is ShapeKind.RECTANGLE:
            overlay = FakeRectangleOverlay(slot, *geometry)
        else:
            raise AssertionError("Drawing mode is not armed")
        self.emit_drawing_complete(overlay)
        return overlay


@pytest.fixture(scope="session")
def qapp():
    """Create a QApplication for tests that need it."""
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])

    yield app


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def config():
    """Default application configuration."""
    return AppConfig()


@pytest.fixture
def provider():
    """A fake map provider that loads successfully."""
    return FakeMapProvider()


@pytest.fixture
def editor(qapp, config, provider):
    """An editor wired to a loaded fake map."""
    editor = GeoFilterEditor(config, provider)
    assert editor.start_map()
    yield editor
    editor.stop_map()


@pytest.fixture
def headless_editor(qapp, config):
    """An editor without any map provider."""
    return GeoFilterEditor(config)


@pytest.fixture
def advisories(editor):
    """Advisories raised by the editor fixture, in order."""
    raised = []
    editor.advisory_raised.connect(raised.append)
    return raised


@pytest.fixture
def sf_point():
    return GeoPoint(37.77, -122.41)
