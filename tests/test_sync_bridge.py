"""Tests for store/overlay projection."""

import pytest

from geofilter_editor.core.editor import GeoFilterEditor
from geofilter_editor.core.map_provider import CircleOverlay, RectangleOverlay
from geofilter_editor.core.models import Circle, FilterSlot, GeoPoint, Rectangle, ShapeKind
from geofilter_editor.core.placeholder import EMPTY_CIRCLE
from geofilter_editor.core.sync_bridge import shape_from_overlay, shapes_match

from conftest import FakeMapProvider

BIAS = FilterSlot.BIAS
RESTRICTION = FilterSlot.RESTRICTION
CIRCLE = Circle(GeoPoint(1.0, 2.0), 500.0)
RECT = Rectangle(GeoPoint(10.0, 10.0), GeoPoint(20.0, 20.0))


class TestShapesMatch:
    """Tests for tolerant shape comparison."""

    def test_within_tolerance(self):
        """Test tiny float drift still matches."""
        drifted = Circle(GeoPoint(1.0 + 1e-12, 2.0), 500.0 - 1e-12)

        assert shapes_match(CIRCLE, drifted, 1e-9)

    def test_outside_tolerance(self):
        """Test real differences do not match."""
        assert not shapes_match(CIRCLE, Circle(GeoPoint(1.0, 2.0), 501.0), 1e-9)

    def test_different_kinds(self):
        """Test a circle never matches a rectangle."""
        assert not shapes_match(CIRCLE, RECT, 1e-9)
        assert shapes_match(None, None, 1e-9)


class TestStoreToOverlay:
    """Tests for projecting store values onto the map."""

    def test_creates_overlay_in_map_order(self, editor, provider):
        """Test a new circle creates one overlay with (lng, lat) center."""
        editor.set_shape(BIAS, CIRCLE)

        overlay = editor.bridge.overlay_for(BIAS)
        assert isinstance(overlay, CircleOverlay)
        assert overlay.slot is BIAS
        assert overlay.get_center() == (2.0, 1.0)
        assert overlay.get_radius() == 500.0
        assert len(provider.created) == 1

    def test_rectangle_bounds(self, editor):
        """Test rectangle corners are sent south-west then north-east."""
        editor.set_shape(RESTRICTION, RECT)

        overlay = editor.bridge.overlay_for(RESTRICTION)
        assert isinstance(overlay, RectangleOverlay)
        assert overlay.get_bounds() == ((10.0, 10.0), (20.0, 20.0))
        assert shape_from_overlay(overlay) == RECT

    def test_placeholder_not_rendered(self, editor, provider):
        """Test the empty placeholder never becomes a visible overlay."""
        editor.set_shape(BIAS, EMPTY_CIRCLE)

        assert editor.bridge.overlay_for(BIAS) is None
        assert provider.created == []

    def test_placeholder_removes_existing_overlay(self, editor):
        """Test switching to an unconfigured kind hides the old overlay."""
        editor.set_query("pizza")
        editor.set_shape(BIAS, RECT)
        overlay = editor.bridge.overlay_for(BIAS)

        editor.set_shape_type(BIAS, ShapeKind.CIRCLE)

        assert editor.get_shape(BIAS) == EMPTY_CIRCLE
        assert overlay.removed
        assert editor.bridge.overlay_for(BIAS) is None

    def test_none_removes_overlay(self, editor):
        """Test clearing a slot removes its overlay."""
        editor.set_shape(BIAS, CIRCLE)
        overlay = editor.bridge.overlay_for(BIAS)

        editor.clear_shape(BIAS)

        assert overlay.removed
        assert editor.bridge.overlay_for(BIAS) is None

    def test_same_kind_mutated_in_place(self, editor, provider):
        """Test a changed value moves the existing overlay."""
        editor.set_shape(BIAS, CIRCLE)
        overlay = editor.bridge.overlay_for(BIAS)

        editor.set_field(BIAS, "radius", "900")

        assert editor.bridge.overlay_for(BIAS) is overlay
        assert overlay.get_radius() == 900.0
        assert overlay.set_calls > 0
        assert len(provider.created) == 1

    def test_wrong_kind_replaced(self, editor, provider):
        """Test a kind change destroys the old overlay and builds a new one."""
        editor.set_shape(BIAS, CIRCLE)
        old = editor.bridge.overlay_for(BIAS)

        editor.set_shape(BIAS, RECT)

        new = editor.bridge.overlay_for(BIAS)
        assert old.removed
        assert isinstance(new, RectangleOverlay)
        assert len(provider.created) == 2

    def test_slots_have_independent_overlays(self, editor):
        """Test one overlay per slot."""
        editor.set_shape(BIAS, CIRCLE)
        editor.set_shape(RESTRICTION, RECT)

        assert editor.bridge.overlay_for(BIAS) is not editor.bridge.overlay_for(RESTRICTION)

    def test_not_projected_before_map_ready(self, qapp, config):
        """Test nothing is created until the map has loaded."""
        provider = FakeMapProvider()
        editor = GeoFilterEditor(config, provider)
        editor.set_shape(BIAS, CIRCLE)

        assert provider.created == []

        editor.start_map()

        assert isinstance(editor.bridge.overlay_for(BIAS), CircleOverlay)
        editor.stop_map()

    def test_detach_removes_overlays(self, qapp, config):
        """Test stopping the map removes every overlay."""
        provider = FakeMapProvider()
        editor = GeoFilterEditor(config, provider)
        editor.start_map()
        editor.set_shape(BIAS, CIRCLE)
        overlay = editor.bridge.overlay_for(BIAS)

        editor.stop_map()

        assert overlay.removed
        assert provider.unloaded
        assert editor.bridge.overlay_for(BIAS) is None


class TestOverlayToStore:
    """Tests for gesture edits flowing back into the store."""

    def test_gesture_writes_store_once(self, editor, provider):
        """Test a resize gesture causes one store write and no re-projection."""
        editor.set_shape(BIAS, RECT)
        overlay = editor.bridge.overlay_for(BIAS)
        writes = []
        editor.store.shape_changed.connect(lambda slot, shape: writes.append((slot, shape)))

        overlay.drag_to((5.0, 5.0), (15.0, 15.0))

        assert writes == [(BIAS, Rectangle(GeoPoint(5.0, 5.0), GeoPoint(15.0, 15.0)))]
        assert overlay.set_calls == 0
        assert len(provider.created) == 1
        assert editor.bridge.overlay_for(BIAS) is overlay

    def test_gesture_without_change_is_noop(self, editor):
        """Test finishing a gesture at the same geometry writes nothing."""
        editor.set_shape(BIAS, CIRCLE)
        overlay = editor.bridge.overlay_for(BIAS)
        writes = []
        editor.store.shape_changed.connect(lambda slot, shape: writes.append(slot))

        overlay.finish_edit()

        assert writes == []

    def test_circle_drag(self, editor):
        """Test moving a circle updates the stored center."""
        editor.set_shape(BIAS, CIRCLE)
        overlay = editor.bridge.overlay_for(BIAS)

        overlay.drag_to((-122.41, 37.77), 750.0)

        assert editor.get_shape(BIAS) == Circle(GeoPoint(37.77, -122.41), 750.0)

    def test_removed_overlay_ignored(self, editor):
        """Test a gesture on a replaced overlay does not reach the store."""
        editor.set_shape(BIAS, CIRCLE)
        old = editor.bridge.overlay_for(BIAS)
        editor.set_shape(BIAS, RECT)

        old.drag_to((50.0, 50.0), 10.0)

        assert editor.get_shape(BIAS) == RECT

    def test_gesture_memory_updated(self, editor):
        """Test map edits are remembered like form edits."""
        editor.set_shape(BIAS, CIRCLE)
        editor.bridge.overlay_for(BIAS).drag_to((3.0, 4.0))

        assert editor.memory.recall(BIAS, ShapeKind.CIRCLE) == Circle(GeoPoint(4.0, 3.0), 500.0)


class TestOriginMarker:
    """Tests for origin marker projection."""

    def test_origin_projected(self, editor, provider):
        """Test setting the origin shows the marker."""
        editor.origin.set_point(GeoPoint(15.12, 120.57))

        assert provider.origin_marker == GeoPoint(15.12, 120.57)

    def test_origin_removed(self, editor, provider):
        """Test clearing the origin hides the marker."""
        editor.origin.set_point(GeoPoint(15.12, 120.57))
        editor.origin.set_point(None)

        assert provider.origin_marker is None

    def test_marker_drag_updates_origin(self, editor, provider):
        """Test dragging the marker moves the origin without re-projecting."""
        editor.origin.set_point(GeoPoint(1.0, 1.0))
        calls = provider.origin_marker_calls
        provider.origin_marker = GeoPoint(2.0, 3.0)

        provider.emit_origin_moved(GeoPoint(2.0, 3.0))

        assert editor.origin.point == GeoPoint(2.0, 3.0)
        assert provider.origin_marker_calls == calls


@pytest.mark.parametrize("slot", list(FilterSlot))
def test_apply_gesture_returns_change(editor, slot):
    """Test apply_gesture reports whether the store changed."""
    assert editor.bridge.apply_gesture(slot, CIRCLE)
    assert not editor.bridge.apply_gesture(slot, CIRCLE)
