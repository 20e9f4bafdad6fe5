"""Tests for the canonical shape store."""

import pytest

from geofilter_editor.core.config import AppConfig
from geofilter_editor.core.memory import MemoryCache
from geofilter_editor.core.models import Circle, FilterSlot, GeoPoint, Rectangle, ShapeKind
from geofilter_editor.core.placeholder import EMPTY_CIRCLE, EMPTY_RECTANGLE
from geofilter_editor.core.session import EditorSession
from geofilter_editor.core.shape_store import ShapeStore, coerce_number, format_number

BIAS = FilterSlot.BIAS
RESTRICTION = FilterSlot.RESTRICTION
CIRCLE = Circle(GeoPoint(1.0, 1.0), 500.0)
RECT = Rectangle(GeoPoint(10.0, 10.0), GeoPoint(20.0, 20.0))


class _Origin:
    point = None


@pytest.fixture
def origin():
    return _Origin()


@pytest.fixture
def session(qapp):
    return EditorSession("San Francisco")


@pytest.fixture
def store(qapp, session, origin):
    return ShapeStore(MemoryCache(), session, AppConfig(), origin_provider=lambda: origin.point)


@pytest.fixture
def changes(store):
    recorded = []
    store.shape_changed.connect(lambda slot, shape: recorded.append((slot, shape)))
    return recorded


class TestCoercion:
    """Tests for free-text numeric input."""

    @pytest.mark.parametrize("text, expected", [
        ("12.5", 12.5),
        (" -3 ", -3.0),
        ("1e3", 1000.0),
        ("", 0.0),
        ("-", 0.0),
        ("abc", 0.0),
        ("nan", 0.0),
        ("inf", 0.0),
    ])
    def test_coerce_number(self, text, expected):
        """Test unparsable input becomes zero."""
        assert coerce_number(text) == expected

    def test_format_number(self):
        """Test integral values print without a decimal part."""
        assert format_number(5000.0) == "5000"
        assert format_number(37.77) == "37.77"
        assert format_number(-122.41) == "-122.41"


class TestSetShape:
    """Tests for ShapeStore.set_shape."""

    def test_slots_start_empty(self, store):
        """Test both slots start at None."""
        assert store.get_shape(BIAS) is None
        assert store.get_shape(RESTRICTION) is None
        assert store.get_kind(BIAS) is ShapeKind.NONE

    def test_set_shape_emits_change(self, store, changes):
        """Test a new value is stored and announced."""
        assert store.set_shape(BIAS, CIRCLE)

        assert store.get_shape(BIAS) == CIRCLE
        assert changes == [(BIAS, CIRCLE)]

    def test_equal_value_is_noop(self, store, changes):
        """Test writing a structurally equal value changes nothing."""
        store.set_shape(BIAS, CIRCLE)

        assert not store.set_shape(BIAS, Circle(GeoPoint(1.0, 1.0), 500.0))
        assert len(changes) == 1

    def test_memory_observes_before_signal(self, store):
        """Test listeners see the memory already updated."""
        seen = []
        store.shape_changed.connect(
            lambda slot, shape: seen.append(store.memory.recall(slot, ShapeKind.CIRCLE))
        )

        store.set_shape(BIAS, CIRCLE)

        assert seen == [CIRCLE]


class TestSetShapeType:
    """Tests for the shape-type decision table."""

    def test_none_clears_slot(self, store):
        """Test switching to NONE empties the slot."""
        store.set_shape(BIAS, CIRCLE)
        store.set_shape_type(BIAS, ShapeKind.NONE)

        assert store.get_shape(BIAS) is None

    def test_pristine_circle_default(self, store, config):
        """Test a pristine session seeds the default circle at the fallback center."""
        store.set_shape_type(BIAS, ShapeKind.CIRCLE)

        assert store.get_shape(BIAS) == Circle(
            config.fallback_center, config.default_circle_radius
        )
        assert store.is_seeded(BIAS)

    def test_pristine_rectangle_default(self, store):
        """Test the default rectangle spans the half-extent around the center."""
        store.set_shape_type(RESTRICTION, ShapeKind.RECTANGLE)

        rect = store.get_shape(RESTRICTION)
        assert rect.low.latitude == pytest.approx(37.67)
        assert rect.low.longitude == pytest.approx(-122.51)
        assert rect.high.latitude == pytest.approx(37.87)
        assert rect.high.longitude == pytest.approx(-122.31)

    def test_default_centered_on_origin(self, store, origin):
        """Test the default follows the origin when one is set."""
        origin.point = GeoPoint(15.12, 120.57)

        store.set_shape_type(BIAS, ShapeKind.CIRCLE)

        assert store.get_shape(BIAS).center == GeoPoint(15.12, 120.57)

    def test_non_pristine_sets_placeholder(self, store, session):
        """Test a non-pristine session gets the empty placeholder."""
        session.set_query("pizza")

        store.set_shape_type(BIAS, ShapeKind.CIRCLE)
        store.set_shape_type(RESTRICTION, ShapeKind.RECTANGLE)

        assert store.get_shape(BIAS) == EMPTY_CIRCLE
        assert store.get_shape(RESTRICTION) == EMPTY_RECTANGLE
        assert not store.is_seeded(BIAS)

    def test_memory_takes_precedence_over_default(self, store):
        """Test a remembered shape wins even in a pristine session."""
        store.set_shape(BIAS, CIRCLE)
        store.set_shape(BIAS, RECT)

        store.set_shape_type(BIAS, ShapeKind.CIRCLE)

        assert store.get_shape(BIAS) == CIRCLE
        assert not store.is_seeded(BIAS)

    def test_circle_rectangle_circle_round_trip(self, store, session):
        """Test toggling kinds restores the exact first circle."""
        session.set_query("pizza")
        store.set_shape(BIAS, CIRCLE)

        store.set_shape_type(BIAS, ShapeKind.RECTANGLE)
        store.set_shape_type(BIAS, ShapeKind.CIRCLE)

        assert store.get_shape(BIAS) == CIRCLE

    def test_rectangle_to_circle_and_back(self, store, session):
        """Test a rectangle survives a detour through an empty circle."""
        session.set_query("pizza")
        store.set_shape(BIAS, RECT)

        store.set_shape_type(BIAS, ShapeKind.CIRCLE)
        assert store.get_shape(BIAS) == EMPTY_CIRCLE

        store.set_shape_type(BIAS, ShapeKind.RECTANGLE)
        assert store.get_shape(BIAS) == RECT

    def test_same_kind_reselect_is_noop(self, store, changes):
        """Test re-selecting the current kind restores the same value."""
        store.set_shape(BIAS, CIRCLE)
        store.set_shape_type(BIAS, ShapeKind.CIRCLE)

        assert changes == [(BIAS, CIRCLE)]


class TestSetField:
    """Tests for numeric field edits."""

    def test_edit_circle_radius(self, store):
        """Test editing the radius keeps the center."""
        store.set_shape(BIAS, CIRCLE)

        assert store.set_field(BIAS, "radius", "750")
        assert store.get_shape(BIAS) == Circle(GeoPoint(1.0, 1.0), 750.0)

    def test_edit_circle_center(self, store):
        """Test editing one center coordinate."""
        store.set_shape(BIAS, CIRCLE)
        store.set_field(BIAS, "center.longitude", "-122.41")

        assert store.get_shape(BIAS).center == GeoPoint(1.0, -122.41)

    def test_edit_rectangle_corner(self, store):
        """Test editing a rectangle corner coordinate."""
        store.set_shape(RESTRICTION, RECT)
        store.set_field(RESTRICTION, "high.latitude", "25")

        assert store.get_shape(RESTRICTION) == Rectangle(GeoPoint(10.0, 10.0), GeoPoint(25.0, 20.0))

    def test_invalid_text_coerced_to_zero(self, store):
        """Test garbage input writes zero instead of failing."""
        store.set_shape(BIAS, CIRCLE)
        store.set_field(BIAS, "radius", "abc")

        assert store.get_shape(BIAS).radius == 0.0

    def test_filling_placeholder(self, store):
        """Test editing a placeholder produces a configured shape."""
        store.set_shape(BIAS, EMPTY_CIRCLE)
        store.set_field(BIAS, "radius", "250")

        assert store.get_shape(BIAS) == Circle(GeoPoint(0.0, 0.0), 250.0)

    def test_field_of_other_kind_ignored(self, store, changes):
        """Test a rectangle field does not apply to a circle."""
        store.set_shape(BIAS, CIRCLE)

        assert not store.set_field(BIAS, "low.latitude", "5")
        assert not store.set_field(RESTRICTION, "radius", "5")
        assert len(changes) == 1


class TestFieldText:
    """Tests for field display text."""

    def test_configured_values(self, store):
        """Test fields show the stored numbers."""
        store.set_shape(BIAS, Circle(GeoPoint(37.77, -122.41), 5000.0))

        assert store.field_text(BIAS, "center.latitude") == "37.77"
        assert store.field_text(BIAS, "center.longitude") == "-122.41"
        assert store.field_text(BIAS, "radius") == "5000"

    def test_placeholder_reads_blank(self, store):
        """Test a placeholder renders as blank fields, not zeros."""
        store.set_shape(RESTRICTION, EMPTY_RECTANGLE)

        assert store.field_text(RESTRICTION, "low.latitude") == ""

    def test_none_and_other_kind_read_blank(self, store):
        """Test empty slots and mismatched fields read blank."""
        assert store.field_text(BIAS, "radius") == ""
        store.set_shape(BIAS, CIRCLE)
        assert store.field_text(BIAS, "high.longitude") == ""


class TestClear:
    """Tests for clearing slots."""

    def test_clear_shape_forgets_memory(self, store):
        """Test clearing a slot also clears its memory."""
        store.set_shape(BIAS, CIRCLE)
        store.set_shape(BIAS, RECT)
        store.set_shape(RESTRICTION, CIRCLE)

        assert store.clear_shape(BIAS)

        assert store.get_shape(BIAS) is None
        assert store.memory.get(BIAS).is_empty
        assert not store.memory.get(RESTRICTION).is_empty

    def test_clear_empty_slot(self, store):
        """Test clearing an empty slot reports no change."""
        assert not store.clear_shape(BIAS)

    def test_clear_all(self, store):
        """Test both slots and all memory are reset."""
        store.set_shape(BIAS, CIRCLE)
        store.set_shape(RESTRICTION, RECT)

        store.clear_all()

        for slot in FilterSlot:
            assert store.get_shape(slot) is None
            assert store.memory.get(slot).is_empty

    def test_reset_seeded_slots(self, store):
        """Test only default-seeded slots are reset."""
        store.set_shape_type(BIAS, ShapeKind.CIRCLE)
        store.set_shape(RESTRICTION, RECT)

        reset = store.reset_seeded_slots()

        assert reset == [BIAS]
        assert store.get_shape(BIAS) is None
        assert store.memory.get(BIAS).is_empty
        assert store.get_shape(RESTRICTION) == RECT
        assert not store.is_seeded(BIAS)
