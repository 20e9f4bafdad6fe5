"""Canonical store for the bias and restriction filter values."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .config import AppConfig
from .memory import MemoryCache
from .models import Circle, FilterSlot, GeoPoint, Rectangle, Shape, ShapeFilter, ShapeKind, shape_kind
from .placeholder import empty_placeholder, is_empty_placeholder
from .session import EditorSession

logger = logging.getLogger(__name__)

# Editable numeric fields, by shape kind
CIRCLE_FIELDS = ("center.latitude", "center.longitude", "radius")
RECTANGLE_FIELDS = ("low.latitude", "low.longitude", "high.latitude", "high.longitude")


def coerce_number(text: str) -> float:
    """
    Parse free-text numeric input.

    Empty, partial ("-", ".") or otherwise unparsable text becomes 0.0,
    as do NaN and infinities.
    """
    try:
        value = float(text.strip())
    except (ValueError, AttributeError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def format_number(value: float) -> str:
    """Format a coordinate or radius for display in a text field."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _replace_point(point: GeoPoint, axis: str, value: float) -> GeoPoint:
    return replace(point, **{axis: value})


class ShapeStore(QObject):
    """
    Single source of truth for the value of each filter slot.

    Every change, whatever its origin (form, shape-type selector, map
    gesture, clear), goes through set_shape. The memory cache observes
    each change before shape_changed is emitted.
    """

    shape_changed = pyqtSignal(object, object)  # FilterSlot, ShapeFilter

    def __init__(
        self,
        memory: MemoryCache,
        session: EditorSession,
        config: Optional[AppConfig] = None,
        origin_provider: Optional[Callable[[], Optional[GeoPoint]]] = None
    ) -> None:
        """
        Initialize the store with both slots empty.

        Args:
            memory: Cache of last configured shapes
            session: Session flags used for default seeding
            config: Default sizes and fallback center
            origin_provider: Returns the current origin, used to center defaults
        """
        super().__init__()
        self._memory = memory
        self._session = session
        self._config = config or AppConfig()
        self._origin_provider = origin_provider
        self._shapes: Dict[FilterSlot, ShapeFilter] = {slot: None for slot in FilterSlot}
        self._seeded: Dict[FilterSlot, bool] = {slot: False for slot in FilterSlot}

    @property
    def memory(self) -> MemoryCache:
        return self._memory

    def get_shape(self, slot: FilterSlot) -> ShapeFilter:
        """Return the current value of a slot."""
        return self._shapes[slot]

    def get_kind(self, slot: FilterSlot) -> ShapeKind:
        return shape_kind(self._shapes[slot])

    def is_seeded(self, slot: FilterSlot) -> bool:
        """True if the slot was filled from the first-load default since its last clear."""
        return self._seeded[slot]

    def set_shape(self, slot: FilterSlot, shape: ShapeFilter) -> bool:
        """
        Replace a slot's value.

        Args:
            slot: Slot to write
            shape: New value

        Returns:
            True if the value changed, False if it was structurally equal
        """
        if self._shapes[slot] == shape:
            return False

        self._shapes[slot] = shape
        self._memory.observe(slot, shape)
        logger.debug(f"{slot.value} -> {shape}")
        self.shape_changed.emit(slot, shape)
        return True

    def set_shape_type(self, slot: FilterSlot, kind: ShapeKind) -> None:
        """
        Switch a slot to a shape kind.

        Resolution order: None clears the slot; otherwise a remembered
        shape of that kind is restored; otherwise, in a pristine session,
        a default shape is synthesized; otherwise the kind's empty
        placeholder is set.
        """
        if kind is ShapeKind.NONE:
            self.set_shape(slot, None)
            return

        remembered = self._memory.recall(slot, kind)
        if remembered is not None:
            logger.debug(f"Restoring remembered {kind.value} for {slot.value}")
            self.set_shape(slot, remembered)
            return

        if self._session.is_pristine():
            self._seeded[slot] = True
            self.set_shape(slot, self.default_shape(kind))
            return

        self.set_shape(slot, empty_placeholder(kind))

    def default_shape(self, kind: ShapeKind) -> Shape:
        """
        Build the first-load default shape of a kind.

        Centered on the origin if one is set, else on the fallback center.
        """
        center = None
        if self._origin_provider is not None:
            center = self._origin_provider()
        if center is None:
            center = self._config.fallback_center

        if kind is ShapeKind.CIRCLE:
            return Circle(center=center, radius=self._config.default_circle_radius)

        extent = self._config.default_rectangle_half_extent
        return Rectangle(
            low=center.offset(-extent, -extent),
            high=center.offset(extent, extent),
        )

    def set_field(self, slot: FilterSlot, field_path: str, text: str) -> bool:
        """
        Apply a numeric text edit to one field of a slot's shape.

        Args:
            slot: Slot being edited
            field_path: One of CIRCLE_FIELDS or RECTANGLE_FIELDS
            text: Raw text from the input; unparsable text becomes 0

        Returns:
            True if the slot value changed
        """
        shape = self._shapes[slot]
        value = coerce_number(text)

        if isinstance(shape, Circle) and field_path in CIRCLE_FIELDS:
            if field_path == "radius":
                updated = replace(shape, radius=value)
            else:
                axis = field_path.split(".")[1]
                updated = replace(shape, center=_replace_point(shape.center, axis, value))
        elif isinstance(shape, Rectangle) and field_path in RECTANGLE_FIELDS:
            corner, axis = field_path.split(".")
            updated = replace(shape, **{corner: _replace_point(getattr(shape, corner), axis, value)})
        else:
            logger.debug(f"Ignoring edit of {field_path!r} on {slot.value} ({shape_kind(shape).value})")
            return False

        return self.set_shape(slot, updated)

    def field_text(self, slot: FilterSlot, field_path: str) -> str:
        """
        Return the display text of a field.

        None, placeholder shapes and fields of the other kind read as "".
        """
        shape = self._shapes[slot]
        if shape is None or is_empty_placeholder(shape):
            return ""

        if isinstance(shape, Circle) and field_path in CIRCLE_FIELDS:
            if field_path == "radius":
                return format_number(shape.radius)
            return format_number(getattr(shape.center, field_path.split(".")[1]))

        if isinstance(shape, Rectangle) and field_path in RECTANGLE_FIELDS:
            corner, axis = field_path.split(".")
            return format_number(getattr(getattr(shape, corner), axis))

        return ""

    def clear_shape(self, slot: FilterSlot) -> bool:
        """
        Reset one slot to None and forget its remembered shapes.

        Returns:
            False if the slot was already None
        """
        if self._shapes[slot] is None:
            return False

        self._memory.invalidate(slot)
        self._seeded[slot] = False
        self.set_shape(slot, None)
        logger.info(f"Cleared {slot.value} shape")
        return True

    def clear_all(self) -> None:
        """Reset both slots to None and forget all remembered shapes."""
        self._memory.invalidate_all()
        for slot in FilterSlot:
            self._seeded[slot] = False
            self.set_shape(slot, None)

    def reset_seeded_slots(self) -> List[FilterSlot]:
        """
        Drop every slot that was filled from the first-load default.

        Returns:
            The slots that were reset
        """
        reset = []
        for slot in FilterSlot:
            if not self._seeded[slot]:
                continue
            self._memory.invalidate(slot)
            self._seeded[slot] = False
            self.set_shape(slot, None)
            reset.append(slot)

        if reset:
            logger.info(f"Reset default-seeded slots: {[s.value for s in reset]}")
        return reset
