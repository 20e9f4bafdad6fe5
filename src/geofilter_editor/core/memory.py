"""Per-slot memory of the last configured circle and rectangle."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from .models import Circle, FilterSlot, Rectangle, ShapeFilter, ShapeKind
from .placeholder import is_empty_placeholder

logger = logging.getLogger(__name__)

BOTH_KINDS = (ShapeKind.CIRCLE, ShapeKind.RECTANGLE)


@dataclass
class SlotMemory:
    """Last non-empty circle and rectangle seen for one slot."""

    last_circle: Optional[Circle] = None
    last_rectangle: Optional[Rectangle] = None

    @property
    def is_empty(self) -> bool:
        return self.last_circle is None and self.last_rectangle is None


class MemoryCache:
    """
    Remembers the last configured shape of each kind, per slot.

    Lets the user switch a slot from circle to rectangle and back without
    losing what was entered. Placeholders and None are never remembered.
    """

    def __init__(self) -> None:
        self._slots: Dict[FilterSlot, SlotMemory] = {slot: SlotMemory() for slot in FilterSlot}

    def get(self, slot: FilterSlot) -> SlotMemory:
        """Return the memory record for a slot."""
        return self._slots[slot]

    def recall(self, slot: FilterSlot, kind: ShapeKind) -> ShapeFilter:
        """Return the remembered shape of a kind, or None."""
        memory = self._slots[slot]
        if kind is ShapeKind.CIRCLE:
            return memory.last_circle
        if kind is ShapeKind.RECTANGLE:
            return memory.last_rectangle
        return None

    def observe(self, slot: FilterSlot, shape: ShapeFilter) -> None:
        """
        Record a new slot value.

        Args:
            slot: Slot that changed
            shape: Its new value; only configured shapes are stored
        """
        if shape is None or is_empty_placeholder(shape):
            return

        memory = self._slots[slot]
        if isinstance(shape, Circle):
            memory.last_circle = shape
        elif isinstance(shape, Rectangle):
            memory.last_rectangle = shape

    def invalidate(self, slot: FilterSlot, kinds: Iterable[ShapeKind] = BOTH_KINDS) -> None:
        """
        Forget remembered shapes.

        Args:
            slot: Slot whose memory to reset
            kinds: Shape kinds to forget (both by default)
        """
        memory = self._slots[slot]
        for kind in kinds:
            if kind is ShapeKind.CIRCLE:
                memory.last_circle = None
            elif kind is ShapeKind.RECTANGLE:
                memory.last_rectangle = None
        logger.debug(f"Invalidated {[k.value for k in kinds]} memory for {slot.value}")

    def invalidate_all(self) -> None:
        """Forget everything for both slots."""
        for slot in FilterSlot:
            self.invalidate(slot)

    def apply_submission(self, slot: FilterSlot, submitted: ShapeFilter) -> None:
        """
        Reset memory after a response to a submitted shape arrives.

        A submitted circle forgets the rectangle and vice versa; a slot that
        submitted nothing forgets both kinds.
        """
        if isinstance(submitted, Circle):
            self.invalidate(slot, (ShapeKind.RECTANGLE,))
        elif isinstance(submitted, Rectangle):
            self.invalidate(slot, (ShapeKind.CIRCLE,))
        else:
            self.invalidate(slot)
