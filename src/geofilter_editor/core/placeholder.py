"""The empty placeholder: a shape whose type is chosen but values are not."""

from __future__ import annotations

from typing import List, Optional

from .advisory import Advisory, shape_not_configured
from .models import Circle, FilterSlot, GeoPoint, Rectangle, Shape, ShapeFilter, ShapeKind

_ORIGIN = GeoPoint(0.0, 0.0)

EMPTY_CIRCLE = Circle(center=_ORIGIN, radius=0.0)
EMPTY_RECTANGLE = Rectangle(low=_ORIGIN, high=_ORIGIN)


def empty_placeholder(kind: ShapeKind) -> Shape:
    """
    Return the all-zero sentinel for a shape kind.

    Raises:
        ValueError: If kind is ShapeKind.NONE
    """
    if kind is ShapeKind.CIRCLE:
        return EMPTY_CIRCLE
    if kind is ShapeKind.RECTANGLE:
        return EMPTY_RECTANGLE
    raise ValueError(f"No placeholder exists for shape kind {kind!r}")


def is_empty_placeholder(shape: ShapeFilter) -> bool:
    """
    Check whether a value is its kind's zero sentinel.

    None is never a placeholder. A genuine zero-valued shape at (0, 0)
    is indistinguishable from the sentinel and is treated as one.
    """
    if isinstance(shape, Circle):
        return (
            shape.center.latitude == 0 and
            shape.center.longitude == 0 and
            shape.radius == 0
        )
    if isinstance(shape, Rectangle):
        return (
            shape.low.latitude == 0 and
            shape.low.longitude == 0 and
            shape.high.latitude == 0 and
            shape.high.longitude == 0
        )
    return False


def is_configured(shape: ShapeFilter) -> bool:
    """True for a Circle or Rectangle that is not the placeholder."""
    return shape is not None and not is_empty_placeholder(shape)


def unconfigured_slots(bias: ShapeFilter, restriction: ShapeFilter) -> List[FilterSlot]:
    """Return the slots holding a placeholder, in bias-then-restriction order."""
    slots = []
    if is_empty_placeholder(bias):
        slots.append(FilterSlot.BIAS)
    if is_empty_placeholder(restriction):
        slots.append(FilterSlot.RESTRICTION)
    return slots


def validate_for_submission(bias: ShapeFilter, restriction: ShapeFilter) -> Optional[Advisory]:
    """
    Check that no active slot is still a placeholder.

    Returns:
        An advisory for the first unconfigured slot, or None if submission may proceed
    """
    slots = unconfigured_slots(bias, restriction)
    if slots:
        return shape_not_configured(slots[0])
    return None
