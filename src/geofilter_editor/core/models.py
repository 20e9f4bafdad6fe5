"""Data models for geofilter shapes and request snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


class FilterSlot(str, Enum):
    """One of the two independent geographic filters."""

    BIAS = "bias"
    RESTRICTION = "restriction"

    @property
    def request_key(self) -> str:
        """Key of this slot in the outgoing request payload."""
        return "locationBias" if self is FilterSlot.BIAS else "locationRestriction"

    @property
    def display_name(self) -> str:
        """Human-readable name used in advisories and labels."""
        return "Location Bias" if self is FilterSlot.BIAS else "Location Restriction"


class ShapeKind(str, Enum):
    """Tag of a slot's current value."""

    NONE = "none"
    CIRCLE = "circle"
    RECTANGLE = "rectangle"


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in degrees. No range is enforced."""

    latitude: float
    longitude: float

    def to_dict(self) -> Dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> GeoPoint:
        return cls(
            latitude=float(data.get("latitude", 0.0)),
            longitude=float(data.get("longitude", 0.0)),
        )

    def offset(self, d_lat: float, d_lng: float) -> GeoPoint:
        """Return a new point shifted by the given degree deltas."""
        return GeoPoint(self.latitude + d_lat, self.longitude + d_lng)


@dataclass(frozen=True)
class Circle:
    """Circle filter: center point plus radius in meters."""

    center: GeoPoint
    radius: float

    @property
    def kind(self) -> ShapeKind:
        return ShapeKind.CIRCLE

    def to_dict(self) -> Dict[str, Any]:
        return {"circle": {"center": self.center.to_dict(), "radius": self.radius}}


@dataclass(frozen=True)
class Rectangle:
    """
    Rectangle filter given by its south-west (low) and north-east (high) corners.

    The corners are stored as given; ``low`` is not required to be
    south-west of ``high``.
    """

    low: GeoPoint
    high: GeoPoint

    @property
    def kind(self) -> ShapeKind:
        return ShapeKind.RECTANGLE

    @property
    def is_normalized(self) -> bool:
        """True if low really is south-west of high."""
        return (
            self.low.latitude <= self.high.latitude and
            self.low.longitude <= self.high.longitude
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"rectangle": {"low": self.low.to_dict(), "high": self.high.to_dict()}}


# Value of one slot at one instant: None, a Circle, or a Rectangle.
Shape = Union[Circle, Rectangle]
ShapeFilter = Optional[Shape]


def shape_kind(shape: ShapeFilter) -> ShapeKind:
    """Return the tag of a slot value."""
    if shape is None:
        return ShapeKind.NONE
    return shape.kind


def shape_to_dict(shape: ShapeFilter) -> Optional[Dict[str, Any]]:
    """Serialize a slot value to its wire form, or None when absent."""
    if shape is None:
        return None
    return shape.to_dict()


def shape_from_dict(data: Optional[Dict[str, Any]]) -> ShapeFilter:
    """
    Parse a wire-form shape.

    Args:
        data: Mapping with either a ``circle`` or a ``rectangle`` member

    Returns:
        The parsed shape, or None if ``data`` carries neither member
    """
    if not data:
        return None

    circle = data.get("circle")
    if circle is not None:
        return Circle(
            center=GeoPoint.from_dict(circle.get("center", {})),
            radius=float(circle.get("radius", 0.0)),
        )

    rectangle = data.get("rectangle")
    if rectangle is not None:
        return Rectangle(
            low=GeoPoint.from_dict(rectangle.get("low", {})),
            high=GeoPoint.from_dict(rectangle.get("high", {})),
        )

    logger.warning(f"Shape payload has neither circle nor rectangle: {data}")
    return None


@dataclass(frozen=True)
class DrawState:
    """Which slot, if any, is currently being edited by pointer gesture."""

    active_slot: Optional[FilterSlot] = None

    @property
    def is_idle(self) -> bool:
        return self.active_slot is None


@dataclass(frozen=True)
class RequestSnapshot:
    """
    The effective filter pair sent downstream.

    Derived at submission time and never written back into the store.
    """

    bias: ShapeFilter = None
    restriction: ShapeFilter = None
    origin: Optional[GeoPoint] = None
    query: str = ""

    def shape_for(self, slot: FilterSlot) -> ShapeFilter:
        """Return the submitted shape for a slot."""
        return self.bias if slot is FilterSlot.BIAS else self.restriction

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the request payload, omitting absent members."""
        data: Dict[str, Any] = {"input": self.query}
        if self.origin is not None:
            data["origin"] = self.origin.to_dict()
        if self.bias is not None:
            data[FilterSlot.BIAS.request_key] = self.bias.to_dict()
        if self.restriction is not None:
            data[FilterSlot.RESTRICTION.request_key] = self.restriction.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RequestSnapshot:
        """Create a snapshot from a request payload."""
        origin = data.get("origin")
        return cls(
            bias=shape_from_dict(data.get(FilterSlot.BIAS.request_key)),
            restriction=shape_from_dict(data.get(FilterSlot.RESTRICTION.request_key)),
            origin=GeoPoint.from_dict(origin) if origin else None,
            query=data.get("input", ""),
        )
