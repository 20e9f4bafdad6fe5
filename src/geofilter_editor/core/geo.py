"""Spherical geometry helpers."""

from __future__ import annotations

import math
from enum import Enum

from .models import Circle, Rectangle, RequestSnapshot, ShapeFilter

EARTH_RADIUS_METERS = 6371000.0
METERS_PER_DEGREE_LATITUDE = 2 * math.pi * EARTH_RADIUS_METERS / 360.0


class PointState(str, Enum):
    """Where a result point lies relative to the submitted filters."""

    INSIDE_RESTRICTION = "insideRestr"
    INSIDE_BIAS = "insideBias"
    OUTSIDE = "outside"


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in meters."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2 +
        math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def point_in_circle(lat: float, lng: float, circle: Circle) -> bool:
    distance = haversine_meters(lat, lng, circle.center.latitude, circle.center.longitude)
    return distance <= circle.radius


def point_in_rectangle(lat: float, lng: float, rectangle: Rectangle) -> bool:
    """Inclusive bounds test; an inverted rectangle contains nothing."""
    return (
        rectangle.low.latitude <= lat <= rectangle.high.latitude and
        rectangle.low.longitude <= lng <= rectangle.high.longitude
    )


def point_in_shape(lat: float, lng: float, shape: ShapeFilter) -> bool:
    if isinstance(shape, Circle):
        return point_in_circle(lat, lng, shape)
    if isinstance(shape, Rectangle):
        return point_in_rectangle(lat, lng, shape)
    return False


def classify_point(snapshot: RequestSnapshot, lat: float, lng: float) -> PointState:
    """
    Classify a result location against the filters that were sent.

    When a restriction was sent only the restriction is considered.
    """
    if snapshot.restriction is not None:
        if point_in_shape(lat, lng, snapshot.restriction):
            return PointState.INSIDE_RESTRICTION
        return PointState.OUTSIDE
    if snapshot.bias is not None and point_in_shape(lat, lng, snapshot.bias):
        return PointState.INSIDE_BIAS
    return PointState.OUTSIDE


def meters_to_degrees(meters: float, latitude: float) -> tuple[float, float]:
    """
    Convert a distance to degree deltas at a latitude.

    Returns:
        Tuple of (latitude_degrees, longitude_degrees)
    """
    d_lat = meters / METERS_PER_DEGREE_LATITUDE
    cos_lat = math.cos(math.radians(latitude))
    d_lng = d_lat / cos_lat if cos_lat > 1e-12 else d_lat
    return d_lat, d_lng
