"""Core business logic modules for the geofilter editor."""

from .models import (
    Circle, DrawState, FilterSlot, GeoPoint, Rectangle, RequestSnapshot, ShapeKind
)
from .config import AppConfig, ConfigManager
from .editor import GeoFilterEditor
from .exclusivity import compute_effective_request

__all__ = [
    "Circle",
    "DrawState",
    "FilterSlot",
    "GeoPoint",
    "Rectangle",
    "RequestSnapshot",
    "ShapeKind",
    "AppConfig",
    "ConfigManager",
    "GeoFilterEditor",
    "compute_effective_request",
]
