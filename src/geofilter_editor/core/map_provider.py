"""
Map-provider capability injected into the editor engine.

The engine never touches map rendering directly. It talks to a
MapProvider, which owns an explicit initialize/teardown lifecycle and
hands out overlay objects. Overlay geometry is exchanged in map
coordinate order: (longitude, latitude).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional, Tuple

from .models import FilterSlot, GeoPoint, ShapeKind

logger = logging.getLogger(__name__)

LngLat = Tuple[float, float]


class MapStatus(str, Enum):
    """Lifecycle status of a map provider."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"
    AUTH_ERROR = "auth_error"
    QUOTA_ERROR = "quota_error"


class MapProviderError(Exception):
    """Raised by a provider implementation when the map cannot be loaded."""


class Overlay(ABC):
    """
    A user-editable geometry object rendered on the map for one slot.

    Implementations call finish_edit() when a pointer gesture (drag end,
    resize end, vertex edit) completes. Programmatic setters must never
    call it.
    """

    def __init__(self, slot: Optional[FilterSlot]) -> None:
        self.slot = slot
        self.on_edit_finished: Optional[Callable[[Overlay], None]] = None
        self._removed = False

    @property
    @abstractmethod
    def kind(self) -> ShapeKind:
        """Geometry type of the overlay."""

    @property
    def removed(self) -> bool:
        return self._removed

    def remove(self) -> None:
        """Take the overlay off the map. Safe to call twice."""
        if self._removed:
            return
        self._removed = True
        self.on_edit_finished = None
        self._detach()

    @abstractmethod
    def _detach(self) -> None:
        """Remove the rendered object from the map."""

    def finish_edit(self) -> None:
        """Report a completed user gesture on this overlay."""
        if not self._removed and self.on_edit_finished is not None:
            self.on_edit_finished(self)


class CircleOverlay(Overlay):
    """Circle overlay: center as (lng, lat) and radius in meters."""

    @property
    def kind(self) -> ShapeKind:
        return ShapeKind.CIRCLE

    @abstractmethod
    def get_center(self) -> LngLat:
        pass

    @abstractmethod
    def set_center(self, center: LngLat) -> None:
        pass

    @abstractmethod
    def get_radius(self) -> float:
        pass

    @abstractmethod
    def set_radius(self, radius: float) -> None:
        pass


class RectangleOverlay(Overlay):
    """Rectangle overlay: south-west and north-east corners as (lng, lat)."""

    @property
    def kind(self) -> ShapeKind:
        return ShapeKind.RECTANGLE

    @abstractmethod
    def get_bounds(self) -> Tuple[LngLat, LngLat]:
        pass

    @abstractmethod
    def set_bounds(self, south_west: LngLat, north_east: LngLat) -> None:
        pass


class MapProvider(ABC):
    """
    Base class for map surfaces.

    Subclasses implement loading, overlay construction, the drawing
    surface and the origin marker. They report user events through
    the emit_* helpers, which forward to callbacks set by the engine.
    """

    def __init__(self) -> None:
        self._status = MapStatus.IDLE
        self.on_status_changed: Optional[Callable[[MapStatus], None]] = None
        self.on_drawing_complete: Optional[Callable[[Overlay], None]] = None
        self.on_map_click: Optional[Callable[[GeoPoint], None]] = None
        self.on_origin_moved: Optional[Callable[[GeoPoint], None]] = None

    @property
    def status(self) -> MapStatus:
        return self._status

    @property
    def is_ready(self) -> bool:
        return self._status is MapStatus.LOADED

    def _set_status(self, status: MapStatus) -> None:
        if status is self._status:
            return
        logger.info(f"Map status: {self._status.value} -> {status.value}")
        self._status = status
        if self.on_status_changed is not None:
            self.on_status_changed(status)

    def initialize(self) -> bool:
        """
        Load the map.

        Returns:
            True if the map is ready for overlays
        """
        if self._status is MapStatus.LOADED:
            return True

        self._set_status(MapStatus.LOADING)
        try:
            self._load()
        except MapProviderError as e:
            logger.error(f"Map failed to load: {e}")
            if self._status not in (MapStatus.AUTH_ERROR, MapStatus.QUOTA_ERROR):
                self._set_status(MapStatus.ERROR)
            return False

        # An auth or quota failure may have been reported while loading
        if self._status is not MapStatus.LOADING:
            return False

        self._set_status(MapStatus.LOADED)
        return True

    def teardown(self) -> None:
        """Remove everything from the map and return to IDLE."""
        self._unload()
        self._set_status(MapStatus.IDLE)

    def report_auth_failure(self) -> None:
        """Record an authentication failure; a quota failure takes precedence."""
        if self._status is not MapStatus.QUOTA_ERROR:
            self._set_status(MapStatus.AUTH_ERROR)

    def report_quota_failure(self) -> None:
        self._set_status(MapStatus.QUOTA_ERROR)

    def emit_drawing_complete(self, overlay: Overlay) -> None:
        """Hand a freshly drawn, transient overlay to the engine."""
        if self.on_drawing_complete is not None:
            self.on_drawing_complete(overlay)
        else:
            overlay.remove()

    def emit_map_click(self, point: GeoPoint) -> None:
        if self.on_map_click is not None:
            self.on_map_click(point)

    def emit_origin_moved(self, point: GeoPoint) -> None:
        if self.on_origin_moved is not None:
            self.on_origin_moved(point)

    @abstractmethod
    def _load(self) -> None:
        """Load map resources. Raise MapProviderError on failure."""

    @abstractmethod
    def _unload(self) -> None:
        """Release map resources and remove all overlays."""

    @abstractmethod
    def create_circle(self, slot: FilterSlot, center: LngLat, radius: float) -> CircleOverlay:
        """Create a persistent, editable circle overlay for a slot."""

    @abstractmethod
    def create_rectangle(
        self,
        slot: FilterSlot,
        south_west: LngLat,
        north_east: LngLat
    ) -> RectangleOverlay:
        """Create a persistent, editable rectangle overlay for a slot."""

    @abstractmethod
    def set_drawing_mode(self, kind: Optional[ShapeKind], slot: Optional[FilterSlot]) -> None:
        """Arm the drawing surface for a kind, or disarm it with None."""

    @abstractmethod
    def set_origin_marker(self, point: Optional[GeoPoint]) -> None:
        """Show the origin marker at a point, or hide it with None."""

    @abstractmethod
    def get_origin_marker(self) -> Optional[GeoPoint]:
        """Return the marker's current position, or None if hidden."""
