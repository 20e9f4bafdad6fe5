"""Two-way projection between the shape store and the map's overlays."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Dict, Optional

from PyQt6.QtCore import QObject

from .config import AppConfig
from .map_provider import CircleOverlay, MapProvider, Overlay, RectangleOverlay
from .models import Circle, FilterSlot, GeoPoint, Rectangle, Shape, ShapeFilter
from .placeholder import is_empty_placeholder
from .shape_store import ShapeStore

if TYPE_CHECKING:
    from .origin import OriginController

logger = logging.getLogger(__name__)


def shape_from_overlay(overlay: Overlay) -> Shape:
    """
    Read an overlay's live geometry as a domain shape.

    Raises:
        TypeError: If the overlay is neither a circle nor a rectangle
    """
    if isinstance(overlay, CircleOverlay):
        lng, lat = overlay.get_center()
        return Circle(center=GeoPoint(lat, lng), radius=overlay.get_radius())
    if isinstance(overlay, RectangleOverlay):
        (sw_lng, sw_lat), (ne_lng, ne_lat) = overlay.get_bounds()
        return Rectangle(low=GeoPoint(sw_lat, sw_lng), high=GeoPoint(ne_lat, ne_lng))
    raise TypeError(f"Unsupported overlay type: {type(overlay).__name__}")


def _close(a: float, b: float, tolerance: float) -> bool:
    return math.isclose(a, b, rel_tol=0.0, abs_tol=tolerance)


def points_match(a: GeoPoint, b: GeoPoint, tolerance: float) -> bool:
    return _close(a.latitude, b.latitude, tolerance) and _close(a.longitude, b.longitude, tolerance)


def shapes_match(a: ShapeFilter, b: ShapeFilter, tolerance: float) -> bool:
    """Compare two slot values with a floating-point tolerance."""
    if isinstance(a, Circle) and isinstance(b, Circle):
        return points_match(a.center, b.center, tolerance) and _close(a.radius, b.radius, tolerance)
    if isinstance(a, Rectangle) and isinstance(b, Rectangle):
        return points_match(a.low, b.low, tolerance) and points_match(a.high, b.high, tolerance)
    return a is None and b is None


class SyncBridge(QObject):
    """
    Keeps at most one live overlay per slot in step with the store.

    Store changes are projected onto overlays (create, mutate in place,
    or remove). Completed gestures on overlays are read back and written
    through ShapeStore.set_shape, the only path by which map edits become
    canonical. Equality checks in both directions stop update cycles.
    """

    def __init__(
        self,
        store: ShapeStore,
        provider: MapProvider,
        config: Optional[AppConfig] = None,
        origin: Optional[OriginController] = None
    ) -> None:
        super().__init__()
        self._store = store
        self._provider = provider
        self._origin = origin
        self._tolerance = (config or AppConfig()).coordinate_tolerance
        self._overlays: Dict[FilterSlot, Overlay] = {}
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    def overlay_for(self, slot: FilterSlot) -> Optional[Overlay]:
        """Return the live overlay of a slot, if any."""
        return self._overlays.get(slot)

    def attach(self) -> None:
        """Start projecting; renders the current store and origin state."""
        if self._attached:
            return

        self._store.shape_changed.connect(self._on_shape_changed)
        if self._origin is not None:
            self._origin.point_changed.connect(self._on_origin_changed)
            self._provider.on_origin_moved = self._on_origin_marker_moved
        self._attached = True

        for slot in FilterSlot:
            self.project(slot)
        if self._origin is not None:
            self.project_origin(self._origin.point)
        logger.debug("Sync bridge attached")

    def detach(self) -> None:
        """Stop projecting and remove every overlay this bridge created."""
        if not self._attached:
            return

        self._store.shape_changed.disconnect(self._on_shape_changed)
        if self._origin is not None:
            self._origin.point_changed.disconnect(self._on_origin_changed)
            self._provider.on_origin_moved = None
        self._attached = False

        for overlay in self._overlays.values():
            overlay.remove()
        self._overlays.clear()
        logger.debug("Sync bridge detached")

    def _on_shape_changed(self, slot: FilterSlot, shape: ShapeFilter) -> None:
        self.project(slot)

    def project(self, slot: FilterSlot) -> None:
        """Render a slot's canonical value onto its overlay."""
        if not self._attached or not self._provider.is_ready:
            return

        shape = self._store.get_shape(slot)
        overlay = self._overlays.get(slot)

        if shape is None or is_empty_placeholder(shape):
            if overlay is not None:
                logger.debug(f"Removing {slot.value} overlay")
                overlay.remove()
                del self._overlays[slot]
            return

        if overlay is not None and overlay.kind is shape.kind:
            if shapes_match(shape_from_overlay(overlay), shape, self._tolerance):
                return
            self._mutate(overlay, shape)
            return

        if overlay is not None:
            logger.debug(f"Replacing {slot.value} {overlay.kind.value} overlay with {shape.kind.value}")
            overlay.remove()

        self._overlays[slot] = self._create(slot, shape)

    def _mutate(self, overlay: Overlay, shape: Shape) -> None:
        """Move or resize an existing overlay in place."""
        logger.debug(f"Updating {overlay.slot.value} overlay in place")
        if isinstance(overlay, CircleOverlay) and isinstance(shape, Circle):
            overlay.set_center((shape.center.longitude, shape.center.latitude))
            overlay.set_radius(shape.radius)
        elif isinstance(overlay, RectangleOverlay) and isinstance(shape, Rectangle):
            overlay.set_bounds(
                (shape.low.longitude, shape.low.latitude),
                (shape.high.longitude, shape.high.latitude),
            )

    def _create(self, slot: FilterSlot, shape: Shape) -> Overlay:
        logger.debug(f"Creating {shape.kind.value} overlay for {slot.value}")
        if isinstance(shape, Circle):
            overlay: Overlay = self._provider.create_circle(
                slot, (shape.center.longitude, shape.center.latitude), shape.radius
            )
        else:
            overlay = self._provider.create_rectangle(
                slot,
                (shape.low.longitude, shape.low.latitude),
                (shape.high.longitude, shape.high.latitude),
            )
        overlay.on_edit_finished = lambda edited, s=slot: self._on_overlay_edited(s, edited)
        return overlay

    def _on_overlay_edited(self, slot: FilterSlot, overlay: Overlay) -> None:
        if self._overlays.get(slot) is not overlay:
            logger.debug(f"Ignoring edit from a stale {slot.value} overlay")
            return
        self.apply_gesture(slot, shape_from_overlay(overlay))

    def apply_gesture(self, slot: FilterSlot, shape: Shape) -> bool:
        """
        Write map-originated geometry into the store.

        Returns:
            True if the store value changed
        """
        return self._store.set_shape(slot, shape)

    def _on_origin_changed(self, point: Optional[GeoPoint]) -> None:
        self.project_origin(point)

    def project_origin(self, point: Optional[GeoPoint]) -> None:
        """Render the origin point as the map's origin marker."""
        if not self._attached or not self._provider.is_ready:
            return

        current = self._provider.get_origin_marker()
        if point is None:
            if current is not None:
                self._provider.set_origin_marker(None)
            return

        if current is not None and points_match(current, point, self._tolerance):
            return
        self._provider.set_origin_marker(point)

    def _on_origin_marker_moved(self, point: GeoPoint) -> None:
        if self._origin is not None:
            self._origin.set_point(point)
