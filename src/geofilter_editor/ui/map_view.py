"""Map surface built on QGraphicsScene, implementing the MapProvider capability."""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Set, Tuple

from PyQt6.QtCore import Qt, QPoint, QPointF, QRectF
from PyQt6.QtGui import QBrush, QColor, QMouseEvent, QPainter, QPen, QWheelEvent
from PyQt6.QtWidgets import (
    QGraphicsEllipseItem, QGraphicsItem, QGraphicsRectItem, QGraphicsScene,
    QGraphicsSceneMouseEvent, QGraphicsView, QWidget
)

from ..core.config import AppConfig
from ..core.geo import haversine_meters, meters_to_degrees
from ..core.map_provider import (
    CircleOverlay, LngLat, MapProvider, Overlay, RectangleOverlay
)
from ..core.models import FilterSlot, GeoPoint, ShapeKind

logger = logging.getLogger(__name__)

HANDLE_SIZE = 8.0  # Pixels around an edge or corner that start a resize
ORIGIN_MARKER_RADIUS = 6.0
CLICK_TOLERANCE = 3.0  # Max pointer travel, in pixels, for a press/release to count as a click


class Projection:
    """Plate carree projection centered on a reference point."""

    def __init__(self, center: GeoPoint, scale: float) -> None:
        self.center = center
        self.scale = scale

    def to_scene(self, lng: float, lat: float) -> QPointF:
        return QPointF(
            (lng - self.center.longitude) * self.scale,
            -(lat - self.center.latitude) * self.scale,
        )

    def to_geo(self, point: QPointF) -> LngLat:
        """Return (lng, lat) of a scene point."""
        return (
            point.x() / self.scale + self.center.longitude,
            -point.y() / self.scale + self.center.latitude,
        )

    def radius_extent(self, radius: float, lat: float) -> Tuple[float, float]:
        """Scene half-width and half-height of a circle of radius meters at lat."""
        d_lat, d_lng = meters_to_degrees(radius, lat)
        return d_lng * self.scale, d_lat * self.scale


def _slot_pen(color: str) -> QPen:
    pen = QPen(QColor(color), 2)
    pen.setCosmetic(True)
    return pen


def _slot_brush(color: str) -> QBrush:
    fill = QColor(color)
    fill.setAlphaF(0.1)
    return QBrush(fill)


class _CircleItem(QGraphicsEllipseItem):
    """Draggable circle; dragging near the rim resizes it."""

    def __init__(self, on_released: Callable[[], None], on_resize: Callable[[QPointF], None]) -> None:
        super().__init__()
        self._on_released = on_released
        self._on_resize = on_resize
        self._resizing = False
        self._changed = False
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsMovable, True)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, True)

    def _near_rim(self, pos: QPointF) -> bool:
        rect = self.rect()
        rx, ry = rect.width() / 2, rect.height() / 2
        if rx <= 0 or ry <= 0:
            return False
        # Normalized elliptical distance; 1.0 is on the rim
        distance = math.hypot(pos.x() / rx, pos.y() / ry)
        margin = HANDLE_SIZE / max(min(rx, ry), 1e-9)
        return abs(distance - 1.0) <= margin

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        self._changed = False
        self._resizing = self._near_rim(event.pos())
        if self._resizing:
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        self._changed = True
        if self._resizing:
            self._on_resize(event.scenePos())
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        if not self._resizing:
            super().mouseReleaseEvent(event)
        self._resizing = False
        if self._changed:
            self._changed = False
            self._on_released()


class _RectItem(QGraphicsRectItem):
    """Draggable rectangle; dragging a corner resizes it."""

    def __init__(self, on_released: Callable[[], None]) -> None:
        super().__init__()
        self._on_released = on_released
        self._corner: Optional[str] = None
        self._changed = False
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsMovable, True)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, True)

    def _corner_at(self, pos: QPointF) -> Optional[str]:
        rect = self.rect()
        corners = {
            "top_left": rect.topLeft(),
            "top_right": rect.topRight(),
            "bottom_left": rect.bottomLeft(),
            "bottom_right": rect.bottomRight(),
        }
        for name, corner in corners.items():
            if abs(pos.x() - corner.x()) <= HANDLE_SIZE and abs(pos.y() - corner.y()) <= HANDLE_SIZE:
                return name
        return None

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        self._changed = False
        self._corner = self._corner_at(event.pos())
        if self._corner:
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        self._changed = True
        if self._corner:
            rect = QRectF(self.rect())
            pos = event.pos()
            if self._corner == "top_left":
                rect.setTopLeft(pos)
            elif self._corner == "top_right":
                rect.setTopRight(pos)
            elif self._corner == "bottom_left":
                rect.setBottomLeft(pos)
            else:
                rect.setBottomRight(pos)
            self.setRect(rect)
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        if self._corner:
            self.setRect(self.rect().normalized())
        else:
            super().mouseReleaseEvent(event)
        self._corner = None
        if self._changed:
            self._changed = False
            self._on_released()


class _OriginItem(QGraphicsEllipseItem):
    """Fixed-size, draggable origin marker."""

    def __init__(self, on_moved: Callable[[QPointF], None]) -> None:
        r = ORIGIN_MARKER_RADIUS
        super().__init__(-r, -r, 2 * r, 2 * r)
        self._on_moved = on_moved
        self._moved = False
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsMovable, True)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIgnoresTransformations, True)
        self.setBrush(QBrush(QColor("#16a34a")))
        self.setPen(QPen(QColor("#ffffff"), 2))
        self.setZValue(10)

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        self._moved = False
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        self._moved = True
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        super().mouseReleaseEvent(event)
        if self._moved:
            self._moved = False
            self._on_moved(self.pos())


class SceneCircleOverlay(CircleOverlay):
    """Circle overlay rendered as a scene ellipse."""

    def __init__(
        self,
        provider: SceneMapProvider,
        slot: Optional[FilterSlot],
        center: LngLat,
        radius: float
    ) -> None:
        super().__init__(slot)
        self._provider = provider
        self._radius = radius
        self.item = _CircleItem(self.finish_edit, self._resize_to)
        provider.style_item(self.item, slot)
        provider.scene.addItem(self.item)
        self.set_center(center)

    def get_center(self) -> LngLat:
        return self._provider.projection.to_geo(self.item.pos())

    def set_center(self, center: LngLat) -> None:
        lng, lat = center
        self.item.setPos(self._provider.projection.to_scene(lng, lat))
        self._update_rect()

    def get_radius(self) -> float:
        return self._radius

    def set_radius(self, radius: float) -> None:
        self._radius = radius
        self._update_rect()

    def _update_rect(self) -> None:
        _, lat = self.get_center()
        rx, ry = self._provider.projection.radius_extent(self._radius, lat)
        self.item.setRect(QRectF(-rx, -ry, 2 * rx, 2 * ry))

    def _resize_to(self, scene_pos: QPointF) -> None:
        c_lng, c_lat = self.get_center()
        lng, lat = self._provider.projection.to_geo(scene_pos)
        self.set_radius(haversine_meters(c_lat, c_lng, lat, lng))

    def _detach(self) -> None:
        self._provider.release(self)


class SceneRectangleOverlay(RectangleOverlay):
    """Rectangle overlay rendered as a scene rect."""

    def __init__(
        self,
        provider: SceneMapProvider,
        slot: Optional[FilterSlot],
        south_west: LngLat,
        north_east: LngLat
    ) -> None:
        super().__init__(slot)
        self._provider = provider
        self.item = _RectItem(self.finish_edit)
        provider.style_item(self.item, slot)
        provider.scene.addItem(self.item)
        self.set_bounds(south_west, north_east)

    def get_bounds(self) -> Tuple[LngLat, LngLat]:
        rect = self.item.rect().translated(self.item.pos()).normalized()
        projection = self._provider.projection
        west, south = projection.to_geo(rect.bottomLeft())
        east, north = projection.to_geo(rect.topRight())
        return (west, south), (east, north)

    def set_bounds(self, south_west: LngLat, north_east: LngLat) -> None:
        projection = self._provider.projection
        sw = projection.to_scene(*south_west)
        ne = projection.to_scene(*north_east)
        self.item.setPos(QPointF(0, 0))
        self.item.setRect(QRectF(sw, ne).normalized())

    def _detach(self) -> None:
        self._provider.release(self)


class SceneMapProvider(MapProvider):
    """
    MapProvider backed by a QGraphicsScene.

    Renders a plain graticule rather than map tiles. Drawing-mode state
    is read by MapView, which turns pointer drags into transient overlays.
    """

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        super().__init__()
        self.config = config or AppConfig()
        self.projection = Projection(self.config.map_center, self.config.map_scale)
        self.scene = QGraphicsScene()
        self.drawing_kind: Optional[ShapeKind] = None
        self.drawing_slot: Optional[FilterSlot] = None
        self._overlays: Set[Overlay] = set()
        self._origin_item: Optional[_OriginItem] = None
        self._grid_items = []

    def slot_color(self, slot: Optional[FilterSlot]) -> str:
        if slot is FilterSlot.RESTRICTION:
            return self.config.restriction_color
        return self.config.bias_color

    def style_item(self, item: QGraphicsItem, slot: Optional[FilterSlot]) -> None:
        color = self.slot_color(slot)
        item.setPen(_slot_pen(color))
        item.setBrush(_slot_brush(color))
        item.setZValue(1)

    def _load(self) -> None:
        self._draw_graticule()

    def _draw_graticule(self) -> None:
        pen = QPen(QColor("#d1d5db"), 1)
        pen.setCosmetic(True)
        center = self.config.map_center
        span = 2
        for offset in range(-span, span + 1):
            lat = math.floor(center.latitude) + offset
            lng = math.floor(center.longitude) + offset
            left = self.projection.to_scene(center.longitude - span - 1, lat)
            right = self.projection.to_scene(center.longitude + span + 1, lat)
            top = self.projection.to_scene(lng, center.latitude + span + 1)
            bottom = self.projection.to_scene(lng, center.latitude - span - 1)
            self._grid_items.append(self.scene.addLine(left.x(), left.y(), right.x(), right.y(), pen))
            self._grid_items.append(self.scene.addLine(top.x(), top.y(), bottom.x(), bottom.y(), pen))

    def _unload(self) -> None:
        for overlay in list(self._overlays):
            overlay.remove()
        self._overlays.clear()
        self.set_origin_marker(None)
        for item in self._grid_items:
            self.scene.removeItem(item)
        self._grid_items = []
        self.set_drawing_mode(None, None)

    def owns_item(self, item: QGraphicsItem) -> bool:
        """Check whether an item is an editable overlay or the origin marker."""
        if item is self._origin_item:
            return True
        return any(getattr(overlay, "item", None) is item for overlay in self._overlays)

    def release(self, overlay: Overlay) -> None:
        """Remove an overlay's item from the scene."""
        item = getattr(overlay, "item", None)
        if item is not None and item.scene() is self.scene:
            self.scene.removeItem(item)
        self._overlays.discard(overlay)

    def create_circle(self, slot: FilterSlot, center: LngLat, radius: float) -> CircleOverlay:
        overlay = SceneCircleOverlay(self, slot, center, radius)
        self._overlays.add(overlay)
        return overlay

    def create_rectangle(
        self,
        slot: FilterSlot,
        south_west: LngLat,
        north_east: LngLat
    ) -> RectangleOverlay:
        overlay = SceneRectangleOverlay(self, slot, south_west, north_east)
        self._overlays.add(overlay)
        return overlay

    def set_drawing_mode(self, kind: Optional[ShapeKind], slot: Optional[FilterSlot]) -> None:
        if kind is ShapeKind.NONE:
            kind = None
        self.drawing_kind = kind
        self.drawing_slot = slot if kind is not None else None

    def complete_drawing(self, start: QPointF, end: QPointF) -> None:
        """Turn a finished drag into a transient overlay and hand it over."""
        if self.drawing_kind is ShapeKind.CIRCLE:
            c_lng, c_lat = self.projection.to_geo(start)
            lng, lat = self.projection.to_geo(end)
            overlay: Overlay = SceneCircleOverlay(
                self, self.drawing_slot, (c_lng, c_lat), haversine_meters(c_lat, c_lng, lat, lng)
            )
        elif self.drawing_kind is ShapeKind.RECTANGLE:
            rect = QRectF(start, end).normalized()
            overlay = SceneRectangleOverlay(
                self,
                self.drawing_slot,
                self.projection.to_geo(rect.bottomLeft()),
                self.projection.to_geo(rect.topRight()),
            )
        else:
            return
        self.emit_drawing_complete(overlay)

    def set_origin_marker(self, point: Optional[GeoPoint]) -> None:
        if point is None:
            if self._origin_item is not None:
                self.scene.removeItem(self._origin_item)
                self._origin_item = None
            return

        if self._origin_item is None:
            self._origin_item = _OriginItem(self._on_origin_dragged)
            self.scene.addItem(self._origin_item)
        self._origin_item.setPos(self.projection.to_scene(point.longitude, point.latitude))

    def get_origin_marker(self) -> Optional[GeoPoint]:
        if self._origin_item is None:
            return None
        lng, lat = self.projection.to_geo(self._origin_item.pos())
        return GeoPoint(lat, lng)

    def _on_origin_dragged(self, scene_pos: QPointF) -> None:
        lng, lat = self.projection.to_geo(scene_pos)
        self.emit_origin_moved(GeoPoint(lat, lng))

    def click_at(self, scene_pos: QPointF) -> None:
        lng, lat = self.projection.to_geo(scene_pos)
        self.emit_map_click(GeoPoint(lat, lng))


class MapView(QGraphicsView):
    """
    Interactive view over a SceneMapProvider.

    Ctrl+wheel zooms. While a drawing mode is armed, a left-button drag on
    empty map draws a new shape; presses on an existing overlay or the
    origin marker still move or resize it.
    """

    ZOOM_FACTOR = 1.15

    def __init__(self, provider: SceneMapProvider, parent: Optional[QWidget] = None) -> None:
        super().__init__(provider.scene, parent)
        self.provider = provider
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self._press_pos: Optional[QPointF] = None
        self._draw_start: Optional[QPointF] = None
        self._preview: Optional[QGraphicsItem] = None

    def wheelEvent(self, event: QWheelEvent) -> None:
        """Handle mouse wheel for zooming."""
        if event.modifiers() == Qt.KeyboardModifier.ControlModifier:
            factor = self.ZOOM_FACTOR if event.angleDelta().y() > 0 else 1 / self.ZOOM_FACTOR
            self.scale(factor, factor)
            event.accept()
        else:
            super().wheelEvent(event)

    def _scene_pos(self, event: QMouseEvent) -> QPointF:
        return self.mapToScene(event.position().toPoint())

    def mousePressEvent(self, event: QMouseEvent) -> None:
        self._press_pos = event.position()
        if (
            event.button() == Qt.MouseButton.LeftButton and
            self.provider.drawing_kind is not None and
            not self.is_over_editable_item(event.position().toPoint())
        ):
            self._draw_start = self._scene_pos(event)
            event.accept()
            return
        super().mousePressEvent(event)

    def is_over_editable_item(self, pos: QPoint) -> bool:
        return any(self.provider.owns_item(item) for item in self.items(pos))

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._draw_start is not None:
            self._update_preview(self._scene_pos(event))
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        is_click = (
            self._press_pos is not None and
            (event.position() - self._press_pos).manhattanLength() <= CLICK_TOLERANCE
        )
        start = self._draw_start
        self._draw_start = None
        self._press_pos = None
        self._clear_preview()

        if start is not None:
            if not is_click:
                self.provider.complete_drawing(start, self._scene_pos(event))
        else:
            super().mouseReleaseEvent(event)

        if is_click and event.button() == Qt.MouseButton.LeftButton:
            self.provider.click_at(self._scene_pos(event))

    def _update_preview(self, pos: QPointF) -> None:
        self._clear_preview()
        start = self._draw_start
        if start is None:
            return
        if self.provider.drawing_kind is ShapeKind.CIRCLE:
            r = math.hypot(pos.x() - start.x(), pos.y() - start.y())
            self._preview = self.scene().addEllipse(start.x() - r, start.y() - r, 2 * r, 2 * r)
        else:
            self._preview = self.scene().addRect(QRectF(start, pos).normalized())
        self.provider.style_item(self._preview, self.provider.drawing_slot)

    def _clear_preview(self) -> None:
        if self._preview is not None:
            self.scene().removeItem(self._preview)
            self._preview = None

    def center_on_geo(self, point: GeoPoint) -> None:
        self.centerOn(self.provider.projection.to_scene(point.longitude, point.latitude))
