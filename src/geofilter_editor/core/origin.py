"""Optional reference point, editable as text or by clicking the map."""

from __future__ import annotations

import logging
import re
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .models import GeoPoint
from .shape_store import format_number

logger = logging.getLogger(__name__)

_DISALLOWED_CHARS = re.compile(r"[^0-9.,-]")


def sanitize_origin_text(text: str) -> str:
    """Strip everything but digits, '.', ',' and '-'."""
    return _DISALLOWED_CHARS.sub("", text)


def parse_origin_text(text: str) -> Optional[GeoPoint]:
    """
    Parse a "lat,lng" string.

    Returns:
        The point, or None for anything other than two non-empty numbers
    """
    parts = sanitize_origin_text(text).split(",")
    if len(parts) != 2:
        return None

    lat_text, lng_text = (part.strip() for part in parts)
    if not lat_text or not lng_text:
        return None

    try:
        return GeoPoint(float(lat_text), float(lng_text))
    except ValueError:
        return None


def format_origin(point: Optional[GeoPoint]) -> str:
    """Format a point as "lat,lng", or "" for None."""
    if point is None:
        return ""
    return f"{format_number(point.latitude)},{format_number(point.longitude)}"


class OriginController(QObject):
    """
    Holds the origin point and the transient "awaiting map click" flag.

    Placement mode is not coordinated with shape drawing; a map click
    while both are active reaches both.
    """

    point_changed = pyqtSignal(object)  # Optional[GeoPoint]
    placing_changed = pyqtSignal(bool)

    def __init__(self) -> None:
        super().__init__()
        self._point: Optional[GeoPoint] = None
        self._placing = False

    @property
    def point(self) -> Optional[GeoPoint]:
        return self._point

    @property
    def placing(self) -> bool:
        return self._placing

    def set_point(self, point: Optional[GeoPoint]) -> bool:
        """
        Set or clear the origin.

        Returns:
            True if the value changed
        """
        if point == self._point:
            return False
        self._point = point
        logger.debug(f"Origin -> {point}")
        self.point_changed.emit(point)
        return True

    def set_text(self, text: str) -> bool:
        """Apply a manual text edit; unparsable text clears the origin."""
        return self.set_point(parse_origin_text(text))

    def text(self) -> str:
        return format_origin(self._point)

    def _set_placing(self, placing: bool) -> None:
        if placing == self._placing:
            return
        self._placing = placing
        self.placing_changed.emit(placing)

    def start_placing(self) -> None:
        self._set_placing(True)

    def cancel_placing(self) -> None:
        self._set_placing(False)

    def toggle(self) -> None:
        """Remove the origin if set, otherwise toggle placement mode."""
        if self._point is not None:
            self.set_point(None)
            self.cancel_placing()
        else:
            self._set_placing(not self._placing)

    def handle_map_click(self, point: GeoPoint) -> bool:
        """
        Consume a map click.

        Returns:
            True if the click placed the origin
        """
        if not self._placing:
            return False
        self.set_point(point)
        self.cancel_placing()
        return True

    def clear(self) -> None:
        """Drop the origin and leave placement mode."""
        self.set_point(None)
        self.cancel_placing()
