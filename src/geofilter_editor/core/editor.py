"""Editor facade wiring the shape store, memory, draw mode, map sync and submission."""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .advisory import Advisory
from .config import AppConfig
from .draw_mode import DrawModeController
from .map_provider import MapProvider
from .memory import MemoryCache
from .models import FilterSlot, GeoPoint, RequestSnapshot, ShapeFilter, ShapeKind
from .origin import OriginController
from .session import EditorSession
from .shape_store import ShapeStore
from .submission import SubmissionController
from .sync_bridge import SyncBridge

logger = logging.getLogger(__name__)


class GeoFilterEditor(QObject):
    """
    One editing session over the bias and restriction filters.

    Owns the canonical store and every controller around it. The map
    provider is optional; without one the engine runs headless and
    all edits go through the store directly.
    """

    advisory_raised = pyqtSignal(object)  # Advisory

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        provider: Optional[MapProvider] = None
    ) -> None:
        """
        Build the engine.

        Args:
            config: Application configuration, defaults if omitted
            provider: Map surface to project overlays onto
        """
        super().__init__()
        self.config = config or AppConfig()
        self.provider = provider

        self.session = EditorSession(self.config.initial_query)
        self.memory = MemoryCache()
        self.origin = OriginController()
        self.store = ShapeStore(
            self.memory,
            self.session,
            self.config,
            origin_provider=lambda: self.origin.point,
        )

        self.bridge: Optional[SyncBridge] = None
        if provider is not None:
            self.bridge = SyncBridge(self.store, provider, self.config, origin=self.origin)
            provider.on_map_click = self._on_map_click

        self.draw = DrawModeController(self.store, provider, self.bridge)
        self.submission = SubmissionController(self.store, self.memory, self.session, self.origin)

        self.draw.advisory_raised.connect(self._relay_advisory)
        self.submission.advisory_raised.connect(self._relay_advisory)
        self.session.seed_departed.connect(self._on_seed_departed)

    def _relay_advisory(self, advisory: Advisory) -> None:
        self.advisory_raised.emit(advisory)

    # Map lifecycle

    def start_map(self) -> bool:
        """
        Initialize the map provider and begin projecting onto it.

        Returns:
            True if the map is ready
        """
        if self.provider is None or self.bridge is None:
            logger.warning("No map provider configured")
            return False

        if not self.provider.initialize():
            return False

        self.bridge.attach()
        return True

    def stop_map(self) -> None:
        """Detach from the map and tear the provider down."""
        if self.provider is None or self.bridge is None:
            return
        self.draw.stop()
        self.bridge.detach()
        self.provider.teardown()

    # Shape editing

    def get_shape(self, slot: FilterSlot) -> ShapeFilter:
        return self.store.get_shape(slot)

    def set_shape(self, slot: FilterSlot, shape: ShapeFilter) -> bool:
        return self.store.set_shape(slot, shape)

    def set_shape_type(self, slot: FilterSlot, kind: ShapeKind) -> None:
        self.store.set_shape_type(slot, kind)

    def set_field(self, slot: FilterSlot, field_path: str, text: str) -> bool:
        return self.store.set_field(slot, field_path, text)

    def clear_shape(self, slot: FilterSlot) -> bool:
        return self.store.clear_shape(slot)

    def toggle_drawing(self, slot: FilterSlot) -> bool:
        return self.draw.toggle(slot)

    # Session

    def set_query(self, text: str) -> None:
        self.session.set_query(text)

    def _on_seed_departed(self) -> None:
        self.store.reset_seeded_slots()

    def _on_map_click(self, point: GeoPoint) -> None:
        if self.origin.placing and self.draw.active_slot is not None:
            logger.debug("Map click while both origin placement and drawing are active")
        self.origin.handle_map_click(point)

    def submit(self) -> Optional[int]:
        """Validate and submit; returns the guard token or None if rejected."""
        return self.submission.submit()

    def build_snapshot(self) -> Optional[RequestSnapshot]:
        return self.submission.build_snapshot()

    def response_received(self, token: int) -> bool:
        return self.submission.response_received(token)

    def clear_all(self) -> None:
        """
        Global clear.

        Empties both slots and the origin, leaves drawing and placement
        modes, forgets all remembered shapes and the submitted snapshot.
        """
        self.draw.stop()
        self.store.clear_all()
        self.origin.clear()
        self.submission.reset()
        self.session.mark_cleared()
        logger.info("Cleared editor state")
