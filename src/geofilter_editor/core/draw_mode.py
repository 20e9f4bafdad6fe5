"""Exclusive draw mode: at most one slot is edited by pointer gesture at a time."""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .advisory import drawing_in_progress, no_shape_type
from .map_provider import MapProvider, Overlay
from .models import DrawState, FilterSlot, ShapeFilter, ShapeKind
from .shape_store import ShapeStore
from .sync_bridge import SyncBridge, shape_from_overlay

logger = logging.getLogger(__name__)


class DrawModeController(QObject):
    """
    State machine Idle -> Drawing(slot) -> Idle.

    Drawing can only start for a slot that holds a shape, and never while
    another slot is being drawn. A completed drawing gesture returns the
    controller to Idle and forwards the geometry to the sync bridge.
    """

    state_changed = pyqtSignal(object)  # DrawState
    advisory_raised = pyqtSignal(object)  # Advisory

    def __init__(
        self,
        store: ShapeStore,
        provider: Optional[MapProvider] = None,
        bridge: Optional[SyncBridge] = None
    ) -> None:
        super().__init__()
        self._store = store
        self._provider = provider
        self._bridge = bridge
        self._state = DrawState()

        self._store.shape_changed.connect(self._on_shape_changed)
        if self._provider is not None:
            self._provider.on_drawing_complete = self._on_drawing_complete

    @property
    def state(self) -> DrawState:
        return self._state

    @property
    def active_slot(self) -> Optional[FilterSlot]:
        return self._state.active_slot

    def is_drawing(self, slot: FilterSlot) -> bool:
        return self._state.active_slot is slot

    def can_start(self, slot: FilterSlot) -> bool:
        """True if start(slot) would be accepted."""
        if self._store.get_kind(slot) is ShapeKind.NONE:
            return False
        return self._state.active_slot is None or self._state.active_slot is slot

    def start(self, slot: FilterSlot) -> bool:
        """
        Enter drawing mode for a slot.

        Returns:
            True if the slot is now being drawn, False if refused
        """
        active = self._state.active_slot
        if active is slot:
            return True

        if active is not None:
            advisory = drawing_in_progress(slot, active)
            logger.warning(advisory.message)
            self.advisory_raised.emit(advisory)
            return False

        if self._store.get_kind(slot) is ShapeKind.NONE:
            advisory = no_shape_type(slot)
            logger.warning(advisory.message)
            self.advisory_raised.emit(advisory)
            return False

        self._set_state(DrawState(active_slot=slot))
        self._arm_provider()
        return True

    def stop(self) -> None:
        """Return to Idle. Always legal."""
        if self._state.active_slot is None:
            return
        self._set_state(DrawState())
        if self._provider is not None:
            self._provider.set_drawing_mode(None, None)

    def toggle(self, slot: FilterSlot) -> bool:
        """
        Stop drawing a slot if it is active, else try to start it.

        Returns:
            True if the slot is being drawn afterwards
        """
        if self._state.active_slot is slot:
            self.stop()
            return False
        return self.start(slot)

    def _set_state(self, state: DrawState) -> None:
        logger.info(
            f"Draw mode: {self._describe(self._state)} -> {self._describe(state)}"
        )
        self._state = state
        self.state_changed.emit(state)

    @staticmethod
    def _describe(state: DrawState) -> str:
        return "idle" if state.active_slot is None else f"drawing({state.active_slot.value})"

    def _arm_provider(self) -> None:
        slot = self._state.active_slot
        if self._provider is None or slot is None:
            return
        self._provider.set_drawing_mode(self._store.get_kind(slot), slot)

    def _on_shape_changed(self, slot: FilterSlot, shape: ShapeFilter) -> None:
        if slot is not self._state.active_slot:
            return
        if shape is None:
            # A slot with no shape cannot stay in drawing mode
            self.stop()
        else:
            self._arm_provider()

    def _on_drawing_complete(self, overlay: Overlay) -> None:
        """Consume a transient overlay produced by the drawing surface."""
        slot = self._state.active_slot
        shape = shape_from_overlay(overlay)
        # Persistent overlays are only ever created by the bridge's projection
        overlay.remove()

        if slot is None:
            logger.debug("Discarding drawn overlay: not in drawing mode")
            return

        if self._bridge is not None:
            self._bridge.apply_gesture(slot, shape)
        else:
            self._store.set_shape(slot, shape)
        self.stop()
