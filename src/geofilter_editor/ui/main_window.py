"""Main application window for the geofilter editor."""

from __future__ import annotations

import json
import logging
from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QCloseEvent
from PyQt6.QtWidgets import (
    QDockWidget, QFormLayout, QHBoxLayout, QLabel, QLineEdit, QMainWindow,
    QMessageBox, QPlainTextEdit, QPushButton, QScrollArea, QStatusBar,
    QVBoxLayout, QWidget
)

from ..core.advisory import Advisory, bias_dropped
from ..core.config import ConfigManager
from ..core.editor import GeoFilterEditor
from ..core.map_provider import MapStatus
from ..core.models import DrawState, FilterSlot, RequestSnapshot, ShapeFilter
from .location_form import LocationForm, OriginEditor
from .map_view import MapView, SceneMapProvider

logger = logging.getLogger(__name__)

MAP_STATUS_MESSAGES = {
    MapStatus.IDLE: "Map not loaded",
    MapStatus.LOADING: "Loading map...",
    MapStatus.LOADED: "Map ready",
    MapStatus.ERROR: "Map failed to load",
    MapStatus.AUTH_ERROR: "Map authentication failed",
    MapStatus.QUOTA_ERROR: "Map quota exceeded",
}


class MainWindow(QMainWindow):
    """
    Main application window.

    Provides:
    - The map surface with editable bias/restriction overlays
    - The request form (query, origin, shape editors)
    - A preview of the outgoing request payload
    """

    # Emitted with (token, RequestSnapshot) for the request-sending collaborator
    request_ready = pyqtSignal(int, object)

    def __init__(self, config_manager: Optional[ConfigManager] = None) -> None:
        """Initialize the main window."""
        super().__init__()

        self.config_manager = config_manager or ConfigManager()
        config = self.config_manager.config

        self.provider = SceneMapProvider(config)
        self.provider.on_status_changed = self._on_map_status_changed
        self.editor = GeoFilterEditor(config, self.provider)

        self._init_ui()
        self._connect_signals()

        self.editor.start_map()
        self.map_view.center_on_geo(config.map_center)

    def _init_ui(self) -> None:
        """Initialize the user interface."""
        self.setWindowTitle("Geofilter Editor")
        self.resize(1280, 800)

        self.map_view = MapView(self.provider)
        self.setCentralWidget(self.map_view)

        self._create_request_dock()
        self._create_preview_dock()
        self._create_status_bar()

    def _create_request_dock(self) -> None:
        panel = QWidget()
        layout = QVBoxLayout(panel)

        form = QFormLayout()
        self.query_edit = QLineEdit(self.editor.session.query)
        form.addRow("Input", self.query_edit)
        self.origin_editor = OriginEditor(self.editor)
        form.addRow("Origin (lat,lng)", self.origin_editor)
        layout.addLayout(form)

        self.location_form = LocationForm(self.editor)
        layout.addWidget(self.location_form)

        self.warning_label = QLabel()
        self.warning_label.setWordWrap(True)
        self.warning_label.setStyleSheet("color: #b45309;")
        self.warning_label.hide()
        layout.addWidget(self.warning_label)

        buttons = QHBoxLayout()
        self.submit_button = QPushButton("Submit")
        self.clear_button = QPushButton("Clear")
        buttons.addWidget(self.submit_button)
        buttons.addWidget(self.clear_button)
        layout.addLayout(buttons)
        layout.addStretch()

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(panel)

        dock = QDockWidget("Request", self)
        dock.setObjectName("request_dock")
        dock.setWidget(scroll)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, dock)

    def _create_preview_dock(self) -> None:
        self.preview = QPlainTextEdit()
        self.preview.setReadOnly(True)

        dock = QDockWidget("Request Payload", self)
        dock.setObjectName("preview_dock")
        dock.setWidget(self.preview)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, dock)

    def _create_status_bar(self) -> None:
        status_bar = QStatusBar()
        self.setStatusBar(status_bar)
        self.map_status_label = QLabel(MAP_STATUS_MESSAGES[self.provider.status])
        self.draw_status_label = QLabel()
        status_bar.addWidget(self.map_status_label)
        status_bar.addPermanentWidget(self.draw_status_label)

    def _connect_signals(self) -> None:
        self.query_edit.textEdited.connect(self.editor.set_query)
        self.submit_button.clicked.connect(self.submit)
        self.clear_button.clicked.connect(self.clear)
        self.editor.advisory_raised.connect(self._on_advisory)
        self.editor.store.shape_changed.connect(self._on_shape_changed)
        self.editor.draw.state_changed.connect(self._on_draw_state_changed)
        self.editor.origin.placing_changed.connect(self._on_placing_changed)

    def _on_map_status_changed(self, status: MapStatus) -> None:
        self.map_status_label.setText(MAP_STATUS_MESSAGES[status])

    def _on_shape_changed(self, slot: FilterSlot, shape: ShapeFilter) -> None:
        both_set = (
            self.editor.get_shape(FilterSlot.BIAS) is not None and
            self.editor.get_shape(FilterSlot.RESTRICTION) is not None
        )
        if both_set:
            self._show_warning(bias_dropped().message)
        else:
            self._show_warning("")

    def _on_draw_state_changed(self, state: DrawState) -> None:
        if state.active_slot is None:
            self.draw_status_label.setText("")
        else:
            self.draw_status_label.setText(f"Drawing {state.active_slot.display_name}")

    def _on_placing_changed(self, placing: bool) -> None:
        if placing:
            self.statusBar().showMessage("Click on the map to place the origin")
        else:
            self.statusBar().clearMessage()

    def _show_warning(self, text: str) -> None:
        self.warning_label.setText(text)
        self.warning_label.setVisible(bool(text))

    def _on_advisory(self, advisory: Advisory) -> None:
        if advisory.blocking:
            QMessageBox.warning(self, "Warning", advisory.message)
        else:
            self._show_warning(advisory.message)

    def submit(self) -> Optional[int]:
        """
        Build and publish the outgoing request.

        Returns:
            The submission token, or None if validation failed
        """
        token = self.editor.submit()
        if token is None:
            return None

        snapshot: RequestSnapshot = self.editor.submission.submitted_snapshot
        self.preview.setPlainText(json.dumps(snapshot.to_dict(), indent=2))
        self.request_ready.emit(token, snapshot)
        return token

    def handle_response(self, token: int) -> None:
        """Entry point for the request-sending collaborator once a response arrives."""
        self.editor.response_received(token)

    def clear(self) -> None:
        """Global clear of shapes, origin and the payload preview."""
        self.editor.clear_all()
        self.preview.clear()
        self._show_warning("")

    def closeEvent(self, event: QCloseEvent) -> None:
        """Tear the map down before closing."""
        self.editor.stop_map()
        super().closeEvent(event)
