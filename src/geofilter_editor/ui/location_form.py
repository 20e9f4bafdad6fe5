"""Form widgets for editing the bias and restriction shapes numerically."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from PyQt6.QtCore import QSignalBlocker
from PyQt6.QtWidgets import (
    QComboBox, QFormLayout, QGroupBox, QHBoxLayout, QLabel, QLineEdit,
    QPushButton, QStackedWidget, QVBoxLayout, QWidget
)

from ..core.editor import GeoFilterEditor
from ..core.models import DrawState, FilterSlot, GeoPoint, ShapeFilter, ShapeKind
from ..core.origin import parse_origin_text, sanitize_origin_text
from ..core.shape_store import CIRCLE_FIELDS, RECTANGLE_FIELDS, coerce_number

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "center.latitude": "Center lat",
    "center.longitude": "Center lng",
    "radius": "Radius (meters)",
    "low.latitude": "Low (South) lat",
    "low.longitude": "Low (West) lng",
    "high.latitude": "High (North) lat",
    "high.longitude": "High (East) lng",
}

KIND_LABELS = {
    ShapeKind.NONE: "None",
    ShapeKind.CIRCLE: "Circle",
    ShapeKind.RECTANGLE: "Rectangle",
}

KIND_ORDER = list(KIND_LABELS)


class ShapeEditor(QGroupBox):
    """
    Editor for one filter slot.

    A shape-type selector, a draw toggle, a clear button and the numeric
    fields for the current shape kind. Only user edits are written to the
    store; store changes refresh the widgets with signals blocked.
    """

    def __init__(
        self,
        editor: GeoFilterEditor,
        slot: FilterSlot,
        parent: Optional[QWidget] = None
    ) -> None:
        super().__init__(slot.display_name, parent)
        self.editor = editor
        self.slot = slot
        self.fields: Dict[str, QLineEdit] = {}
        self._init_ui()

        editor.store.shape_changed.connect(self._on_shape_changed)
        editor.draw.state_changed.connect(self._on_draw_state_changed)
        self.refresh()

    def _init_ui(self) -> None:
        layout = QVBoxLayout(self)

        header = QHBoxLayout()
        self.type_combo = QComboBox()
        for label in KIND_LABELS.values():
            self.type_combo.addItem(label)
        self.type_combo.currentIndexChanged.connect(self._on_type_selected)
        header.addWidget(self.type_combo, 1)

        self.draw_button = QPushButton("Draw on Map")
        self.draw_button.clicked.connect(self._on_draw_clicked)
        header.addWidget(self.draw_button)

        self.clear_button = QPushButton("Clear Shape")
        self.clear_button.clicked.connect(self._on_clear_clicked)
        header.addWidget(self.clear_button)
        layout.addLayout(header)

        self.drawing_hint = QLabel(
            "Drawing mode active. Draw on the map, or move/resize the existing shape."
        )
        self.drawing_hint.setWordWrap(True)
        self.drawing_hint.hide()
        layout.addWidget(self.drawing_hint)

        self.pages = QStackedWidget()
        self.pages.addWidget(QWidget())
        self.pages.addWidget(self._build_page(CIRCLE_FIELDS))
        self.pages.addWidget(self._build_page(RECTANGLE_FIELDS))
        layout.addWidget(self.pages)

    def _build_page(self, field_paths) -> QWidget:
        page = QWidget()
        form = QFormLayout(page)
        form.setContentsMargins(0, 0, 0, 0)
        for path in field_paths:
            line_edit = QLineEdit()
            line_edit.setObjectName(f"{self.slot.value}_{path.replace('.', '_')}")
            line_edit.textEdited.connect(
                lambda text, p=path: self.editor.set_field(self.slot, p, text)
            )
            form.addRow(FIELD_LABELS[path], line_edit)
            self.fields[path] = line_edit
        return page

    def _on_type_selected(self, index: int) -> None:
        self.editor.set_shape_type(self.slot, KIND_ORDER[index])

    def _on_draw_clicked(self) -> None:
        self.editor.toggle_drawing(self.slot)

    def _on_clear_clicked(self) -> None:
        self.editor.clear_shape(self.slot)

    def _on_shape_changed(self, slot: FilterSlot, shape: ShapeFilter) -> None:
        if slot is self.slot:
            self.refresh()

    def _on_draw_state_changed(self, state: DrawState) -> None:
        self._refresh_controls()

    def refresh(self) -> None:
        """Update every widget from the store."""
        kind = self.editor.store.get_kind(self.slot)

        with QSignalBlocker(self.type_combo):
            self.type_combo.setCurrentIndex(KIND_ORDER.index(kind))
        self.pages.setCurrentIndex(KIND_ORDER.index(kind))

        for path, line_edit in self.fields.items():
            text = self.editor.store.field_text(self.slot, path)
            if line_edit.hasFocus() and coerce_number(line_edit.text()) == coerce_number(text):
                # Keep partial input such as "-" or "1." while the user types
                continue
            if line_edit.text() != text:
                line_edit.setText(text)

        self._refresh_controls()

    def _refresh_controls(self) -> None:
        kind = self.editor.store.get_kind(self.slot)
        active = self.editor.draw.active_slot
        drawing_this = active is self.slot
        drawing_other = active is not None and not drawing_this

        self.draw_button.setText("Stop Drawing" if drawing_this else "Draw on Map")
        self.draw_button.setEnabled(not drawing_other and kind is not ShapeKind.NONE)
        self.clear_button.setEnabled(kind is not ShapeKind.NONE)
        self.drawing_hint.setVisible(drawing_this)
        for line_edit in self.fields.values():
            line_edit.setReadOnly(drawing_this)


class LocationForm(QWidget):
    """Both shape editors plus an explanatory note."""

    def __init__(self, editor: GeoFilterEditor, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.editors = {
            slot: ShapeEditor(editor, slot) for slot in FilterSlot
        }
        for slot_editor in self.editors.values():
            layout.addWidget(slot_editor)

        note = QLabel(
            "Use the form or draw on the map. At most one bias OR restriction "
            "is sent in the API request."
        )
        note.setWordWrap(True)
        layout.addWidget(note)


class OriginEditor(QWidget):
    """Text field for the origin plus a Place / Cancel / Remove button."""

    def __init__(self, editor: GeoFilterEditor, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.origin = editor.origin

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.line_edit = QLineEdit()
        self.line_edit.setPlaceholderText("15.12,120.57")
        self.line_edit.textEdited.connect(self._on_text_edited)
        layout.addWidget(self.line_edit, 1)

        self.button = QPushButton()
        self.button.clicked.connect(self._on_button_clicked)
        layout.addWidget(self.button)

        self.origin.point_changed.connect(self._on_point_changed)
        self.origin.placing_changed.connect(self._refresh_button)
        self._on_point_changed(self.origin.point)

    def _on_text_edited(self, text: str) -> None:
        sanitized = sanitize_origin_text(text)
        if sanitized != text:
            self.line_edit.setText(sanitized)
        self.origin.set_text(sanitized)

    def _on_button_clicked(self) -> None:
        self.origin.toggle()

    def _on_point_changed(self, point: Optional[GeoPoint]) -> None:
        if not (self.line_edit.hasFocus() and parse_origin_text(self.line_edit.text()) == point):
            self.line_edit.setText(self.origin.text())
        self._refresh_button()

    def _refresh_button(self, *args) -> None:
        if self.origin.point is not None:
            self.button.setText("Remove")
        elif self.origin.placing:
            self.button.setText("Cancel")
        else:
            self.button.setText("Place")
