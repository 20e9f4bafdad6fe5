"""UI components for the geofilter editor."""

from .location_form import LocationForm, OriginEditor, ShapeEditor
from .map_view import MapView, SceneMapProvider
from .main_window import MainWindow

__all__ = [
    "LocationForm",
    "OriginEditor",
    "ShapeEditor",
    "MapView",
    "SceneMapProvider",
    "MainWindow",
]
