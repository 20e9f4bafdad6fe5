"""
Geofilter Editor - an interactive editor for location bias and restriction filters.

Built with PyQt6. Each filter can be a circle or a rectangle and is kept
in sync across numeric fields, a shape-type selector and map overlays.
"""

__version__ = "1.0.0"
