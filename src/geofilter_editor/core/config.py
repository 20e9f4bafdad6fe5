"""Configuration management for the geofilter editor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models import GeoPoint

logger = logging.getLogger(__name__)

# Default configuration file path
DEFAULT_CONFIG_PATH = Path("geofilter_config.yaml")


@dataclass
class AppConfig:
    """
    Application configuration settings.

    Holds the defaults used when a shape is seeded on first load, the
    comparison tolerance for overlay geometry, and map display settings.
    """

    initial_query: str = "San Francisco"  # Seed value of the primary query text
    fallback_latitude: float = 37.77  # Default-shape center when no origin is set
    fallback_longitude: float = -122.41
    default_circle_radius: float = 5000.0  # Meters
    default_rectangle_half_extent: float = 0.1  # Degrees from center to each edge
    coordinate_tolerance: float = 1e-9  # Overlay-vs-store equality tolerance
    bias_color: str = "#2563eb"
    restriction_color: str = "#ef4444"
    map_scale: float = 2000.0  # Scene pixels per degree
    map_center_latitude: float = 37.7749
    map_center_longitude: float = -122.4194

    @property
    def fallback_center(self) -> GeoPoint:
        return GeoPoint(self.fallback_latitude, self.fallback_longitude)

    @property
    def map_center(self) -> GeoPoint:
        return GeoPoint(self.map_center_latitude, self.map_center_longitude)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return {
            "initialQuery": self.initial_query,
            "fallbackLatitude": self.fallback_latitude,
            "fallbackLongitude": self.fallback_longitude,
            "defaultCircleRadius": self.default_circle_radius,
            "defaultRectangleHalfExtent": self.default_rectangle_half_extent,
            "coordinateTolerance": self.coordinate_tolerance,
            "biasColor": self.bias_color,
            "restrictionColor": self.restriction_color,
            "mapScale": self.map_scale,
            "mapCenterLatitude": self.map_center_latitude,
            "mapCenterLongitude": self.map_center_longitude,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        """Create config from dictionary."""
        return cls(
            initial_query=data.get("initialQuery", "San Francisco"),
            fallback_latitude=float(data.get("fallbackLatitude", 37.77)),
            fallback_longitude=float(data.get("fallbackLongitude", -122.41)),
            default_circle_radius=float(data.get("defaultCircleRadius", 5000.0)),
            default_rectangle_half_extent=float(data.get("defaultRectangleHalfExtent", 0.1)),
            coordinate_tolerance=float(data.get("coordinateTolerance", 1e-9)),
            bias_color=data.get("biasColor", "#2563eb"),
            restriction_color=data.get("restrictionColor", "#ef4444"),
            map_scale=float(data.get("mapScale", 2000.0)),
            map_center_latitude=float(data.get("mapCenterLatitude", 37.7749)),
            map_center_longitude=float(data.get("mapCenterLongitude", -122.4194)),
        )


class ConfigManager:
    """
    Manager for loading and saving application configuration.

    Handles YAML serialization and provides a clean interface
    for configuration access.
    """

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = config_path
        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        """Get the current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> AppConfig:
        """
        Load configuration from file.

        Returns:
            AppConfig instance with loaded or default values
        """
        if not self.config_path.exists():
            logger.info(f"Config file not found at {self.config_path}, using defaults")
            return AppConfig()

        try:
            with open(self.config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {self.config_path}")
            return AppConfig.from_dict(data)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing config file: {e}")
            return AppConfig()
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error loading config: {e}")
            return AppConfig()

    def save(self, config: Optional[AppConfig] = None) -> bool:
        """
        Save configuration to file.

        Args:
            config: Configuration to save, or use current config

        Returns:
            True if save was successful
        """
        if config is not None:
            self._config = config

        if self._config is None:
            logger.warning("No configuration to save")
            return False

        try:
            with open(self.config_path, "w") as f:
                yaml.dump(self._config.to_dict(), f, default_flow_style=False)
            logger.info(f"Saved configuration to {self.config_path}")
            return True
        except OSError as e:
            logger.error(f"Error saving config: {e}")
            return False

    def update(self, **kwargs: Any) -> None:
        """
        Update configuration with new values.

        Args:
            **kwargs: Key-value pairs to update
        """
        config = self.config
        for key, value in kwargs.items():
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                logger.warning(f"Unknown config key: {key}")
        self.save()
