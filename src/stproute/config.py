"""Ride settings loaded from JSON files and command-line overrides."""

import json
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict

from .units import DistanceUnit

logger = logging.getLogger(__name__)

# Keys written by the companion app's settings screen
_SETTINGS_ALIASES = {
    "checkpointAlerts": "alerts_enabled",
    "distanceUnit": "distance_unit",
    "gpsUpdateInterval": "gps_update_interval",
}


@dataclass
class RideSettings:
    """Configuration for the stproute CLI and location tracker."""

    alerts_enabled: bool = False
    distance_unit: DistanceUnit = DistanceUnit.MILES
    gps_update_interval: int = 300  # seconds, 0 disables tracking
    enter_radius: float = 1.0  # miles
    exit_radius: float = 3.0  # miles
    bbox_buffer: float = 2000.0  # meters
    log_level: str = "WARNING"
    metrics: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RideSettings":
        """
        Build settings from a mapping, falling back to defaults for missing
        or invalid values. A missing alerts flag means alerts are disabled.
        """
        settings = cls()
        known = {f.name for f in fields(cls)}

        for raw_key, value in data.items():
            key = _SETTINGS_ALIASES.get(raw_key, raw_key)
            if key not in known:
                logger.debug(f"Ignoring unknown setting {raw_key!r}")
                continue
            try:
                setattr(settings, key, _coerce(key, value))
            except (TypeError, ValueError) as e:
                logger.warning(f"Invalid value for setting {raw_key!r}: {e}; using default")

        return settings

    def with_overrides(self, **overrides: Any) -> "RideSettings":
        """
        Return a copy with the non-None overrides applied.

        Raises:
            TypeError, ValueError: If an override is not a valid value
        """
        return replace(
            self,
            **{k: _coerce(k, v) for k, v in overrides.items() if v is not None},
        )

    def validate_radii(self) -> None:
        """
        Raises:
            ValueError: If the enter radius is not smaller than the exit radius
        """
        if self.enter_radius >= self.exit_radius:
            raise ValueError(
                f"enter radius ({self.enter_radius} miles) must be smaller than "
                f"exit radius ({self.exit_radius} miles)"
            )


def _coerce(key: str, value: Any) -> Any:
    if key in ("alerts_enabled", "metrics"):
        if not isinstance(value, bool):
            raise TypeError(f"expected a boolean, got {value!r}")
        return value
    if key == "distance_unit":
        if isinstance(value, DistanceUnit):
            return value
        return DistanceUnit.parse(value)
    if key == "gps_update_interval":
        interval = int(value)
        if interval < 0:
            raise ValueError(f"interval must not be negative, got {interval}")
        return interval
    if key in ("enter_radius", "exit_radius", "bbox_buffer"):
        number = float(value)
        if number <= 0:
            raise ValueError(f"must be positive, got {number}")
        return number
    if key == "log_level":
        level = str(value).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return level
    return value


def load_settings(filename: str) -> RideSettings:
    """
    Load settings from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist.
        PermissionError: If file can't be read.
        ValueError: If the file is not a JSON object.
    """
    logger.debug(f"Reading settings file: {filename}")
    with open(filename, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {filename} must contain a JSON object")
    return RideSettings.from_dict(data)
