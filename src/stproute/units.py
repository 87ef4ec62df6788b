"""Distance units and rider-facing distance formatting."""

from enum import Enum

METERS_PER_MILE = 1609.34
KILOMETERS_PER_MILE = 1.60934


class DistanceUnit(Enum):
    """Enumeration for the rider's preferred distance unit."""

    MILES = "Miles"
    KILOMETERS = "Kilometers"

    def __str__(self) -> str:
        return self.value

    @property
    def abbreviation(self) -> str:
        return "km" if self is DistanceUnit.KILOMETERS else "mi"

    @classmethod
    def parse(cls, text: str) -> "DistanceUnit":
        """
        Parse a unit name such as "Miles", "mi", "kilometers" or "km".

        Raises:
            ValueError: If the text does not name a known unit
        """
        normalized = str(text).strip().lower()
        if normalized in ("miles", "mile", "mi"):
            return cls.MILES
        if normalized in ("kilometers", "kilometres", "kilometer", "km"):
            return cls.KILOMETERS
        raise ValueError(f"Unknown distance unit: {text!r}")


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE


def format_distance(miles: float, unit: DistanceUnit = DistanceUnit.MILES) -> str:
    """
    Format a distance with one decimal place in the rider's unit.

    Args:
        miles: Distance in miles
        unit: Unit to display

    Returns:
        String such as "0.9 mi" or "1.4 km"
    """
    if unit is DistanceUnit.KILOMETERS:
        return f"{miles * KILOMETERS_PER_MILE:.1f} km"
    return f"{miles:.1f} mi"


def format_distance_int(miles: int, unit: DistanceUnit = DistanceUnit.MILES) -> str:
    """Format a whole-mile distance, truncating kilometers to an integer."""
    if unit is DistanceUnit.KILOMETERS:
        return f"{int(miles * KILOMETERS_PER_MILE)} km"
    return f"{int(miles)} mi"
