"""
Geographic helpers for checkpoint distance calculations.

This module provides the Position type, great-circle distances between
positions, and the projection helpers used to build a planar route line.
"""

from typing import List, Optional, Tuple, NamedTuple
import math
from shapely.geometry import LineString
import pyproj

# Mean Earth radius in meters
EARTH_RADIUS = 6371000.0


class Position(NamedTuple):
    """Represents a geographic position with latitude and longitude."""

    latitude: float
    longitude: float


def is_valid_position(position: Position) -> bool:
    """
    Check whether a position is usable for distance calculations.

    Args:
        position: Position to check

    Returns:
        True if both coordinates are finite and within WGS84 bounds
    """
    lat, lon = position.latitude, position.longitude
    if lat is None or lon is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def calculate_haversine_distance(coord1: Position, coord2: Position) -> float:
    """
    Calculate Haversine distance between two coordinates.

    Uses Haversine formula for great circle distance along the Earth's surface.

    Args:
        coord1: First coordinate position
        coord2: Second coordinate position

    Returns:
        Distance in meters
    """
    lat1, lon1 = math.radians(coord1.latitude), math.radians(coord1.longitude)
    lat2, lon2 = math.radians(coord2.latitude), math.radians(coord2.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )

    # Clamp for rounding on near-antipodal points
    return 2 * EARTH_RADIUS * math.asin(math.sqrt(min(a, 1.0)))


def create_transverse_mercator_projection(
    bbox: Tuple[float, float, float, float],
) -> pyproj.Proj:
    """
    Create a custom transverse mercator projection centered on the given bounding box.

    Args:
        bbox: Tuple of (south, west, north, east) in decimal degrees

    Returns:
        pyproj.Proj object for the custom projection
    """
    south, west, north, east = bbox

    center_lat = (south + north) / 2.0
    center_lon = (west + east) / 2.0

    proj_string = f"+proj=tmerc +lat_0={center_lat} +lon_0={center_lon} +k=1 +x_0=0 +y_0=0 +datum=WGS84 +units=m +no_defs"
    return pyproj.Proj(proj_string)


def coords_to_polyline(
    positions: List[Position], projection: Optional[pyproj.Proj] = None
) -> LineString:
    """
    Convert a list of positions to a Shapely LineString.

    Args:
        positions: List of Position objects
        projection: Optional pyproj.Proj object for coordinate transformation.
                   If None, uses (longitude, latitude) coordinates directly.

    Returns:
        LineString object in projected coordinates if projection is provided,
        otherwise in geographic coordinates

    Raises:
        ValueError: If positions has less than 2 points
    """
    if not positions or len(positions) < 2:
        raise ValueError("At least two positions are required to create a LineString.")

    lons = [pos.longitude for pos in positions]
    lats = [pos.latitude for pos in positions]

    if projection is not None:
        x_coords, y_coords = projection(lons, lats)
        return LineString(list(zip(x_coords, y_coords)))

    return LineString(list(zip(lons, lats)))
