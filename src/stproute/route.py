#!/usr/bin/env python3
"""
Route model built from the checkpoint list.
"""

from bisect import bisect_right
from math import cos, radians
from typing import List, Optional, Sequence, Tuple
import logging
from shapely.geometry import LineString, Point

from .checkpoint import Checkpoint, STP_CHECKPOINTS, validate_checkpoints
from .geometry import (
    Position,
    calculate_haversine_distance,
    coords_to_polyline,
    create_transverse_mercator_projection,
)
from .units import meters_to_miles

logger = logging.getLogger(__name__)


class Route:
    """The ride as a polyline through its checkpoints, with mile markers."""

    def __init__(self, checkpoints: Sequence[Checkpoint]):
        """Initializes a Route object.

        Args:
            checkpoints: Checkpoints in route order.

        Raises:
            ValueError: If there are fewer than two checkpoints or they are
                not in ascending mile order.
        """
        validate_checkpoints(checkpoints)
        if len(checkpoints) < 2:
            raise ValueError("Route must have at least two checkpoints")

        self.checkpoints = tuple(checkpoints)
        self.coords = [c.position for c in self.checkpoints]
        self.bbox = self._calculate_bbox()

        self.projection = create_transverse_mercator_projection(self.bbox)
        self.linestring: LineString = coords_to_polyline(self.coords, self.projection)

        # Projected distance of each checkpoint along the line
        self._vertex_distances = [0.0]
        line_coords = list(self.linestring.coords)
        for i in range(1, len(line_coords)):
            segment = Point(line_coords[i - 1]).distance(Point(line_coords[i]))
            self._vertex_distances.append(self._vertex_distances[-1] + segment)

    @classmethod
    def from_checkpoints(
        cls, checkpoints: Sequence[Checkpoint] = STP_CHECKPOINTS
    ) -> "Route":
        return cls(checkpoints)

    @property
    def total_miles(self) -> float:
        return self.checkpoints[-1].mile - self.checkpoints[0].mile

    def _calculate_bbox(self) -> Tuple[float, float, float, float]:
        """Unbuffered (south, west, north, east) bounding box in decimal degrees."""
        latitudes = [coord.latitude for coord in self.coords]
        longitudes = [coord.longitude for coord in self.coords]
        return (min(latitudes), min(longitudes), max(latitudes), max(longitudes))

    def get_bbox(self, buffer: float = 0.0) -> Tuple[float, float, float, float]:
        """
        Get bounding box for this route, optionally with a buffer.

        Args:
            buffer: Buffer distance in meters (default: 0.0)

        Returns:
            Tuple of (south, west, north, east) in decimal degrees
        """
        if buffer == 0.0:
            return self.bbox

        min_lat, min_lon, max_lat, max_lon = self.bbox

        # 1 degree latitude ≈ 111 km; longitude scaled by the average latitude
        avg_lat = (min_lat + max_lat) / 2
        lat_buffer = buffer / 111000.0
        lon_buffer = buffer / (111000.0 * abs(cos(radians(avg_lat))))

        return (
            max(-90.0, min_lat - lat_buffer),
            max(-180.0, min_lon - lon_buffer),
            min(90.0, max_lat + lat_buffer),
            min(180.0, max_lon + lon_buffer),
        )

    def nearest_checkpoints(
        self, position: Position, limit: Optional[int] = None
    ) -> List[Tuple[Checkpoint, float]]:
        """
        Checkpoints sorted by great-circle distance from a position.

        Args:
            position: The rider's position
            limit: Optional maximum number of results

        Returns:
            List of (checkpoint, distance in miles), nearest first
        """
        ranked = sorted(
            (
                (c, meters_to_miles(calculate_haversine_distance(position, c.position)))
                for c in self.checkpoints
            ),
            key=lambda item: item[1],
        )
        return ranked if limit is None else ranked[:limit]

    def nearest_checkpoint(self, position: Position) -> Tuple[Checkpoint, float]:
        return self.nearest_checkpoints(position, limit=1)[0]

    def progress_miles(self, position: Position) -> float:
        """
        Estimate how far along the route a position is, in route miles.

        The position is projected onto the checkpoint polyline and the mile
        markers of the surrounding checkpoints are interpolated, so the result
        follows the published mile markers rather than straight-line distance.
        """
        x, y = self.projection(position.longitude, position.latitude)
        along = self.linestring.project(Point(x, y))

        # Projections past either end clamp onto the end points
        if along >= self.linestring.length - 1e-6:
            return self.checkpoints[-1].mile

        index = bisect_right(self._vertex_distances, along) - 1
        index = max(0, min(index, len(self.checkpoints) - 2))

        start_distance = self._vertex_distances[index]
        segment_length = self._vertex_distances[index + 1] - start_distance
        start_mile = self.checkpoints[index].mile
        end_mile = self.checkpoints[index + 1].mile

        if segment_length <= 0:
            return start_mile

        t = min(max((along - start_distance) / segment_length, 0.0), 1.0)
        return start_mile + t * (end_mile - start_mile)

    def next_checkpoint(self, position: Position) -> Optional[Checkpoint]:
        """The first checkpoint beyond the rider's progress, or None past the finish."""
        progress = self.progress_miles(position)
        for checkpoint in self.checkpoints:
            if checkpoint.mile > progress:
                return checkpoint
        return None

    def miles_remaining(self, position: Position) -> float:
        return max(0.0, self.checkpoints[-1].mile - self.progress_miles(position))

    def __len__(self) -> int:
        """Return number of checkpoints on the route."""
        return len(self.checkpoints)

    def __getitem__(self, index):
        return self.checkpoints[index]

    def __iter__(self):
        return iter(self.checkpoints)
