#!/usr/bin/env python3
"""
Location sources that feed the tracker.

A source hands out one sample per request. Transient failures such as signal
loss raise LocationUnavailableError and may be retried; a source that has no
more samples raises LocationSourceExhausted.
"""

from datetime import datetime
from typing import Iterable, List, NamedTuple, Optional, TextIO
import logging
import gpxpy
import gpxpy.gpx

from .geometry import Position

logger = logging.getLogger(__name__)


class LocationUnavailableError(Exception):
    """Raised when a location fix cannot be acquired right now."""


class LocationSourceExhausted(Exception):
    """Raised when a source will deliver no further samples."""


class LocationSample(NamedTuple):
    """A single location fix."""

    latitude: float
    longitude: float
    timestamp: Optional[datetime] = None

    @property
    def position(self) -> Position:
        return Position(latitude=self.latitude, longitude=self.longitude)


class LocationSource:
    """Base class for location providers."""

    def request_location(self) -> LocationSample:
        raise NotImplementedError


class StaticLocationSource(LocationSource):
    """Serves a fixed list of samples; None entries simulate a lost fix."""

    def __init__(self, samples: Iterable[Optional[LocationSample]]):
        self._samples = list(samples)
        self._index = 0

    def request_location(self) -> LocationSample:
        if self._index >= len(self._samples):
            raise LocationSourceExhausted("No more samples")
        sample = self._samples[self._index]
        self._index += 1
        if sample is None:
            raise LocationUnavailableError("No location fix")
        return sample


class GPXTrackSource(StaticLocationSource):
    """Replays the track points of a recorded ride."""

    def __init__(self, samples: List[LocationSample], interval: float = 0.0):
        """Initializes a GPXTrackSource.

        Args:
            samples: Track points in recorded order.
            interval: Minimum seconds of track time between delivered samples;
                0 delivers every point. Points without timestamps are always
                delivered.
        """
        self.track = samples
        super().__init__(self._thin(samples, interval))
        logger.debug(
            f"Replaying {len(self._samples)} of {len(samples)} track points "
            f"(interval {interval}s)"
        )

    @staticmethod
    def _thin(samples: List[LocationSample], interval: float) -> List[LocationSample]:
        if interval <= 0:
            return list(samples)

        thinned = []
        last_time = None
        for sample in samples:
            if sample.timestamp is None or last_time is None:
                thinned.append(sample)
                last_time = sample.timestamp
                continue
            if (sample.timestamp - last_time).total_seconds() >= interval:
                thinned.append(sample)
                last_time = sample.timestamp

        # Always finish at the end of the ride
        if samples and (not thinned or thinned[-1] is not samples[-1]):
            thinned.append(samples[-1])
        return thinned

    @classmethod
    def from_gpx(cls, file_input: TextIO, interval: float = 0.0) -> "GPXTrackSource":
        """
        Parse GPX data and concatenate all tracks/segments into a single ride.

        Args:
            file_input: File-like object containing GPX data
            interval: Minimum seconds of track time between samples

        Returns:
            GPXTrackSource replaying the ride

        Raises:
            ValueError: If the GPX data contains no track points.
            gpxpy.gpx.GPXException: If GPX file is malformed.
        """
        gpx_data = gpxpy.parse(file_input)

        samples = []
        for track in gpx_data.tracks:
            for segment in track.segments:
                for point in segment.points:
                    samples.append(
                        LocationSample(
                            latitude=point.latitude,
                            longitude=point.longitude,
                            timestamp=point.time,
                        )
                    )

        if not samples:
            raise ValueError("GPX file contains no track points")

        logger.debug(f"Parsed {len(samples)} track points from GPX file")
        return cls(samples, interval)

    @classmethod
    def from_file(cls, filename: str, interval: float = 0.0) -> "GPXTrackSource":
        """
        Load a GPX file for replay.

        Raises:
            FileNotFoundError: If file doesn't exist.
            PermissionError: If file can't be read.
            gpxpy.gpx.GPXException: If GPX file is malformed.
        """
        logger.debug(f"Reading GPX file: {filename}")
        with open(filename, "r", encoding="utf-8") as f:
            return cls.from_gpx(f, interval)
