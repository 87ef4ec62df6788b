#!/usr/bin/env python3
"""
Tests for location sources and GPX replay.
"""

import io
import pytest
import gpxpy.gpx

from stproute.sources import (
    GPXTrackSource,
    LocationSample,
    LocationSourceExhausted,
    LocationUnavailableError,
    StaticLocationSource,
)


def make_gpx(points, with_times=True) -> str:
    """Build a one-segment GPX document from (lat, lon, seconds) tuples."""
    trkpts = []
    for lat, lon, seconds in points:
        time = ""
        if with_times:
            time = f"<time>2026-07-11T06:{seconds // 60:02d}:{seconds % 60:02d}Z</time>"
        trkpts.append(f'<trkpt lat="{lat}" lon="{lon}">{time}</trkpt>')
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<gpx version="1.1" creator="stproute-tests" xmlns="http://www.topografix.com/GPX/1/1">\n'
        "<trk><trkseg>\n" + "\n".join(trkpts) + "\n</trkseg></trk>\n</gpx>\n"
    )


class TestStaticLocationSource:

    def test_serves_samples_in_order(self):
        samples = [LocationSample(47.0, -122.0), LocationSample(47.1, -122.1)]
        source = StaticLocationSource(samples)
        assert source.request_location() == samples[0]
        assert source.request_location() == samples[1]
        with pytest.raises(LocationSourceExhausted):
            source.request_location()

    def test_none_simulates_lost_fix(self):
        source = StaticLocationSource([None, LocationSample(47.0, -122.0)])
        with pytest.raises(LocationUnavailableError):
            source.request_location()
        assert source.request_location().latitude == 47.0

    def test_sample_position(self):
        sample = LocationSample(47.11504, -122.42719)
        assert sample.position.latitude == 47.11504
        assert sample.timestamp is None


class TestGPXTrackSource:

    def test_parse_all_points(self):
        gpx = make_gpx([(47.0, -122.0, 0), (47.01, -122.0, 30), (47.02, -122.0, 60)])
        source = GPXTrackSource.from_gpx(io.StringIO(gpx))

        assert len(source.track) == 3
        first = source.request_location()
        assert (first.latitude, first.longitude) == (47.0, -122.0)
        assert first.timestamp is not None

    def test_interval_thins_by_track_time(self):
        points = [(47.0 + i * 0.01, -122.0, i * 60) for i in range(7)]
        source = GPXTrackSource.from_gpx(io.StringIO(make_gpx(points)), interval=150)

        delivered = []
        while True:
            try:
                delivered.append(source.request_location())
            except LocationSourceExhausted:
                break

        assert [round(s.latitude, 2) for s in delivered] == [47.0, 47.03, 47.06]

    def test_interval_keeps_the_final_point(self):
        points = [(47.0 + i * 0.01, -122.0, i * 60) for i in range(7)]
        source = GPXTrackSource.from_gpx(io.StringIO(make_gpx(points)), interval=200)

        delivered = [source.request_location() for _ in range(3)]
        assert [round(s.latitude, 2) for s in delivered] == [47.0, 47.04, 47.06]
        with pytest.raises(LocationSourceExhausted):
            source.request_location()

    def test_points_without_times_are_all_delivered(self):
        points = [(47.0, -122.0, 0), (47.01, -122.0, 0), (47.02, -122.0, 0)]
        source = GPXTrackSource.from_gpx(io.StringIO(make_gpx(points, with_times=False)), interval=300)
        delivered = [source.request_location() for _ in range(3)]
        assert len(delivered) == 3

    def test_empty_track(self):
        with pytest.raises(ValueError, match="no track points"):
            GPXTrackSource.from_gpx(io.StringIO(make_gpx([])))

    def test_malformed_gpx(self):
        with pytest.raises(gpxpy.gpx.GPXException):
            GPXTrackSource.from_gpx(io.StringIO("this is not gpx"))

    def test_from_file(self, tmp_path):
        path = tmp_path / "ride.gpx"
        path.write_text(make_gpx([(47.0, -122.0, 0), (47.01, -122.0, 30)]), encoding="utf-8")
        assert len(GPXTrackSource.from_file(str(path)).track) == 2

        with pytest.raises(FileNotFoundError):
            GPXTrackSource.from_file(str(tmp_path / "missing.gpx"))
