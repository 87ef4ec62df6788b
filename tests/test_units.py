import pytest

from stproute.units import (
    DistanceUnit,
    format_distance,
    format_distance_int,
    meters_to_miles,
)


class TestFormatting:

    def test_miles(self):
        assert format_distance(0.9) == "0.9 mi"
        assert format_distance(0.94, DistanceUnit.MILES) == "0.9 mi"

    def test_kilometers(self):
        assert format_distance(1.0, DistanceUnit.KILOMETERS) == "1.6 km"
        assert format_distance(0.0, DistanceUnit.KILOMETERS) == "0.0 km"

    def test_whole_miles(self):
        assert format_distance_int(206) == "206 mi"
        assert format_distance_int(206, DistanceUnit.KILOMETERS) == "331 km"
        assert format_distance_int(55, DistanceUnit.KILOMETERS) == "88 km"


def test_meters_to_miles():
    assert meters_to_miles(1609.34) == pytest.approx(1.0)
    assert meters_to_miles(0) == 0


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Miles", DistanceUnit.MILES),
        ("mi", DistanceUnit.MILES),
        (" MILES ", DistanceUnit.MILES),
        ("Kilometers", DistanceUnit.KILOMETERS),
        ("km", DistanceUnit.KILOMETERS),
    ],
)
def test_parse(text, expected):
    assert DistanceUnit.parse(text) is expected


def test_parse_rejects_unknown_units():
    with pytest.raises(ValueError):
        DistanceUnit.parse("furlongs")


def test_abbreviation_and_str():
    assert DistanceUnit.MILES.abbreviation == "mi"
    assert DistanceUnit.KILOMETERS.abbreviation == "km"
    assert str(DistanceUnit.KILOMETERS) == "Kilometers"
