#!/usr/bin/env python3
"""Data structures and the official checkpoint list for the STP route."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from enum import Enum
import logging

from .geometry import Position

logger = logging.getLogger(__name__)


class CheckpointType(Enum):
    """Enumeration for checkpoint kinds along the route."""

    START = "start"
    REST_STOP = "rest-stop"
    MINI_STOP = "mini-stop"
    FINISH = "finish"

    def __str__(self) -> str:
        return self.value.replace("-", " ").title()


class RouteFilter(Enum):
    """Enumeration for the checkpoint list filters."""

    ALL = "all"
    REST_STOPS = "rest"
    MINI_STOPS = "mini"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Checkpoint:
    """A fixed stop along the route, identified by a stable slug."""

    id: str
    name: str
    mile: float
    kind: CheckpointType
    latitude: float
    longitude: float
    saturday_hours: Optional[str] = None
    sunday_hours: Optional[str] = None
    amenities: Tuple[str, ...] = field(default_factory=tuple)
    location: str = ""
    notes: str = ""

    @property
    def position(self) -> Position:
        return Position(latitude=self.latitude, longitude=self.longitude)

    def get_short_description(self) -> str:
        """Get a short description such as "Rest Stop Spanaway Middle School (mile 55)"."""
        return f"{self.kind} {self.name} (mile {self.mile:g})"


def validate_checkpoints(checkpoints: Sequence[Checkpoint]) -> None:
    """
    Check the invariants of a checkpoint list.

    Args:
        checkpoints: Checkpoints in route order

    Raises:
        ValueError: If the list is empty, has duplicate ids, negative mile
            markers, or is not ordered by ascending mile
    """
    if not checkpoints:
        raise ValueError("Checkpoint list cannot be empty")

    seen = set()
    previous_mile = None
    for checkpoint in checkpoints:
        if checkpoint.id in seen:
            raise ValueError(f"Duplicate checkpoint id: {checkpoint.id}")
        seen.add(checkpoint.id)

        if checkpoint.mile < 0:
            raise ValueError(
                f"Checkpoint {checkpoint.id} has negative mile {checkpoint.mile}"
            )
        if previous_mile is not None and checkpoint.mile < previous_mile:
            raise ValueError(
                f"Checkpoint {checkpoint.id} at mile {checkpoint.mile} is out of "
                f"route order (previous mile {previous_mile})"
            )
        previous_mile = checkpoint.mile


def filter_checkpoints(
    checkpoints: Iterable[Checkpoint], route_filter: RouteFilter
) -> List[Checkpoint]:
    """
    Filter checkpoints the way the route list does.

    The rest stop filter keeps the start and finish, since both offer full
    services.
    """
    if route_filter == RouteFilter.REST_STOPS:
        kinds = {CheckpointType.START, CheckpointType.REST_STOP, CheckpointType.FINISH}
        return [c for c in checkpoints if c.kind in kinds]
    if route_filter == RouteFilter.MINI_STOPS:
        return [c for c in checkpoints if c.kind == CheckpointType.MINI_STOP]
    return list(checkpoints)


# Official STP 2026 checkpoints
STP_CHECKPOINTS: Tuple[Checkpoint, ...] = (
    Checkpoint(
        id="seattle-uw-stadium",
        name="Seattle - UW Stadium",
        mile=0,
        kind=CheckpointType.START,
        latitude=47.65592,
        longitude=-122.30085,
        saturday_hours="4:45-7:15 AM",
        amenities=("restroom", "bag drop"),
        location="Parking Lot E-18, University of Washington",
        notes="Packet pickup Friday 6-9 PM or Saturday morning. Arrive early for best start position.",
    ),
    Checkpoint(
        id="seward-park",
        name="Seward Park",
        mile=10,
        kind=CheckpointType.MINI_STOP,
        latitude=47.54888,
        longitude=-122.25748,
        saturday_hours="5:15-8:30 AM",
        amenities=("bike support", "restroom"),
        location="Seward Park, Seattle",
        notes="No host services. Mechanic and restrooms available.",
    ),
    Checkpoint(
        id="ikea-renton",
        name="IKEA Renton",
        mile=19,
        kind=CheckpointType.REST_STOP,
        latitude=47.44362,
        longitude=-122.22777,
        saturday_hours="5:30-9 AM",
        sunday_hours="Closed",
        amenities=("free food", "water", "restroom", "medical", "bike support"),
        location="IKEA, Renton, WA",
        notes="First major rest stop. Free food and full services.",
    ),
    Checkpoint(
        id="puyallup-kalles-junior-high",
        name="Puyallup - Kalles Junior High",
        mile=42,
        kind=CheckpointType.MINI_STOP,
        latitude=47.18681,
        longitude=-122.28800,
        saturday_hours="6 AM-12 PM",
        amenities=("food purchase", "water", "restroom"),
        location="Kalles Junior High School, Puyallup, WA",
        notes="Food and drinks available for purchase.",
    ),
    Checkpoint(
        id="spanaway-middle-school",
        name="Spanaway Middle School",
        mile=55,
        kind=CheckpointType.REST_STOP,
        latitude=47.11504,
        longitude=-122.42719,
        saturday_hours="7 AM-2 PM",
        sunday_hours="Closed",
        amenities=("free food", "water", "restroom", "medical", "bike support"),
        location="Spanaway Middle School, Spanaway, WA",
        notes="Full-service rest stop with free food.",
    ),
    Checkpoint(
        id="mckenna-elementary",
        name="McKenna Elementary",
        mile=71,
        kind=CheckpointType.MINI_STOP,
        latitude=46.93872,
        longitude=-122.55434,
        saturday_hours="8 AM-2 PM",
        amenities=("food purchase", "water", "restroom"),
        location="McKenna Elementary School, McKenna, WA",
        notes="Standard mini-stop services.",
    ),
    Checkpoint(
        id="yelm-city-park",
        name="Yelm City Park",
        mile=74,
        kind=CheckpointType.MINI_STOP,
        latitude=46.94024,
        longitude=-122.60936,
        saturday_hours="8 AM-2 PM",
        amenities=("restroom",),
        location="Yelm City Park, Yelm, WA",
        notes="Porta-potties only. Limited services.",
    ),
    Checkpoint(
        id="rainier-mini-stop",
        name="Rainier Mini Stop",
        mile=77,
        kind=CheckpointType.MINI_STOP,
        latitude=46.88994,
        longitude=-122.68747,
        saturday_hours="9 AM-3 PM",
        amenities=("food purchase", "water", "restroom"),
        location="Rainier, WA",
        notes="New for 2025! Mini stop with food and drinks for purchase.",
    ),
    Checkpoint(
        id="tenino-city-park",
        name="Tenino City Park",
        mile=88,
        kind=CheckpointType.MINI_STOP,
        latitude=46.85553,
        longitude=-122.85245,
        saturday_hours="9 AM-4 PM",
        amenities=("food purchase", "water", "restroom"),
        location="Tenino City Park, Tenino, WA",
        notes="Standard mini-stop services.",
    ),
    Checkpoint(
        id="centralia-college",
        name="Centralia College (Midpoint)",
        mile=101,
        kind=CheckpointType.MINI_STOP,
        latitude=46.71534,
        longitude=-122.96060,
        saturday_hours="10 AM-7 PM",
        sunday_hours="6-9 AM",
        amenities=("food purchase", "water", "medical", "bike support", "overnight"),
        location="Centralia College, Centralia, WA",
        notes="Official midpoint! Medical and mechanical support. Two-day riders stay overnight here.",
    ),
    Checkpoint(
        id="chehalis-recreation-park",
        name="Chehalis Recreation Park",
        mile=109,
        kind=CheckpointType.REST_STOP,
        latitude=46.65003,
        longitude=-122.95552,
        saturday_hours="9:30 AM-2 PM",
        sunday_hours="6-10 AM (Mini-Stop)",
        amenities=("free food", "water", "restroom", "medical", "bike support"),
        location="Chehalis Recreation Park, Chehalis, WA",
        notes="REST STOP Saturday with free food & full services. Operates as MINI-STOP Sunday with limited services.",
    ),
    Checkpoint(
        id="vader",
        name="Vader",
        mile=129,
        kind=CheckpointType.MINI_STOP,
        latitude=46.40181,
        longitude=-122.96883,
        saturday_hours="10 AM-5 PM",
        sunday_hours="6 AM-12 PM",
        amenities=("free food", "water", "restroom"),
        location="Vader, WA",
        notes="Famous for free Vader Taters! Small town stop with local hospitality.",
    ),
    Checkpoint(
        id="castle-rock-high-school",
        name="Castle Rock High School",
        mile=138,
        kind=CheckpointType.MINI_STOP,
        latitude=46.28244,
        longitude=-122.91883,
        sunday_hours="6 AM-3 PM",
        amenities=("water", "restroom", "food purchase"),
        location="Castle Rock High School, Castle Rock, WA",
        notes="Sunday only. Running tap water, porta-potties, limited baked goods for sale.",
    ),
    Checkpoint(
        id="lexington-riverside-park",
        name="Lexington - Riverside Park",
        mile=147,
        kind=CheckpointType.REST_STOP,
        latitude=46.19102,
        longitude=-122.90493,
        saturday_hours="1-6 PM",
        sunday_hours="8 AM-2 PM",
        amenities=("free food", "water", "restroom", "medical", "bike support"),
        location="Riverside Park, Lexington, WA",
        notes="Full-service rest stop. Great place to refuel for the final push.",
    ),
    Checkpoint(
        id="goble-tavern",
        name="Goble Tavern",
        mile=163,
        kind=CheckpointType.MINI_STOP,
        latitude=46.01355,
        longitude=-122.87558,
        saturday_hours="1-6 PM",
        sunday_hours="10 AM-4 PM",
        amenities=("food purchase", "water"),
        location="Goble Tavern, Goble, OR",
        notes="Welcome to Oregon! Local tavern stop.",
    ),
    Checkpoint(
        id="st-helens-elementary",
        name="St. Helens Elementary",
        mile=177,
        kind=CheckpointType.REST_STOP,
        latitude=45.85506,
        longitude=-122.83817,
        saturday_hours="2-6 PM",
        sunday_hours="9 AM-5 PM",
        amenities=("free food", "water", "restroom", "medical", "bike support"),
        location="St. Helens Elementary School, St. Helens, OR",
        notes="Last major rest stop before Portland. Full services available.",
    ),
    Checkpoint(
        id="scappoose",
        name="Scappoose",
        mile=188,
        kind=CheckpointType.MINI_STOP,
        latitude=45.68283,
        longitude=-122.87401,
        saturday_hours="2-6 PM",
        sunday_hours="9 AM-5 PM",
        amenities=("water", "food purchase"),
        location="NW Boat Basin Rd, Scappoose, OR",
        notes="Free tap water hauled in. Other items may be for sale. Almost there!",
    ),
    Checkpoint(
        id="portland-holladay-park",
        name="Portland - Holladay Park",
        mile=206,
        kind=CheckpointType.FINISH,
        latitude=45.53076,
        longitude=-122.65358,
        saturday_hours="4-10 PM",
        sunday_hours="10 AM-6 PM",
        amenities=("finisher meal", "merchandise", "bag pickup"),
        location="Holladay Park, Portland, OR",
        notes="Congratulations, you made it! Finisher meal, merchandise pickup, and luggage retrieval available.",
    ),
)

validate_checkpoints(STP_CHECKPOINTS)

_CHECKPOINTS_BY_ID: Dict[str, Checkpoint] = {c.id: c for c in STP_CHECKPOINTS}


def get_checkpoint(checkpoint_id: str) -> Checkpoint:
    """
    Look up an official checkpoint by id.

    Raises:
        KeyError: If no checkpoint has the given id
    """
    try:
        return _CHECKPOINTS_BY_ID[checkpoint_id]
    except KeyError:
        raise KeyError(f"Unknown checkpoint id: {checkpoint_id}") from None
