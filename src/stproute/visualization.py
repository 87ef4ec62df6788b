#!/usr/bin/env python3
"""
Route visualization using folium maps.
"""

from typing import Optional, Sequence
import logging
import folium
from folium.template import Template

from .checkpoint import Checkpoint, CheckpointType
from .config import RideSettings
from .metrics import RideMetrics
from .route import Route
from .sources import LocationSample
from .units import format_distance_int

logger = logging.getLogger(__name__)

ROUTE_COLOR = "#F28C28"
TRACK_COLOR = "#2E86AB"

# folium.Icon colors per checkpoint kind
MARKER_COLORS = {
    CheckpointType.START: "green",
    CheckpointType.REST_STOP: "blue",
    CheckpointType.MINI_STOP: "orange",
    CheckpointType.FINISH: "red",
}

MARKER_ICONS = {
    CheckpointType.START: "play",
    CheckpointType.REST_STOP: "cutlery",
    CheckpointType.MINI_STOP: "tint",
    CheckpointType.FINISH: "flag",
}


class CheckpointLegend(folium.MacroElement):
    """Custom legend for the route map with dynamic counts."""

    def __init__(
        self,
        checkpoints: Sequence[Checkpoint],
        metrics: Optional[RideMetrics] = None,
    ):
        super().__init__()
        self.rest_stop_count = sum(
            1 for c in checkpoints if c.kind == CheckpointType.REST_STOP
        )
        self.mini_stop_count = sum(
            1 for c in checkpoints if c.kind == CheckpointType.MINI_STOP
        )
        self.has_track = metrics is not None
        self.alerted_count = len(metrics.alerted_checkpoints) if metrics else 0

        self._template = Template(
            """
        {% macro html(this, kwargs) %}
        <div id="checkpoint-legend" style="
            position: fixed;
            bottom: 50px;
            left: 50px;
            width: 230px;
            background-color: white;
            border: 2px solid grey;
            z-index: 9999;
            font-size: 13px;
            padding: 12px;
            font-family: Arial, sans-serif;
            border-radius: 5px;
            box-shadow: 0 2px 5px rgba(0,0,0,0.2);
            box-sizing: border-box;
        ">
            <b>Legend</b><br>
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: #F28C28; font-weight: bold; font-size: 18px;">—</span>
                STP Route
            </div>
            <div style="margin: 4px 0; line-height: 1.3;">
                Rest Stops ({{ this.rest_stop_count }})
            </div>
            <div style="margin: 4px 0; line-height: 1.3;">
                Mini Stops ({{ this.mini_stop_count }})
            </div>
            {% if this.has_track %}
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: #2E86AB; font-weight: bold; font-size: 18px;">—</span>
                Your Ride
            </div>
            <div style="margin: 4px 0; line-height: 1.3;">
                Checkpoint Alerts ({{ this.alerted_count }})
            </div>
            {% endif %}
        </div>
        {% endmacro %}
        """
        )


def checkpoint_to_html(checkpoint: Checkpoint, settings: RideSettings) -> str:
    """
    Format a checkpoint's details into HTML for popup display.

    Args:
        checkpoint: The Checkpoint to format
        settings: Settings providing the distance unit

    Returns:
        HTML-formatted string
    """
    unit = settings.distance_unit
    html_parts = [
        f"<b>{checkpoint.name}</b>",
        f"<br>{checkpoint.kind} &middot; {format_distance_int(int(checkpoint.mile), unit)}",
    ]

    if checkpoint.location:
        html_parts.append(f"<br><i>{checkpoint.location}</i>")

    if checkpoint.saturday_hours or checkpoint.sunday_hours:
        html_parts.append("<br><b>Hours:</b>")
        if checkpoint.saturday_hours:
            html_parts.append(f"<br>&nbsp;&nbsp;Saturday: {checkpoint.saturday_hours}")
        if checkpoint.sunday_hours:
            html_parts.append(f"<br>&nbsp;&nbsp;Sunday: {checkpoint.sunday_hours}")

    if checkpoint.amenities:
        html_parts.append(f"<br><b>Amenities:</b> {', '.join(checkpoint.amenities)}")

    if checkpoint.notes:
        html_parts.append(f"<br>{checkpoint.notes}")

    return "".join(html_parts)


def create_route_map(
    route: Route,
    output_filename: str,
    settings: RideSettings,
    checkpoints: Optional[Sequence[Checkpoint]] = None,
    track: Optional[Sequence[LocationSample]] = None,
    metrics: Optional[RideMetrics] = None,
) -> None:
    """
    Create an interactive map showing the route, its checkpoints and an
    optional recorded ride, save as HTML.

    Args:
        route: Route built from the checkpoints
        output_filename: Path where HTML map file should be saved
        settings: RideSettings with the map buffer and distance unit
        checkpoints: Checkpoints to mark (default: all on the route)
        track: Optional samples of a replayed ride
        metrics: Optional ride metrics; alerted checkpoints are highlighted

    Raises:
        ValueError: If route is empty
    """
    if len(route) == 0:
        raise ValueError("Cannot create map for empty route")

    if checkpoints is None:
        checkpoints = route.checkpoints

    south, west, north, east = route.get_bbox(settings.bbox_buffer)
    center_lat = (south + north) / 2
    center_lon = (west + east) / 2

    logger.debug(f"Creating map centered at ({center_lat:.4f}, {center_lon:.4f})")

    route_map = folium.Map(
        location=[center_lat, center_lon],
        tiles=None,
    )

    folium.TileLayer(
        tiles="CartoDB positron",
        attr=(
            "&copy; <a href='https://www.openstreetmap.org/copyright'>OpenStreetMap</a> "
            "contributors &copy; <a href='https://carto.com/attributions'>CARTO</a>"
        ),
        name="Standard",
        control=True,
        show=True,
    ).add_to(route_map)

    folium.TileLayer(
        tiles="https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        attr=(
            "Tiles &copy; Esri &mdash; Source: Esri, i-cubed, USDA, USGS, AEX, GeoEye, "
            "Getmapping, Aerogrid, IGN, IGP, UPR-EGP, and the GIS User Community"
        ),
        name="Satellite",
        control=True,
        show=False,
    ).add_to(route_map)

    folium.LayerControl().add_to(route_map)

    folium.PolyLine(
        [[pos.latitude, pos.longitude] for pos in route.coords],
        color=ROUTE_COLOR,
        weight=4,
        opacity=0.8,
        popup="STP Route",
        z_index=1,
    ).add_to(route_map)

    if track:
        folium.PolyLine(
            [[s.latitude, s.longitude] for s in track],
            color=TRACK_COLOR,
            weight=2,
            opacity=0.7,
            popup="Your Ride",
            z_index=2,
        ).add_to(route_map)

    alerted = set(metrics.alerted_checkpoints) if metrics else set()

    for checkpoint in checkpoints:
        popup_text = checkpoint_to_html(checkpoint, settings)
        if checkpoint.id in alerted:
            popup_text = "<b>Alert sent</b><br>" + popup_text

        folium.Marker(
            [checkpoint.latitude, checkpoint.longitude],
            popup=folium.Popup(popup_text, max_width=300),
            tooltip=f"Mile {int(checkpoint.mile)}: {checkpoint.name}",
            icon=folium.Icon(
                color="purple" if checkpoint.id in alerted else MARKER_COLORS[checkpoint.kind],
                icon=MARKER_ICONS[checkpoint.kind],
            ),
        ).add_to(route_map)

    route_map.add_child(CheckpointLegend(checkpoints, metrics))

    route_map.fit_bounds([[south, west], [north, east]])

    route_map.save(output_filename)

    logger.debug(
        f"Map saved to {output_filename} with {len(checkpoints)} checkpoints"
        + (f" and {len(track)} track points" if track else "")
    )
