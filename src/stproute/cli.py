#!/usr/bin/env python3
"""
STP Checkpoint Companion
This script lists the Seattle to Portland checkpoints, replays a recorded GPX
ride through the checkpoint alert logic, and generates an interactive HTML map
of the route.

Requirements:
    pip install gpxpy folium requests shapely pyproj

"""

from typing import List, Optional, Sequence, Tuple
import webbrowser
import argparse
import logging
import sys
import os
from gpxpy import gpx

from . import __version__
from . import visualization
from .checkpoint import STP_CHECKPOINTS, Checkpoint, RouteFilter, filter_checkpoints
from .config import RideSettings, load_settings
from .file_utils import generate_output_filename
from .geometry import Position, is_valid_position
from .metrics import collect_metrics, log_metrics
from .notifications import (
    CollectingNotificationSink,
    FanOutNotificationSink,
    NotificationSink,
    WebhookNotificationSink,
)
from .proximity import ProximityNotifier, ProximityState
from .route import Route
from .sources import GPXTrackSource
from .tracker import LocationTracker, TrackerStats
from .units import DistanceUnit, format_distance, format_distance_int

logger = logging.getLogger("stproute")


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Seattle to Portland checkpoint alerts and route map",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "filename",
        type=str,
        nargs="?",
        help="GPX file of a ride to replay (omit to just list checkpoints)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output HTML map file (default: auto-generated based on input filename)",
    )
    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help="JSON settings file (alerts flag, distance unit, GPS interval)",
    )
    parser.add_argument(
        "--unit",
        type=str,
        default=None,
        choices=["miles", "mi", "kilometers", "km"],
        help="Distance unit for display (default: miles)",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="GPS update interval in seconds; 0 disables tracking (default: 300)",
    )
    parser.add_argument(
        "--enter-radius",
        type=float,
        default=None,
        help="Alert when within this many miles of a checkpoint (default: 1.0)",
    )
    parser.add_argument(
        "--exit-radius",
        type=float,
        default=None,
        help="Re-arm a checkpoint alert beyond this many miles (default: 3.0)",
    )
    parser.add_argument(
        "--no-alerts",
        action="store_true",
        help="Disable checkpoint alerts",
    )
    parser.add_argument(
        "--webhook",
        type=str,
        default=None,
        help="Also POST each alert as JSON to this URL",
    )
    parser.add_argument(
        "--filter",
        type=str,
        default=RouteFilter.ALL.value,
        choices=[f.value for f in RouteFilter],
        help="Checkpoints to list and map: all, rest (rest stops, start and finish) or mini (default: all)",
    )
    parser.add_argument(
        "--position",
        type=str,
        default=None,
        metavar="LAT,LON",
        help="Show the nearest checkpoints and route progress for this position",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--no-map",
        action="store_true",
        help="Don't write an HTML map",
    )
    parser.add_argument(
        "--no-open",
        action="store_true",
        help="Don't automatically open the HTML file in browser",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Output structured metrics after processing",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"stproute {__version__}",
    )
    return parser


def build_settings(args: argparse.Namespace) -> RideSettings:
    """
    Combine the optional settings file with command-line overrides.

    Alerts are on for the CLI unless --no-alerts is given or the settings
    file turns them off.

    Raises:
        FileNotFoundError, PermissionError: If the settings file cannot be read
        TypeError, ValueError: If the settings file or an override is invalid
    """
    if args.settings:
        settings = load_settings(args.settings)
    else:
        settings = RideSettings(alerts_enabled=True)

    if args.no_alerts:
        settings.alerts_enabled = False

    settings = settings.with_overrides(
        distance_unit=DistanceUnit.parse(args.unit) if args.unit else None,
        gps_update_interval=args.interval,
        enter_radius=args.enter_radius,
        exit_radius=args.exit_radius,
        log_level=args.log_level,
        metrics=True if args.metrics else None,
    )
    settings.validate_radii()
    return settings


def parse_position(text: str) -> Position:
    """
    Parse "LAT,LON" into a Position.

    Raises:
        ValueError: If the text is malformed or out of range
    """
    parts = text.split(",")
    if len(parts) != 2:
        raise ValueError(f"Expected LAT,LON, got {text!r}")
    position = Position(latitude=float(parts[0]), longitude=float(parts[1]))
    if not is_valid_position(position):
        raise ValueError(f"Position out of range: {text!r}")
    return position


def determine_output_filename(
    input_filename: Optional[str], output_arg: Optional[str]
) -> str:
    """
    Determine the output filename to use.

    Raises:
        RuntimeError: If auto-generation fails
        ValueError: If constructed filename would be illegal
    """
    if output_arg is not None:
        return output_arg

    try:
        return generate_output_filename(input_filename)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Failed to generate output filename: {e}")
        raise


def open_file_in_browser(filename: str) -> None:
    """
    Open the specified file in the default browser.

    Args:
        filename: Path to the file to open
    """
    abs_path = os.path.abspath(filename)
    try:
        webbrowser.open(f"file://{abs_path}")
        logger.debug(f"Opening {abs_path} in your default browser...")
    except Exception as e:
        logger.warning(f"Could not automatically open browser: {e}")
        logger.warning(f"Please manually open {abs_path}")


def setup_logging(settings: RideSettings) -> None:
    """Setup logging configuration."""
    if hasattr(sys.stdout, "reconfigure") and sys.stdout.encoding != "utf-8":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            if hasattr(sys.stderr, "reconfigure") and sys.stderr.encoding != "utf-8":
                sys.stderr.reconfigure(encoding="utf-8")
        except Exception as e:
            logger.debug(f"Could not reconfigure stdout/stderr to UTF-8: {e}")
    level = getattr(logging, settings.log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure the root logger so all modules inherit the configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Suppress overly verbose third-party logging
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def print_checkpoints(
    checkpoints: Sequence[Checkpoint],
    unit: DistanceUnit,
    distances: Optional[List[Tuple[Checkpoint, float]]] = None,
) -> None:
    """
    Print the checkpoint list, aligned by mile marker.

    Args:
        checkpoints: Checkpoints to print, in route order
        unit: Distance unit for display
        distances: Optional (checkpoint, miles) pairs; printed in that order
            with the distance from the rider appended
    """
    if not checkpoints:
        print("No checkpoints match the filter")
        return

    rows = distances if distances is not None else [(c, None) for c in checkpoints]
    mile_width = max(len(format_distance_int(int(c.mile), unit)) for c, _ in rows)
    kind_width = max(len(str(c.kind)) for c, _ in rows)

    print(f"STP checkpoints ({len(checkpoints)}):")
    for checkpoint, distance in rows:
        line = (
            f"{format_distance_int(int(checkpoint.mile), unit):>{mile_width}}  "
            f"{str(checkpoint.kind):<{kind_width}}  {checkpoint.name}"
        )
        if distance is not None:
            line += f" ({format_distance(distance, unit)} away)"
        print(line)


def print_position_summary(route: Route, position: Position, unit: DistanceUnit) -> None:
    """Print route progress and the next checkpoint for a position."""
    progress = route.progress_miles(position)
    print(
        f"Route progress: {format_distance(progress, unit)} of "
        f"{format_distance_int(int(route.total_miles), unit)} "
        f"({format_distance(route.miles_remaining(position), unit)} to go)"
    )
    upcoming = route.next_checkpoint(position)
    if upcoming is None:
        print("Next checkpoint: none, you made it!")
    else:
        print(
            f"Next checkpoint: {upcoming.name} at "
            f"{format_distance_int(int(upcoming.mile), unit)}"
        )


def replay_ride(
    filename: str, settings: RideSettings, sinks: Sequence[NotificationSink]
) -> TrackerStats:
    """
    Replay a GPX ride through the tracker and print each alert.

    Raises:
        FileNotFoundError, PermissionError, gpx.GPXException, ValueError:
            If the GPX file cannot be loaded
    """
    source = GPXTrackSource.from_file(filename, interval=settings.gps_update_interval)
    logger.info(f"Loaded GPX ride with {len(source.track)} points")

    notifier = ProximityNotifier(
        STP_CHECKPOINTS,
        state=ProximityState(),
        enter_radius=settings.enter_radius,
        exit_radius=settings.exit_radius,
    )
    collector = CollectingNotificationSink()
    sink = FanOutNotificationSink([collector, *sinks])

    tracker = LocationTracker(source, notifier, sink, settings, retry_delay=0.0)
    stats = tracker.run(realtime=False)

    if not tracker.enabled:
        print("GPS tracking is disabled (interval = 0); no alerts replayed")
    elif not settings.alerts_enabled:
        print("Checkpoint alerts are disabled")
    elif not collector.delivered:
        print("No checkpoint alerts along this ride")
    else:
        print(f"Checkpoint alerts ({len(collector.delivered)}):")
        for notification in collector.delivered:
            print(f"  {notification.title} {notification.body}")

    return stats


def main():
    """
    Parses command-line arguments, lists checkpoints, replays an optional
    GPX ride, and generates an interactive map.
    """
    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        settings = build_settings(args)
    except (FileNotFoundError, PermissionError, TypeError, ValueError) as e:
        print(f"Cannot load settings: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(settings)

    route = Route.from_checkpoints(STP_CHECKPOINTS)
    checkpoints = filter_checkpoints(STP_CHECKPOINTS, RouteFilter(args.filter))
    unit = settings.distance_unit

    if args.position:
        try:
            position = parse_position(args.position)
        except ValueError as e:
            logger.error(f"Invalid --position: {e}")
            sys.exit(1)
        wanted = {c.id for c in checkpoints}
        nearest = [
            (c, d) for c, d in route.nearest_checkpoints(position) if c.id in wanted
        ]
        print_checkpoints(checkpoints, unit, nearest)
        print_position_summary(route, position, unit)
    else:
        print_checkpoints(checkpoints, unit)

    stats = None
    if args.filename:
        sinks: List[NotificationSink] = []
        if args.webhook:
            sinks.append(WebhookNotificationSink(args.webhook))
        try:
            stats = replay_ride(args.filename, settings, sinks)
        except FileNotFoundError:
            logger.error(f"GPX file not found: {args.filename}")
            sys.exit(1)
        except PermissionError:
            logger.error(f"Cannot read GPX file (permission denied): {args.filename}")
            sys.exit(1)
        except gpx.GPXException as e:
            logger.error(f"Invalid GPX file: {e}")
            sys.exit(1)
        except ValueError as e:
            logger.error(f"Cannot replay GPX file: {e}")
            sys.exit(1)

    metrics = collect_metrics(stats, STP_CHECKPOINTS) if stats is not None else None

    if not args.no_map:
        try:
            output_filename = determine_output_filename(args.filename, args.output)
            logger.debug(f"Output filename: {output_filename}")
        except (RuntimeError, ValueError):
            sys.exit(1)

        try:
            visualization.create_route_map(
                route,
                output_filename,
                settings,
                checkpoints=checkpoints,
                track=stats.track if stats is not None else None,
                metrics=metrics,
            )
        except Exception as e:
            logger.error(f"Failed to create map: {e}")
            sys.exit(1)

        if not args.no_open:
            open_file_in_browser(output_filename)

    if metrics is not None:
        log_metrics(metrics, settings)


if __name__ == "__main__":
    main()
