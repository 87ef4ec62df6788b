#!/usr/bin/env python3
"""
stproute - Checkpoint alerts and route maps for the Seattle to Portland ride.

This package provides the official STP checkpoint list, a proximity notifier
that alerts once per checkpoint approach, and tools to replay recorded rides
and visualize them on interactive maps.
"""
import importlib.metadata

__version__ = importlib.metadata.version("stproute")

# Import main classes for public API
from .checkpoint import Checkpoint, CheckpointType, STP_CHECKPOINTS
from .geometry import Position
from .proximity import CheckpointNotification, ProximityNotifier, ProximityState
from .route import Route
from .units import DistanceUnit

__all__ = [
    "Checkpoint",
    "CheckpointType",
    "STP_CHECKPOINTS",
    "CheckpointNotification",
    "ProximityNotifier",
    "ProximityState",
    "Position",
    "Route",
    "DistanceUnit",
]
