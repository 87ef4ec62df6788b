#!/usr/bin/env python3
"""
Checkpoint proximity alerts.

Each checkpoint is either OUTSIDE (the initial state) or INSIDE. A checkpoint
moves to INSIDE, emitting one notification, when the rider comes within the
enter radius. It returns to OUTSIDE, silently, only once the rider is farther
away than the exit radius. Between the two radii the state is kept, so riding
back and forth across the enter radius does not repeat the alert.
"""

from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Set
import logging

from .checkpoint import Checkpoint
from .geometry import Position, calculate_haversine_distance
from .units import DistanceUnit, format_distance, meters_to_miles

logger = logging.getLogger(__name__)

DEFAULT_ENTER_RADIUS_MILES = 1.0
DEFAULT_EXIT_RADIUS_MILES = 3.0
NOTIFICATION_TITLE = "Checkpoint Ahead!"


class CheckpointNotification(NamedTuple):
    """An alert to hand to the notification sink."""

    identifier: str  # Unique per checkpoint so the sink can deduplicate
    title: str
    body: str
    checkpoint_id: str
    distance_miles: float


class ProximityState:
    """The set of checkpoint ids currently inside the alert radius."""

    def __init__(self, inside: Optional[Iterable[str]] = None):
        self._inside: Set[str] = set(inside or ())

    def __contains__(self, checkpoint_id: object) -> bool:
        return checkpoint_id in self._inside

    def __len__(self) -> int:
        return len(self._inside)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._inside))

    def mark_inside(self, checkpoint_id: str) -> None:
        self._inside.add(checkpoint_id)

    def mark_outside(self, checkpoint_id: str) -> None:
        self._inside.discard(checkpoint_id)

    def reset(self) -> None:
        """Return every checkpoint to OUTSIDE."""
        self._inside.clear()

    def __repr__(self) -> str:
        return f"ProximityState(inside={sorted(self._inside)!r})"


def notification_identifier(checkpoint: Checkpoint) -> str:
    return f"checkpoint-{checkpoint.id}"


class ProximityNotifier:
    """Turns location samples into one-shot checkpoint notifications."""

    def __init__(
        self,
        checkpoints: Sequence[Checkpoint],
        state: Optional[ProximityState] = None,
        enter_radius: float = DEFAULT_ENTER_RADIUS_MILES,
        exit_radius: float = DEFAULT_EXIT_RADIUS_MILES,
    ):
        """Initializes a ProximityNotifier.

        Args:
            checkpoints: The checkpoints to watch.
            state: Proximity state owned by the caller; a fresh empty state
                is created when omitted.
            enter_radius: Distance in miles at or below which a checkpoint alerts.
            exit_radius: Distance in miles beyond which a checkpoint re-arms.

        Raises:
            ValueError: If the radii are not positive or enter_radius is not
                smaller than exit_radius.
        """
        if enter_radius <= 0:
            raise ValueError(f"Enter radius must be positive, got {enter_radius} miles")
        if exit_radius <= enter_radius:
            raise ValueError(
                f"Exit radius ({exit_radius} miles) must be larger than "
                f"enter radius ({enter_radius} miles)"
            )
        self.checkpoints = tuple(checkpoints)
        self.state = state if state is not None else ProximityState()
        self.enter_radius = enter_radius
        self.exit_radius = exit_radius

    def distances_to(self, position: Position) -> Dict[str, float]:
        """
        Great-circle distance from a position to every checkpoint.

        Returns:
            Mapping of checkpoint id to distance in miles
        """
        return {
            checkpoint.id: meters_to_miles(
                calculate_haversine_distance(position, checkpoint.position)
            )
            for checkpoint in self.checkpoints
        }

    def evaluate(
        self,
        position: Position,
        alerts_enabled: bool,
        unit: DistanceUnit = DistanceUnit.MILES,
    ) -> List[CheckpointNotification]:
        """
        Evaluate one location sample.

        Args:
            position: The rider's current position
            alerts_enabled: When False, nothing is emitted and the state is
                left untouched
            unit: Unit used to format the distance in the notification body

        Returns:
            Notifications for every checkpoint that moved from OUTSIDE to INSIDE
        """
        if not alerts_enabled:
            return []

        notifications = []
        distances = self.distances_to(position)

        for checkpoint in self.checkpoints:
            distance = distances[checkpoint.id]

            if checkpoint.id not in self.state:
                if distance <= self.enter_radius:
                    notifications.append(
                        CheckpointNotification(
                            identifier=notification_identifier(checkpoint),
                            title=NOTIFICATION_TITLE,
                            body=f"{checkpoint.name} is {format_distance(distance, unit)} away",
                            checkpoint_id=checkpoint.id,
                            distance_miles=distance,
                        )
                    )
                    self.state.mark_inside(checkpoint.id)
                    logger.debug(
                        f"Entered alert radius of {checkpoint.name} ({distance:.2f} mi)"
                    )
            elif distance > self.exit_radius:
                self.state.mark_outside(checkpoint.id)
                logger.debug(
                    f"Left {checkpoint.name} ({distance:.2f} mi), alert re-armed"
                )

        return notifications

    def reset(self) -> None:
        """Clear all suppression so the next approach to any checkpoint alerts again."""
        logger.debug(f"Resetting proximity state ({len(self.state)} checkpoints inside)")
        self.state.reset()
