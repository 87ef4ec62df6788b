#!/usr/bin/env python3
"""
Periodic location tracking that drives the proximity notifier.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import logging
import threading

from .config import RideSettings
from .geometry import is_valid_position
from .notifications import NotificationSink
from .proximity import CheckpointNotification, ProximityNotifier
from .sources import (
    LocationSample,
    LocationSource,
    LocationSourceExhausted,
    LocationUnavailableError,
)

logger = logging.getLogger(__name__)


@dataclass
class TrackerStats:
    """Counters for one tracking session."""

    polls: int = 0
    samples_evaluated: int = 0
    samples_skipped: int = 0
    acquisition_failures: int = 0
    delivery_failures: int = 0
    notifications: List[CheckpointNotification] = field(default_factory=list)
    track: List[LocationSample] = field(default_factory=list)


class LocationTracker:
    """Polls a location source and forwards checkpoint alerts to a sink."""

    def __init__(
        self,
        source: LocationSource,
        notifier: ProximityNotifier,
        sink: NotificationSink,
        settings: RideSettings,
        max_retries: int = 3,
        retry_delay: float = 5.0,
    ):
        """Initializes a LocationTracker.

        Args:
            source: Provider of location samples.
            notifier: Proximity notifier; the tracker is the only caller.
            sink: Destination for emitted notifications.
            settings: Alerts flag, distance unit and polling interval.
            max_retries: Extra acquisition attempts after a failed request.
            retry_delay: Seconds to wait between acquisition attempts.
        """
        self.source = source
        self.notifier = notifier
        self.sink = sink
        self.settings = settings
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.stats = TrackerStats()
        self._lock = threading.Lock()
        self._stopped = threading.Event()

    @property
    def enabled(self) -> bool:
        return self.settings.gps_update_interval > 0

    def _acquire(self) -> Optional[LocationSample]:
        """Request a sample, retrying on transient failures; None if none arrived."""
        for attempt in range(self.max_retries + 1):
            try:
                return self.source.request_location()
            except LocationUnavailableError as e:
                self.stats.acquisition_failures += 1
                logger.warning(
                    f"Location unavailable ({e}), attempt {attempt + 1} of {self.max_retries + 1}"
                )
                if attempt < self.max_retries and self.retry_delay > 0:
                    if self._stopped.wait(self.retry_delay):
                        return None
        return None

    def poll_once(self) -> List[CheckpointNotification]:
        """
        Acquire one sample and evaluate it.

        Returns:
            Notifications delivered for this sample

        Raises:
            LocationSourceExhausted: If the source has no more samples
        """
        with self._lock:
            self.stats.polls += 1
            sample = self._acquire()

            if sample is None or not is_valid_position(sample.position):
                self.stats.samples_skipped += 1
                logger.debug("No usable location this cycle, skipping evaluation")
                return []

            self.stats.samples_evaluated += 1
            self.stats.track.append(sample)
            notifications = self.notifier.evaluate(
                sample.position,
                alerts_enabled=self.settings.alerts_enabled,
                unit=self.settings.distance_unit,
            )

            delivered = []
            for notification in notifications:
                try:
                    self.sink.send(notification)
                except Exception as e:
                    # Re-arm so the next sample in range emits it again
                    self.notifier.state.mark_outside(notification.checkpoint_id)
                    self.stats.delivery_failures += 1
                    logger.error(f"Failed to deliver {notification.identifier}: {e}")
                    continue
                delivered.append(notification)
                self.stats.notifications.append(notification)

            return delivered

    def run(self, max_polls: Optional[int] = None, realtime: bool = True) -> TrackerStats:
        """
        Poll until stopped, the source runs dry, or max_polls is reached.

        Args:
            max_polls: Optional limit on the number of polls
            realtime: Wait the configured interval between polls; replays
                pass False to process samples back to back

        Returns:
            Statistics for the session
        """
        if not self.enabled:
            logger.info("GPS is disabled (interval = 0), not tracking")
            return self.stats

        logger.info(
            f"Starting location tracking with interval: {self.settings.gps_update_interval}s"
        )
        self._stopped.clear()

        while not self._stopped.is_set():
            if max_polls is not None and self.stats.polls >= max_polls:
                break
            try:
                self.poll_once()
            except LocationSourceExhausted:
                logger.debug("Location source exhausted")
                break
            if realtime and self._stopped.wait(self.settings.gps_update_interval):
                break

        logger.info(
            f"Stopped tracking after {self.stats.polls} polls "
            f"({len(self.stats.notifications)} notifications)"
        )
        return self.stats

    def stop(self) -> None:
        """Stop generating samples; pending notifications are not flushed."""
        self._stopped.set()

    def apply_settings(self, settings: RideSettings) -> None:
        """
        Switch to new settings, clearing alert suppression when anything that
        affects alerts has changed.
        """
        with self._lock:
            previous = self.settings
            radii_changed = (
                settings.enter_radius != previous.enter_radius
                or settings.exit_radius != previous.exit_radius
            )

            if radii_changed:
                # Raises ValueError before anything is switched
                self.notifier = ProximityNotifier(
                    self.notifier.checkpoints,
                    state=self.notifier.state,
                    enter_radius=settings.enter_radius,
                    exit_radius=settings.exit_radius,
                )
            self.settings = settings

            if (
                radii_changed
                or settings.alerts_enabled != previous.alerts_enabled
                or settings.distance_unit != previous.distance_unit
            ):
                self.notifier.reset()
