"""
Module for collecting and logging metrics of a ride replay.
"""

import collections
import logging
from typing import Dict, NamedTuple, Sequence

from .checkpoint import Checkpoint
from .config import RideSettings
from .tracker import TrackerStats

logger = logging.getLogger(__name__)


class RideMetrics(NamedTuple):
    """Container for ride replay metrics."""

    samples_evaluated: int
    samples_skipped: int
    acquisition_failures: int
    notification_counts: Dict[str, int]  # by checkpoint kind, plus "total"
    alerted_checkpoints: Sequence[str]
    delivery_failures: int = 0


def collect_metrics(
    stats: TrackerStats, checkpoints: Sequence[Checkpoint]
) -> RideMetrics:
    """
    Collect metrics from a tracking session before creating the route map.

    Args:
        stats: Statistics reported by the tracker
        checkpoints: Checkpoints the notifier was watching

    Returns:
        RideMetrics containing all collected metrics
    """
    by_id = {c.id: c for c in checkpoints}
    counts: Dict[str, int] = collections.defaultdict(int)
    alerted = []

    for notification in stats.notifications:
        counts["total"] += 1
        checkpoint = by_id.get(notification.checkpoint_id)
        if checkpoint is not None:
            counts[checkpoint.kind.value] += 1
        if notification.checkpoint_id not in alerted:
            alerted.append(notification.checkpoint_id)

    return RideMetrics(
        samples_evaluated=stats.samples_evaluated,
        samples_skipped=stats.samples_skipped,
        acquisition_failures=stats.acquisition_failures,
        notification_counts=dict(counts),
        alerted_checkpoints=tuple(alerted),
        delivery_failures=stats.delivery_failures,
    )


def log_metrics(metrics: RideMetrics, settings: RideSettings) -> None:
    """
    Log detailed metrics after creating the route map.

    Args:
        metrics: RideMetrics containing collected metrics
        settings: RideSettings with the metrics flag
    """
    if not settings.metrics:
        return

    logger.debug("=== STPROUTE_METRICS ===")
    logger.debug(f"samples_evaluated={metrics.samples_evaluated}")
    logger.debug(f"samples_skipped={metrics.samples_skipped}")
    logger.debug(f"acquisition_failures={metrics.acquisition_failures}")
    logger.debug(f"delivery_failures={metrics.delivery_failures}")
    logger.debug(f"notifications_total={metrics.notification_counts.get('total', 0)}")

    for key, count in sorted(metrics.notification_counts.items()):
        if key != "total" and count > 0:
            logger.debug(f"notifications[{key}]={count}")

    logger.debug(f"alerted_checkpoints={len(metrics.alerted_checkpoints)}")
    logger.debug("=== END_STPROUTE_METRICS ===")
