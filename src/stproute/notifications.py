"""
Notification sinks that deliver checkpoint alerts to the rider.
"""

from typing import Dict, List
import logging
import time
import requests

from .proximity import CheckpointNotification

DEFAULT_WEBHOOK_TIMEOUT = 10

logger = logging.getLogger(__name__)


class NotificationSink:
    """Base class for notification delivery."""

    def send(self, notification: CheckpointNotification) -> None:
        raise NotImplementedError


class LoggingNotificationSink(NotificationSink):
    """Writes each alert to the log."""

    def send(self, notification: CheckpointNotification) -> None:
        logger.info(f"{notification.title} {notification.body}")


class CollectingNotificationSink(NotificationSink):
    """Keeps delivered alerts in memory, replacing a pending alert with the same identifier."""

    def __init__(self):
        self._pending: Dict[str, CheckpointNotification] = {}
        self.delivered: List[CheckpointNotification] = []

    def send(self, notification: CheckpointNotification) -> None:
        if notification.identifier in self._pending:
            logger.debug(f"Replacing pending notification {notification.identifier}")
        self._pending[notification.identifier] = notification
        self.delivered.append(notification)

    @property
    def pending(self) -> List[CheckpointNotification]:
        return list(self._pending.values())

    def acknowledge(self, identifier: str) -> None:
        """Dismiss a pending alert, as when the rider taps it."""
        self._pending.pop(identifier, None)


def _is_retryable_error(e: requests.exceptions.HTTPError) -> bool:
    """Check if an HTTP error is retryable."""
    if e.response is not None:
        return e.response.status_code == 429 or e.response.status_code >= 500
    error_msg = str(e).lower()
    return any(code in error_msg for code in ["429", "500", "502", "503", "504"])


class WebhookNotificationSink(NotificationSink):
    """Posts alerts as JSON to a push-notification webhook."""

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_WEBHOOK_TIMEOUT,
        max_retries: int = 3,
        base_delay: float = 2.0,
    ):
        self.url = url
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay

    def send(self, notification: CheckpointNotification) -> None:
        """
        Deliver one alert, retrying with exponential backoff on 429 and 5xx.

        Raises:
            requests.exceptions.RequestException: On network or HTTP errors after retries
        """
        payload = {
            "identifier": notification.identifier,
            "title": notification.title,
            "body": notification.body,
            "checkpointId": notification.checkpoint_id,
        }
        attempt = 0

        while True:
            try:
                response = requests.post(self.url, json=payload, timeout=self.timeout)
                response.raise_for_status()
                logger.debug(f"Delivered {notification.identifier} to {self.url}")
                return

            except requests.exceptions.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else None
                if _is_retryable_error(e) and attempt < self.max_retries:
                    delay = self.base_delay * (2**attempt)
                    logger.warning(
                        f"Webhook returned {status_code or 'unknown'}, retrying in {delay:.0f}s "
                        f"(attempt {attempt + 1} of {self.max_retries + 1})"
                    )
                    time.sleep(delay)
                    attempt += 1
                    continue
                raise


class FanOutNotificationSink(NotificationSink):
    """Delivers each alert to several sinks in order."""

    def __init__(self, sinks: List[NotificationSink]):
        self.sinks = list(sinks)

    def send(self, notification: CheckpointNotification) -> None:
        for sink in self.sinks:
            sink.send(notification)
