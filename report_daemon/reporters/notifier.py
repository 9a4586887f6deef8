"""One-way event notifications for daemon lifecycle announcements."""

import logging
import queue
from typing import List

from ..utils.formatters import truncate_bytes


MAX_MESSAGE_BYTES = 100
DEFAULT_QUEUE_SIZE = 64


class EventNotifier:
    """Announces daemon events on a bounded queue.

    Sends never block. When the queue is full the oldest undelivered event is
    discarded to make room, and a single warning is logged until a consumer
    drains the queue again. Nothing in the daemon reads from the queue;
    consumers call ``drain()``.
    """

    def __init__(self, enabled: bool = True, queue_size: int = DEFAULT_QUEUE_SIZE,
                 max_message_bytes: int = MAX_MESSAGE_BYTES):
        """Initialize event notifier.

        Args:
            enabled: When False, notify() is a no-op.
            queue_size: Maximum number of undelivered events.
            max_message_bytes: Events are truncated to this many UTF-8 bytes.
        """
        self.enabled = enabled
        self.max_message_bytes = max_message_bytes
        self.queue: "queue.Queue[str]" = queue.Queue(maxsize=queue_size)
        self.dropped = 0
        self.closed = False
        self._overflowing = False
        self.logger = logging.getLogger(__name__)

    def notify(self, event: str) -> bool:
        """Post an event without blocking.

        Returns:
            True if the event was queued.
        """
        if not self.enabled or self.closed:
            return False

        message = truncate_bytes(event, self.max_message_bytes)
        while True:
            try:
                self.queue.put_nowait(message)
                return True
            except queue.Full:
                self._discard_oldest()

    def _discard_oldest(self) -> None:
        try:
            self.queue.get_nowait()
        except queue.Empty:
            return
        self.dropped += 1
        if not self._overflowing:
            self._overflowing = True
            self.logger.warning(
                f"Notification queue full ({self.queue.maxsize} events), discarding oldest events"
            )

    def drain(self) -> List[str]:
        """Remove and return every queued event."""
        events = []
        while True:
            try:
                events.append(self.queue.get_nowait())
            except queue.Empty:
                break
        self._overflowing = False
        return events

    def close(self) -> None:
        """Stop accepting events and discard anything undelivered."""
        if self.closed:
            return
        discarded = len(self.drain())
        self.closed = True
        self.logger.info(f"Notification queue closed ({discarded} undelivered, {self.dropped} dropped)")
