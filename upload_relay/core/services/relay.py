"""
Throttled byte relay.

The relay sits between an inbound chunk stream and a storage sink. It has
two outputs: the forwarded chunks, which are ordered and mandatory, and
progress notifications, which are sampled by the admission policy and
delivered fire-and-forget.
"""

import logging
from typing import AsyncIterable, AsyncIterator, Optional

from ..domain.events import FILE_UPLOAD_EVENT, ProgressNotification, UploadProgress
from ..interfaces.notifications import INotificationEmitter
from .throttle import DEFAULT_RATE_LIMIT_INTERVAL_MS, Clock, can_execute, now_ms

logger = logging.getLogger(__name__)


class ThrottledRelay:
    """
    Per-file transform forwarding bytes and sampling progress.

    One relay is created per file. Its counters are private to that file's
    transfer and are never shared between files or sessions.
    """

    def __init__(
        self,
        filename: str,
        recipient_id: str,
        emitter: INotificationEmitter,
        interval_ms: float = DEFAULT_RATE_LIMIT_INTERVAL_MS,
        clock: Clock = now_ms
    ) -> None:
        self.filename = filename
        self.recipient_id = recipient_id
        self.interval_ms = interval_ms
        self._emitter = emitter
        self._clock = clock

        # The first chunk is throttled like any other.
        self.last_notified_at_ms = clock()
        self.bytes_processed = 0
        self.notifications_sent = 0

    async def relay(self, source: AsyncIterable[bytes]) -> AsyncIterator[bytes]:
        """
        Forward every chunk of ``source`` unchanged.

        Each chunk is handed downstream before it is counted, so the
        consumer never waits on notification logic.
        """
        async for chunk in source:
            yield chunk
            self.observe(chunk)

    def observe(self, chunk: bytes) -> Optional[ProgressNotification]:
        """
        Count a forwarded chunk and notify if the throttle admits it.

        Returns:
            The notification that was emitted, or None if throttled
        """
        self.bytes_processed += len(chunk)

        now = self._clock()
        if not can_execute(now, self.last_notified_at_ms, self.interval_ms):
            return None

        self.last_notified_at_ms = now
        notification = ProgressNotification(
            recipient_id=self.recipient_id,
            payload=UploadProgress(
                processed_already=self.bytes_processed,
                filename=self.filename
            ),
            event=FILE_UPLOAD_EVENT
        )
        self._notify(notification)
        return notification

    def _notify(self, notification: ProgressNotification) -> None:
        try:
            self._emitter.to(notification.recipient_id).emit(
                notification.event,
                notification.payload.to_dict()
            )
            self.notifications_sent += 1
        except Exception as e:
            logger.warning(
                f"Dropped progress notification for [{self.filename}] "
                f"to {notification.recipient_id}: {e}")
