"""
Notification interfaces for the progress side channel.

The emitter addresses one recipient at a time and delivers named events
with a JSON-serializable payload. Delivery is fire-and-forget: `emit`
must return without waiting for the transport.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class INotificationChannel(ABC):
    """A delivery channel bound to a single recipient."""

    @abstractmethod
    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        """
        Queue an event for delivery to the bound recipient.

        Args:
            event: Event name
            payload: Event payload

        Raises:
            NotificationError: If the event cannot even be queued
        """
        pass


class INotificationEmitter(ABC):
    """Interface for notification transports."""

    @abstractmethod
    def to(self, recipient_id: str) -> INotificationChannel:
        """
        Select the recipient of the next emitted event.

        Args:
            recipient_id: Opaque recipient identifier

        Returns:
            Channel bound to the recipient
        """
        pass
