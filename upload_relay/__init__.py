"""
Upload Relay - streaming multipart uploads with throttled progress notifications.

Inbound file streams are forwarded byte for byte to storage while a
time-based admission policy decides when to report progress to the
uploading client over WebSocket.
"""

__version__ = "0.1.0"

from .core.exceptions import NotificationError, StorageError, TransportError, UploadRelayError
from .core.interfaces.notifications import INotificationChannel, INotificationEmitter
from .core.interfaces.storage import IStorageSink
from .core.services.relay import ThrottledRelay
from .core.services.session import UploadSession
from .core.services.throttle import can_execute

__all__ = [
    "NotificationError",
    "StorageError",
    "TransportError",
    "UploadRelayError",
    "INotificationChannel",
    "INotificationEmitter",
    "IStorageSink",
    "ThrottledRelay",
    "UploadSession",
    "can_execute",
]
