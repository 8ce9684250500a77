"""
Core module containing the upload relay's business logic, domain models,
and service interfaces.

The core is independent of the web framework and of the concrete storage
and notification transports.
"""

from .domain.events import FILE_UPLOAD_EVENT, FileUploadResult, ProgressNotification, UploadProgress
from .exceptions import (
    ConfigError, ErrorCode, NotificationError, StorageError, TransportError, UploadRelayError
)
from .interfaces.notifications import INotificationChannel, INotificationEmitter
from .interfaces.storage import IStorageSink
from .services.relay import ThrottledRelay
from .services.session import UploadSession
from .services.throttle import can_execute

__all__ = [
    "FILE_UPLOAD_EVENT",
    "FileUploadResult",
    "ProgressNotification",
    "UploadProgress",
    "ConfigError",
    "ErrorCode",
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
