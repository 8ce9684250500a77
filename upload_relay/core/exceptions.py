"""
Exception hierarchy for the upload relay.

Byte-path failures (transport and storage) propagate to whoever drives
an upload; notification failures are reported through their own type so
the relay can isolate them from the transfer.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Error codes carried by every relay exception."""
    CONFIG_ERROR = 20001
    TRANSPORT_ERROR = 20002
    STORAGE_ERROR = 20003
    NOTIFICATION_ERROR = 20004


class UploadRelayError(Exception):
    """Base exception for upload relay errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        """Serialize the error for API responses."""
        return {
            "error": self.code.name.lower(),
            "code": self.code.value,
            "message": self.message,
        }


class ConfigError(UploadRelayError):
    """Invalid configuration value or file."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(ErrorCode.CONFIG_ERROR, message, details)


class TransportError(UploadRelayError):
    """Inbound stream failure: client disconnect or malformed multipart framing."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(ErrorCode.TRANSPORT_ERROR, message, details)


class StorageError(UploadRelayError):
    """Storage sink failure: disk full, permission denied and the like."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(ErrorCode.STORAGE_ERROR, message, details)


class NotificationError(UploadRelayError):
    """Progress notification could not be delivered."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(ErrorCode.NOTIFICATION_ERROR, message, details)
