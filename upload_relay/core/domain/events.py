"""
Progress event models emitted on the notification side channel.

These are plain value objects; the relay builds them and the
notification transport serializes them for the recipient.
"""

from dataclasses import dataclass
from typing import Any, Dict

FILE_UPLOAD_EVENT = "file-upload"
"""Event name of every progress notification."""


@dataclass(frozen=True)
class UploadProgress:
    """Cumulative progress of a single file transfer."""

    processed_already: int
    """Bytes observed for the file when the notification was decided."""

    filename: str
    """Destination file name."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire payload."""
        return {
            "processedAlready": self.processed_already,
            "filename": self.filename,
        }


@dataclass(frozen=True)
class ProgressNotification:
    """
    A progress notification addressed to one recipient.

    The notification is immutable: the byte count is fixed at the moment
    the relay decides to notify, not when the transport delivers it.
    """

    recipient_id: str
    payload: UploadProgress
    event: str = FILE_UPLOAD_EVENT


@dataclass(frozen=True)
class FileUploadResult:
    """Completion record for one persisted file part."""

    field_name: str
    filename: str
    path: str
    bytes_written: int
    notifications_sent: int
