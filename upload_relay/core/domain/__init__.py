"""
Domain models representing the values that flow through an upload.

This module contains pure domain models without external dependencies.
"""

from .events import FILE_UPLOAD_EVENT, FileUploadResult, ProgressNotification, UploadProgress

__all__ = [
    "FILE_UPLOAD_EVENT",
    "FileUploadResult",
    "ProgressNotification",
    "UploadProgress",
]
