"""
Storage sinks for persisted uploads.
"""

from .filesystem import FileSink

__all__ = [
    "FileSink",
]
