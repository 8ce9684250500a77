"""
Notification transports for upload progress events.
"""

from .websocket import ConnectionRegistry, RecipientChannel

__all__ = [
    "ConnectionRegistry",
    "RecipientChannel",
]
