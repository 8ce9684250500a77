"""
Core interfaces defining the contracts the upload core depends on.

These interfaces keep the relay and session independent of the concrete
storage and notification transports.
"""

from .lifecycle import IStoppable, IHealthCheckable
from .notifications import INotificationChannel, INotificationEmitter
from .storage import IStorageSink, StorageSinkFactory

__all__ = [
    "IStoppable",
    "IHealthCheckable",
    "INotificationChannel",
    "INotificationEmitter",
    "IStorageSink",
    "StorageSinkFactory",
]
