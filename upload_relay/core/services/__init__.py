"""
Core service implementations: the throttled relay, the stream pipeline and
the upload session that composes them.
"""

from .pipeline import pipeline
from .relay import ThrottledRelay
from .session import UploadSession
from .throttle import DEFAULT_RATE_LIMIT_INTERVAL_MS, can_execute, now_ms

__all__ = [
    "DEFAULT_RATE_LIMIT_INTERVAL_MS",
    "ThrottledRelay",
    "UploadSession",
    "can_execute",
    "now_ms",
    "pipeline",
]
