"""
API routers.
"""

from . import health, upload, websocket

__all__ = [
    "health",
    "upload",
    "websocket",
]
