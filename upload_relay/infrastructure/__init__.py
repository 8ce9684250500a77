"""
Infrastructure layer containing external dependencies and I/O operations.

This layer holds configuration, logging, the filesystem storage sink, the
multipart parser and the WebSocket notification transport.
"""

from .config.loader import ConfigLoader
from .logging.setup import setup_logging

__all__ = [
    "ConfigLoader",
    "setup_logging",
]
