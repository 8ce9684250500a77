"""
Configuration models and loading.
"""

from .loader import ConfigLoader
from .models import (
    ApplicationConfig, LoggingConfig, SecurityConfig, ServerConfig, UploadConfig
)

__all__ = [
    "ApplicationConfig",
    "ConfigLoader",
    "LoggingConfig",
    "SecurityConfig",
    "ServerConfig",
    "UploadConfig",
]
