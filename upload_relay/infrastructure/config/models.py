"""
Configuration models and data structures.

This module defines the configuration models used throughout the application,
providing type safety and validation for configuration values.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from ...core.exceptions import ConfigError


@dataclass
class ServerConfig:
    """HTTP/WebSocket server configuration."""
    host: str = "0.0.0.0"
    port: int = 3000
    websocket_path: str = "/ws"
    upload_path: str = "/upload"


@dataclass
class UploadConfig:
    """Upload handling configuration."""
    storage_root: str = "downloads"
    rate_limit_interval_ms: float = 200
    max_queued_chunks: int = 16


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_directory: str = "logs"
    max_file_size: str = "10 MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = False


@dataclass
class SecurityConfig:
    """Security configuration."""
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class ApplicationConfig:
    """Main application configuration."""

    # Basic application settings
    name: str = "Upload Relay"
    version: str = "0.1.0"
    debug: bool = False
    environment: str = "production"

    # Component configurations
    server: ServerConfig = field(default_factory=ServerConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)

    config_file_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate_server()
        self._validate_upload()

    def _validate_server(self) -> None:
        if not (1 <= self.server.port <= 65535):
            raise ConfigError(
                f"Server port must be between 1 and 65535, got {self.server.port}")

    def _validate_upload(self) -> None:
        if not self.upload.storage_root:
            raise ConfigError("Upload storage root must not be empty")
        if self.upload.rate_limit_interval_ms < 0:
            raise ConfigError(
                f"Rate limit interval must not be negative, got {self.upload.rate_limit_interval_ms}")
        if self.upload.max_queued_chunks < 1:
            raise ConfigError(
                f"Max queued chunks must be positive, got {self.upload.max_queued_chunks}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from dictionary."""
        try:
            server_config = ServerConfig(**data.get('server', {}))
            upload_config = UploadConfig(**data.get('upload', {}))
            logging_config = LoggingConfig(**data.get('logging', {}))
            security_config = SecurityConfig(**data.get('security', {}))
        except TypeError as e:
            raise ConfigError(f"Unknown configuration key: {e}")

        return cls(
            name=data.get('name', 'Upload Relay'),
            version=data.get('version', '0.1.0'),
            debug=data.get('debug', False),
            environment=data.get('environment', 'production'),
            server=server_config,
            upload=upload_config,
            logging=logging_config,
            security=security_config,
            config_file_path=data.get('config_file_path')
        )
