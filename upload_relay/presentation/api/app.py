"""
FastAPI application factory and configuration.

This module creates and configures the FastAPI application with
middleware, error handling, and route registration.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ...core.exceptions import StorageError, TransportError, UploadRelayError
from ...infrastructure.config.models import ApplicationConfig
from ...infrastructure.notifications.websocket import ConnectionRegistry
from .middleware import (
    ErrorHandlerMiddleware, relay_error_handler, storage_error_handler, transport_error_handler
)
from .routers import health, upload, websocket

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Prepares the storage root on startup and stops the notification
    registry on shutdown.
    """
    config: ApplicationConfig = app.state.config
    Path(config.upload.storage_root).mkdir(parents=True, exist_ok=True)
    logger.info(f"Storing uploads under {config.upload.storage_root}")

    yield

    await app.state.connections.stop()
    logger.info("Application shutting down...")


def create_app(
    config: ApplicationConfig,
    connections: Optional[ConnectionRegistry] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration
        connections: Notification registry (created if omitted)

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=config.name,
        version=config.version,
        description="Streams multipart uploads to disk with throttled WebSocket progress",
        debug=config.debug,
        lifespan=lifespan
    )

    app.state.config = config
    app.state.connections = connections or ConnectionRegistry()

    _configure_middleware(app, config)
    _register_exception_handlers(app)
    _register_routes(app, config)

    logger.info(f"FastAPI application created: {config.name} v{config.version}")
    return app


def create_app_from_config() -> FastAPI:
    """Create app from configuration (for uvicorn reload)."""
    from ...infrastructure.config.loader import ConfigLoader

    config = ConfigLoader().load_config()
    return create_app(config)


def _configure_middleware(app: FastAPI, config: ApplicationConfig) -> None:
    app.add_middleware(ErrorHandlerMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.debug("Middleware configured")


def _register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TransportError, transport_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StorageError, storage_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(UploadRelayError, relay_error_handler)  # type: ignore[arg-type]


def _register_routes(app: FastAPI, config: ApplicationConfig) -> None:
    app.include_router(
        health.router,
        prefix="/health",
        tags=["health"]
    )

    app.include_router(
        upload.router,
        prefix=config.server.upload_path,
        tags=["upload"]
    )

    app.include_router(
        websocket.router,
        prefix=config.server.websocket_path,
        tags=["websocket"]
    )

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with basic application information."""
        return {
            "name": app.title,
            "version": app.version,
            "status": "running",
            "upload_url": config.server.upload_path,
            "websocket_url": config.server.websocket_path,
            "health_url": "/health"
        }

    logger.debug("Routes registered")
