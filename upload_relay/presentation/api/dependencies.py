"""
FastAPI dependency injection utilities.

Routes reach the application configuration and the notification registry
through the app state populated by ``create_app``.
"""

from fastapi import HTTPException, Request, WebSocket, status

from ...infrastructure.config.models import ApplicationConfig
from ...infrastructure.notifications.websocket import ConnectionRegistry


def get_config(request: Request) -> ApplicationConfig:
    """
    Get the application configuration from the request.

    Raises:
        HTTPException: If configuration is not available
    """
    if not hasattr(request.app.state, "config"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application configuration not available"
        )

    return request.app.state.config


def get_connection_registry(request: Request) -> ConnectionRegistry:
    """
    Get the WebSocket connection registry from the request.

    Raises:
        HTTPException: If the registry is not available
    """
    if not hasattr(request.app.state, "connections"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Connection registry not available"
        )

    return request.app.state.connections


def get_websocket_registry(websocket: WebSocket) -> ConnectionRegistry:
    """Get the connection registry from a WebSocket scope."""
    return websocket.app.state.connections
