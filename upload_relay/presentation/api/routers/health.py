"""
Health check API endpoints.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ....infrastructure.config.models import ApplicationConfig
from ....infrastructure.notifications.websocket import ConnectionRegistry
from ..dependencies import get_config, get_connection_registry

router = APIRouter()


@router.get("")
async def health_check(
    config: ApplicationConfig = Depends(get_config),
    connections: ConnectionRegistry = Depends(get_connection_registry)
) -> Dict[str, Any]:
    """
    Health check endpoint.

    Reports the application, the storage root and the notification registry.
    """
    storage_root = Path(config.upload.storage_root)
    registry_health = await connections.check_health()

    healthy = storage_root.is_dir() and registry_health["healthy"]

    return {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "application": {
            "name": config.name,
            "version": config.version,
            "environment": config.environment
        },
        "components": {
            "storage": {
                "healthy": storage_root.is_dir(),
                "details": {"storage_root": str(storage_root)}
            },
            "connections": registry_health
        }
    }
