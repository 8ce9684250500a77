"""
WebSocket endpoint for progress notifications.

A client connects, receives its connection id in a ``connected`` event and
passes that id as ``socketId`` when uploading.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ....infrastructure.notifications.websocket import ConnectionRegistry
from ..dependencies import get_connection_registry, get_websocket_registry

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("")
async def websocket_endpoint(
    websocket: WebSocket,
    connections: ConnectionRegistry = Depends(get_websocket_registry)
) -> None:
    """Register the client as a notification recipient until it disconnects."""
    connection_id = await connections.connect(websocket)

    try:
        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_json({"event": "pong", "data": {"id": connection_id}})

    except WebSocketDisconnect:
        pass

    except Exception as e:
        logger.error(f"WebSocket error on {connection_id}: {e}")

    finally:
        connections.disconnect(connection_id)


@router.get("/connections")
async def get_connection_info(
    connections: ConnectionRegistry = Depends(get_connection_registry)
) -> Dict[str, Any]:
    """Get information about active WebSocket connections."""
    return {
        "active_connections": connections.get_connection_count()
    }
