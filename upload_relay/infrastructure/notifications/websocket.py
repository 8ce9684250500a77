"""
WebSocket notification transport.

Keeps track of connected WebSocket clients by id and delivers progress
events to one of them. Emitting never waits on the socket: every send is
scheduled as a background task and its failure only affects the
recipient's connection.
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, Optional, Set

from fastapi import WebSocket

from ...core.exceptions import NotificationError
from ...core.interfaces.lifecycle import IHealthCheckable, IStoppable
from ...core.interfaces.notifications import INotificationChannel, INotificationEmitter

logger = logging.getLogger(__name__)

CONNECTED_EVENT = "connected"


class RecipientChannel(INotificationChannel):
    """Channel bound to a single connection id."""

    def __init__(self, registry: "ConnectionRegistry", recipient_id: str) -> None:
        self._registry = registry
        self.recipient_id = recipient_id

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        self._registry.dispatch(self.recipient_id, event, payload)


class ConnectionRegistry(INotificationEmitter, IStoppable, IHealthCheckable):
    """Registry of WebSocket connections addressable by id."""

    def __init__(self) -> None:
        self._connections: Dict[str, WebSocket] = {}
        self._pending: Set["asyncio.Task[None]"] = set()
        self._metrics: Dict[str, int] = {
            'connections_total': 0,
            'messages_sent': 0,
            'messages_failed': 0,
            'messages_dropped': 0
        }

    async def connect(self, websocket: WebSocket, connection_id: Optional[str] = None) -> str:
        """
        Accept a WebSocket connection and announce its id to the client.

        Returns:
            The connection id to pass as upload recipient
        """
        await websocket.accept()

        connection_id = connection_id or uuid.uuid4().hex
        self._connections[connection_id] = websocket
        self._metrics['connections_total'] += 1

        await websocket.send_json({"event": CONNECTED_EVENT, "data": {"id": connection_id}})
        logger.info(
            f"WebSocket connection {connection_id} established. "
            f"Total connections: {len(self._connections)}")
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        """Forget a connection."""
        if self._connections.pop(connection_id, None) is not None:
            logger.info(
                f"WebSocket connection {connection_id} closed. "
                f"Total connections: {len(self._connections)}")

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def get_connection_count(self) -> int:
        return len(self._connections)

    def to(self, recipient_id: str) -> INotificationChannel:
        return RecipientChannel(self, recipient_id)

    def dispatch(self, recipient_id: str, event: str, payload: Dict[str, Any]) -> None:
        """
        Schedule delivery of an event to a connection.

        Events for unknown recipients are dropped.

        Raises:
            NotificationError: If called outside a running event loop
        """
        websocket = self._connections.get(recipient_id)
        if websocket is None:
            self._metrics['messages_dropped'] += 1
            logger.debug(f"No connection {recipient_id}, dropping event {event}")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise NotificationError(f"Cannot schedule event {event}: {e}") from e

        task = loop.create_task(self._send(recipient_id, websocket, {"event": event, "data": payload}))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, recipient_id: str, websocket: WebSocket, message: Dict[str, Any]) -> None:
        try:
            await websocket.send_json(message)
            self._metrics['messages_sent'] += 1
        except Exception as e:
            self._metrics['messages_failed'] += 1
            logger.error(f"Failed to send {message['event']} to {recipient_id}: {e}")
            self.disconnect(recipient_id)

    async def stop(self) -> None:
        """Cancel outstanding sends and forget every connection."""
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        self._pending.clear()
        self._connections.clear()
        logger.info("Connection registry stopped")

    async def check_health(self) -> Dict[str, Any]:
        return {
            'healthy': True,
            'status': 'running',
            'details': {
                'active_connections': len(self._connections),
                'pending_messages': len(self._pending),
                **self._metrics
            }
        }
