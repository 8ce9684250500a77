"""
Upload endpoint.

Streams a multipart request body straight to storage. Progress for each
file is pushed to the WebSocket connection named by ``socketId``.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, Request

from ....core.services.session import UploadSession
from ....infrastructure.config.models import ApplicationConfig
from ....infrastructure.notifications.websocket import ConnectionRegistry
from ..dependencies import get_config, get_connection_registry

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("")
async def upload_files(
    request: Request,
    socket_id: str = Query(..., alias="socketId"),
    config: ApplicationConfig = Depends(get_config),
    connections: ConnectionRegistry = Depends(get_connection_registry)
) -> Dict[str, Any]:
    """
    Persist every file part of a multipart upload.

    Responds once all parts are on disk.
    """
    session = UploadSession(
        emitter=connections,
        recipient_id=socket_id,
        storage_root=config.upload.storage_root,
        rate_limit_interval_ms=config.upload.rate_limit_interval_ms,
        max_queued_chunks=config.upload.max_queued_chunks
    )

    def on_finish() -> None:
        logger.info(f"Upload request for {socket_id} finished: {len(session.completed)} file(s)")

    parser = session.register_events(request.headers, on_finish)
    await parser.feed(request.stream())

    return {
        "result": "Files uploaded with success!",
        "files": [
            {"filename": result.filename, "size": result.bytes_written}
            for result in session.completed
        ]
    }
