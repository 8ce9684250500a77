"""
HTTP middleware and exception handlers.

Transport and storage failures raised while streaming an upload are
mapped to JSON error responses; anything unexpected becomes a 500.
"""

import logging
from typing import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ...core.exceptions import StorageError, TransportError, UploadRelayError

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for centralized error handling."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            logger.exception(
                f"Unhandled error in {request.method} {request.url}: {e}")

            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": str(e) if request.app.debug else "An unexpected error occurred"
                }
            )


async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
    """Client-side stream failures."""
    logger.warning(f"Upload aborted by transport error on {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content=exc.to_dict())


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Storage sink failures."""
    logger.error(f"Upload failed to persist on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=exc.to_dict())


async def relay_error_handler(request: Request, exc: UploadRelayError) -> JSONResponse:
    """Any other relay error."""
    logger.error(f"Upload relay error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=exc.to_dict())
