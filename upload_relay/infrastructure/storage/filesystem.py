"""
Filesystem storage sink backed by aiofiles.

Writes run in aiofiles' thread pool and are awaited one at a time, which
is what gives the upload pipeline its backpressure on slow disks.
"""

import logging
from typing import Any, Optional

import aiofiles

from ...core.exceptions import StorageError
from ...core.interfaces.storage import IStorageSink

logger = logging.getLogger(__name__)


class FileSink(IStorageSink):
    """Writes a byte stream to a file, creating or truncating it."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.bytes_written = 0
        self._file: Optional[Any] = None

    @property
    def is_open(self) -> bool:
        return self._file is not None

    async def open(self) -> None:
        try:
            self._file = await aiofiles.open(self.path, "wb")
        except OSError as e:
            raise StorageError(
                f"Cannot open {self.path} for writing: {e}",
                details={"path": self.path}
            ) from e
        logger.debug(f"Opened storage sink: {self.path}")

    async def write(self, chunk: bytes) -> None:
        if self._file is None:
            raise StorageError(f"Storage sink for {self.path} is not open",
                               details={"path": self.path})
        try:
            await self._file.write(chunk)
        except OSError as e:
            raise StorageError(
                f"Write to {self.path} failed: {e}",
                details={"path": self.path, "bytes_written": self.bytes_written}
            ) from e
        self.bytes_written += len(chunk)

    async def close(self) -> None:
        if self._file is None:
            return

        file, self._file = self._file, None
        try:
            try:
                await file.flush()
            finally:
                await file.close()
        except OSError as e:
            raise StorageError(
                f"Closing {self.path} failed: {e}",
                details={"path": self.path, "bytes_written": self.bytes_written}
            ) from e

        logger.debug(f"Closed storage sink: {self.path} ({self.bytes_written} bytes)")
