"""
Storage sink interfaces.

A sink is a consumer of bytes that may apply backpressure: every
`write` is awaited before the next chunk is pulled from upstream.
"""

import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Callable, Optional, Type

logger = logging.getLogger(__name__)


class IStorageSink(ABC):
    """
    Interface for writable byte sinks.

    Sinks are used as async context managers. Leaving the context without
    an error closes and flushes the sink, and a failure to do so is raised.
    Leaving it with an error still releases the sink, but the original
    error is the one that propagates.
    """

    @abstractmethod
    async def open(self) -> None:
        """Acquire the underlying resource."""
        pass

    @abstractmethod
    async def write(self, chunk: bytes) -> None:
        """
        Write a chunk, returning once the sink has accepted it.

        Raises:
            StorageError: If the chunk cannot be written
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Flush and release the underlying resource.

        Closing an already closed sink is a no-op.

        Raises:
            StorageError: If pending data cannot be flushed
        """
        pass

    async def __aenter__(self) -> "IStorageSink":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType]
    ) -> None:
        if exc_type is None:
            await self.close()
            return

        try:
            await self.close()
        except Exception as close_error:
            logger.warning(f"Error releasing storage sink after failure: {close_error}")


StorageSinkFactory = Callable[[str], IStorageSink]
"""Creates a sink for a destination path."""
