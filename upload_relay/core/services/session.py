"""
Upload session orchestration.

A session lives for one multipart request. For every file part it wires
the inbound stream through a fresh ThrottledRelay into a storage sink and
resolves once the sink has flushed the file.
"""

import logging
import os
from typing import TYPE_CHECKING, AsyncIterable, Callable, List, Mapping, Optional

from ..domain.events import FileUploadResult
from ..interfaces.notifications import INotificationEmitter
from ..interfaces.storage import StorageSinkFactory
from .pipeline import pipeline
from .relay import ThrottledRelay
from .throttle import DEFAULT_RATE_LIMIT_INTERVAL_MS, Clock, now_ms

if TYPE_CHECKING:
    from ...infrastructure.multipart.parser import MultipartParser

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUEUED_CHUNKS = 16


class UploadSession:
    """
    Orchestrates the file parts of one multipart upload request.

    Args:
        emitter: Notification transport for progress events
        recipient_id: Who receives progress notifications
        storage_root: Directory persisted files are created under
        rate_limit_interval_ms: Minimum time between two notifications per file
        sink_factory: Creates the storage sink for a destination path
        clock: Millisecond time source shared by the session's relays
        max_queued_chunks: Chunks buffered per file part by the parser
    """

    def __init__(
        self,
        emitter: INotificationEmitter,
        recipient_id: str,
        storage_root: str,
        rate_limit_interval_ms: float = DEFAULT_RATE_LIMIT_INTERVAL_MS,
        sink_factory: Optional[StorageSinkFactory] = None,
        clock: Clock = now_ms,
        max_queued_chunks: int = DEFAULT_MAX_QUEUED_CHUNKS
    ) -> None:
        if sink_factory is None:
            from ...infrastructure.storage.filesystem import FileSink
            sink_factory = FileSink

        self.emitter = emitter
        self.recipient_id = recipient_id
        self.storage_root = storage_root
        self.rate_limit_interval_ms = rate_limit_interval_ms
        self.max_queued_chunks = max_queued_chunks
        self._sink_factory = sink_factory
        self._clock = clock
        self.completed: List[FileUploadResult] = []

    def create_relay(self, filename: str) -> ThrottledRelay:
        """Create the relay for one file; its throttle window starts now."""
        return ThrottledRelay(
            filename=filename,
            recipient_id=self.recipient_id,
            emitter=self.emitter,
            interval_ms=self.rate_limit_interval_ms,
            clock=self._clock
        )

    async def handle_file_part(
        self,
        field_name: str,
        inbound_stream: AsyncIterable[bytes],
        filename: str
    ) -> FileUploadResult:
        """
        Persist one file part under the storage root.

        The filename is joined to the storage root as given; callers are
        expected to supply a safe name.

        Args:
            field_name: Multipart field name (not used for storage)
            inbound_stream: Chunks of the file part
            filename: Destination file name

        Returns:
            Completion record for the file

        Raises:
            TransportError: If the inbound stream fails
            StorageError: If the sink fails
        """
        destination = os.path.join(self.storage_root, filename)
        relay = self.create_relay(filename)

        try:
            async with self._sink_factory(destination) as sink:
                written = await pipeline(inbound_stream, relay.relay, sink=sink)
        except Exception as e:
            logger.error(f"File [{filename}] failed after {relay.bytes_processed} bytes: {e}")
            raise

        result = FileUploadResult(
            field_name=field_name,
            filename=filename,
            path=destination,
            bytes_written=written,
            notifications_sent=relay.notifications_sent
        )
        self.completed.append(result)

        logger.info(f"File [{filename}] finished")
        return result

    def register_events(
        self,
        headers: Mapping[str, str],
        on_finish: Callable[[], object]
    ) -> "MultipartParser":
        """
        Create a multipart parser for a request and bind this session to it.

        Args:
            headers: Request headers, including the multipart content type
            on_finish: Called once every file part has been persisted

        Returns:
            The bound parser; feed it the request body

        Raises:
            TransportError: If the headers do not describe a multipart body
        """
        from ...infrastructure.multipart.parser import MultipartParser

        parser = MultipartParser(headers, max_queued_chunks=self.max_queued_chunks)
        parser.on("file", self.handle_file_part)
        parser.on("finish", on_finish)

        return parser
