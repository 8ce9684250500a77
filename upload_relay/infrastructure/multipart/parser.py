"""
Streaming multipart parser.

Splits a multipart request body into file parts without buffering whole
files. The low-level framing is handled by python-multipart; this module
turns its synchronous callbacks into one bounded async stream per file
part and dispatches parts to registered handlers.

Events:
    file:   (field_name, FilePartStream, filename) for every part that
            carries a filename
    finish: () once the body is consumed and every file handler settled
"""

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, AsyncIterable, Callable, Dict, List, Mapping, Optional, Tuple

from python_multipart.multipart import MultipartParser as StreamingMultipartParser
from python_multipart.multipart import parse_options_header

from ...core.exceptions import TransportError

logger = logging.getLogger(__name__)

_END_OF_PART = object()


class FilePartStream:
    """
    Async iterator over the chunks of one file part.

    Chunks are queued up to ``maxsize``; the parser waits for room before
    reading more of the request body. Once discarded, the stream drops
    anything still queued or put later, so a consumer that stops early
    never stalls the parser.
    """

    def __init__(self, filename: str, maxsize: int) -> None:
        self.filename = filename
        self._queue: "asyncio.Queue[Any]" = asyncio.Queue(maxsize=maxsize)
        self._discarded = False
        self._exhausted = False

    @property
    def discarded(self) -> bool:
        return self._discarded

    async def put(self, chunk: bytes) -> None:
        await self._put(chunk)

    async def finish(self) -> None:
        """Mark the end of the part."""
        await self._put(_END_OF_PART)

    async def abort(self, error: BaseException) -> None:
        """End the part with an error raised to the consumer."""
        await self._put(error)

    def discard(self) -> None:
        self._discarded = True
        while not self._queue.empty():
            self._queue.get_nowait()

    async def aclose(self) -> None:
        self.discard()

    async def _put(self, item: Any) -> None:
        if not self._discarded:
            await self._queue.put(item)

    def __aiter__(self) -> "FilePartStream":
        return self

    async def __anext__(self) -> bytes:
        if self._exhausted:
            raise StopAsyncIteration

        item = await self._queue.get()
        if item is _END_OF_PART:
            self._exhausted = True
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            self._exhausted = True
            raise item
        return item


class MultipartParser:
    """
    Event-driven multipart parser for one request.

    Args:
        headers: Request headers carrying the multipart content type
        max_queued_chunks: Chunks buffered per file part

    Raises:
        TransportError: If the content type is not multipart or has no boundary
    """

    def __init__(self, headers: Mapping[str, str], max_queued_chunks: int = 16) -> None:
        content_type = _get_header(headers, "content-type")
        if not content_type:
            raise TransportError("Missing content-type header")

        media_type, params = parse_options_header(content_type)
        if not media_type.startswith(b"multipart/"):
            raise TransportError(f"Unsupported content type: {content_type}")

        boundary = params.get(b"boundary")
        if not boundary:
            raise TransportError("Multipart boundary not found in content type")

        self.max_queued_chunks = max_queued_chunks
        self.files_seen = 0
        self.finished = False

        self._listeners: Dict[str, List[Callable[..., Any]]] = defaultdict(list)
        self._tasks: List["asyncio.Future[Any]"] = []
        self._messages: List[Tuple[Any, ...]] = []
        self._current: Optional[FilePartStream] = None
        self._ended = False

        self._header_field = b""
        self._header_value = b""
        self._part_headers: Dict[bytes, bytes] = {}

        callbacks = {
            "on_part_begin": self._on_part_begin,
            "on_part_data": self._on_part_data,
            "on_part_end": self._on_part_end,
            "on_header_field": self._on_header_field,
            "on_header_value": self._on_header_value,
            "on_header_end": self._on_header_end,
            "on_headers_finished": self._on_headers_finished,
            "on_end": self._on_end,
        }
        self._parser = StreamingMultipartParser(boundary, callbacks)

    def on(self, event: str, handler: Callable[..., Any]) -> "MultipartParser":
        """Register a handler for an event."""
        self._listeners[event].append(handler)
        return self

    def listeners(self, event: str) -> List[Callable[..., Any]]:
        return list(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """
        Call every handler of ``event``.

        Awaitable results are scheduled as tasks and awaited by ``settle``.

        Returns:
            True if the event had handlers
        """
        handlers = self.listeners(event)
        streams = [arg for arg in args if isinstance(arg, FilePartStream)]
        for handler in handlers:
            result = handler(*args)
            if not inspect.isawaitable(result):
                # A synchronous handler is done with the part once it returns.
                for stream in streams:
                    stream.discard()
                continue

            task = asyncio.ensure_future(result)
            for stream in streams:
                task.add_done_callback(lambda _, stream=stream: stream.discard())
            self._tasks.append(task)

        return bool(handlers)

    async def settle(self) -> Optional[BaseException]:
        """
        Wait for every scheduled handler.

        Returns:
            The first handler error, if any
        """
        if not self._tasks:
            return None

        results = await asyncio.gather(*self._tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                return result
        return None

    async def feed(self, body: AsyncIterable[bytes]) -> None:
        """
        Parse a request body and dispatch its file parts.

        Returns once every file handler has finished and ``finish`` was
        emitted.

        Raises:
            TransportError: If the body cannot be read or is malformed
            Exception: The first error raised by a file handler
        """
        try:
            await self._consume(body)
        except asyncio.CancelledError:
            logger.warning(f"Multipart request cancelled after {self.files_seen} file(s)")
            await self._cancel_handlers()
            raise

    async def _consume(self, body: AsyncIterable[bytes]) -> None:
        try:
            async for chunk in body:
                self._parser.write(chunk)
                await self._dispatch()

            self._parser.finalize()
            await self._dispatch()

            if not self._ended:
                raise TransportError("Multipart body ended before the closing boundary")

        except Exception as e:
            error = e if isinstance(e, TransportError) else TransportError(
                f"Multipart body could not be read: {e}")
            logger.error(f"Multipart request aborted after {self.files_seen} file(s): {error}")

            if self._current is not None:
                await self._current.abort(error)
                self._current = None
            await self.settle()

            if error is e:
                raise
            raise error from e

        handler_error = await self.settle()
        if handler_error is not None:
            raise handler_error

        pending = len(self._tasks)
        self.finished = True
        self.emit("finish")
        if len(self._tasks) > pending:
            await asyncio.gather(*self._tasks[pending:])

    async def _cancel_handlers(self) -> None:
        """Stop the current part and cancel unfinished handlers so their sinks are released."""
        if self._current is not None:
            self._current.discard()
            self._current = None

        unfinished = [task for task in self._tasks if not task.done()]
        for task in unfinished:
            task.cancel()
        if unfinished:
            await asyncio.gather(*unfinished, return_exceptions=True)

    async def _dispatch(self) -> None:
        messages, self._messages = self._messages, []

        for message in messages:
            kind = message[0]

            if kind == "begin":
                _, field_name, filename = message
                stream = FilePartStream(filename, self.max_queued_chunks)
                self._current = stream
                self.files_seen += 1
                logger.debug(f"File part started: field={field_name} filename={filename}")
                if not self.emit("file", field_name, stream, filename):
                    stream.discard()

            elif kind == "data":
                if self._current is not None:
                    await self._current.put(message[1])

            elif kind == "end":
                if self._current is not None:
                    await self._current.finish()
                    self._current = None

    def _on_part_begin(self) -> None:
        self._part_headers = {}

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._messages.append(("data", bytes(data[start:end])))

    def _on_part_end(self) -> None:
        self._messages.append(("end",))

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._part_headers[self._header_field.lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def _on_headers_finished(self) -> None:
        disposition = self._part_headers.get(b"content-disposition")
        if disposition is None:
            raise TransportError("Missing Content-Disposition header in multipart part")

        _, options = parse_options_header(disposition)
        filename = options.get(b"filename")
        if filename is None:
            # Plain form field.
            return

        field_name = _decode(options.get(b"name", b""))
        self._messages.append(("begin", field_name, _decode(filename)))

    def _on_end(self) -> None:
        self._ended = True


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value

    for key, candidate in headers.items():
        if key.lower() == name:
            return candidate
    return None


def _decode(value: bytes) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return value.decode("latin-1")
