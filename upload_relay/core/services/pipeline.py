"""
Linear stream pipeline: source, transforms, sink.

The pipeline pulls one chunk at a time and awaits the sink before pulling
the next, so a slow sink slows the source and nothing is buffered between
stages.
"""

import logging
from typing import Any, AsyncIterable, Callable

from ..interfaces.storage import IStorageSink

logger = logging.getLogger(__name__)

Transform = Callable[[AsyncIterable[bytes]], AsyncIterable[bytes]]


async def pipeline(
    source: AsyncIterable[bytes],
    *transforms: Transform,
    sink: IStorageSink
) -> int:
    """
    Drive ``source`` through ``transforms`` into ``sink``.

    The first error raised by any stage stops the pipeline and propagates
    unchanged. On every exit path the composed stream and the source are
    closed so upstream resources are released promptly. Closing the sink
    is left to its owner.

    Args:
        source: Inbound chunk stream
        transforms: Stream transforms applied in order
        sink: Destination sink

    Returns:
        Number of bytes written to the sink
    """
    stream: AsyncIterable[bytes] = source
    for transform in transforms:
        stream = transform(stream)

    written = 0
    try:
        async for chunk in stream:
            await sink.write(chunk)
            written += len(chunk)
    finally:
        await _aclose(stream)
        if stream is not source:
            await _aclose(source)

    return written


async def _aclose(stream: Any) -> None:
    aclose = getattr(stream, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception as e:
        logger.debug(f"Error closing pipeline stage: {e}")
