"""
Server-Sent Events framing.

A frame is one block of lines terminated by a blank line. Network reads do
not line up with frames: a single chunk may hold several frames, none, or
half of one, so the splitter keeps the unfinished tail between calls.
"""

import logging
from typing import Iterable, Iterator, Optional

import orjson

logger = logging.getLogger(__name__)

FRAME_DELIMITER = b"\n\n"


class SSEFrameSplitter:
    """Incrementally cut a byte stream into complete SSE frames."""

    def __init__(self):
        self._buffer = b""

    @property
    def pending(self) -> bytes:
        """Bytes received but not yet part of a complete frame."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[bytes]:
        """Add a chunk and return every frame it completes, in arrival order."""
        if not chunk:
            return []

        # CRLF framing is legal SSE; a "\r\n" split across chunks is joined here
        self._buffer = (self._buffer + chunk).replace(b"\r\n", b"\n")

        *complete, self._buffer = self._buffer.split(FRAME_DELIMITER)
        return [frame for frame in complete if frame.strip()]

    def flush(self) -> list[bytes]:
        """Return the trailing frame of a stream that ended without a blank line."""
        remainder, self._buffer = self._buffer, b""
        if remainder.strip():
            logger.debug(f"Flushing {len(remainder)} trailing bytes as a final frame")
            return [remainder]
        return []


def iter_frames(chunks: Iterable[bytes]) -> Iterator[bytes]:
    """Split an iterable of byte chunks into frames, flushing at the end."""
    splitter = SSEFrameSplitter()
    for chunk in chunks:
        yield from splitter.feed(chunk)
    yield from splitter.flush()


def format_sse(data: dict, event: Optional[str] = None) -> str:
    """Format data as SSE event"""
    prefix = f"event: {event}\n" if event else ""
    return f"{prefix}data: {orjson.dumps(data).decode()}\n\n"
