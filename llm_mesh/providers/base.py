import logging
from abc import ABC
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Generic, Optional, Protocol, TypeVar

import httpx

from llm_mesh.config import settings
from llm_mesh.utils.exceptions import InvalidStreamEvent, ProviderError, TransportError
from llm_mesh.utils.sse import SSEFrameSplitter

logger = logging.getLogger(__name__)

E = TypeVar("E")


@dataclass
class StreamChunk(Generic[E]):
    """One item of a provider stream: a decoded event or the error in its place"""

    provider: str
    event: Optional[E] = None
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> E:
        """Return the event, raising the error if this item carries one."""
        if self.error is not None:
            raise self.error
        return self.event


class StreamTracker(Protocol):
    """Counts streams that are open across providers"""

    def stream_started(self) -> None: ...

    def stream_ended(self) -> None: ...


class BaseProvider(ABC):
    """Abstract base class for AI providers"""

    name: str  # Provider identifier: "anthropic", "openai", "groq"

    def __init__(
        self,
        api_key: str,
        base_url: str,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        # Relative request paths are joined onto the base, which must end in "/"
        self.base_url = base_url.rstrip("/") + "/"
        self._client: Optional[httpx.AsyncClient] = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json", **(headers or {})},
            timeout=timeout if timeout is not None else self.timeout,
            transport=transport,
        )
        self._stream_tracker: Optional[StreamTracker] = None

    @classmethod
    def from_settings(cls, config=None, **kwargs) -> "BaseProvider":
        """Build the provider from environment settings."""
        raise NotImplementedError

    @property
    def timeout(self) -> float:
        """Get the configured provider timeout in seconds."""
        return float(settings.provider_timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise ProviderError(f"{self.name} client is closed", self.name)
        return self._client

    async def cleanup(self):
        """Cleanup HTTP client resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.cleanup()

    def is_configured(self) -> bool:
        """Check if provider has valid API key"""
        return bool(self.api_key)

    def track_streams(self, tracker: Optional[StreamTracker]) -> None:
        """Report stream start and end to `tracker` (e.g. the provider registry)."""
        self._stream_tracker = tracker

    def _stream_started(self) -> None:
        if self._stream_tracker is not None:
            self._stream_tracker.stream_started()

    def _stream_ended(self) -> None:
        if self._stream_tracker is not None:
            self._stream_tracker.stream_ended()

    def _error_chunk(self, error: ProviderError) -> StreamChunk:
        """Create an error StreamChunk."""
        if error.provider is None:
            error.provider = self.name
        return StreamChunk(provider=self.name, error=error)

    def _log_decode_error(self, error: Exception) -> None:
        """Log stream decode error at debug level."""
        logger.debug(f"Stream decode error in {self.name}: {error}")

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send a one-shot request, wrapping transport failures."""
        try:
            return await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} {method} {path} failed: {e}")
            raise TransportError(e, self.name) from e

    async def _stream_sse_events(
        self,
        response: httpx.Response,
        decode: Callable[[bytes], E],
    ) -> AsyncIterator[StreamChunk[E]]:
        """
        Decode SSE frames from a streaming response.

        Args:
            response: The httpx streaming response (status already checked)
            decode: Function turning one complete frame into an event

        Yields:
            StreamChunk objects in frame arrival order. A frame that fails to
            decode yields an error chunk and the stream continues; a transport
            failure yields one error chunk and ends the stream.
        """
        splitter = SSEFrameSplitter()

        def chunks_for(frames: list[bytes]) -> list[StreamChunk[E]]:
            items = []
            for frame in frames:
                try:
                    items.append(StreamChunk(provider=self.name, event=decode(frame)))
                except InvalidStreamEvent as e:
                    self._log_decode_error(e)
                    items.append(self._error_chunk(e))
            return items

        try:
            async for chunk in response.aiter_bytes():
                for item in chunks_for(splitter.feed(chunk)):
                    yield item
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} stream interrupted: {e}")
            yield self._error_chunk(TransportError(e, self.name))
            return

        for item in chunks_for(splitter.flush()):
            yield item
