import httpx
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Iterable, Optional, Union

from pydantic import ValidationError

from llm_mesh.config import Settings, settings
from llm_mesh.models.message import MessageRequest, MessageResponse
from llm_mesh.models.response import ApiErrorResponse
from llm_mesh.models.stream import StreamEvent, decode_frame
from llm_mesh.providers.base import BaseProvider, StreamChunk
from llm_mesh.utils.exceptions import (
    ApiError,
    ApiVersionError,
    JsonDecodeError,
    MissingApiKeyError,
    TransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.anthropic.com"
API_KEY_ENV_VAR = "ANTHROPIC_API_KEY"

ANTHROPIC_API_KEY_HEADER = "x-api-key"
ANTHROPIC_BETA_HEADER = "anthropic-beta"
ANTHROPIC_VERSION_HEADER = "anthropic-version"
EVENT_STREAM_CONTENT_TYPE = "text/event-stream"


class AnthropicVersion(str, Enum):
    LATEST = "2023-06-01"
    INITIAL = "2023-01-01"

    def __str__(self) -> str:
        return self.value


class ApiVersion(str, Enum):
    V1 = "v1"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, version: Union["ApiVersion", str]) -> "ApiVersion":
        try:
            return cls(version)
        except ValueError:
            raise ApiVersionError(str(version)) from None


class MessageStream:
    """Events of one streamed message, in arrival order.

    Iterating yields StreamChunk items; a chunk holds either an event or the
    error that replaced it. Iteration does not stop at MessageStopEvent, the
    stream simply ends with the response body.
    """

    def __init__(self, provider: "AnthropicProvider", response: httpx.Response):
        self.response = response
        self._chunks = provider._stream_sse_events(response, decode_frame)

    @property
    def request_id(self) -> Optional[str]:
        return self.response.headers.get("request-id")

    def __aiter__(self) -> AsyncIterator[StreamChunk[StreamEvent]]:
        return self._chunks

    async def aclose(self):
        await self._chunks.aclose()
        await self.response.aclose()


class AnthropicProvider(BaseProvider):
    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_BASE_URL,
        anthropic_version: Union[AnthropicVersion, str] = AnthropicVersion.LATEST,
        api_version: Union[ApiVersion, str] = ApiVersion.V1,
        beta_headers: Optional[Iterable[str]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.anthropic_version = str(anthropic_version)
        self.api_version = ApiVersion.parse(api_version)
        self.beta_headers: Optional[str] = None
        super().__init__(
            api_key,
            f"{base_url.rstrip('/')}/{self.api_version}",
            headers={
                ANTHROPIC_API_KEY_HEADER: api_key,
                ANTHROPIC_VERSION_HEADER: self.anthropic_version,
            },
            timeout=timeout,
            transport=transport,
        )
        if beta_headers:
            self.with_beta_headers(beta_headers)

    @classmethod
    def from_settings(
        cls, config: Optional[Settings] = None, **kwargs
    ) -> "AnthropicProvider":
        """Build a provider from environment settings."""
        config = config or settings
        if not config.anthropic_api_key:
            raise MissingApiKeyError(API_KEY_ENV_VAR, cls.name)
        return cls(
            config.anthropic_api_key,
            base_url=config.anthropic_base_url,
            anthropic_version=config.anthropic_version,
            api_version=config.anthropic_api_version,
            **kwargs,
        )

    def with_beta_header(self, header: str) -> "AnthropicProvider":
        """Opt in to a beta feature for every following request."""
        if self.beta_headers:
            self.beta_headers = f"{self.beta_headers},{header}"
        else:
            self.beta_headers = header
        return self

    def with_beta_headers(self, headers: Iterable[str]) -> "AnthropicProvider":
        for header in headers:
            self.with_beta_header(header)
        return self

    def _request_headers(self, **extra: str) -> dict[str, str]:
        headers = dict(extra)
        if self.beta_headers:
            headers[ANTHROPIC_BETA_HEADER] = self.beta_headers
        return headers

    async def _raise_api_error(self, response: httpx.Response):
        """Turn a non-success response into ApiError, or JsonDecodeError if the body is not an error envelope."""
        try:
            body = await response.aread()
        except httpx.HTTPError as e:
            raise TransportError(e, self.name) from e

        try:
            envelope = ApiErrorResponse.model_validate_json(body)
        except ValidationError as e:
            logger.error(
                f"Anthropic API error: status={response.status_code}, "
                f"unparseable body={body[:200]!r}"
            )
            raise JsonDecodeError(str(e), body, self.name) from e

        logger.error(
            f"Anthropic API error: status={response.status_code}, "
            f"type={envelope.error.type}, message={envelope.error.message}"
        )
        raise ApiError(
            response.status_code,
            envelope.error.type,
            envelope.error.message,
            self.name,
        )

    async def create_message(self, request: MessageRequest) -> MessageResponse:
        """Send a message and wait for the complete response."""
        response = await self._request(
            "POST", "messages", json=request.to_payload(), headers=self._request_headers()
        )
        if not response.is_success:
            await self._raise_api_error(response)

        try:
            return MessageResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise JsonDecodeError(str(e), response.content, self.name) from e

    @asynccontextmanager
    async def stream_message(self, request: MessageRequest) -> AsyncIterator[MessageStream]:
        """
        Stream a message as server-sent events.

        Raises ApiError (or JsonDecodeError) on entry when the API rejects the
        request. Leaving the block closes the response, also when the events
        were not consumed to the end.

            async with provider.stream_message(request) as stream:
                async for chunk in stream:
                    event = chunk.unwrap()
        """
        payload = request.model_copy(update={"stream": True}).to_payload()
        http_request = self.client.build_request(
            "POST",
            "messages",
            json=payload,
            headers=self._request_headers(Accept=EVENT_STREAM_CONTENT_TYPE),
        )
        self._stream_started()
        try:
            try:
                response = await self.client.send(http_request, stream=True)
            except httpx.HTTPError as e:
                logger.warning(f"{self.name} stream request failed: {e}")
                raise TransportError(e, self.name) from e

            try:
                if not response.is_success:
                    await self._raise_api_error(response)

                stream = MessageStream(self, response)
                try:
                    yield stream
                finally:
                    await stream.aclose()
            finally:
                await response.aclose()
        finally:
            self._stream_ended()
