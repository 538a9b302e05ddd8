"""
Error types shared by all provider clients.

Usage:
    from llm_mesh.utils.exceptions import ApiError, raise_for_status

    try:
        response = await provider.create_message(request)
    except ApiError as e:
        print(e.error_type, e.message)

Stream decoding failures (InvalidStreamEvent and subclasses) are never raised
out of a stream; they are handed to the caller as items instead.
"""

from typing import NoReturn, Optional, Union

import httpx


class ProviderError(Exception):
    """Base class for every error raised by a provider client."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class MissingApiKeyError(ProviderError):
    """No API key was configured for a provider."""

    def __init__(self, env_var: str, provider: Optional[str] = None):
        super().__init__(f"Missing API key {env_var}", provider)
        self.env_var = env_var


class ApiVersionError(ProviderError):
    def __init__(self, version: str):
        super().__init__(f"Invalid API version: {version}")
        self.version = version


class ModelNotSupportedError(ProviderError):
    def __init__(self, model: str, provider: Optional[str] = None):
        super().__init__(f"Model not supported: {model}", provider)
        self.model = model


class TransportError(ProviderError):
    """The HTTP transport failed (connect, read, timeout...)."""

    def __init__(self, error: httpx.HTTPError, provider: Optional[str] = None):
        super().__init__(f"HTTP client error: {error}", provider)
        self.error = error


class JsonDecodeError(ProviderError):
    """A response body could not be deserialized."""

    def __init__(self, detail: str, body: Union[str, bytes] = b"", provider: Optional[str] = None):
        super().__init__(f"Failed to deserialize: {detail}", provider)
        self.body = body


class ApiError(ProviderError):
    """Structured error returned by the provider (error type + message)."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        message: str,
        provider: Optional[str] = None,
    ):
        super().__init__(f"API error: {error_type} {message}", provider)
        self.status_code = status_code
        self.error_type = error_type
        self.message = message


# ============================================================================
# HTTP status errors (OpenAI-format providers)
# ============================================================================


class StatusError(ProviderError):
    """Non-success HTTP status, keeping the raw response text."""

    label = "Unexpected status"

    def __init__(self, status_code: int, detail: str, provider: Optional[str] = None):
        super().__init__(f"{self.label}: {detail}", provider)
        self.status_code = status_code
        self.detail = detail


class BadRequestError(StatusError):
    label = "Bad Request"


class UnauthorizedError(StatusError):
    label = "Unauthorized"


class ForbiddenError(StatusError):
    label = "Forbidden"


class NotFoundError(StatusError):
    label = "Not Found"


class UnprocessableEntityError(StatusError):
    label = "Unprocessable Entity"


class RateLimitedError(StatusError):
    label = "Rate limited"


class InternalServerError(StatusError):
    label = "Internal Server Error"


class BadGatewayError(StatusError):
    label = "Bad Gateway"


class ServiceUnavailableError(StatusError):
    label = "Service Unavailable"


class UnexpectedStatusError(StatusError):
    pass


STATUS_ERRORS: dict[int, type[StatusError]] = {
    httpx.codes.BAD_REQUEST: BadRequestError,
    httpx.codes.UNAUTHORIZED: UnauthorizedError,
    httpx.codes.FORBIDDEN: ForbiddenError,
    httpx.codes.NOT_FOUND: NotFoundError,
    httpx.codes.UNPROCESSABLE_ENTITY: UnprocessableEntityError,
    httpx.codes.TOO_MANY_REQUESTS: RateLimitedError,
    httpx.codes.INTERNAL_SERVER_ERROR: InternalServerError,
    httpx.codes.BAD_GATEWAY: BadGatewayError,
    httpx.codes.SERVICE_UNAVAILABLE: ServiceUnavailableError,
}


def raise_for_status(provider: str, response: httpx.Response) -> NoReturn:
    """Raise the StatusError subclass matching a non-success response.

    The response body must already be read.
    """
    error_class = STATUS_ERRORS.get(response.status_code, UnexpectedStatusError)
    detail = response.text
    if error_class is UnexpectedStatusError:
        detail = f"{response.status_code} {detail}".strip()
    raise error_class(response.status_code, detail, provider)


# ============================================================================
# Stream decoding errors
# ============================================================================


class InvalidStreamEvent(ProviderError):
    """One SSE frame could not be decoded into an event."""

    reason = "Invalid Stream Event"

    def __init__(self, detail: str = "", frame: Union[str, bytes] = ""):
        message = f"{self.reason}: {detail}" if detail else self.reason
        super().__init__(message)
        self.frame = frame


class StreamEncodingError(InvalidStreamEvent):
    reason = "UTF8 Error"


class MissingDataLineError(InvalidStreamEvent):
    reason = "No data line in stream event"


class MalformedEventError(InvalidStreamEvent):
    reason = "Malformed stream event"
