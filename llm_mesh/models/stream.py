"""
Streaming events of the Anthropic messages API.

Each SSE frame carries one JSON document whose `type` field selects the
event class. Decoding is a pure function of the frame: no state is kept
between events, so ordering and index consistency are left to the caller.

    event = decode_frame(b'data: {"type": "ping"}')
    assert isinstance(event, PingEvent)

Tags this module does not know are returned as UnknownEvent rather than
rejected, so newer server event types pass through without ending a
consumer's loop.
"""

import logging
import re
from enum import Enum
from typing import Any, Dict, Literal, Optional, Type, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from llm_mesh.models.message import MessageResponse, StopReason
from llm_mesh.models.response import ApiErrorDetail
from llm_mesh.utils.exceptions import (
    MalformedEventError,
    MissingDataLineError,
    StreamEncodingError,
)

logger = logging.getLogger(__name__)

SSE_DATA_FIELD = "data:"
# Only CR, LF and CRLF end a line; U+2028, U+2029 and U+0085 may sit inside JSON strings
SSE_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class ContentBlockKind(str, Enum):
    TEXT = "text"
    TEXT_DELTA = "text_delta"

    def __str__(self) -> str:
        return self.value


class ContentBlock(BaseModel):
    """A full block at block start, or a text fragment in a delta"""

    model_config = ConfigDict(frozen=True)

    type: ContentBlockKind
    text: str

    @property
    def kind(self) -> ContentBlockKind:
        return self.type


class MessageDeltaStop(BaseModel):
    model_config = ConfigDict(frozen=True)

    stop_reason: Optional[StopReason]
    stop_sequence: Optional[str] = None


class StreamUsageTokens(BaseModel):
    model_config = ConfigDict(frozen=True)

    output_tokens: int = Field(ge=0)


# ============================================================================
# Events
# ============================================================================


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class PingEvent(_Event):
    type: Literal["ping"] = "ping"


class MessageStartEvent(_Event):
    type: Literal["message_start"] = "message_start"
    message: MessageResponse


class ContentBlockStartEvent(_Event):
    type: Literal["content_block_start"] = "content_block_start"
    index: int = Field(ge=0)
    content_block: ContentBlock


class ContentBlockDeltaEvent(_Event):
    type: Literal["content_block_delta"] = "content_block_delta"
    index: int = Field(ge=0)
    delta: ContentBlock


class ContentBlockStopEvent(_Event):
    type: Literal["content_block_stop"] = "content_block_stop"
    index: int = Field(ge=0)


class MessageDeltaEvent(_Event):
    """Terminal metadata: why generation stopped and the running output token count"""

    type: Literal["message_delta"] = "message_delta"
    delta: MessageDeltaStop
    usage: StreamUsageTokens


class MessageStopEvent(_Event):
    type: Literal["message_stop"] = "message_stop"


class ErrorEvent(_Event):
    """Error reported by the server after the stream started (e.g. overloaded)"""

    type: Literal["error"] = "error"
    error: ApiErrorDetail


class UnknownEvent(_Event):
    """Event whose tag is not recognized; remaining fields are kept as extras."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str

    @property
    def event_type(self) -> str:
        return self.type

    @property
    def payload(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


StreamEvent = Union[
    PingEvent,
    MessageStartEvent,
    ContentBlockStartEvent,
    ContentBlockDeltaEvent,
    ContentBlockStopEvent,
    MessageDeltaEvent,
    MessageStopEvent,
    ErrorEvent,
    UnknownEvent,
]

EVENT_TYPES: Dict[str, Type[_Event]] = {
    "ping": PingEvent,
    "message_start": MessageStartEvent,
    "content_block_start": ContentBlockStartEvent,
    "content_block_delta": ContentBlockDeltaEvent,
    "content_block_stop": ContentBlockStopEvent,
    "message_delta": MessageDeltaEvent,
    "message_stop": MessageStopEvent,
    "error": ErrorEvent,
}


def parse_stream_event(data: Union[str, bytes]) -> StreamEvent:
    """
    Parse the JSON payload of one `data:` field into a stream event.

    Args:
        data: The JSON document following the `data:` prefix

    Returns:
        The event class selected by the document's `type` tag

    Raises:
        MalformedEventError: invalid JSON, missing or non-string `type`,
            or fields that do not fit the declared type
    """
    try:
        document = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise MalformedEventError(f"invalid JSON: {e}", data) from e

    if not isinstance(document, dict):
        raise MalformedEventError("payload is not a JSON object", data)

    event_type = document.get("type")
    if not isinstance(event_type, str):
        raise MalformedEventError("missing or invalid 'type' field", data)

    event_class = EVENT_TYPES.get(event_type, UnknownEvent)
    if event_class is UnknownEvent:
        logger.debug(f"Unrecognized stream event type '{event_type}'")

    try:
        return event_class.model_validate(document)
    except ValidationError as e:
        raise MalformedEventError(
            f"'{event_type}' event does not match its shape: {e.error_count()} error(s)", data
        ) from e


def find_data_line(frame: str) -> Optional[str]:
    """Return the value of the first `data:` line of a frame, if any."""
    for line in SSE_LINE_BREAK.split(frame):
        if line.startswith(SSE_DATA_FIELD):
            value = line[len(SSE_DATA_FIELD):]
            # A single space after the colon is part of the field syntax
            return value[1:] if value.startswith(" ") else value
    return None


def decode_frame(frame: Union[str, bytes]) -> StreamEvent:
    """
    Decode one complete SSE frame into a stream event.

    Raises:
        StreamEncodingError: the frame bytes are not valid UTF-8
        MissingDataLineError: no line of the frame starts with `data:`
        MalformedEventError: see parse_stream_event
    """
    if isinstance(frame, bytes):
        try:
            frame = frame.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StreamEncodingError(str(e), frame) from e

    data = find_data_line(frame)
    if data is None:
        raise MissingDataLineError(frame=frame)
    return parse_stream_event(data)
