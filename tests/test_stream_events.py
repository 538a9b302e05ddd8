"""Tests for stream event decoding."""

import orjson
import pytest

from llm_mesh.models.message import StopReason
from llm_mesh.models.response import ApiErrorType
from llm_mesh.models.stream import (
    ContentBlockDeltaEvent,
    ContentBlockKind,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    ErrorEvent,
    MessageDeltaEvent,
    MessageStartEvent,
    MessageStopEvent,
    PingEvent,
    UnknownEvent,
    decode_frame,
    parse_stream_event,
)
from llm_mesh.utils.exceptions import (
    InvalidStreamEvent,
    MalformedEventError,
    MissingDataLineError,
    StreamEncodingError,
)

MESSAGE_START = (
    '{"type":"message_start","message":{"id":"msg_0117mpmR7a2JEj2Z1G4jqjkf","type":"message",'
    '"role":"assistant","model":"claude-3-5-sonnet-20240620","content":[],"stop_reason":null,'
    '"stop_sequence":null,"usage":{"input_tokens":9,"output_tokens":3}}}'
)
CONTENT_BLOCK_START = '{"type":"content_block_start","index":0,"content_block":{"type":"text","text":""}}'
CONTENT_BLOCK_DELTA = '{"type":"content_block_delta","index":0,"delta":{"type":"text_delta","text":"Hello!"}}'
CONTENT_BLOCK_STOP = '{"type":"content_block_stop","index":0}'
MESSAGE_DELTA = (
    '{"type":"message_delta","delta":{"stop_reason":"end_turn","stop_sequence":null},'
    '"usage":{"output_tokens":30}}'
)
ERROR = '{"type":"error","error":{"type":"overloaded_error","message":"Overloaded"}}'


def test_ping_event():
    assert parse_stream_event('{"type": "ping"}') == PingEvent()


def test_message_start_event():
    event = parse_stream_event(MESSAGE_START)
    assert isinstance(event, MessageStartEvent)
    message = event.message
    assert message.id == "msg_0117mpmR7a2JEj2Z1G4jqjkf"
    assert message.role == "assistant"
    assert message.model == "claude-3-5-sonnet-20240620"
    assert message.content == []
    assert message.stop_reason is None
    assert message.stop_sequence is None
    assert message.usage.input_tokens == 9
    assert message.usage.output_tokens == 3


def test_content_block_start_event():
    event = parse_stream_event(CONTENT_BLOCK_START)
    assert isinstance(event, ContentBlockStartEvent)
    assert event.index == 0
    assert event.content_block.kind == ContentBlockKind.TEXT
    assert event.content_block.text == ""


def test_content_block_delta_event():
    event = parse_stream_event(CONTENT_BLOCK_DELTA)
    assert isinstance(event, ContentBlockDeltaEvent)
    assert event.index == 0
    assert event.delta.kind == ContentBlockKind.TEXT_DELTA
    assert event.delta.text == "Hello!"


def test_content_block_stop_event():
    assert parse_stream_event(CONTENT_BLOCK_STOP) == ContentBlockStopEvent(index=0)


def test_message_delta_event():
    event = parse_stream_event(MESSAGE_DELTA)
    assert isinstance(event, MessageDeltaEvent)
    assert event.delta.stop_reason == StopReason.END_TURN
    assert event.delta.stop_sequence is None
    assert event.usage.output_tokens == 30


def test_message_stop_event():
    assert parse_stream_event('{"type":"message_stop"}') == MessageStopEvent()


def test_error_event():
    event = parse_stream_event(ERROR)
    assert isinstance(event, ErrorEvent)
    assert event.error.type == ApiErrorType.OVERLOADED
    assert event.error.message == "Overloaded"


def test_unknown_event_type_is_kept_not_treated_as_stop():
    event = parse_stream_event('{"type":"unknown_event","foo":1}')
    assert isinstance(event, UnknownEvent)
    assert not isinstance(event, MessageStopEvent)
    assert event.event_type == "unknown_event"
    assert event.payload == {"foo": 1}


@pytest.mark.parametrize(
    "raw",
    [
        '{"type":"ping"}',
        MESSAGE_START,
        CONTENT_BLOCK_START,
        CONTENT_BLOCK_DELTA,
        CONTENT_BLOCK_STOP,
        MESSAGE_DELTA,
        '{"type":"message_stop"}',
        ERROR,
        '{"type":"unknown_event","foo":[1,2]}',
    ],
)
def test_dumped_event_decodes_to_equal_event(raw):
    event = parse_stream_event(raw)
    assert parse_stream_event(orjson.dumps(event.model_dump(mode="json"))) == event


def test_invalid_json_is_malformed():
    with pytest.raises(MalformedEventError):
        parse_stream_event('{"type": "ping"')


@pytest.mark.parametrize("raw", ['{"index": 0}', '{"type": 3}', '["ping"]', '"ping"'])
def test_missing_or_invalid_type_is_malformed(raw):
    with pytest.raises(MalformedEventError):
        parse_stream_event(raw)


def test_shape_mismatch_is_malformed():
    with pytest.raises(MalformedEventError) as exc_info:
        parse_stream_event('{"type":"content_block_stop"}')
    assert "content_block_stop" in str(exc_info.value)


def test_negative_index_is_malformed():
    with pytest.raises(MalformedEventError):
        parse_stream_event('{"type":"content_block_stop","index":-1}')


def test_unknown_stop_reason_is_malformed():
    with pytest.raises(MalformedEventError):
        parse_stream_event(
            '{"type":"message_delta","delta":{"stop_reason":"bored"},"usage":{"output_tokens":1}}'
        )


def test_decode_frame_ignores_event_and_comment_lines():
    frame = b': keep-alive\nevent: content_block_stop\ndata: {"type":"content_block_stop","index":2}'
    assert decode_frame(frame) == ContentBlockStopEvent(index=2)


def test_decode_frame_accepts_data_without_space():
    assert decode_frame('data:{"type":"ping"}') == PingEvent()


def test_decode_frame_uses_first_data_line():
    frame = 'data: {"type":"ping"}\ndata: {"type":"message_stop"}'
    assert decode_frame(frame) == PingEvent()


def test_decode_frame_without_data_line():
    with pytest.raises(MissingDataLineError) as exc_info:
        decode_frame(b"event: ping\nid: 1")
    assert isinstance(exc_info.value, InvalidStreamEvent)
    assert exc_info.value.frame == "event: ping\nid: 1"


def test_decode_frame_invalid_utf8():
    with pytest.raises(StreamEncodingError) as exc_info:
        decode_frame(b"data: \xff\xfe")
    assert isinstance(exc_info.value, InvalidStreamEvent)


def test_events_are_immutable():
    event = parse_stream_event(CONTENT_BLOCK_STOP)
    with pytest.raises(Exception):
        event.index = 1


@pytest.mark.parametrize("separator", ["\u2028", "\u2029", "\x85"])
def test_text_delta_with_unicode_line_separator(separator):
    """JSON strings may hold these raw; they do not end an SSE line."""
    payload = {
        "type": "content_block_delta",
        "index": 0,
        "delta": {"type": "text_delta", "text": f"a{separator}b"},
    }
    frame = b"event: content_block_delta\ndata: " + orjson.dumps(payload)
    event = decode_frame(frame)
    assert isinstance(event, ContentBlockDeltaEvent)
    assert event.delta.text == f"a{separator}b"


def test_decode_frame_with_bare_cr_line_endings():
    assert decode_frame(b'event: ping\rdata: {"type":"ping"}') == PingEvent()
