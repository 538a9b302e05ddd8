"""Tests for SSE frame splitting."""

from llm_mesh.models.stream import ContentBlockDeltaEvent, PingEvent, decode_frame
from llm_mesh.utils.sse import SSEFrameSplitter, format_sse, iter_frames


def test_two_frames_in_one_chunk():
    splitter = SSEFrameSplitter()
    frames = splitter.feed(b'data: {"type":"ping"}\n\ndata: {"type":"message_stop"}\n\n')
    assert frames == [b'data: {"type":"ping"}', b'data: {"type":"message_stop"}']
    assert splitter.pending == b""


def test_empty_chunk_yields_nothing():
    splitter = SSEFrameSplitter()
    assert splitter.feed(b"") == []
    assert splitter.flush() == []


def test_delimiter_only_chunk_yields_nothing():
    splitter = SSEFrameSplitter()
    assert splitter.feed(b"\n\n") == []
    assert splitter.feed(b"\n\n\n\n") == []
    assert splitter.flush() == []


def test_whitespace_segments_are_discarded():
    splitter = SSEFrameSplitter()
    frames = splitter.feed(b'data: {"type":"ping"}\n\n  \n\n\t\n\n')
    assert frames == [b'data: {"type":"ping"}']


def test_frame_split_across_chunks_is_reassembled():
    splitter = SSEFrameSplitter()
    assert splitter.feed(b'event: ping\ndata: {"ty') == []
    assert splitter.pending == b'event: ping\ndata: {"ty'
    assert splitter.feed(b'pe": "ping"}\n') == []
    frames = splitter.feed(b'\ndata: {"type":"message_stop"}')
    assert frames == [b'event: ping\ndata: {"type": "ping"}']
    assert splitter.pending == b'data: {"type":"message_stop"}'


def test_frame_split_at_every_byte():
    payload = b'data: {"type":"ping"}\n\ndata: {"type":"message_stop"}\n\n'
    frames = list(iter_frames(payload[i:i + 1] for i in range(len(payload))))
    assert frames == [b'data: {"type":"ping"}', b'data: {"type":"message_stop"}']


def test_crlf_delimiters():
    splitter = SSEFrameSplitter()
    frames = splitter.feed(b"data: a\r\n\r\ndata: b\r\n\r\n")
    assert frames == [b"data: a", b"data: b"]


def test_crlf_delimiter_split_across_chunks():
    splitter = SSEFrameSplitter()
    assert splitter.feed(b"data: a\r\n\r") == []
    assert splitter.feed(b"\ndata: b") == [b"data: a"]


def test_utf8_character_split_across_chunks():
    # "é" is two bytes: \xc3\xa9
    splitter = SSEFrameSplitter()
    first = b'data: {"type":"content_block_delta","index":0,"delta":{"type":"text_delta","text":"caf\xc3'
    assert splitter.feed(first) == []
    frames = splitter.feed(b'\xa9"}}\n\n')
    assert len(frames) == 1

    event = decode_frame(frames[0])
    assert isinstance(event, ContentBlockDeltaEvent)
    assert event.delta.text == "café"


def test_flush_returns_trailing_frame_once():
    splitter = SSEFrameSplitter()
    assert splitter.feed(b'data: {"type":"ping"}') == []
    assert splitter.flush() == [b'data: {"type":"ping"}']
    assert splitter.flush() == []


def test_iter_frames_preserves_arrival_order():
    chunks = [b"data: 1\n\nda", b"ta: 2\n\n", b"data: 3"]
    assert list(iter_frames(chunks)) == [b"data: 1", b"data: 2", b"data: 3"]


def test_format_sse():
    assert format_sse({"type": "ping"}) == 'data: {"type":"ping"}\n\n'
    assert format_sse({"type": "ping"}, event="ping") == 'event: ping\ndata: {"type":"ping"}\n\n'


def test_format_sse_output_decodes():
    frames = list(iter_frames([format_sse({"type": "ping"}, event="ping").encode()]))
    assert len(frames) == 1
    assert decode_frame(frames[0]) == PingEvent()
