"""Shared test fixtures."""

import httpx
import pytest

from llm_mesh.config import Settings


class ChunkedStream(httpx.AsyncByteStream):
    """Response body delivered in fixed chunks, optionally failing at the end."""

    def __init__(self, chunks, error=None):
        self.chunks = list(chunks)
        self.error = error
        self.delivered = 0
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            self.delivered += 1
            yield chunk
        if self.error is not None:
            raise self.error

    async def aclose(self):
        self.closed = True


@pytest.fixture
def chunked_stream():
    return ChunkedStream


@pytest.fixture
def empty_settings():
    """Settings with no API keys, ignoring the environment and any .env file."""
    return Settings(
        _env_file=None,
        anthropic_api_key=None,
        openai_api_key=None,
        groq_api_key=None,
    )


@pytest.fixture
def message_start_json():
    return {
        "id": "msg_0117mpmR7a2JEj2Z1G4jqjkf",
        "type": "message",
        "role": "assistant",
        "model": "claude-3-5-sonnet-20240620",
        "content": [],
        "stop_reason": None,
        "stop_sequence": None,
        "usage": {"input_tokens": 9, "output_tokens": 3},
    }
