"""API clients for LLM provider HTTP APIs, with a streaming SSE event decoder."""

from llm_mesh.models.message import Message, MessageRequest, MessageResponse
from llm_mesh.models.stream import StreamEvent, decode_frame, parse_stream_event
from llm_mesh.providers import (
    AnthropicProvider,
    MessageStream,
    StreamChunk,
    provider_registry,
)
from llm_mesh.providers.groq import GroqProvider
from llm_mesh.providers.openai import OpenAIProvider

__version__ = "0.1.0"

__all__ = [
    "AnthropicProvider",
    "GroqProvider",
    "Message",
    "MessageRequest",
    "MessageResponse",
    "MessageStream",
    "OpenAIProvider",
    "StreamChunk",
    "StreamEvent",
    "decode_frame",
    "parse_stream_event",
    "provider_registry",
]
