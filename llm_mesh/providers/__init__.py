from llm_mesh.providers.base import BaseProvider, StreamChunk
from llm_mesh.providers.anthropic import AnthropicProvider, MessageStream
from llm_mesh.providers.openai_format import OpenAIFormatProvider
from llm_mesh.providers.registry import provider_registry

__all__ = [
    "AnthropicProvider",
    "BaseProvider",
    "MessageStream",
    "OpenAIFormatProvider",
    "StreamChunk",
    "provider_registry",
]
