"""
Payload models for the Anthropic messages endpoint.

Requests are serialized with `to_payload()`, which drops unset optional
fields. Responses accept any model id so that new models do not break
deserialization.
"""

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from llm_mesh.models.claude import ClaudeModel


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ContentType(str, Enum):
    TEXT = "text"


class TextContent(BaseModel):
    """Text content part of a message"""
    type: Literal["text"] = "text"
    text: str


class ImageSource(BaseModel):
    """Image source with base64 data"""
    type: Literal["base64"] = "base64"
    media_type: str  # e.g., "image/jpeg", "image/png"
    data: str  # Base64-encoded image data (without data URL prefix)


class ImageContent(BaseModel):
    """Image content part of a multimodal message"""
    type: Literal["image"] = "image"
    source: ImageSource


Content = Union[TextContent, ImageContent]


class Message(BaseModel):
    """Message with either text-only (string) or multimodal (array) content"""
    role: Role
    content: Union[str, List[Content]]

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role=Role.USER, content=[TextContent(text=text)])

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(role=Role.ASSISTANT, content=[TextContent(text=text)])


class CacheType(str, Enum):
    EPHEMERAL = "ephemeral"


class CacheControl(BaseModel):
    type: CacheType = CacheType.EPHEMERAL


class SystemPrompt(BaseModel):
    """Structured system prompt block, optionally marked for prompt caching"""
    type: ContentType = ContentType.TEXT
    text: str
    cache_control: Optional[CacheControl] = None


System = Union[str, List[SystemPrompt]]


class MessageMetadata(BaseModel):
    user_id: Optional[str] = None


class MessageRequest(BaseModel):
    model: Union[ClaudeModel, str] = ClaudeModel.CLAUDE_3_5_SONNET
    # Absolute maximum; the model may stop earlier
    max_tokens: int = Field(default=1000, gt=0)
    messages: List[Message] = Field(default_factory=list)
    metadata: Optional[MessageMetadata] = None
    stop_sequences: Optional[List[str]] = None
    stream: bool = False
    system: Optional[System] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    top_k: Optional[int] = Field(default=None, gt=0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "model": "claude-3-5-sonnet-20240620",
                    "max_tokens": 1024,
                    "messages": [
                        {
                            "role": "user",
                            "content": [{"type": "text", "text": "Hello, Claude"}],
                        }
                    ],
                }
            ]
        }
    )

    def to_payload(self) -> dict:
        """JSON body for the messages endpoint, without unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class RoleResponse(str, Enum):
    """Role of a response message; the API only ever answers as the assistant"""
    ASSISTANT = "assistant"

    def __str__(self) -> str:
        return self.value


class StopReason(str, Enum):
    END_TURN = "end_turn"
    MAX_TOKENS = "max_tokens"
    STOP_SEQUENCE = "stop_sequence"
    TOOL_USE = "tool_use"

    def __str__(self) -> str:
        return self.value


class TokenUsage(BaseModel):
    input_tokens: int
    output_tokens: int
    cache_creation_input_tokens: Optional[int] = None
    cache_read_input_tokens: Optional[int] = None


class MessageResponse(BaseModel):
    """A complete message, or the empty envelope opening a stream"""
    id: str
    type: Literal["message"] = "message"
    role: RoleResponse = RoleResponse.ASSISTANT
    content: List[TextContent] = Field(default_factory=list)
    model: str
    stop_reason: Optional[StopReason] = None
    stop_sequence: Optional[str] = None
    usage: TokenUsage

    @property
    def text(self) -> str:
        return "".join(block.text for block in self.content)
