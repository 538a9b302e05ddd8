"""
Chat completion models for OpenAI-compatible APIs (OpenAI, Groq).

Response models tolerate fields they do not declare; providers add their
own extensions (e.g. Groq's `x_groq`).
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    role: str = Field(..., pattern="^(system|user|assistant|tool)$")
    content: Optional[str] = None
    name: Optional[str] = None


class ChatCompletionRequest(BaseModel):
    model: str
    messages: List[ChatMessage]
    max_tokens: Optional[int] = Field(default=None, gt=0)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    stop: Optional[List[str]] = None
    user: Optional[str] = None

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


class ChatUsage(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletion(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    object: str = "chat.completion"
    created: int
    model: str
    choices: List[ChatChoice] = Field(default_factory=list)
    usage: Optional[ChatUsage] = None

    @property
    def text(self) -> str:
        """Content of the first choice, empty if there is none"""
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""


class ModelInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    object: str = "model"
    created: Optional[int] = None
    owned_by: Optional[str] = None


class ModelList(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str = "list"
    data: List[ModelInfo] = Field(default_factory=list)

    def ids(self) -> List[str]:
        return sorted(model.id for model in self.data)
