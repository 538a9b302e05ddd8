from enum import Enum

from llm_mesh.utils.exceptions import ModelNotSupportedError


class ClaudeModel(str, Enum):
    """Claude model ids known to this client."""

    CLAUDE_3_5_SONNET = "claude-3-5-sonnet-20240620"
    CLAUDE_3_OPUS = "claude-3-opus-20240229"
    CLAUDE_3_SONNET = "claude-3-sonnet-20240229"
    CLAUDE_3_HAIKU = "claude-3-haiku-20240307"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, model_id: str) -> "ClaudeModel":
        try:
            return cls(model_id)
        except ValueError:
            raise ModelNotSupportedError(model_id, provider="anthropic") from None
