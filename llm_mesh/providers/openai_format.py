import logging
from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from llm_mesh.config import Settings, settings
from llm_mesh.models.chat import ChatCompletion, ChatCompletionRequest, ModelList
from llm_mesh.providers.base import BaseProvider
from llm_mesh.utils.exceptions import JsonDecodeError, MissingApiKeyError, raise_for_status

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class OpenAIFormatProvider(BaseProvider):
    """Base class for providers using OpenAI-compatible API format.

    Subclasses only need to set `name`, `base_url`, `api_key_env_var`
    and the settings fields they read from.
    """

    name: str = ""  # Override in subclass
    base_url: str = ""  # Override in subclass
    api_key_env_var: str = ""  # Override in subclass

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            api_key,
            base_url or self.base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def _settings_fields(cls, config: Settings) -> tuple[Optional[str], Optional[str]]:
        """Return (api_key, base_url) for this provider from settings."""
        raise NotImplementedError

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None, **kwargs):
        api_key, base_url = cls._settings_fields(config or settings)
        if not api_key:
            raise MissingApiKeyError(cls.api_key_env_var, cls.name)
        return cls(api_key, base_url=base_url, **kwargs)

    async def _handle_response(self, response: httpx.Response, model: Type[T]) -> T:
        """Map a non-success status to its error class, else parse the body."""
        if not response.is_success:
            logger.error(
                f"{self.name} API error: status={response.status_code}, body={response.text[:200]}"
            )
            raise_for_status(self.name, response)

        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise JsonDecodeError(str(e), response.content, self.name) from e

    async def create_chat_completion(self, request: ChatCompletionRequest) -> ChatCompletion:
        """Create a (non-streaming) chat completion."""
        response = await self._request("POST", "chat/completions", json=request.to_payload())
        return await self._handle_response(response, ChatCompletion)

    async def list_models(self) -> ModelList:
        """List the models available to this API key."""
        response = await self._request("GET", "models")
        return await self._handle_response(response, ModelList)
