from llm_mesh.config import Settings
from llm_mesh.providers.openai_format import OpenAIFormatProvider


class OpenAIProvider(OpenAIFormatProvider):
    """OpenAI GPT provider."""

    name = "openai"
    base_url = "https://api.openai.com/v1"
    api_key_env_var = "OPENAI_API_KEY"

    @classmethod
    def _settings_fields(cls, config: Settings):
        return config.openai_api_key, config.openai_base_url
