from llm_mesh.config import Settings
from llm_mesh.providers.openai_format import OpenAIFormatProvider


class GroqProvider(OpenAIFormatProvider):
    """Groq provider (OpenAI-compatible endpoint)."""

    name = "groq"
    base_url = "https://api.groq.com/openai/v1"
    api_key_env_var = "GROQ_API_KEY"

    @classmethod
    def _settings_fields(cls, config: Settings):
        return config.groq_api_key, config.groq_base_url
