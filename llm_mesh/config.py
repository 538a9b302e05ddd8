import logging
import sys

from pydantic_settings import BaseSettings
from typing import Optional


def setup_logging(level: int = logging.INFO):
    """Configure logging for command-line use of the clients."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class Settings(BaseSettings):
    # Anthropic messages API
    anthropic_api_key: Optional[str] = None
    anthropic_base_url: str = "https://api.anthropic.com"
    anthropic_version: str = "2023-06-01"
    anthropic_api_version: str = "v1"

    # OpenAI-format chat APIs
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    groq_api_key: Optional[str] = None
    groq_base_url: str = "https://api.groq.com/openai/v1"

    # Timeout settings (seconds)
    provider_timeout: int = 60

    debug: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
