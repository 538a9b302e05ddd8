import asyncio
import logging
from typing import Dict, List, Optional, Type

from llm_mesh.config import Settings, settings
from llm_mesh.providers.anthropic import AnthropicProvider
from llm_mesh.providers.base import BaseProvider
from llm_mesh.providers.groq import GroqProvider
from llm_mesh.providers.openai import OpenAIProvider
from llm_mesh.utils.exceptions import MissingApiKeyError

logger = logging.getLogger(__name__)


# Mapping of provider names to their classes
PROVIDER_CLASSES: Dict[str, Type[BaseProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
    "groq": GroqProvider,
}


class ProviderRegistry:
    """Central registry for AI providers - built from settings"""

    # Maximum time to wait for active streams during cleanup (seconds)
    CLEANUP_TIMEOUT = 10.0

    def __init__(self):
        self._providers: Dict[str, BaseProvider] = {}
        self._active_streams: int = 0

    @property
    def active_streams(self) -> int:
        return self._active_streams

    def stream_started(self) -> None:
        """Call when a provider stream starts."""
        self._active_streams += 1

    def stream_ended(self) -> None:
        """Call when a provider stream ends."""
        self._active_streams = max(0, self._active_streams - 1)

    def initialize(self, config: Optional[Settings] = None, **kwargs):
        """Create every provider that has an API key configured.

        Extra keyword arguments (e.g. `transport`) are passed to each provider.
        """
        config = config or settings
        for name, provider_class in PROVIDER_CLASSES.items():
            if name in self._providers:
                continue
            try:
                self.register(provider_class.from_settings(config, **kwargs), name)
            except MissingApiKeyError:
                logger.debug(f"Skipping provider '{name}': no API key configured")
            except Exception as e:
                logger.error(f"Error initializing provider '{name}': {e}")

    def register(self, provider: BaseProvider, name: Optional[str] = None) -> None:
        """Add a provider; its streams count towards the cleanup wait."""
        provider.track_streams(self)
        self._providers[name or provider.name] = provider

    def get_provider(self, name: str) -> Optional[BaseProvider]:
        return self._providers.get(name)

    def get_active_providers(self) -> List[BaseProvider]:
        """Return all providers with valid API keys"""
        return [p for p in self._providers.values() if p.is_configured()]

    def get_provider_names(self) -> List[str]:
        """Return names of all configured providers"""
        return list(self._providers.keys())

    async def cleanup(self):
        """Cleanup all providers, waiting for active streams to complete."""
        # Wait for active streams to complete (with timeout)
        wait_time = 0.0
        while self._active_streams > 0 and wait_time < self.CLEANUP_TIMEOUT:
            logger.debug(f"Waiting for {self._active_streams} active streams to complete...")
            await asyncio.sleep(0.1)
            wait_time += 0.1

        if self._active_streams > 0:
            logger.warning(
                f"Cleanup timeout: {self._active_streams} streams still active after "
                f"{self.CLEANUP_TIMEOUT}s. Proceeding with cleanup."
            )

        # Cleanup all providers
        for provider in self._providers.values():
            try:
                await provider.cleanup()
            except Exception as e:
                logger.warning(f"Error cleaning up provider {provider.name}: {e}")
        self._providers.clear()


# Singleton instance
provider_registry = ProviderRegistry()
