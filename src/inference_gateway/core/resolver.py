"""
Provider resolution from model identifiers.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

import httpx

from .config import GatewayConfig
from .interface import AbstractProvider
from .retry import RetryPolicy
from ..adapters import (
    OpenAIProvider,
    WhisperProvider,
    StabilityProvider,
    AnthropicProvider,
    HuggingFaceProvider,
)

logger = logging.getLogger(__name__)

TEXT_COMPLETION = "openai"
TRANSCRIPTION = "whisper"
IMAGE_GENERATION = "stability"
CHAT = "anthropic"
DEFAULT = "huggingface"

TEXT_COMPLETION_PREFIXES = ("gpt-",)
TEXT_COMPLETION_IDS = frozenset({"text-davinci-003", "text-davinci-002"})
TRANSCRIPTION_IDS = frozenset({"whisper", "whisper-1"})
IMAGE_PREFIXES = ("stable-diffusion",)
CHAT_PREFIXES = ("claude",)

# Evaluated top to bottom, first match wins
RESOLUTION_RULES: List[Tuple[str, Callable[[str], bool]]] = [
    (
        TEXT_COMPLETION,
        lambda model_id: model_id.startswith(TEXT_COMPLETION_PREFIXES) or model_id in TEXT_COMPLETION_IDS,
    ),
    (TRANSCRIPTION, lambda model_id: model_id in TRANSCRIPTION_IDS),
    (IMAGE_GENERATION, lambda model_id: model_id.startswith(IMAGE_PREFIXES)),
    (CHAT, lambda model_id: model_id.startswith(CHAT_PREFIXES)),
]


def provider_key_for(model_id: Optional[str]) -> str:
    """
    Map a model id to the key of the provider that serves it.

    Never fails: ids matching no rule go to the default provider.
    """
    model_id = model_id or ""
    for key, matches in RESOLUTION_RULES:
        if matches(model_id):
            return key
    return DEFAULT


class ProviderResolver:
    """
    Resolves model ids to provider instances.

    One instance of each provider is built up front and shared by all
    requests resolved through this resolver.
    """

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        providers: Optional[Dict[str, AbstractProvider]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the resolver.

        Args:
            config: Gateway configuration for building providers
            providers: Provider instances overriding the built ones, by key
            transport: Optional httpx transport shared by built providers
        """
        self._config = config or GatewayConfig()
        self._providers: Dict[str, AbstractProvider] = self._build_providers(transport)
        if providers:
            self._providers.update(providers)

    def _build_providers(
        self, transport: Optional[httpx.AsyncBaseTransport]
    ) -> Dict[str, AbstractProvider]:
        settings = self._config.providers
        retry_policy = RetryPolicy.from_settings(self._config.inference)
        common = {
            "timeout": self._config.inference.request_timeout,
            "retry_policy": retry_policy,
            "transport": transport,
        }
        return {
            TEXT_COMPLETION: OpenAIProvider(settings.openai, **common),
            TRANSCRIPTION: WhisperProvider(settings.openai, **common),
            IMAGE_GENERATION: StabilityProvider(settings.stability, **common),
            CHAT: AnthropicProvider(settings.anthropic, **common),
            DEFAULT: HuggingFaceProvider(settings.huggingface, **common),
        }

    @property
    def providers(self) -> Dict[str, AbstractProvider]:
        return dict(self._providers)

    def resolve(self, model_id: Optional[str]) -> AbstractProvider:
        """
        Get the provider for a model id.

        Args:
            model_id: Model identifier

        Returns:
            Provider instance (the default provider for unknown ids)
        """
        key = provider_key_for(model_id)
        provider = self._providers[key]
        logger.debug(f"Resolved model {model_id} to provider {provider.name}")
        return provider

    async def disconnect_all(self) -> None:
        """Disconnect all providers."""
        for provider in self._providers.values():
            try:
                await provider.disconnect()
            except Exception as e:
                logger.error(f"Failed to disconnect provider {provider.name}: {e}")
