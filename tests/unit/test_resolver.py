"""
Unit tests for provider resolution.
"""
import pytest

from inference_gateway.adapters import (
    AnthropicProvider,
    HuggingFaceProvider,
    OpenAIProvider,
    StabilityProvider,
    WhisperProvider,
)
from inference_gateway.core.resolver import ProviderResolver, provider_key_for

from fakes import FakeProvider, make_config


class TestResolutionRules:
    """Test the ordered model id rules."""

    @pytest.mark.parametrize("model_id,expected", [
        ("gpt-4", "openai"),
        ("gpt-3.5-turbo", "openai"),
        ("text-davinci-003", "openai"),
        ("text-davinci-002", "openai"),
        ("whisper", "whisper"),
        ("whisper-1", "whisper"),
        ("stable-diffusion", "stability"),
        ("stable-diffusion-xl-1024-v1-0", "stability"),
        ("claude-3-opus", "anthropic"),
        ("claude-2", "anthropic"),
        ("mistralai/Mistral-7B-Instruct-v0.2", "huggingface"),
        ("text-davinci-001", "huggingface"),
        ("whisper-large", "huggingface"),
        ("", "huggingface"),
    ])
    def test_provider_key(self, model_id, expected):
        """Test each model id maps to the expected provider."""
        assert provider_key_for(model_id) == expected

    def test_none_goes_to_default(self):
        """Test resolution is total even for a missing id."""
        assert provider_key_for(None) == "huggingface"


class TestProviderResolver:
    """Test provider instance resolution."""

    def test_builds_all_providers(self):
        """Test one provider of each kind is built."""
        resolver = ProviderResolver(make_config())
        assert isinstance(resolver.resolve("gpt-4"), OpenAIProvider)
        assert isinstance(resolver.resolve("whisper"), WhisperProvider)
        assert isinstance(resolver.resolve("stable-diffusion"), StabilityProvider)
        assert isinstance(resolver.resolve("claude-3-opus"), AnthropicProvider)
        assert isinstance(resolver.resolve("anything-else"), HuggingFaceProvider)

    def test_shared_instances(self):
        """Test repeated resolution returns the same provider."""
        resolver = ProviderResolver(make_config())
        assert resolver.resolve("gpt-4") is resolver.resolve("gpt-3.5-turbo")

    def test_provider_override(self):
        """Test overriding one provider by key."""
        fake = FakeProvider(name="fake-openai")
        resolver = ProviderResolver(make_config(), providers={"openai": fake})
        assert resolver.resolve("gpt-4") is fake
        assert isinstance(resolver.resolve("claude-3-opus"), AnthropicProvider)

    def test_streaming_capabilities(self):
        """Test which providers offer streaming."""
        resolver = ProviderResolver(make_config())
        assert resolver.resolve("gpt-4").supports_streaming
        assert resolver.resolve("claude-3-opus").supports_streaming
        assert not resolver.resolve("whisper").supports_streaming
        assert not resolver.resolve("stable-diffusion").supports_streaming
        assert not resolver.resolve("some/model").supports_streaming

    @pytest.mark.asyncio
    async def test_disconnect_all(self):
        """Test disconnecting releases provider clients."""
        resolver = ProviderResolver(make_config())
        openai = resolver.resolve("gpt-4")
        await openai.connect()
        assert openai.is_connected

        await resolver.disconnect_all()
        assert not openai.is_connected
