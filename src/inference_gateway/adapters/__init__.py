"""
Provider adapters for the backend model vendors.
"""

from .base import HTTPProvider, ResponseByteStream
from .openai_adapter import OpenAIProvider
from .whisper_adapter import WhisperProvider
from .stability_adapter import StabilityProvider
from .anthropic_adapter import AnthropicProvider
from .huggingface_adapter import HuggingFaceProvider

__all__ = [
    "HTTPProvider",
    "ResponseByteStream",
    "OpenAIProvider",
    "WhisperProvider",
    "StabilityProvider",
    "AnthropicProvider",
    "HuggingFaceProvider",
]
