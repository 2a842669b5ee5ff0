"""
Abstract Provider interface definition.

Defines the contract that all backend provider adapters must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any, AsyncIterator, Optional, Set
from enum import Enum

from .errors import StreamingUnsupportedError
from ..models.request import InferenceRequest
from ..models.response import ProviderOutput


class ProviderCapability(str, Enum):
    """Capabilities that a provider may support."""
    TEXT_GENERATION = "text-generation"
    CHAT = "chat"
    STREAMING = "streaming"
    SPEECH_TO_TEXT = "speech-to-text"
    IMAGE_GENERATION = "image-generation"


@dataclass
class ProviderPayload:
    """
    Outbound payload prepared for a provider call.

    ``body`` is what goes on the wire; the credential is kept apart and
    is only ever placed in the provider's authentication header.
    """
    model: str
    body: Dict[str, Any]
    credential: str = field(repr=False)
    files: Optional[Dict[str, Any]] = None
    path: Optional[str] = None
    parameters: Dict[str, Any] = field(default_factory=dict)


class AbstractProvider(ABC):
    """
    Abstract base class for backend provider adapters.

    A provider turns a validated ``InferenceRequest`` into a vendor
    payload and performs the vendor call. Providers that cannot stream
    leave ``ProviderCapability.STREAMING`` out of their capabilities and
    inherit the failing ``infer_streaming``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique name of this provider instance.

        Returns:
            Provider name (e.g., "openai", "whisper")
        """
        pass

    @property
    @abstractmethod
    def provider_type(self) -> str:
        """
        Vendor behind this provider (e.g., "openai", "anthropic").

        Returns:
            Provider type identifier
        """
        pass

    @property
    @abstractmethod
    def capabilities(self) -> Set[ProviderCapability]:
        """
        Set of capabilities this provider supports.

        Returns:
            Set of ProviderCapability values
        """
        pass

    @property
    def supports_streaming(self) -> bool:
        return ProviderCapability.STREAMING in self.capabilities

    async def connect(self) -> None:
        """Prepare any client resources."""

    async def disconnect(self) -> None:
        """Release client resources."""

    @abstractmethod
    def build_payload(self, model_id: str, request: InferenceRequest) -> ProviderPayload:
        """
        Build the outbound payload for a request.

        Args:
            model_id: Catalog model id the request was made against
            request: Validated inference request

        Returns:
            Prepared payload

        Raises:
            ProviderConfigError: If no credential is available
            ValidationError: If a provider-specific input is missing
        """
        pass

    @abstractmethod
    async def infer(self, payload: ProviderPayload) -> ProviderOutput:
        """
        Perform a single inference call.

        Args:
            payload: Prepared payload

        Returns:
            Normalized provider output
        """
        pass

    async def infer_streaming(self, payload: ProviderPayload) -> AsyncIterator[bytes]:
        """
        Open a streaming inference call.

        Args:
            payload: Prepared payload

        Returns:
            The provider's raw byte stream
        """
        raise StreamingUnsupportedError(
            f"Streaming is not supported for model {payload.model}", model_id=payload.model
        )

    def supports(self, capability: ProviderCapability) -> bool:
        return capability in self.capabilities

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, type={self.provider_type!r})"
