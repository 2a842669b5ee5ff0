"""
Inference gateway facade.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import GatewayConfig
from .errors import NoActiveModelError
from .interface import AbstractProvider
from .registry import ActivationRegistry
from .resolver import ProviderResolver
from .streaming import StreamingExecutor
from .executor import RequestLike
from ..models.catalog import (
    ActivationResult,
    ActiveModelInfo,
    DeactivationResult,
    ModelView,
)
from ..models.response import InferenceResult, StreamHandle

logger = logging.getLogger(__name__)


class InferenceGateway:
    """
    Public entry point of the inference gateway.

    Exposes catalog and activation management plus inference, streaming
    and the active-model convenience calls used by the HTTP layer.
    """

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        registry: Optional[ActivationRegistry] = None,
        resolver: Optional[ProviderResolver] = None,
        providers: Optional[Dict[str, AbstractProvider]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the gateway.

        Args:
            config: Gateway configuration (defaults from the environment)
            registry: Activation registry; built from the config catalog if omitted
            resolver: Provider resolver; built from the config if omitted
            providers: Provider overrides by resolver key
            transport: Optional httpx transport for built providers
        """
        self.config = config or GatewayConfig()
        self.registry = registry or ActivationRegistry(catalog=self.config.models or None)
        self.resolver = resolver or ProviderResolver(
            self.config, providers=providers, transport=transport
        )
        self._executor = StreamingExecutor(self.registry, self.resolver, self.config.inference)

    async def startup(self) -> None:
        """Run startup activation and pick the default model."""
        settings = self.config.inference

        if settings.activate_all_on_startup:
            await self.activate_all_models()

        if settings.default_model:
            if self.registry.in_catalog(settings.default_model):
                await self.activate_model(settings.default_model)
            else:
                logger.warning(f"Default model {settings.default_model} is not in the catalog")

    async def shutdown(self) -> None:
        await self.resolver.disconnect_all()

    def list_models(self) -> List[ModelView]:
        return self.registry.list_models()

    def get_model(self, model_id: str) -> Optional[ModelView]:
        return self.registry.get_model(model_id)

    async def activate_model(
        self, model_id: str, config: Optional[Dict[str, Any]] = None
    ) -> ActivationResult:
        return await self.registry.activate_model(model_id, config or {})

    async def deactivate_model(self) -> DeactivationResult:
        return await self.registry.deactivate_model()

    def get_active_model(self) -> ActiveModelInfo:
        return self.registry.get_active_model()

    async def activate_all_models(self) -> List[Dict[str, Any]]:
        return await self.registry.activate_all()

    async def infer(self, model_id: str, request: RequestLike) -> InferenceResult:
        return await self._executor.infer(model_id, request)

    async def infer_streaming(self, model_id: str, request: RequestLike) -> StreamHandle:
        return await self._executor.infer_streaming(model_id, request)

    def _require_active_model(self) -> str:
        active = self.registry.active_model
        if not active:
            raise NoActiveModelError()
        return active

    async def infer_active(self, request: RequestLike) -> InferenceResult:
        """Perform inference with the active model."""
        return await self.infer(self._require_active_model(), request)

    async def infer_active_streaming(self, request: RequestLike) -> StreamHandle:
        """Perform streaming inference with the active model."""
        return await self.infer_streaming(self._require_active_model(), request)
