"""
Non-streaming inference execution.
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, Optional, Tuple, TypeVar, Union

import pydantic
from opentelemetry import trace

from .config import InferenceSettings
from .errors import (
    ActivationError,
    InferenceTimeoutError,
    ModelNotFoundError,
    ValidationError,
)
from .interface import AbstractProvider
from .registry import ActivationRegistry
from .resolver import ProviderResolver
from .validation import validate_inference_params
from ..models.request import InferenceRequest
from ..models.response import InferenceResult

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

T = TypeVar("T")

RequestLike = Union[InferenceRequest, Dict[str, Any]]


class InferenceExecutor:
    """
    Runs a single inference request end to end.

    validate -> auto-activate -> resolve provider -> build payload ->
    provider call raced against the inference timeout. Retries happen
    inside the provider's HTTP transport.
    """

    operation = "inference"

    def __init__(
        self,
        registry: ActivationRegistry,
        resolver: ProviderResolver,
        settings: Optional[InferenceSettings] = None,
    ):
        self._registry = registry
        self._resolver = resolver
        self._settings = settings or InferenceSettings()

    @property
    def inference_timeout(self) -> float:
        return self._settings.inference_timeout

    def _coerce_request(self, request: RequestLike) -> InferenceRequest:
        """Validate and normalize a request model or raw mapping."""
        validate_inference_params(request)
        if isinstance(request, InferenceRequest):
            return request
        try:
            return InferenceRequest.model_validate(request)
        except pydantic.ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ()))
            raise ValidationError(f"Invalid {field}: {first.get('msg')}", field=field or None)

    async def _ensure_activated(self, model_id: str) -> None:
        if self._registry.is_activated(model_id):
            return

        logger.info(f"Auto-activating model {model_id} for {self.operation}")
        try:
            await self._registry.activate_model(model_id, {})
        except ActivationError as e:
            logger.error(f"Failed to auto-activate model {model_id}: {e.message}")
            raise ModelNotFoundError(
                f"Model {model_id} not found or could not be activated", model_id=model_id
            ) from e

    async def _prepare(
        self, model_id: str, request: RequestLike
    ) -> Tuple[InferenceRequest, AbstractProvider]:
        try:
            normalized = self._coerce_request(request)
        except ValidationError as e:
            logger.error(f"Parameter validation error: {e.message}")
            raise

        await self._ensure_activated(model_id)
        return normalized, self._resolver.resolve(model_id)

    async def _race_timeout(self, call: Awaitable[T], model_id: str) -> T:
        """
        Await a provider call, cancelling it once the timeout expires.
        """
        timeout = self._settings.inference_timeout
        try:
            return await asyncio.wait_for(call, timeout=timeout)
        except asyncio.TimeoutError:
            raise InferenceTimeoutError(
                f"{self.operation.capitalize()} request timed out after {timeout}s",
                timeout=timeout,
                model_id=model_id,
            )

    async def infer(self, model_id: str, request: RequestLike) -> InferenceResult:
        """
        Perform inference using the specified model.

        Args:
            model_id: Catalog model identifier
            request: Inference request or raw request mapping

        Returns:
            Inference result

        Raises:
            ValidationError, ModelNotFoundError, ProviderConfigError,
            TransientNetworkError, InferenceTimeoutError
        """
        logger.info(f"Performing inference with model {model_id}")

        with tracer.start_as_current_span("inference") as span:
            span.set_attribute("model_id", model_id)
            try:
                normalized, provider = await self._prepare(model_id, request)
                span.set_attribute("provider", provider.name)

                payload = provider.build_payload(model_id, normalized)
                output = await self._race_timeout(provider.infer(payload), model_id)
            except Exception as e:
                logger.error(f"Inference error with model {model_id}: {e}")
                span.record_exception(e)
                raise

            timestamp = self._registry.touch()

            return InferenceResult(
                model_id=model_id,
                response=output.response,
                timestamp=timestamp,
                raw_response=output.raw_response,
                parameters=output.parameters or normalized.echoed_parameters(),
                provider=provider.name,
            )
