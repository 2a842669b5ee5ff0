"""
Hugging Face Inference API adapter.

Catch-all provider for arbitrary externally hosted models: any model id
not claimed by another provider is posted to ``{base_url}/{model_id}``.
Whether the model exists is decided by the remote API.
"""

import json
import logging
from typing import Optional, Set, Dict, Any

import httpx

from .base import HTTPProvider
from ..core.config import HuggingFaceSettings
from ..core.interface import ProviderCapability, ProviderPayload
from ..core.errors import ValidationError
from ..core.retry import RetryPolicy
from ..models.request import InferenceRequest
from ..models.response import ProviderOutput

logger = logging.getLogger(__name__)


class HuggingFaceProvider(HTTPProvider):
    """Generic text-generation provider backed by Hugging Face."""

    credential_label = "Hugging Face"

    def __init__(
        self,
        settings: Optional[HuggingFaceSettings] = None,
        name: str = "huggingface",
        timeout: float = 60.0,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings or HuggingFaceSettings()
        super().__init__(
            name=name,
            base_url=self._settings.base_url,
            api_key=self._settings.api_key,
            timeout=timeout,
            retry_policy=retry_policy,
            transport=transport,
        )

    @property
    def provider_type(self) -> str:
        return "huggingface"

    @property
    def capabilities(self) -> Set[ProviderCapability]:
        return {ProviderCapability.TEXT_GENERATION}

    @staticmethod
    def _mapping_extra(extras: Dict[str, Any], key: str) -> Dict[str, Any]:
        value = extras.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValidationError(f"Invalid {key}: must be an object", field=key)
        return value

    def build_payload(self, model_id: str, request: InferenceRequest) -> ProviderPayload:
        credential = self._resolve_credential(request)
        model = request.model or model_id
        if not model:
            raise ValidationError("Model name is required for Hugging Face inference", field="model")

        extras = request.extra_params()
        parameters = {
            key: value
            for key, value in request.echoed_parameters().items()
            if value is not None
        }
        parameters.update(self._mapping_extra(extras, "parameters"))

        body = {
            "inputs": request.prompt,
            "parameters": parameters,
            "options": self._mapping_extra(extras, "options"),
        }

        return ProviderPayload(
            model=model,
            body=body,
            credential=credential,
            path=f"/{model}",
            parameters=parameters,
        )

    @staticmethod
    def _extract_text(data: Any) -> str:
        if isinstance(data, list) and data and isinstance(data[0], dict):
            text = data[0].get("generated_text")
            if text is not None:
                return text
        return json.dumps(data)

    async def infer(self, payload: ProviderPayload) -> ProviderOutput:
        """Run inference via the Hugging Face Inference API."""
        logger.debug(f"Hugging Face API request: {json.dumps(payload.body)}")

        response = await self._request("POST", payload.path, payload.credential, json=payload.body)
        data = response.json()

        return ProviderOutput(
            model_id=payload.model,
            response=self._extract_text(data),
            raw_response=data,
            parameters=payload.parameters,
        )
