"""
OpenAI chat completions adapter.

Serves GPT and legacy davinci model ids through the OpenAI
``/chat/completions`` endpoint, with and without streaming.
"""

import json
import logging
from typing import Optional, Set, Dict, Any

import httpx

from .base import HTTPProvider, ResponseByteStream
from ..core.config import OpenAISettings
from ..core.interface import ProviderCapability, ProviderPayload
from ..core.errors import TransientNetworkError
from ..core.retry import RetryPolicy
from ..models.request import InferenceRequest
from ..models.response import ProviderOutput

logger = logging.getLogger(__name__)


class OpenAIProvider(HTTPProvider):
    """
    Text-completion provider backed by OpenAI.

    Uses the configured organization and API version headers when set.
    """

    credential_label = "OpenAI"

    def __init__(
        self,
        settings: Optional[OpenAISettings] = None,
        name: str = "openai",
        timeout: float = 60.0,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings or OpenAISettings()
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
        return "openai"

    @property
    def capabilities(self) -> Set[ProviderCapability]:
        return {
            ProviderCapability.TEXT_GENERATION,
            ProviderCapability.CHAT,
            ProviderCapability.STREAMING,
        }

    def _auth_headers(self, credential: str) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {credential}"}
        if self._settings.org_id:
            headers["OpenAI-Organization"] = self._settings.org_id
        if self._settings.api_version:
            headers["OpenAI-Version"] = self._settings.api_version
        return headers

    def build_payload(self, model_id: str, request: InferenceRequest) -> ProviderPayload:
        credential = self._resolve_credential(request)
        model = request.model or model_id or self._settings.default_model

        body = {
            "model": model,
            "messages": [{"role": "user", "content": request.prompt}],
            "temperature": (
                request.temperature if request.temperature is not None else self._settings.temperature
            ),
            "max_tokens": (
                request.max_tokens if request.max_tokens is not None else self._settings.max_tokens
            ),
            "top_p": request.top_p if request.top_p is not None else 1,
            "stream": bool(request.stream),
        }

        return ProviderPayload(
            model=model,
            body=body,
            credential=credential,
            path="/chat/completions",
            parameters={
                "temperature": body["temperature"],
                "max_tokens": body["max_tokens"],
                "top_p": body["top_p"],
            },
        )

    async def infer(self, payload: ProviderPayload) -> ProviderOutput:
        """Create a chat completion via the OpenAI API."""
        body = {**payload.body, "stream": False}
        logger.debug(f"OpenAI API request: {json.dumps(body)}")

        response = await self._request("POST", payload.path, payload.credential, json=body)
        data = response.json()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise TransientNetworkError(
                f"Unexpected OpenAI response shape: {e}",
                provider=self._name,
                upstream_status=response.status_code,
                body=response.text,
            )

        return ProviderOutput(
            model_id=payload.model,
            response=content,
            raw_response=data,
            parameters=payload.parameters,
        )

    async def infer_streaming(self, payload: ProviderPayload) -> ResponseByteStream:
        """Open a streaming chat completion; yields raw SSE bytes."""
        body = {**payload.body, "stream": True}
        logger.debug(f"OpenAI API streaming request: {json.dumps(body)}")
        return await self._open_stream("POST", payload.path, payload.credential, json=body)
