"""
Anthropic Messages API adapter.

Provides multi-turn chat access to Claude models, with streaming.
"""

import json
import logging
from typing import Optional, Set, Dict

import httpx

from .base import HTTPProvider, ResponseByteStream
from ..core.config import AnthropicSettings
from ..core.interface import ProviderCapability, ProviderPayload
from ..core.errors import TransientNetworkError
from ..core.retry import RetryPolicy
from ..models.request import InferenceRequest
from ..models.response import ProviderOutput

logger = logging.getLogger(__name__)


class AnthropicProvider(HTTPProvider):
    """
    Chat provider backed by Anthropic's Messages API.

    Authenticates with the ``x-api-key`` header instead of a bearer token.
    """

    credential_label = "Anthropic"

    def __init__(
        self,
        settings: Optional[AnthropicSettings] = None,
        name: str = "anthropic",
        timeout: float = 60.0,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings or AnthropicSettings()
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
        return "anthropic"

    @property
    def capabilities(self) -> Set[ProviderCapability]:
        return {
            ProviderCapability.TEXT_GENERATION,
            ProviderCapability.CHAT,
            ProviderCapability.STREAMING,
        }

    def _auth_headers(self, credential: str) -> Dict[str, str]:
        return {
            "x-api-key": credential,
            "anthropic-version": self._settings.api_version,
        }

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
            "stream": bool(request.stream),
        }
        if request.top_p is not None:
            body["top_p"] = request.top_p

        return ProviderPayload(
            model=model,
            body=body,
            credential=credential,
            path="/v1/messages",
            parameters={
                "temperature": body["temperature"],
                "max_tokens": body["max_tokens"],
                "top_p": request.top_p,
            },
        )

    async def infer(self, payload: ProviderPayload) -> ProviderOutput:
        """Create a message via the Anthropic API."""
        body = {**payload.body, "stream": False}
        logger.debug(f"Anthropic API request: {json.dumps(body)}")

        response = await self._request("POST", payload.path, payload.credential, json=body)
        data = response.json()

        text_blocks = [
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type", "text") == "text"
        ]
        if not text_blocks:
            raise TransientNetworkError(
                "Anthropic response contained no text content",
                provider=self._name,
                upstream_status=response.status_code,
                body=response.text,
            )

        return ProviderOutput(
            model_id=payload.model,
            response="".join(text_blocks),
            raw_response=data,
            parameters=payload.parameters,
        )

    async def infer_streaming(self, payload: ProviderPayload) -> ResponseByteStream:
        """Open a streaming message; yields raw SSE event bytes."""
        body = {**payload.body, "stream": True}
        logger.debug(f"Anthropic API streaming request: {json.dumps(body)}")
        return await self._open_stream("POST", payload.path, payload.credential, json=body)
