"""
Stability AI text-to-image adapter.
"""

import json
import logging
from typing import Optional, Set, Dict

import httpx

from .base import HTTPProvider
from ..core.config import StabilitySettings
from ..core.interface import ProviderCapability, ProviderPayload
from ..core.retry import RetryPolicy
from ..models.request import InferenceRequest
from ..models.response import ProviderOutput

logger = logging.getLogger(__name__)


class StabilityProvider(HTTPProvider):
    """
    Image generation provider backed by Stability AI.

    The result's ``response`` is a list of generated images, each with
    ``base64``, ``seed`` and ``finish_reason``. No streaming mode.
    """

    credential_label = "Stability AI"

    def __init__(
        self,
        settings: Optional[StabilitySettings] = None,
        name: str = "stability",
        timeout: float = 60.0,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings or StabilitySettings()
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
        return "stability"

    @property
    def capabilities(self) -> Set[ProviderCapability]:
        return {ProviderCapability.IMAGE_GENERATION}

    def _auth_headers(self, credential: str) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {credential}",
        }

    def build_payload(self, model_id: str, request: InferenceRequest) -> ProviderPayload:
        credential = self._resolve_credential(request)
        settings = self._settings
        extras = request.extra_params()

        engine = extras.get("engine") or request.model or settings.default_engine

        body = {
            "text_prompts": [
                {
                    "text": request.prompt,
                    "weight": extras.get("weight") or 1.0,
                },
            ],
            "cfg_scale": (
                extras["cfg_scale"] if extras.get("cfg_scale") is not None else settings.default_cfg_scale
            ),
            "height": extras.get("height") or settings.default_height,
            "width": extras.get("width") or settings.default_width,
            "steps": extras.get("steps") or settings.default_steps,
            "samples": extras.get("samples") or 1,
        }

        return ProviderPayload(
            model=engine,
            body=body,
            credential=credential,
            path=f"/generation/{engine}/text-to-image",
            parameters={
                "cfg_scale": body["cfg_scale"],
                "height": body["height"],
                "width": body["width"],
                "steps": body["steps"],
                "samples": body["samples"],
            },
        )

    async def infer(self, payload: ProviderPayload) -> ProviderOutput:
        """Generate images via the Stability AI API."""
        logger.debug(f"Stability AI request: {json.dumps(payload.body)}")

        response = await self._request("POST", payload.path, payload.credential, json=payload.body)
        data = response.json()

        images = [
            {
                "base64": artifact.get("base64"),
                "seed": artifact.get("seed"),
                "finish_reason": artifact.get("finishReason"),
            }
            for artifact in data.get("artifacts", [])
        ]

        return ProviderOutput(
            model_id=payload.model,
            response=images,
            raw_response=data,
            parameters=payload.parameters,
        )
