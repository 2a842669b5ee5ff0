"""
OpenAI Whisper transcription adapter.
"""

import base64
import binascii
import logging
from typing import Optional, Set, Dict, Any, Tuple

import httpx

from .base import HTTPProvider
from ..core.config import OpenAISettings
from ..core.interface import ProviderCapability, ProviderPayload
from ..core.errors import ValidationError
from ..core.retry import RetryPolicy
from ..models.request import InferenceRequest
from ..models.response import ProviderOutput

logger = logging.getLogger(__name__)

WHISPER_ALIASES = {"whisper"}


class WhisperProvider(HTTPProvider):
    """
    Speech-to-text provider backed by the OpenAI transcription endpoint.

    ``infer`` uploads the request's audio and returns the transcript.
    The vendor API has no streaming mode, so streaming is not offered.
    Audio is taken from the ``audio_file`` extra as raw bytes or from
    ``audio_base64``. Strings such as file paths are refused.
    """

    credential_label = "OpenAI"

    def __init__(
        self,
        settings: Optional[OpenAISettings] = None,
        name: str = "whisper",
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
        return {ProviderCapability.SPEECH_TO_TEXT}

    def _auth_headers(self, credential: str) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {credential}"}
        if self._settings.org_id:
            headers["OpenAI-Organization"] = self._settings.org_id
        return headers

    @staticmethod
    def _load_audio(extras: Dict[str, Any]) -> Tuple[str, bytes]:
        audio = extras.get("audio_file")
        filename = extras.get("filename") or "audio"

        if isinstance(audio, (bytes, bytearray)):
            return filename, bytes(audio)

        if audio is not None and audio != "":
            raise ValidationError(
                "Invalid audio_file: send raw bytes or use audio_base64", field="audio_file"
            )

        encoded = extras.get("audio_base64")
        if encoded:
            try:
                return filename, base64.b64decode(encoded, validate=True)
            except (binascii.Error, ValueError):
                raise ValidationError("Invalid audio_base64: not valid base64", field="audio_base64")

        raise ValidationError("Audio file is required for transcription", field="audio_file")

    def build_payload(self, model_id: str, request: InferenceRequest) -> ProviderPayload:
        credential = self._resolve_credential(request)
        whisper = self._settings.whisper
        extras = request.extra_params()

        if request.model:
            model = request.model
        elif model_id and model_id not in WHISPER_ALIASES:
            model = model_id
        else:
            model = whisper.default_model

        filename, audio = self._load_audio(extras)

        language = extras.get("language") or whisper.default_language
        temperature = (
            request.temperature if request.temperature is not None else whisper.default_temperature
        )
        response_format = extras.get("response_format") or whisper.default_response_format

        body = {
            "model": model,
            "temperature": str(temperature),
            "response_format": response_format,
        }
        if language:
            body["language"] = language

        return ProviderPayload(
            model=model,
            body=body,
            credential=credential,
            files={"file": (filename, audio)},
            path="/audio/transcriptions",
            parameters={
                "temperature": temperature,
                "language": language,
                "response_format": response_format,
            },
        )

    async def infer(self, payload: ProviderPayload) -> ProviderOutput:
        """Transcribe audio via the Whisper API."""
        logger.debug(f"Whisper API request for model: {payload.model}")

        response = await self._request(
            "POST",
            payload.path,
            payload.credential,
            data=payload.body,
            files=payload.files,
        )

        if payload.body.get("response_format") in ("json", "verbose_json"):
            data = response.json()
            text = data.get("text")
        else:
            data = response.text
            text = data

        return ProviderOutput(
            model_id=payload.model,
            response=text,
            raw_response=data,
            parameters=payload.parameters,
        )
