"""
In-memory providers and helpers shared by the test suites.
"""

import asyncio
from typing import Any, Dict, List, Optional

from inference_gateway.core.config import (
    GatewayConfig,
    InferenceSettings,
    LoggingSettings,
    TracingSettings,
)
from inference_gateway.core.gateway import InferenceGateway
from inference_gateway.core.interface import AbstractProvider, ProviderCapability, ProviderPayload
from inference_gateway.models.response import ProviderOutput


class FakeStream:
    """Byte stream that yields fixed chunks and optionally fails afterwards."""

    def __init__(self, chunks: List[bytes], error: Optional[Exception] = None):
        self.chunks = chunks
        self.error = error
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


class FakeProvider(AbstractProvider):
    """Provider that never touches the network."""

    def __init__(
        self,
        name: str = "fake",
        streaming: bool = True,
        output: Any = "ok",
        error: Optional[Exception] = None,
        chunks: Optional[List[bytes]] = None,
        stream_error: Optional[Exception] = None,
        hang: bool = False,
    ):
        self._name = name
        self._streaming = streaming
        self.output = output
        self.error = error
        self.chunks = chunks if chunks is not None else [b"hello", b"world"]
        self.stream_error = stream_error
        self.hang = hang
        self.payloads: List[ProviderPayload] = []
        self.streams: List[FakeStream] = []
        self.cancelled = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def provider_type(self) -> str:
        return "fake"

    @property
    def capabilities(self):
        caps = {ProviderCapability.TEXT_GENERATION}
        if self._streaming:
            caps.add(ProviderCapability.STREAMING)
        return caps

    def build_payload(self, model_id, request) -> ProviderPayload:
        return ProviderPayload(
            model=request.model or model_id,
            body={"prompt": request.prompt},
            credential=request.credential_override or "test-key",
            parameters=request.echoed_parameters(),
        )

    async def _maybe_hang(self) -> None:
        if not self.hang:
            return
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise

    async def infer(self, payload: ProviderPayload) -> ProviderOutput:
        self.payloads.append(payload)
        await self._maybe_hang()
        if self.error is not None:
            raise self.error
        return ProviderOutput(model_id=payload.model, response=self.output, parameters=payload.parameters)

    async def infer_streaming(self, payload: ProviderPayload):
        if not self._streaming:
            return await super().infer_streaming(payload)
        self.payloads.append(payload)
        await self._maybe_hang()
        if self.error is not None:
            raise self.error
        stream = FakeStream(list(self.chunks), self.stream_error)
        self.streams.append(stream)
        return stream


def make_config(**inference: Any) -> GatewayConfig:
    """Configuration with fast retries and no startup side effects."""
    settings: Dict[str, Any] = {
        "inference_timeout": 5.0,
        "request_timeout": 5.0,
        "max_retries": 2,
        "retry_delay": 0.0,
        "default_model": None,
        "activate_all_on_startup": False,
    }
    settings.update(inference)
    return GatewayConfig(
        inference=InferenceSettings(**settings),
        logging=LoggingSettings(level="info", format="text"),
        tracing=TracingSettings(enabled=False),
    )


def make_gateway(providers: Optional[Dict[str, AbstractProvider]] = None, transport=None, **inference: Any):
    return InferenceGateway(make_config(**inference), providers=providers, transport=transport)
