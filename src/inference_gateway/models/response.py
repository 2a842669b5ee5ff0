"""
Inference result and stream handle models.
"""

from typing import Optional, List, Dict, Any, AsyncIterator, Awaitable, Callable, Union
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> str:
    """Current time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class ProviderOutput(BaseModel):
    """Normalized output of a provider's ``infer`` operation."""
    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    response: Union[str, List[Dict[str, Any]], None] = None
    raw_response: Any = None
    parameters: Dict[str, Any] = Field(default_factory=dict)


class InferenceResult(BaseModel):
    """
    Result of a non-streaming inference call.

    ``response`` is text for completion and transcription models and a
    list of image dicts (``base64``, ``seed``, ``finish_reason``) for
    image generation models.
    """
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str
    response: Union[str, List[Dict[str, Any]], None] = None
    timestamp: str = Field(default_factory=utc_now)
    raw_response: Any = None
    parameters: Dict[str, Any] = Field(default_factory=dict)
    provider: Optional[str] = None


class StreamHandle:
    """
    An open provider byte stream handed to the caller.

    The caller owns the underlying connection once this is returned and
    must exhaust the stream or call ``aclose``.
    """

    is_streaming = True

    def __init__(
        self,
        model_id: str,
        stream: AsyncIterator[bytes],
        parameters: Optional[Dict[str, Any]] = None,
        timestamp: Optional[str] = None,
        provider: Optional[str] = None,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        self.model_id = model_id
        self.stream = stream
        self.parameters = parameters or {}
        self.timestamp = timestamp or utc_now()
        self.provider = provider
        self._on_close = on_close
        self._closed = False

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self.stream.__aiter__()

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        """Release the underlying connection."""
        if self._closed:
            return
        self._closed = True
        aclose = getattr(self.stream, "aclose", None)
        if aclose is not None:
            await aclose()
        if self._on_close is not None:
            await self._on_close()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model_id": self.model_id,
            "timestamp": self.timestamp,
            "is_streaming": True,
            "parameters": self.parameters,
        }

    def __repr__(self) -> str:
        return f"StreamHandle(model_id={self.model_id!r}, provider={self.provider!r})"
