"""
Streaming inference execution and output framing.
"""

import codecs
import json
import logging
from typing import AsyncIterator, Optional, Union

from .errors import (
    GatewayError,
    StreamingInferenceError,
    StreamingUnsupportedError,
)
from .executor import InferenceExecutor, RequestLike, tracer
from ..models.response import StreamHandle

logger = logging.getLogger(__name__)


class StreamingExecutor(InferenceExecutor):
    """
    Opens a provider stream and hands it to the caller.

    Shares validation, auto-activation and resolution with
    ``InferenceExecutor``. Providers without streaming support are
    rejected before any payload is built or request is sent.
    """

    operation = "streaming inference"

    async def infer_streaming(self, model_id: str, request: RequestLike) -> StreamHandle:
        """
        Perform streaming inference using the specified model.

        Args:
            model_id: Catalog model identifier
            request: Inference request or raw request mapping

        Returns:
            Handle owning the open provider byte stream

        Raises:
            ValidationError, ModelNotFoundError, StreamingUnsupportedError,
            ProviderConfigError, TransientNetworkError, InferenceTimeoutError
        """
        logger.info(f"Performing streaming inference with model {model_id}")

        with tracer.start_as_current_span("streaming_inference") as span:
            span.set_attribute("model_id", model_id)
            try:
                normalized, provider = await self._prepare(model_id, request)
                span.set_attribute("provider", provider.name)

                if not provider.supports_streaming:
                    raise StreamingUnsupportedError(
                        f"Streaming is not supported for model {model_id}", model_id=model_id
                    )

                payload = provider.build_payload(model_id, normalized)
                stream = await self._race_timeout(provider.infer_streaming(payload), model_id)
            except Exception as e:
                logger.error(f"Streaming inference error with model {model_id}: {e}")
                span.record_exception(e)
                raise

            timestamp = self._registry.touch()

            return StreamHandle(
                model_id=model_id,
                stream=stream,
                parameters=payload.parameters,
                timestamp=timestamp,
                provider=provider.name,
            )


def format_frame(data: Union[str, bytes], event: Optional[str] = None) -> str:
    """Format one server-sent event frame."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8", errors="replace")
    prefix = f"event: {event}\n" if event else ""
    return f"{prefix}data: {data}\n\n"


def error_frame(error: GatewayError) -> str:
    """Terminal frame carrying an error."""
    return format_frame(json.dumps(error.to_dict()), event="error")


def done_frame(handle: StreamHandle) -> str:
    """Terminal frame marking a stream that completed normally."""
    return format_frame(json.dumps({"model_id": handle.model_id, "status": "completed"}), event="done")


async def encode_sse_frames(handle: StreamHandle) -> AsyncIterator[str]:
    """
    Translate a provider byte stream into server-sent event frames.

    Each chunk becomes one frame with its payload passed through as-is.
    Bytes are decoded incrementally so a multi-byte character split
    across chunks is carried whole into the later frame.
    The sequence always ends with exactly one terminal frame: ``done`` on
    success, or ``error`` carrying a ``StreamingInferenceError`` if the
    stream fails part way. The upstream connection is closed either way.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    try:
        async for chunk in handle:
            if isinstance(chunk, (bytes, bytearray)):
                chunk = decoder.decode(bytes(chunk))
                if not chunk:
                    continue
            yield format_frame(chunk)
        tail = decoder.decode(b"", final=True)
        if tail:
            yield format_frame(tail)
    except Exception as e:
        logger.error(f"Stream for model {handle.model_id} failed mid-stream: {e}")
        if isinstance(e, StreamingInferenceError):
            failure = e
        else:
            failure = StreamingInferenceError(str(e) or e.__class__.__name__, model_id=handle.model_id)
        yield error_frame(failure)
    else:
        yield done_frame(handle)
    finally:
        await handle.aclose()
