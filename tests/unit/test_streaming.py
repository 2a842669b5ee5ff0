"""
Unit tests for streaming inference and event-stream framing.
"""
import json

import httpx
import pytest

from inference_gateway.core.config import OpenAISettings
from inference_gateway.core.errors import (
    InferenceTimeoutError,
    StreamingInferenceError,
    StreamingUnsupportedError,
    TransientNetworkError,
    ValidationError,
)
from inference_gateway.core.gateway import InferenceGateway
from inference_gateway.core.streaming import encode_sse_frames, error_frame, format_frame
from inference_gateway.models.response import StreamHandle

from fakes import FakeProvider, FakeStream, make_config, make_gateway


async def collect(handle):
    return [frame async for frame in encode_sse_frames(handle)]


class TestStreamingExecutor:
    """Test opening provider streams."""

    @pytest.mark.asyncio
    async def test_returns_handle(self):
        """Test a stream handle wraps the provider stream."""
        fake = FakeProvider(name="fake-openai")
        gateway = make_gateway(providers={"openai": fake})

        handle = await gateway.infer_streaming("gpt-4", {"prompt": "Hi", "stream": True, "temperature": 1})
        assert isinstance(handle, StreamHandle)
        assert handle.model_id == "gpt-4"
        assert handle.provider == "fake-openai"
        assert handle.parameters["temperature"] == 1
        assert gateway.registry.is_activated("gpt-4")
        await handle.aclose()

    @pytest.mark.asyncio
    async def test_streaming_unsupported_before_payload(self):
        """Test whisper streaming fails on capability, not on missing audio."""
        gateway = make_gateway()
        with pytest.raises(StreamingUnsupportedError):
            await gateway.infer_streaming("whisper", {"prompt": "Hi", "stream": True})

    @pytest.mark.asyncio
    async def test_stability_streaming_unsupported(self):
        """Test image generation has no streaming mode."""
        gateway = make_gateway()
        with pytest.raises(StreamingUnsupportedError):
            await gateway.infer_streaming("stable-diffusion", {"prompt": "a cat", "stream": True})

    @pytest.mark.asyncio
    async def test_validation_first(self):
        """Test streaming requests are validated before anything else."""
        fake = FakeProvider()
        gateway = make_gateway(providers={"openai": fake})
        with pytest.raises(ValidationError):
            await gateway.infer_streaming("gpt-4", {"stream": True})
        assert fake.payloads == []

    @pytest.mark.asyncio
    async def test_open_timeout(self):
        """Test opening a stream is bounded by the inference timeout."""
        fake = FakeProvider(hang=True)
        gateway = make_gateway(providers={"openai": fake}, inference_timeout=0.05)
        with pytest.raises(InferenceTimeoutError):
            await gateway.infer_streaming("gpt-4", {"prompt": "Hi", "stream": True})
        assert fake.cancelled

    @pytest.mark.asyncio
    async def test_infer_active_streaming(self):
        """Test streaming against the active model."""
        gateway = make_gateway(providers={"anthropic": FakeProvider()})
        await gateway.activate_model("claude-3-opus")

        handle = await gateway.infer_active_streaming({"prompt": "Hi", "stream": True})
        assert handle.model_id == "claude-3-opus"
        await handle.aclose()


class TestFraming:
    """Test event-stream frame encoding."""

    def test_format_frame(self):
        """Test bytes and text payloads become data frames."""
        assert format_frame(b"abc") == "data: abc\n\n"
        assert format_frame("x", event="done") == "event: done\ndata: x\n\n"

    def test_error_frame(self):
        """Test error frames carry the serialized error."""
        frame = error_frame(StreamingInferenceError("broken"))
        assert frame.startswith("event: error\ndata: ")
        payload = json.loads(frame.split("data: ", 1)[1])
        assert payload == {"error": {"code": "streaming_inference_failed", "message": "broken"}}

    @pytest.mark.asyncio
    async def test_chunks_then_done(self):
        """Test one frame per chunk followed by a done frame."""
        stream = FakeStream([b"one", b"two"])
        handle = StreamHandle(model_id="gpt-4", stream=stream)

        frames = await collect(handle)
        assert frames[:2] == ["data: one\n\n", "data: two\n\n"]
        assert frames[2].startswith("event: done\n")
        assert len(frames) == 3
        assert stream.closed
        assert handle.closed

    @pytest.mark.asyncio
    async def test_character_split_across_chunks(self):
        """Test a multi-byte character split between chunks arrives intact."""
        stream = FakeStream([b"h\xc3", b"\xa9llo"])
        handle = StreamHandle(model_id="gpt-4", stream=stream)

        frames = await collect(handle)
        data = [frame[len("data: "):-2] for frame in frames if frame.startswith("data: ")]
        assert "".join(data) == "héllo"
        assert "\ufffd" not in "".join(frames)
        assert frames[-1].startswith("event: done\n")

    @pytest.mark.asyncio
    async def test_truncated_character_flushed_at_end(self):
        """Test an incomplete trailing character is flushed as a replacement."""
        stream = FakeStream([b"ok", b"\xc3"])
        handle = StreamHandle(model_id="gpt-4", stream=stream)

        frames = await collect(handle)
        assert frames[:2] == ["data: ok\n\n", "data: \ufffd\n\n"]
        assert frames[2].startswith("event: done\n")

    @pytest.mark.asyncio
    async def test_mid_stream_failure(self):
        """Test a failing stream ends with exactly one error frame."""
        stream = FakeStream([b"partial"], error=RuntimeError("connection reset"))
        handle = StreamHandle(model_id="gpt-4", stream=stream)

        frames = await collect(handle)
        assert frames[0] == "data: partial\n\n"
        assert len(frames) == 2
        assert frames[1].startswith("event: error\n")
        payload = json.loads(frames[1].split("data: ", 1)[1])
        assert payload["error"]["code"] == "streaming_inference_failed"
        assert payload["error"]["message"] == "connection reset"
        assert not any(frame.startswith("event: done") for frame in frames)
        assert stream.closed

    @pytest.mark.asyncio
    async def test_abandoned_stream_is_closed(self):
        """Test a consumer that stops early still releases the connection."""
        stream = FakeStream([b"a", b"b", b"c"])
        handle = StreamHandle(model_id="gpt-4", stream=stream)

        frames = encode_sse_frames(handle)
        assert await frames.__anext__() == "data: a\n\n"
        await frames.aclose()
        assert stream.closed

    @pytest.mark.asyncio
    async def test_on_close_called_once(self):
        """Test closing a handle twice releases resources once."""
        calls = []

        async def on_close():
            calls.append(1)

        handle = StreamHandle(model_id="gpt-4", stream=FakeStream([]), on_close=on_close)
        await handle.aclose()
        await handle.aclose()
        assert calls == [1]


class TestStreamingEndToEnd:
    """Test streaming through the OpenAI adapter with a mocked upstream."""

    def _gateway(self, handler):
        config = make_config()
        config.providers.openai = OpenAISettings(api_key="sk-test", base_url="https://api.openai.com/v1")
        return InferenceGateway(config, transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_upstream_bytes_passed_through(self):
        """Test upstream event bytes are forwarded inside data frames."""
        chunk = b'{"choices":[{"delta":{"content":"Hi"}}]}'
        gateway = self._gateway(lambda request: httpx.Response(200, content=chunk))

        handle = await gateway.infer_streaming("gpt-4", {"prompt": "Hi", "stream": True})
        frames = await collect(handle)

        assert frames[0] == f"data: {chunk.decode()}\n\n"
        assert frames[-1].startswith("event: done\n")
        await gateway.shutdown()

    @pytest.mark.asyncio
    async def test_upstream_failure_before_stream(self):
        """Test an upstream error is raised before a handle is returned."""
        gateway = self._gateway(lambda request: httpx.Response(500, text="down"))

        with pytest.raises(TransientNetworkError) as exc:
            await gateway.infer_streaming("gpt-4", {"prompt": "Hi", "stream": True})
        assert exc.value.attempts == 3
        await gateway.shutdown()
