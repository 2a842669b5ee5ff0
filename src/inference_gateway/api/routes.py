"""
REST API routes for the inference gateway.
"""

import json
import logging
import time
from typing import Any, AsyncIterator, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from ..core.errors import GatewayError, ModelNotFoundError, NoActiveModelError, ValidationError
from ..core.gateway import InferenceGateway
from ..core.streaming import encode_sse_frames, error_frame
from ..models.response import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(tags=["models"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def get_gateway(request: Request) -> InferenceGateway:
    return request.app.state.gateway


async def _read_json(request: Request) -> Dict[str, Any]:
    """Parse a JSON object body, rejecting anything else."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


async def _single_frame(frame: str) -> AsyncIterator[str]:
    yield frame


async def _stream_response(gateway: InferenceGateway, model_id: str, body: Dict[str, Any]):
    """Open a provider stream and wrap it as a server-sent event response."""
    try:
        handle = await gateway.infer_streaming(model_id, body)
    except GatewayError as e:
        # Failure before the stream opened: one terminal error frame.
        return StreamingResponse(
            _single_frame(error_frame(e)),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    return StreamingResponse(
        encode_sse_frames(handle),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


# Service status

@router.get("/health")
async def health_check(gateway: InferenceGateway = Depends(get_gateway)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "checks": {
            "server": "running",
            "models": "active" if gateway.registry.active_model else "available",
        },
    }


@router.get("/status")
async def server_status(request: Request, gateway: InferenceGateway = Depends(get_gateway)):
    """Server status with the active model and uptime."""
    return {
        "status": "running",
        "active_model": gateway.registry.active_model,
        "uptime": time.monotonic() - request.app.state.started_at,
        "timestamp": utc_now(),
    }


# Model management

@router.get("/models")
async def list_models(gateway: InferenceGateway = Depends(get_gateway)):
    """List catalog models with their activation status."""
    return {"models": [model.model_dump() for model in gateway.list_models()]}


@router.post("/model/deactivate")
async def deactivate_model(gateway: InferenceGateway = Depends(get_gateway)):
    """Deactivate the current model."""
    result = await gateway.deactivate_model()
    return {"success": True, **result.model_dump()}


@router.get("/model/active")
async def get_active_model(gateway: InferenceGateway = Depends(get_gateway)):
    """Get active model information."""
    info = gateway.get_active_model()
    if not info.active_model:
        return JSONResponse(status_code=404, content=NoActiveModelError().to_dict())
    return info.model_dump()


@router.post("/model/infer")
async def infer_active(request: Request, gateway: InferenceGateway = Depends(get_gateway)):
    """Perform inference with the active model."""
    active = gateway.registry.active_model
    if not active:
        raise NoActiveModelError()

    body = await _read_json(request)
    if body.get("stream") is True:
        return await _stream_response(gateway, active, body)

    result = await gateway.infer(active, body)
    return result.model_dump()


@router.get("/model/{model_id:path}")
async def get_model(model_id: str, gateway: InferenceGateway = Depends(get_gateway)):
    """Get model information."""
    model = gateway.get_model(model_id)
    if model is None:
        raise ModelNotFoundError(f"Model {model_id} not found", model_id=model_id)
    return model.model_dump()


@router.post("/model/{model_id:path}/activate")
async def activate_model(
    model_id: str, request: Request, gateway: InferenceGateway = Depends(get_gateway)
):
    """Activate a model, optionally with configuration overrides."""
    try:
        body = await _read_json(request)
    except ValidationError as e:
        logger.debug(f"Ignoring activation body for model {model_id}: {e.message}")
        body = {}
    config = body.get("config") or {}
    if not isinstance(config, dict):
        raise ValidationError("Invalid config: must be an object", field="config")

    result = await gateway.activate_model(model_id, config)
    return result.model_dump()


@router.post("/model/{model_id:path}/infer")
async def infer_model(
    model_id: str, request: Request, gateway: InferenceGateway = Depends(get_gateway)
):
    """Perform inference with a specific model."""
    body = await _read_json(request)
    if body.get("stream") is True:
        return await _stream_response(gateway, model_id, body)

    result = await gateway.infer(model_id, body)
    return result.model_dump()
