"""
Inference Gateway Service

A FastAPI service that exposes model catalog management and inference
against heterogeneous model providers.

Features:
- Model catalog listing and activation
- Inference against the active model or a named model
- Server-sent event streaming of provider output
- OpenTelemetry tracing when enabled
"""

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .routes import router
from ..core.config import GatewayConfig, LoggingSettings, TracingSettings, load_config
from ..core.errors import GatewayError
from ..core.gateway import InferenceGateway

logger = logging.getLogger(__name__)


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(settings: LoggingSettings) -> None:
    """Configure root logging for the service."""
    handler = logging.StreamHandler()
    if settings.format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    logging.basicConfig(level=settings.level.upper(), handlers=[handler], force=True)


def setup_tracing(settings: TracingSettings, app: FastAPI) -> None:
    """Export spans over OTLP and instrument the app."""
    resource = Resource.create({"service.name": settings.service_name})
    provider = TracerProvider(resource=resource)
    processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint))
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)
    logger.info(f"Tracing enabled, exporting to {settings.otlp_endpoint}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    gateway: InferenceGateway = app.state.gateway

    await gateway.startup()
    logger.info("Inference gateway service started")
    yield

    await gateway.shutdown()
    logger.info("Inference gateway service stopped")


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(
    gateway: Optional[InferenceGateway] = None,
    config: Optional[GatewayConfig] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        gateway: Pre-built gateway (tests inject one with fake providers)
        config: Configuration; loaded from GATEWAY_CONFIG or defaults if omitted
    """
    if gateway is None:
        config = config or load_config()
        gateway = InferenceGateway(config)
    else:
        config = gateway.config

    setup_logging(config.logging)

    app = FastAPI(
        title="Model Inference Gateway",
        description="Unified inference API over heterogeneous model providers",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.gateway = gateway
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config.tracing.enabled:
        setup_tracing(config.tracing, app)

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.include_router(router)

    return app
