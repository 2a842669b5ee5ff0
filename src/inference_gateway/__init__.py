"""
Model Inference Gateway

Resolves inference requests to heterogeneous model providers:
- Parameter validation before any network activity
- Lazy model activation with a process-wide active model
- Provider resolution by model id
- Timeout and retry discipline around provider calls
- Raw provider streams framed as server-sent events
"""

from .core.interface import AbstractProvider, ProviderCapability, ProviderPayload
from .core.config import GatewayConfig, load_config
from .core.registry import ActivationRegistry
from .core.resolver import ProviderResolver
from .core.gateway import InferenceGateway
from .core.streaming import encode_sse_frames
from .models.request import InferenceRequest
from .models.response import InferenceResult, StreamHandle

__all__ = [
    "AbstractProvider",
    "ProviderCapability",
    "ProviderPayload",
    "GatewayConfig",
    "load_config",
    "ActivationRegistry",
    "ProviderResolver",
    "InferenceGateway",
    "encode_sse_frames",
    "InferenceRequest",
    "InferenceResult",
    "StreamHandle",
]

__version__ = "1.0.0"
