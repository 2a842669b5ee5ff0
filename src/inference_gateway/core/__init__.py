"""
Core inference gateway components.
"""

from .interface import AbstractProvider, ProviderCapability, ProviderPayload
from .config import GatewayConfig, load_config
from .errors import (
    GatewayError,
    ValidationError,
    ActivationError,
    ModelNotFoundError,
    NoActiveModelError,
    ProviderConfigError,
    ProviderAuthenticationError,
    TransientNetworkError,
    InferenceTimeoutError,
    StreamingUnsupportedError,
    StreamingInferenceError,
)
from .retry import RetryPolicy
from .validation import validate_inference_params
from .registry import ActivationRegistry

__all__ = [
    "AbstractProvider",
    "ProviderCapability",
    "ProviderPayload",
    "GatewayConfig",
    "load_config",
    "GatewayError",
    "ValidationError",
    "ActivationError",
    "ModelNotFoundError",
    "NoActiveModelError",
    "ProviderConfigError",
    "ProviderAuthenticationError",
    "TransientNetworkError",
    "InferenceTimeoutError",
    "StreamingUnsupportedError",
    "StreamingInferenceError",
    "RetryPolicy",
    "validate_inference_params",
    "ActivationRegistry",
]
