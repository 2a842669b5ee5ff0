"""
Inference gateway data models.
"""

from .request import InferenceRequest
from .response import InferenceResult, ProviderOutput, StreamHandle
from .catalog import (
    ModelDescriptor,
    ModelStatus,
    ModelView,
    ActivationRecord,
    ActivationResult,
    DeactivationResult,
    ActiveModelInfo,
    DEFAULT_CATALOG,
)

__all__ = [
    "InferenceRequest",
    "InferenceResult",
    "ProviderOutput",
    "StreamHandle",
    "ModelDescriptor",
    "ModelStatus",
    "ModelView",
    "ActivationRecord",
    "ActivationResult",
    "DeactivationResult",
    "ActiveModelInfo",
    "DEFAULT_CATALOG",
]
