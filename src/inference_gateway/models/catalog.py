"""
Model catalog and activation state models.
"""

from typing import Optional, List, Dict, Any
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class ModelStatus(str, Enum):
    """Lifecycle status of a catalog model."""
    AVAILABLE = "available"
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"


class ModelDescriptor(BaseModel):
    """Static catalog entry for a model."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    version: str = "1.0"
    description: str = ""
    capabilities: List[str] = Field(default_factory=list)
    provider: str


class ActivationRecord(BaseModel):
    """Per-model activation state, owned by the activation registry."""
    status: ModelStatus = ModelStatus.ACTIVATED
    activated_at: Optional[str] = None
    deactivated_at: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)


class ModelView(ModelDescriptor):
    """A catalog entry decorated with its current activation state."""
    status: ModelStatus = ModelStatus.AVAILABLE
    is_active: Optional[bool] = None


class ActivationResult(BaseModel):
    active_model: str
    status: ModelStatus = ModelStatus.ACTIVATED
    timestamp: str
    config: Dict[str, Any] = Field(default_factory=dict)


class DeactivationResult(BaseModel):
    status: ModelStatus = ModelStatus.DEACTIVATED
    previous_model: Optional[str] = None
    timestamp: str


class ActiveModelInfo(BaseModel):
    """The active slot; ``active_model`` is None when nothing is active."""
    model_config = ConfigDict(protected_namespaces=())

    active_model: Optional[str] = None
    model_info: Optional[ActivationRecord] = None
    timestamp: str


DEFAULT_CATALOG: List[Dict[str, Any]] = [
    {
        "id": "gpt-4",
        "name": "GPT-4",
        "version": "1.0",
        "description": "Advanced language model with strong reasoning capabilities",
        "capabilities": ["text-generation", "code-generation", "reasoning"],
        "provider": "openai",
    },
    {
        "id": "stable-diffusion",
        "name": "Stable Diffusion",
        "version": "3.0",
        "description": "Image generation model",
        "capabilities": ["image-generation"],
        "provider": "stability",
    },
    {
        "id": "whisper",
        "name": "Whisper",
        "version": "2.0",
        "description": "Speech recognition model",
        "capabilities": ["speech-to-text"],
        "provider": "openai",
    },
    {
        "id": "claude-3-opus",
        "name": "Claude 3 Opus",
        "version": "1.0",
        "description": "Advanced language model from Anthropic",
        "capabilities": ["text-generation", "code-generation", "reasoning"],
        "provider": "anthropic",
    },
    {
        "id": "mistralai/Mistral-7B-Instruct-v0.2",
        "name": "Mistral 7B Instruct",
        "version": "0.2",
        "description": "Open-weight instruction model served by the Hugging Face Inference API",
        "capabilities": ["text-generation"],
        "provider": "huggingface",
    },
]
