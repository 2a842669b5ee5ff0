"""
Inference request model.
"""

from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


class InferenceRequest(BaseModel):
    """
    A single logical inference request.

    Domain checks on the generation parameters are performed by
    ``validate_inference_params`` rather than by the model itself, so a
    request can always be constructed and then rejected with a
    descriptive error. Provider-specific fields (``audio_file``,
    ``cfg_scale``, ``parameters`` ...) are kept as extras.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    prompt: Optional[str] = None
    temperature: Optional[Any] = None
    max_tokens: Optional[Any] = None
    top_p: Optional[Any] = None
    stream: bool = False

    # Override of the model id forwarded to the vendor
    model: Optional[str] = None

    # Never serialized; only the provider's auth header may carry it
    credential_override: Optional[str] = Field(
        default=None, alias="api_key", exclude=True, repr=False
    )

    def extra_params(self) -> Dict[str, Any]:
        """Provider-specific fields supplied with the request."""
        return dict(self.model_extra or {})

    def echoed_parameters(self) -> Dict[str, Any]:
        """Generation parameters echoed back to the caller."""
        return {
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
        }
