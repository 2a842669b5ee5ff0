"""
Inference gateway error types.
"""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """Base exception for inference gateway errors."""

    code = "inference_failed"
    status_code = 500

    def __init__(self, message: str, model_id: Optional[str] = None):
        self.message = message
        self.model_id = model_id
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API responses and stream error frames."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }


class ValidationError(GatewayError):
    """Raised when an inference request is malformed."""

    code = "invalid_request"
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, model_id: Optional[str] = None):
        super().__init__(message, model_id)
        self.field = field


class ActivationError(GatewayError):
    """Raised when a model cannot be activated."""

    code = "activation_failed"
    status_code = 404


class ModelNotFoundError(ActivationError):
    """Raised when a model id is not in the catalog."""

    code = "model_not_found"


class NoActiveModelError(GatewayError):
    """Raised when the active-model entry points are used with no active model."""

    code = "no_active_model"
    status_code = 400

    def __init__(self, message: str = "No active model"):
        super().__init__(message)


class ProviderConfigError(GatewayError):
    """Raised when the resolved provider has no usable credential."""

    code = "provider_not_configured"
    status_code = 500

    def __init__(self, message: str, provider: Optional[str] = None, model_id: Optional[str] = None):
        super().__init__(message, model_id)
        self.provider = provider


class ProviderAuthenticationError(ProviderConfigError):
    """Raised when the upstream provider rejects the credential."""

    code = "provider_authentication_failed"
    status_code = 502


class TransientNetworkError(GatewayError):
    """Raised when the provider keeps failing after all retries."""

    code = "upstream_error"
    status_code = 502

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        upstream_status: Optional[int] = None,
        body: Optional[str] = None,
        attempts: int = 1,
    ):
        super().__init__(message)
        self.provider = provider
        self.upstream_status = upstream_status
        self.body = body
        self.attempts = attempts

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.upstream_status is not None:
            data["error"]["upstream_status"] = self.upstream_status
        return data


class InferenceTimeoutError(GatewayError):
    """Raised when inference does not finish within the inference timeout."""

    code = "inference_timeout"
    status_code = 504

    def __init__(self, message: str, timeout: Optional[float] = None, model_id: Optional[str] = None):
        super().__init__(message, model_id)
        self.timeout = timeout


class StreamingUnsupportedError(GatewayError):
    """Raised when the resolved provider has no streaming mode."""

    code = "streaming_not_supported"
    status_code = 400


class StreamingInferenceError(GatewayError):
    """Raised (or framed) when a stream fails after it has started."""

    code = "streaming_inference_failed"
    status_code = 500
