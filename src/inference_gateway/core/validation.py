"""
Inference parameter validation.
"""

from typing import Any, Mapping, Union

from .errors import ValidationError
from ..models.request import InferenceRequest


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_inference_params(params: Union[InferenceRequest, Mapping[str, Any]]) -> None:
    """
    Validate inference parameters before any registry or network work.

    Checks run in order and only the first violation is reported.

    Args:
        params: Request model or raw request mapping

    Raises:
        ValidationError: If a required parameter is missing or out of range
    """
    if isinstance(params, InferenceRequest):
        data = params.model_dump()
    else:
        data = params

    prompt = data.get("prompt")
    if prompt is None or prompt == "":
        raise ValidationError("Missing required parameter: prompt", field="prompt")

    temperature = data.get("temperature")
    if temperature is not None and (not _is_number(temperature) or not 0 <= temperature <= 2):
        raise ValidationError(
            "Invalid temperature: must be a number between 0 and 2", field="temperature"
        )

    max_tokens = data.get("max_tokens")
    if max_tokens is not None and (
        not _is_number(max_tokens)
        or (isinstance(max_tokens, float) and not max_tokens.is_integer())
        or max_tokens < 1
    ):
        raise ValidationError(
            "Invalid max_tokens: must be a positive integer", field="max_tokens"
        )

    top_p = data.get("top_p")
    if top_p is not None and (not _is_number(top_p) or not 0 <= top_p <= 1):
        raise ValidationError(
            "Invalid top_p: must be a number between 0 and 1", field="top_p"
        )
