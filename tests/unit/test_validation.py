"""
Unit tests for inference parameter validation.
"""
import pytest

from inference_gateway.core.errors import ValidationError
from inference_gateway.core.validation import validate_inference_params
from inference_gateway.models.request import InferenceRequest


class TestPrompt:
    """Test the required prompt parameter."""

    @pytest.mark.parametrize("params", [{}, {"prompt": None}, {"prompt": ""}])
    def test_missing_prompt(self, params):
        """Test an absent or empty prompt is rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_inference_params(params)
        assert exc.value.message == "Missing required parameter: prompt"
        assert exc.value.field == "prompt"

    def test_prompt_only(self):
        """Test a prompt alone is a valid request."""
        validate_inference_params({"prompt": "Hello"})

    @pytest.mark.parametrize("prompt", ["   ", "\n", "\t "])
    def test_whitespace_prompt_accepted(self, prompt):
        """Test a prompt of only whitespace is passed through."""
        validate_inference_params({"prompt": prompt})

    def test_accepts_request_model(self):
        """Test a request model is validated like a mapping."""
        validate_inference_params(InferenceRequest(prompt="Hello", temperature=1.5))


class TestRanges:
    """Test numeric parameter ranges."""

    @pytest.mark.parametrize("value", [0, 0.7, 2, 2.0])
    def test_temperature_in_range(self, value):
        """Test temperature accepts the closed range [0, 2]."""
        validate_inference_params({"prompt": "x", "temperature": value})

    @pytest.mark.parametrize("value", [-0.1, 2.5, "hot", True])
    def test_temperature_out_of_range(self, value):
        """Test temperature rejects values outside [0, 2] and non-numbers."""
        with pytest.raises(ValidationError) as exc:
            validate_inference_params({"prompt": "x", "temperature": value})
        assert exc.value.message == "Invalid temperature: must be a number between 0 and 2"

    @pytest.mark.parametrize("value", [1, 256, 100.0])
    def test_max_tokens_valid(self, value):
        """Test max_tokens accepts positive integers."""
        validate_inference_params({"prompt": "x", "max_tokens": value})

    @pytest.mark.parametrize("value", [0, -5, 1.5, "10", float("inf")])
    def test_max_tokens_invalid(self, value):
        """Test max_tokens rejects zero, negatives, fractions and strings."""
        with pytest.raises(ValidationError) as exc:
            validate_inference_params({"prompt": "x", "max_tokens": value})
        assert exc.value.message == "Invalid max_tokens: must be a positive integer"

    @pytest.mark.parametrize("value", [0, 0.5, 1])
    def test_top_p_valid(self, value):
        """Test top_p accepts the closed range [0, 1]."""
        validate_inference_params({"prompt": "x", "top_p": value})

    @pytest.mark.parametrize("value", [1.01, -1, "all"])
    def test_top_p_invalid(self, value):
        """Test top_p rejects values outside [0, 1]."""
        with pytest.raises(ValidationError) as exc:
            validate_inference_params({"prompt": "x", "top_p": value})
        assert exc.value.message == "Invalid top_p: must be a number between 0 and 1"

    def test_first_violation_reported(self):
        """Test only the first failing check is reported."""
        with pytest.raises(ValidationError) as exc:
            validate_inference_params({"temperature": 9, "top_p": 9})
        assert exc.value.field == "prompt"

        with pytest.raises(ValidationError) as exc:
            validate_inference_params({"prompt": "x", "temperature": 9, "top_p": 9})
        assert exc.value.field == "temperature"

    def test_error_serialization(self):
        """Test validation errors serialize as invalid_request."""
        with pytest.raises(ValidationError) as exc:
            validate_inference_params({"prompt": "x", "top_p": 3})
        assert exc.value.status_code == 400
        assert exc.value.to_dict() == {
            "error": {
                "code": "invalid_request",
                "message": "Invalid top_p: must be a number between 0 and 1",
            }
        }
