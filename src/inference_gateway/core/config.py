"""
Configuration loading for the inference gateway.
"""

import os
import logging
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


def _env_ms(name: str, default_ms: int) -> float:
    """Read a millisecond duration from the environment as seconds."""
    value = os.environ.get(name)
    try:
        return int(value) / 1000.0 if value is not None else default_ms / 1000.0
    except ValueError:
        return default_ms / 1000.0


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


@dataclass
class InferenceSettings:
    """Timeouts, retries and model defaults for inference calls."""
    inference_timeout: float = field(default_factory=lambda: _env_ms("INFERENCE_TIMEOUT_MS", 120000))
    request_timeout: float = field(default_factory=lambda: _env_ms("REQUEST_TIMEOUT_MS", 60000))
    max_retries: int = field(default_factory=lambda: _env_int("MAX_RETRIES", 3))
    retry_delay: float = field(default_factory=lambda: _env_ms("RETRY_DELAY_MS", 1000))
    backoff: str = "fixed"  # fixed, exponential
    jitter: bool = False
    default_model: Optional[str] = field(default_factory=lambda: os.environ.get("DEFAULT_MODEL"))
    activate_all_on_startup: bool = field(
        default_factory=lambda: _env_bool("MODELS_AUTOACTIVATE", False)
    )


@dataclass
class WhisperSettings:
    """Defaults for audio transcription."""
    default_model: str = field(default_factory=lambda: os.environ.get("WHISPER_DEFAULT_MODEL", "whisper-1"))
    default_language: Optional[str] = field(default_factory=lambda: os.environ.get("WHISPER_DEFAULT_LANGUAGE"))
    default_temperature: float = field(default_factory=lambda: _env_float("WHISPER_DEFAULT_TEMPERATURE", 0.0))
    default_response_format: str = field(
        default_factory=lambda: os.environ.get("WHISPER_DEFAULT_RESPONSE_FORMAT", "json")
    )


@dataclass
class OpenAISettings:
    api_key: Optional[str] = field(default_factory=lambda: os.environ.get("OPENAI_API_KEY"))
    org_id: Optional[str] = field(default_factory=lambda: os.environ.get("OPENAI_ORG_ID"))
    base_url: str = field(default_factory=lambda: os.environ.get("OPENAI_API_BASE_URL", "https://api.openai.com/v1"))
    api_version: Optional[str] = field(default_factory=lambda: os.environ.get("OPENAI_API_VERSION"))
    max_tokens: int = field(default_factory=lambda: _env_int("OPENAI_MAX_TOKENS", 4096))
    temperature: float = field(default_factory=lambda: _env_float("OPENAI_TEMPERATURE", 0.7))
    default_model: str = field(default_factory=lambda: os.environ.get("OPENAI_DEFAULT_MODEL", "gpt-4"))
    whisper: WhisperSettings = field(default_factory=WhisperSettings)


@dataclass
class AnthropicSettings:
    api_key: Optional[str] = field(default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY"))
    base_url: str = field(default_factory=lambda: os.environ.get("ANTHROPIC_API_BASE_URL", "https://api.anthropic.com"))
    api_version: str = field(default_factory=lambda: os.environ.get("ANTHROPIC_API_VERSION", "2023-06-01"))
    default_model: str = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_DEFAULT_MODEL", "claude-3-opus-20240229")
    )
    max_tokens: int = field(default_factory=lambda: _env_int("ANTHROPIC_MAX_TOKENS", 4096))
    temperature: float = field(default_factory=lambda: _env_float("ANTHROPIC_TEMPERATURE", 0.7))


@dataclass
class StabilitySettings:
    api_key: Optional[str] = field(default_factory=lambda: os.environ.get("STABILITY_API_KEY"))
    base_url: str = field(default_factory=lambda: os.environ.get("STABILITY_API_BASE_URL", "https://api.stability.ai/v1"))
    default_engine: str = field(
        default_factory=lambda: os.environ.get("STABILITY_DEFAULT_ENGINE", "stable-diffusion-xl-1024-v1-0")
    )
    default_steps: int = field(default_factory=lambda: _env_int("STABILITY_DEFAULT_STEPS", 30))
    default_cfg_scale: float = field(default_factory=lambda: _env_float("STABILITY_DEFAULT_CFG_SCALE", 7.0))
    default_width: int = field(default_factory=lambda: _env_int("STABILITY_DEFAULT_WIDTH", 1024))
    default_height: int = field(default_factory=lambda: _env_int("STABILITY_DEFAULT_HEIGHT", 1024))


@dataclass
class HuggingFaceSettings:
    api_key: Optional[str] = field(default_factory=lambda: os.environ.get("HUGGINGFACE_API_KEY"))
    base_url: str = field(
        default_factory=lambda: os.environ.get(
            "HUGGINGFACE_API_BASE_URL", "https://api-inference.huggingface.co/models"
        )
    )


@dataclass
class ProviderSettings:
    """Per-vendor base URLs, default credentials and default parameters."""
    openai: OpenAISettings = field(default_factory=OpenAISettings)
    anthropic: AnthropicSettings = field(default_factory=AnthropicSettings)
    stability: StabilitySettings = field(default_factory=StabilitySettings)
    huggingface: HuggingFaceSettings = field(default_factory=HuggingFaceSettings)


@dataclass
class LoggingSettings:
    level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "info"))
    format: str = field(default_factory=lambda: os.environ.get("LOG_FORMAT", "json"))  # json, text


@dataclass
class TracingSettings:
    enabled: bool = field(default_factory=lambda: _env_bool("TRACING_ENABLED", False))
    otlp_endpoint: str = field(
        default_factory=lambda: os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    )
    service_name: str = "inference-gateway"


@dataclass
class GatewayConfig:
    """Complete gateway configuration."""
    inference: InferenceSettings = field(default_factory=InferenceSettings)
    providers: ProviderSettings = field(default_factory=ProviderSettings)
    models: List[Dict[str, Any]] = field(default_factory=list)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    tracing: TracingSettings = field(default_factory=TracingSettings)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GatewayConfig":
        """Build a configuration from a parsed YAML mapping."""
        return _parse_config(data or {})


def load_config(config_path: Optional[str] = None) -> GatewayConfig:
    """
    Load gateway configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses GATEWAY_CONFIG or
            the default locations.

    Returns:
        Loaded configuration
    """
    if config_path is None:
        config_path = os.environ.get("GATEWAY_CONFIG")

    if config_path is None:
        paths = [
            Path("config/inference-gateway/gateway.yaml"),
            Path("/etc/inference-gateway/gateway.yaml"),
            Path.home() / ".config/inference-gateway/gateway.yaml",
        ]
        for p in paths:
            if p.exists():
                config_path = str(p)
                break

    if config_path is None or not Path(config_path).exists():
        logger.warning("No gateway config file found, using defaults")
        return GatewayConfig()

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)

        return _parse_config(data or {})

    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        return GatewayConfig()


def _expand_env(value: Any) -> Any:
    """Expand ${VAR} references in string values."""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return os.environ.get(value[2:-1])
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _apply(target: Any, values: Dict[str, Any]) -> Any:
    """Overlay known keys from a mapping onto a settings dataclass."""
    for key, value in (values or {}).items():
        if not hasattr(target, key):
            logger.warning(f"Ignoring unknown config key: {key}")
            continue
        current = getattr(target, key)
        if isinstance(value, dict) and hasattr(current, "__dataclass_fields__"):
            _apply(current, value)
        else:
            setattr(target, key, value)
    return target


def _parse_config(data: Dict[str, Any]) -> GatewayConfig:
    """Parse configuration dictionary."""
    data = _expand_env(data)
    config = GatewayConfig()

    inference = dict(data.get("inference", {}))
    # Durations may be given in milliseconds like the environment variables
    for key in ("inference_timeout", "request_timeout", "retry_delay"):
        ms_key = f"{key}_ms"
        if ms_key in inference:
            inference[key] = float(inference.pop(ms_key)) / 1000.0

    _apply(config.inference, inference)
    _apply(config.providers, data.get("providers", {}))
    _apply(config.logging, data.get("logging", {}))
    _apply(config.tracing, data.get("tracing", {}))
    config.models = list(data.get("models", []))

    if config.inference.backoff not in ("fixed", "exponential"):
        logger.warning(f"Unknown backoff strategy {config.inference.backoff!r}, using fixed")
        config.inference.backoff = "fixed"

    return config
