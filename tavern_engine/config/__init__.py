"""Configuration loading and validation."""

from .models import (
    SystemConfig,
    LLMConfig,
    ContextConfig,
    PathsConfig,
)
from .loader import ConfigLoader, ConfigLoadError, ConfigValidationError

__all__ = [
    "SystemConfig",
    "LLMConfig",
    "ContextConfig",
    "PathsConfig",
    "ConfigLoader",
    "ConfigLoadError",
    "ConfigValidationError",
]
