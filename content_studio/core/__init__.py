"""
Core Module
===========

Configuration, exceptions, and security helpers for Content Studio.
"""

from .config import (
    Config,
    ServiceConfig,
    ModelConfig,
    GenerationConfig,
    WorkflowConfig,
    get_config,
    set_config,
    reset_config,
)
from .exceptions import (
    ContentStudioError,
    ConfigurationError,
    ValidationError,
    GenerationError,
    ProviderError,
    SchemaParseError,
    ImageGenerationError,
)
from .security import sanitize_text, redact_api_key

__all__ = [
    # Configuration
    "Config",
    "ServiceConfig",
    "ModelConfig",
    "GenerationConfig",
    "WorkflowConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Exceptions
    "ContentStudioError",
    "ConfigurationError",
    "ValidationError",
    "GenerationError",
    "ProviderError",
    "SchemaParseError",
    "ImageGenerationError",
    # Security
    "sanitize_text",
    "redact_api_key",
]
