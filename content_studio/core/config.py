"""
Configuration System
====================

Centralized, validated configuration management with typed dataclasses.
"""

import os
import re
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any, Union
import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class ServiceConfig:
    """Generative service connection settings."""

    provider: str = "gemini"
    api_key: Optional[str] = None
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: int = 300

    VALID_PROVIDERS = {"gemini"}

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if self.provider not in self.VALID_PROVIDERS:
            raise ConfigurationError(
                f"Invalid provider: {self.provider}",
                config_key="service.provider",
            )
        if not 1 <= int(self.timeout) <= 3600:
            raise ConfigurationError(
                f"timeout must be 1-3600 seconds, got {self.timeout}",
                config_key="service.timeout",
            )
        self.timeout = int(self.timeout)
        # Empty interpolation result means "read from environment"
        if not self.api_key:
            self.api_key = None


@dataclass
class ModelConfig:
    """Model selector per generation operation."""

    research: str = "gemini-3-pro-preview"
    script: str = "gemini-3-pro-preview"
    image: str = "gemini-2.5-flash-image"
    metadata: str = "gemini-3-flash-preview"
    thumbnail: str = "gemini-3-flash-preview"

    def __post_init__(self):
        for name in ("research", "script", "image", "metadata", "thumbnail"):
            if not getattr(self, name):
                raise ConfigurationError(
                    f"Model for '{name}' must not be empty",
                    config_key=f"models.{name}",
                )


@dataclass
class GenerationConfig:
    """Generation parameters shared by all prompts."""

    default_length: str = "MEDIUM"
    scene_count: int = 12
    aspect_ratio: str = "16:9"
    metadata_max_chars: int = 5000
    thumbnail_max_chars: int = 2000
    language: str = "Korean"
    locale: str = "Korea"
    people: str = "Korean people"

    VALID_LENGTHS = {"SHORT", "MEDIUM", "LONG"}
    VALID_ASPECT_RATIOS = {"16:9", "9:16", "4:3", "1:1"}

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if str(self.default_length).upper() not in self.VALID_LENGTHS:
            raise ConfigurationError(
                f"Invalid default length: {self.default_length}",
                config_key="generation.default_length",
            )
        self.default_length = str(self.default_length).upper()
        if not 1 <= int(self.scene_count) <= 50:
            raise ConfigurationError(
                f"scene_count must be 1-50, got {self.scene_count}",
                config_key="generation.scene_count",
            )
        self.scene_count = int(self.scene_count)
        if self.aspect_ratio not in self.VALID_ASPECT_RATIOS:
            raise ConfigurationError(
                f"Invalid aspect ratio: {self.aspect_ratio}",
                config_key="generation.aspect_ratio",
            )
        for name in ("metadata_max_chars", "thumbnail_max_chars"):
            if int(getattr(self, name)) <= 0:
                raise ConfigurationError(
                    f"{name} must be positive",
                    config_key=f"generation.{name}",
                )
            setattr(self, name, int(getattr(self, name)))


@dataclass
class WorkflowConfig:
    """Workflow behaviour settings."""

    failure_notice: str = "Something went wrong while processing. Please try again."


# =============================================================================
# Main Configuration Class
# =============================================================================


@dataclass
class Config:
    """
    Main configuration container with validation and loading.

    Provides a unified interface to all configuration settings with:
    - Type-safe access to configuration values
    - Validation on load
    - Environment variable interpolation
    - Sensible defaults for all values
    """

    service: ServiceConfig = field(default_factory=ServiceConfig)
    models: ModelConfig = field(default_factory=ModelConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)

    SECTIONS = ("service", "models", "generation", "workflow")

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Config":
        """
        Load configuration from file with environment variable interpolation.

        Args:
            path: Path to YAML config file (defaults.yaml)

        Returns:
            Validated Config instance
        """
        search_paths = [
            Path("./config/defaults.yaml"),
            Path("./defaults.yaml"),
            Path.home() / ".content-studio" / "config.yaml",
        ]

        if path:
            search_paths.insert(0, Path(path))

        config_data = {}

        for search_path in search_paths:
            if search_path.exists():
                logger.info(f"Loading config from: {search_path}")
                try:
                    with open(search_path, "r", encoding="utf-8") as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except yaml.YAMLError as e:
                    raise ConfigurationError(
                        f"Invalid YAML in config file: {e}",
                        config_key=str(search_path),
                    )
        else:
            logger.info("No config file found, using defaults")

        config_data = cls._interpolate_env_vars(config_data)

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary with validation."""
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping")
        try:
            return cls(
                service=ServiceConfig(**(data.get("service") or {})),
                models=ModelConfig(**(data.get("models") or {})),
                generation=GenerationConfig(**(data.get("generation") or {})),
                workflow=WorkflowConfig(**(data.get("workflow") or {})),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    @staticmethod
    def _interpolate_env_vars(data: Any) -> Any:
        """Recursively interpolate ${VAR} patterns with environment variables."""
        if isinstance(data, str):
            # Handle ${VAR} and ${VAR:-default} patterns
            pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

            def replace(match):
                var_name = match.group(1)
                default = match.group(2) or ""
                return os.environ.get(var_name, default)

            return re.sub(pattern, replace, data)
        elif isinstance(data, dict):
            return {k: Config._interpolate_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [Config._interpolate_env_vars(item) for item in data]
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (API key omitted)."""
        result = {section: asdict(getattr(self, section)) for section in self.SECTIONS}
        result["service"].pop("api_key", None)
        return result


# =============================================================================
# Convenience Functions
# =============================================================================


_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance (lazily loaded)."""
    global _global_config
    if _global_config is None:
        _global_config = Config.load()
    return _global_config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset global configuration to None (forces reload on next access)."""
    global _global_config
    _global_config = None
