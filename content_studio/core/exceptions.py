"""
Custom Exceptions
=================

Unified exception hierarchy for the content pipeline.

Top-level stage failures (GenerationError and its subclasses) abort a run.
ImageGenerationError is raised for a single scene or the thumbnail
background and is always handled where it occurs.
"""

from typing import Optional, Dict, Any


class ContentStudioError(Exception):
    """Base exception for all Content Studio errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


class ConfigurationError(ContentStudioError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type
        super().__init__(message, details=details, **kwargs)


class ValidationError(ContentStudioError):
    """Input validation errors (empty topic, unknown length tier, ...)."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]
        if constraint:
            details["constraint"] = constraint
        super().__init__(message, details=details, **kwargs)


class GenerationError(ContentStudioError):
    """A generation call failed or returned no usable payload."""

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        prompt: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if stage:
            details["stage"] = stage
        if prompt:
            # Truncate long prompts
            details["prompt"] = prompt[:200] if len(prompt) > 200 else prompt
        super().__init__(message, details=details, **kwargs)


class ProviderError(GenerationError):
    """Provider/API-related errors (HTTP status, timeouts, transport)."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if provider:
            details["provider"] = provider
        if status_code:
            details["status_code"] = status_code
        if response_body:
            # Truncate large responses
            details["response_body"] = response_body[:500] if len(response_body) > 500 else response_body

        # Informational only: nothing in the pipeline retries automatically
        recoverable = kwargs.pop("recoverable", status_code in (429, 500, 502, 503, 504) if status_code else False)
        self.status_code = status_code
        super().__init__(message, recoverable=recoverable, details=details, **kwargs)


class SchemaParseError(GenerationError):
    """A structured response did not parse into the expected shape."""

    def __init__(
        self,
        message: str,
        raw_text: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if raw_text:
            details["raw_text"] = raw_text[:200] if len(raw_text) > 200 else raw_text
        super().__init__(message, details=details, **kwargs)


class ImageGenerationError(GenerationError):
    """Image generation failed for one scene or the thumbnail background."""

    def __init__(
        self,
        message: str,
        scene_index: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if scene_index is not None:
            details["scene_index"] = scene_index
        kwargs.setdefault("stage", "images")
        self.scene_index = scene_index
        super().__init__(message, details=details, recoverable=True, **kwargs)
