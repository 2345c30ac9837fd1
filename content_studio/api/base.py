"""
Base Generation Client
======================

Abstract interface for the generative service. The pipeline only depends
on this interface, so tests and alternative providers can be injected.
"""

import logging
from abc import ABC, abstractmethod

from ..models import (
    LengthTier,
    ResearchResult,
    ScriptResult,
    MetadataResult,
    ThumbnailResult,
)

logger = logging.getLogger(__name__)


class BaseGenerationClient(ABC):
    """
    Abstract base class for generation clients.

    The five operations are plain request/response calls with no retry
    policy of their own and no effect on workflow state.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def research(self, topic: str) -> ResearchResult:
        """
        Produce a fact-checked report with grounding sources.

        An empty report is returned (not raised) when the service answers
        without text.
        """
        pass

    @abstractmethod
    async def script(self, research_report: str, length_tier: LengthTier) -> ScriptResult:
        """Produce a narration script split into scenes."""
        pass

    @abstractmethod
    async def image(self, prompt: str) -> str:
        """
        Generate one image.

        Returns:
            A data URL, or an empty string when no image came back
        """
        pass

    @abstractmethod
    async def metadata(self, script_text: str) -> MetadataResult:
        """Produce SEO metadata for a script."""
        pass

    @abstractmethod
    async def thumbnail(self, script_text: str) -> ThumbnailResult:
        """Produce thumbnail copy, then the thumbnail background image."""
        pass

    async def close(self) -> None:
        """Release any held resources."""
        return None

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
