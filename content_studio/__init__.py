"""
Content Studio
==============

Turn one free-text topic into a complete YouTube content package using a
generative AI service.

Features:
- Grounded research with web citations
- Narration script with a TTS variant and a 12-scene breakdown
- One illustration per scene, each failing independently
- SEO metadata and thumbnail copy with background art
- Single-scene image retry

Quick Start:
    import asyncio
    from content_studio import ContentPipeline, LengthTier, get_client

    async def main():
        async with ContentPipeline(get_client("gemini")) as pipeline:
            await pipeline.run("Recent trends in the Korean economy", LengthTier.MEDIUM)
            print(pipeline.state.to_dict())

    asyncio.run(main())
"""

__version__ = "0.1.0"
__author__ = "Content Studio"

# =============================================================================
# Core
# =============================================================================

from .core import (
    Config,
    get_config,
    set_config,
    reset_config,
    ContentStudioError,
    ConfigurationError,
    ValidationError,
    GenerationError,
    ProviderError,
    SchemaParseError,
    ImageGenerationError,
)

# =============================================================================
# Models
# =============================================================================

from .models import (
    LengthTier,
    Stage,
    RUN_ORDER,
    GroundingSource,
    ResearchResult,
    Scene,
    ScriptResult,
    MetadataResult,
    ThumbnailResult,
    SceneImageOutcome,
    WorkflowState,
)

# =============================================================================
# Clients & Workflow
# =============================================================================

from .api import BaseGenerationClient, get_client, list_clients, register_client
from .workflow import ContentPipeline, WorkflowStateStore
from .utils import save_package, load_package

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "get_config",
    "set_config",
    "reset_config",
    "ContentStudioError",
    "ConfigurationError",
    "ValidationError",
    "GenerationError",
    "ProviderError",
    "SchemaParseError",
    "ImageGenerationError",
    # Models
    "LengthTier",
    "Stage",
    "RUN_ORDER",
    "GroundingSource",
    "ResearchResult",
    "Scene",
    "ScriptResult",
    "MetadataResult",
    "ThumbnailResult",
    "SceneImageOutcome",
    "WorkflowState",
    # Clients & Workflow
    "BaseGenerationClient",
    "get_client",
    "list_clients",
    "register_client",
    "ContentPipeline",
    "WorkflowStateStore",
    "save_package",
    "load_package",
]
