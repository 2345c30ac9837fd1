"""
API Integration Layer
=====================

Generation clients for the content pipeline.

Usage:
    from content_studio.api import get_client

    async with get_client("gemini") as client:
        research = await client.research("Recent trends in the Korean economy")
"""

from .base import BaseGenerationClient
from .factory import get_client, list_clients, register_client

__all__ = [
    "BaseGenerationClient",
    "get_client",
    "list_clients",
    "register_client",
]
