"""
Client Factory
==============

Factory for creating generation client instances.
"""

import logging
from typing import List, Dict, Type

from .base import BaseGenerationClient

logger = logging.getLogger(__name__)

# Registry of available clients
_CLIENTS: Dict[str, Type[BaseGenerationClient]] = {}


def register_client(name: str):
    """Decorator to register a client class."""
    def decorator(cls: Type[BaseGenerationClient]):
        _CLIENTS[name.lower()] = cls
        return cls
    return decorator


def get_client(name: str, **kwargs) -> BaseGenerationClient:
    """
    Get a generation client instance.

    Args:
        name: Client name (e.g., 'gemini')
        **kwargs: Client-specific arguments (api_key, config, ...)

    Returns:
        Configured client instance

    Raises:
        ValueError: If client name is not recognized
    """
    name_lower = name.lower()

    if name_lower not in _CLIENTS:
        if name_lower == "gemini":
            from .gemini import GeminiClient  # noqa: F401  (registers itself)
        else:
            raise ValueError(f"Unknown client: {name}")

    client_class = _CLIENTS.get(name_lower)
    if client_class is None:
        raise ValueError(f"Client '{name}' not registered")

    logger.debug(f"Creating {name_lower} client")
    return client_class(**kwargs)


def list_clients() -> List[str]:
    """List all registered client names."""
    from . import gemini  # noqa: F401

    return list(_CLIENTS.keys())
