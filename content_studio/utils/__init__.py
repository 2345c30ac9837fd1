"""
Utilities
=========

Helper functions for Content Studio.
"""

from .storage import save_package, load_package

__all__ = [
    "save_package",
    "load_package",
]
