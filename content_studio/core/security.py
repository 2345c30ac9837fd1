"""
Security Utilities
==================

Input cleanup and secret redaction for logs and error messages.
"""

import re
import logging

logger = logging.getLogger(__name__)


def sanitize_text(text: str, max_length: int = 20000) -> str:
    """
    Clean user-provided free text before it goes into a prompt.

    Args:
        text: User-provided text (topic, links, notes)
        max_length: Maximum allowed length

    Returns:
        Text without control characters, stripped and truncated
    """
    if not text:
        return ""

    # Remove control characters
    sanitized = "".join(char for char in text if char.isprintable() or char in "\n\t")

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]
        logger.warning(f"Text truncated from {len(text)} to {max_length} characters")

    return sanitized.strip()


def redact_api_key(text: str) -> str:
    """
    Redact API keys and sensitive tokens from text.

    Args:
        text: Text that might contain API keys

    Returns:
        Text with API keys redacted
    """
    if not text:
        return text

    patterns = [
        # Google API keys
        (r"AIza[A-Za-z0-9_\-]{35}", "AIza***REDACTED***"),
        # Key passed as query parameter
        (r"([?&]key=)[^&\s'\"]+", r"\1***REDACTED***"),
        # Generic Bearer tokens
        (r"Bearer\s+[A-Za-z0-9_\-\.]+", "Bearer ***REDACTED***"),
        # Environment variable patterns
        (r"(GEMINI_API_KEY|GOOGLE_API_KEY)=[^\s]+", r"\1=***REDACTED***"),
    ]

    result = text
    for pattern, replacement in patterns:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)

    return result
