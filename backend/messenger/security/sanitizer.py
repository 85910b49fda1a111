"""
Input sanitization for message payloads.

Content is trimmed, length-checked and then escaped so it can never be
injected as markup into whatever renders it later:
- ``& < > " ' / \\ ` `` become HTML entities
- leading/trailing whitespace is removed before the length check
"""
from __future__ import annotations

from typing import Any, Optional


MAX_CONTENT_LENGTH = 500

_ESCAPE_TABLE = str.maketrans({
    '&': '&amp;',
    '"': '&quot;',
    "'": '&#x27;',
    '<': '&lt;',
    '>': '&gt;',
    '/': '&#x2F;',
    '\\': '&#x5C;',
    '`': '&#96;',
})


class InputSanitizer:
    """Validates and sanitizes user input."""

    RECEIVER_REQUIRED = "Receiver ID is required"
    RECEIVER_NOT_STRING = "Receiver ID must be a string"
    CONTENT_EMPTY = "Message content cannot be empty"
    CONTENT_TOO_LONG = f"Message cannot exceed {MAX_CONTENT_LENGTH} characters"

    @staticmethod
    def escape_markup(value: str) -> str:
        """Escape markup-significant characters."""
        return value.translate(_ESCAPE_TABLE)

    @staticmethod
    def sanitize_receiver_id(value: Any) -> str:
        """Require a non-blank receiver identifier; syntax is checked by the service."""
        if value is None:
            raise ValueError(InputSanitizer.RECEIVER_REQUIRED)
        if not isinstance(value, str):
            raise ValueError(InputSanitizer.RECEIVER_NOT_STRING)
        if not value.strip():
            raise ValueError(InputSanitizer.RECEIVER_REQUIRED)
        return value.strip()

    @staticmethod
    def sanitize_content(value: Any, max_length: Optional[int] = MAX_CONTENT_LENGTH) -> str:
        """
        Trim, validate and escape message content.

        Args:
            value: Raw content from the request
            max_length: Max length measured after trimming, before escaping

        Returns:
            Trimmed, escaped content

        Raises:
            ValueError: If content is missing, blank or too long
        """
        if value is None or not isinstance(value, str):
            raise ValueError(InputSanitizer.CONTENT_EMPTY)

        trimmed = value.strip()
        if not trimmed:
            raise ValueError(InputSanitizer.CONTENT_EMPTY)

        if max_length and len(trimmed) > max_length:
            raise ValueError(InputSanitizer.CONTENT_TOO_LONG)

        return InputSanitizer.escape_markup(trimmed)
