"""Identifier syntax shared by users and messages."""
from __future__ import annotations

from typing import Any, Optional
from uuid import UUID


def normalize_id(value: Any) -> Optional[str]:
    """
    Return the canonical 32-char hex form of ``value`` or None when it is
    not a syntactically valid identifier. Accepts dashed or plain UUIDs.
    """
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if len(candidate) not in (32, 36):
        return None
    try:
        return UUID(candidate).hex
    except ValueError:
        return None


def is_valid_id(value: Any) -> bool:
    return normalize_id(value) is not None
