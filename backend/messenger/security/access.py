"""Capability checks on messages: may ``actor`` perform ``action`` on ``message``?"""
from __future__ import annotations

import enum
from typing import Any


class Action(str, enum.Enum):
    MARK_READ = "mark_read"


def can(actor_id: str, message: Any, action: Action) -> bool:
    if action is Action.MARK_READ:
        # Receiver only; the sender cannot flip the flag either
        return actor_id == getattr(message, "receiver", None)
    return False
