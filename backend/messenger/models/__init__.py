# backend/messenger/models/__init__.py
from .user import User
from .message import Message

__all__ = ["User", "Message"]
