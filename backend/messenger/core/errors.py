"""
Error taxonomy for the messaging API.

Every client-facing failure is an ``APIError`` subclass. The exception
handlers in ``messenger.main`` turn them into the stable JSON shape::

    {"success": false, "error": "<Name>", "message": "...", "errors": [...]}
"""
from __future__ import annotations

import math
from typing import Dict, List, Optional

from fastapi import status


class APIError(Exception):
    """Base class for errors that are safe to show to the client."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error: str = "BadRequest"
    default_message: str = "Bad request"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.error, "message": self.message}


class Unauthenticated(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthenticated"
    default_message = "Authentication token required"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(APIError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"
    default_message = "Forbidden"


class ValidationFailed(APIError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "ValidationFailed"
    default_message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class NotFound(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "NotFound"
    default_message = "Not found"


class Conflict(APIError):
    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"
    default_message = "Conflict"


class TooManyRequests(APIError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error = "TooManyRequests"
    default_message = "Too many requests"

    def __init__(self, message: Optional[str] = None, retry_after: float = 0.0):
        seconds = max(1, math.ceil(retry_after))
        super().__init__(message, headers={"Retry-After": str(seconds)})
        self.retry_after = seconds

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["retryAfter"] = self.retry_after
        return body


class InvalidReceiver(APIError):
    error = "InvalidReceiver"
    default_message = "Invalid receiver ID"


class SelfMessageForbidden(APIError):
    error = "SelfMessageForbidden"
    default_message = "You cannot send a message to yourself"


class InvalidId(APIError):
    error = "InvalidId"
    default_message = "Invalid message ID"


class AlreadyRead(APIError):
    error = "AlreadyRead"
    default_message = "Message already marked as read"


class ServiceUnavailable(APIError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "ServiceUnavailable"
    default_message = "Service temporarily unavailable"


class InternalError(APIError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal"
    default_message = "Internal server error"
