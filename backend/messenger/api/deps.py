from __future__ import annotations

import json
import logging

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from messenger.core.config import Settings
from messenger.core.errors import Forbidden, TooManyRequests, Unauthenticated, ValidationFailed
from messenger.core.security import TokenExpired, TokenInvalid, verify_access_token
from messenger.schemas.message import MessageSendRequest
from messenger.security.rate_limiter import RateLimiter
from messenger.services.message_service import MessageService


logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_message_service(request: Request) -> MessageService:
    return request.app.state.message_service


def client_address(request: Request) -> str:
    """Address used as the rate-limit key."""
    settings = get_settings(request)
    if settings.TRUST_FORWARDED_FOR:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"


def _enforce(limiter: RateLimiter, request: Request, response: Response, message: str) -> None:
    key = client_address(request)
    result = limiter.hit(key)
    if not result.allowed:
        logger.warning("Rate limit hit for %s on %s", key, request.url.path)
        raise TooManyRequests(message, retry_after=result.retry_after)

    response.headers["RateLimit-Limit"] = str(result.limit)
    response.headers["RateLimit-Remaining"] = str(result.remaining)
    response.headers["RateLimit-Reset"] = str(int(result.retry_after + 0.5))


def login_rate_limit(request: Request, response: Response) -> None:
    """Max LOGIN_RATE_LIMIT attempts per address per window, counted before any credential check."""
    _enforce(
        request.app.state.login_limiter,
        request,
        response,
        "Too many login attempts. Try again after 15 minutes.",
    )


def message_rate_limit(request: Request, response: Response) -> None:
    _enforce(
        request.app.state.message_limiter,
        request,
        response,
        "Too many messages sent. Please slow down.",
    )


async def get_current_user_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """
    Dependency: verify the bearer token and attach the user id to the request.
    Expects: Authorization: Bearer <token>
    Returns: user id (also stored on ``request.state.user_id``)
    Raises: Unauthenticated when missing/expired, Forbidden when invalid
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Authentication token required")

    try:
        user_id = verify_access_token(credentials.credentials, get_settings(request))
    except TokenExpired:
        raise Unauthenticated("Token expired. Please login again.")
    except TokenInvalid:
        logger.warning("Rejected invalid token on %s", request.url.path)
        raise Forbidden("Invalid token")

    request.state.user_id = user_id
    return user_id


async def sanitized_send_payload(request: Request) -> MessageSendRequest:
    """Parse and sanitize the send body; all field errors are reported together."""
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationFailed([{"field": "body", "message": "Request body must be valid JSON"}])
    return MessageSendRequest.parse_payload(data)
