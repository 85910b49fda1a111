from __future__ import annotations

from datetime import datetime, timedelta, timezone

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError
from jose import ExpiredSignatureError, JWTError, jwt

from messenger.core.config import Settings, settings as default_settings


# Argon2 parameters
_ph = PasswordHasher(
    time_cost=2,
    memory_cost=102400,  # ~100 MB
    parallelism=8,
    hash_len=32,
    salt_len=16,
)


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpired(TokenError):
    """The token is well formed and signed, but its ``exp`` has passed."""


class TokenInvalid(TokenError):
    """Bad signature, malformed token, missing subject or any other failure."""


def hash_password(password: str) -> str:
    return _ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _ph.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def create_access_token(
    subject: str,
    cfg: Settings | None = None,
    expires_minutes: int | None = None,
) -> str:
    """
    Issue a signed, time-bound token for ``subject``.

    Args:
        subject: User id placed in the ``sub`` claim
        cfg: Settings holding the secret/algorithm (module settings if omitted)
        expires_minutes: Override of ``JWT_EXPIRE_MINUTES``

    Returns:
        Encoded JWT
    """
    cfg = cfg or default_settings
    exp_min = cfg.JWT_EXPIRE_MINUTES if expires_minutes is None else expires_minutes

    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=exp_min)).timestamp()),
    }
    return jwt.encode(payload, cfg.JWT_SECRET, algorithm=cfg.JWT_ALGORITHM)


def verify_access_token(token: str, cfg: Settings | None = None) -> str:
    """
    Verify ``token`` and return its subject.

    Raises:
        TokenExpired: signature is valid but the token has expired
        TokenInvalid: anything else that prevents verification
    """
    cfg = cfg or default_settings
    try:
        payload = jwt.decode(
            token,
            cfg.JWT_SECRET,
            algorithms=[cfg.JWT_ALGORITHM],
        )
    except ExpiredSignatureError as exc:
        raise TokenExpired("Token expired") from exc
    except JWTError as exc:
        raise TokenInvalid("Invalid token") from exc

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise TokenInvalid("Token has no subject")
    return subject
