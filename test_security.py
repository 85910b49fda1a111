import pytest
from jose import jwt

from messenger.core.config import Settings
from messenger.core.security import (
    TokenExpired,
    TokenInvalid,
    create_access_token,
    hash_password,
    verify_access_token,
    verify_password,
)


@pytest.fixture
def cfg() -> Settings:
    return Settings(JWT_SECRET="unit-secret", JWT_EXPIRE_MINUTES=60)


def test_token_round_trip(cfg):
    token = create_access_token("abc123", cfg=cfg)
    assert verify_access_token(token, cfg=cfg) == "abc123"


def test_token_expires_after_configured_minutes(cfg):
    token = create_access_token("abc123", cfg=cfg)
    claims = jwt.get_unverified_claims(token)
    assert claims["exp"] - claims["iat"] == 60 * 60


def test_expired_token_is_distinguished(cfg):
    token = create_access_token("abc123", cfg=cfg, expires_minutes=-1)
    with pytest.raises(TokenExpired):
        verify_access_token(token, cfg=cfg)


def test_wrong_secret_is_invalid(cfg):
    token = create_access_token("abc123", cfg=Settings(JWT_SECRET="other-secret"))
    with pytest.raises(TokenInvalid):
        verify_access_token(token, cfg=cfg)


def test_expired_token_with_wrong_secret_is_invalid_not_expired(cfg):
    token = create_access_token("abc123", cfg=Settings(JWT_SECRET="other-secret"), expires_minutes=-1)
    with pytest.raises(TokenInvalid):
        verify_access_token(token, cfg=cfg)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_token_is_invalid(cfg, token):
    with pytest.raises(TokenInvalid):
        verify_access_token(token, cfg=cfg)


def test_token_without_subject_is_invalid(cfg):
    token = jwt.encode({"exp": 9999999999}, cfg.JWT_SECRET, algorithm=cfg.JWT_ALGORITHM)
    with pytest.raises(TokenInvalid):
        verify_access_token(token, cfg=cfg)


def test_password_hash_verifies_only_the_right_secret():
    hashed = hash_password("secret1")
    assert hashed != "secret1"
    assert verify_password("secret1", hashed)
    assert not verify_password("secret2", hashed)
    assert not verify_password("secret1", "not-a-hash")
