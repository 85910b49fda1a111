from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class RegisterIn(BaseModel):
    """Registration request."""
    model_config = ConfigDict(extra='ignore')

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Name cannot be empty')
        return v

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator('password')
    @classmethod
    def validate_password_not_empty(cls, v: str) -> str:
        """Ensure password is not whitespace-only."""
        if not v.strip():
            raise ValueError('Password cannot be empty')
        return v


class LoginIn(BaseModel):
    """
    Login request. ``email`` is a plain string so a malformed address is an
    ordinary failed login (401) rather than a validation error.
    """
    model_config = ConfigDict(extra='ignore')

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RegisterOut(BaseModel):
    success: bool = True
    message: str


class TokenOut(BaseModel):
    token: str


class ProfileOut(BaseModel):
    message: str
    userId: str
