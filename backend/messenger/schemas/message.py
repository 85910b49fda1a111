from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from messenger.core.errors import ValidationFailed
from messenger.security.sanitizer import InputSanitizer


class MessageSendRequest(BaseModel):
    """
    Send payload. Both fields run through InputSanitizer; pydantic collects
    every failing field, so the client sees all problems at once.
    """
    model_config = ConfigDict(extra='ignore', populate_by_name=True, validate_default=True)

    receiver_id: Any = Field(default=None, alias='receiverId')
    content: Any = None

    @field_validator('receiver_id')
    @classmethod
    def validate_receiver_id(cls, v: Any) -> str:
        return InputSanitizer.sanitize_receiver_id(v)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v: Any) -> str:
        return InputSanitizer.sanitize_content(v)

    @classmethod
    def parse_payload(cls, data: Any) -> 'MessageSendRequest':
        """
        Validate a decoded JSON body.

        Raises:
            ValidationFailed: one entry per violated field
        """
        if not isinstance(data, dict):
            raise ValidationFailed([{'field': 'body', 'message': 'Request body must be a JSON object'}])
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValidationFailed(validation_errors(exc)) from exc


_FIELD_NAMES = {'receiver_id': 'receiverId'}


def validation_errors(exc: Any) -> List[Dict[str, str]]:
    """
    Flatten pydantic (or FastAPI request) validation errors into
    ``[{field, message}]``, keeping the first error per field.
    """
    seen = {}
    for err in exc.errors():
        loc = [part for part in err.get('loc', ()) if part not in ('body', 'query', 'path')]
        field = str(loc[0]) if loc else 'body'
        field = _FIELD_NAMES.get(field, field)
        if field in seen:
            continue
        ctx_error = (err.get('ctx') or {}).get('error')
        seen[field] = str(ctx_error) if ctx_error else err.get('msg', 'Invalid value')
    return [{'field': field, 'message': message} for field, message in seen.items()]


class UserPublic(BaseModel):
    """Public projection of a user; never carries the password hash."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class MessageOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    sender: str
    receiver: str
    content: str
    read: bool
    created_at: datetime = Field(alias='createdAt')
    updated_at: datetime = Field(alias='updatedAt')

    @classmethod
    def from_model(cls, msg: Any) -> 'MessageOut':
        return cls(
            id=msg.id,
            sender=msg.sender_id,
            receiver=msg.receiver_id,
            content=msg.content,
            read=msg.read,
            created_at=msg.created_at,
            updated_at=msg.updated_at,
        )


class InboxItem(BaseModel):
    """Received message with the sender's public fields."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    sender: UserPublic
    receiver: str
    content: str
    read: bool
    created_at: datetime = Field(alias='createdAt')
    updated_at: datetime = Field(alias='updatedAt')


class SentItem(BaseModel):
    """Sent message with the receiver's public fields."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    sender: str
    receiver: UserPublic
    content: str
    read: bool
    created_at: datetime = Field(alias='createdAt')
    updated_at: datetime = Field(alias='updatedAt')


class MessageResponse(BaseModel):
    success: bool = True
    message: str
    data: MessageOut


class InboxResponse(BaseModel):
    success: bool = True
    message: str
    page: int
    limit: int
    count: int
    data: List[InboxItem]


class SentResponse(BaseModel):
    success: bool = True
    message: str
    page: int
    limit: int
    count: int
    data: List[SentItem]
