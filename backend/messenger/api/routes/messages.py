from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from messenger.api.deps import (
    get_current_user_id,
    get_message_service,
    message_rate_limit,
    sanitized_send_payload,
)
from messenger.schemas.message import (
    InboxResponse,
    MessageResponse,
    MessageSendRequest,
    SentResponse,
)
from messenger.services.message_service import MessageService


router = APIRouter(prefix='/api/message', tags=['messages'])


# Order matters: rate limit, then token, then payload sanitation
@router.post(
    '/send',
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    dependencies=[Depends(message_rate_limit)],
)
async def send_message(
    user_id: str = Depends(get_current_user_id),
    req: MessageSendRequest = Depends(sanitized_send_payload),
    service: MessageService = Depends(get_message_service),
) -> MessageResponse:
    message = await service.send(user_id, req.receiver_id, req.content)
    return MessageResponse(message='Message sent successfully', data=message)


@router.get('/inbox', response_model=InboxResponse)
async def list_inbox(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
) -> InboxResponse:
    """List received messages, newest first."""
    result = await service.list_inbox(user_id, page, limit)
    return InboxResponse(
        message='Inbox fetched successfully',
        page=result.page,
        limit=result.limit,
        count=result.count,
        data=result.items,
    )


@router.get('/sent', response_model=SentResponse)
async def list_sent(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
) -> SentResponse:
    """List sent messages, newest first."""
    result = await service.list_sent(user_id, page, limit)
    return SentResponse(
        message='Sent messages fetched successfully',
        page=result.page,
        limit=result.limit,
        count=result.count,
        data=result.items,
    )


@router.patch('/read/{message_id}', response_model=MessageResponse)
async def mark_as_read(
    message_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
) -> MessageResponse:
    """Mark message as read (receiver only)"""
    message = await service.mark_read(user_id, message_id)
    return MessageResponse(message='Message marked as read', data=message)
