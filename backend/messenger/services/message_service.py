"""Send, list and mark-read operations on messages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, List, Tuple, TypeVar

from messenger.core.errors import (
    AlreadyRead,
    Forbidden,
    InvalidId,
    InvalidReceiver,
    NotFound,
    SelfMessageForbidden,
)
from messenger.core.ids import normalize_id
from messenger.schemas.message import InboxItem, MessageOut, SentItem, UserPublic
from messenger.security.access import Action, can
from messenger.services.message_store import MessageStore


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Largest OFFSET a 64-bit signed SQL integer can carry
MAX_OFFSET = 2 ** 63 - 1


@dataclass
class Page(Generic[T]):
    page: int
    limit: int
    items: List[T] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


class MessageService:
    """Applies ownership and read-state rules on top of a MessageStore."""

    def __init__(self, store: MessageStore, default_limit: int = 10, max_limit: int = 100) -> None:
        self.store = store
        self.default_limit = default_limit
        self.max_limit = max_limit

    def resolve_paging(self, page: Any, limit: Any) -> Tuple[int, int]:
        """
        1-based page and bounded limit; missing, non-numeric or non-positive
        values fall back to defaults. Pages past the largest representable
        offset are clamped, which still yields an empty page.
        """
        page_size = min(_positive_int(limit, self.default_limit), self.max_limit)
        page_number = min(_positive_int(page, 1), MAX_OFFSET // page_size + 1)
        return page_number, page_size

    async def send(self, sender_id: str, receiver_id: str, content: str) -> MessageOut:
        """
        Create a message from ``sender_id`` to ``receiver_id``.

        ``content`` must already be sanitized. Raises InvalidReceiver when the
        receiver id is malformed, then SelfMessageForbidden when it names the
        sender. Nothing is written unless both checks pass.
        """
        receiver = normalize_id(receiver_id)
        if receiver is None:
            raise InvalidReceiver()

        sender = normalize_id(sender_id) or sender_id
        if sender == receiver:
            raise SelfMessageForbidden()

        message = await self.store.create(sender, receiver, content)
        logger.info("Message %s sent from %s to %s", message.id, sender, receiver)
        return message

    async def list_inbox(self, user_id: str, page: Any = None, limit: Any = None) -> Page[InboxItem]:
        page_number, page_size = self.resolve_paging(page, limit)
        messages = await self.store.list_for_receiver(user_id, (page_number - 1) * page_size, page_size)
        profiles = await self.store.get_profiles(m.sender for m in messages)

        items = [
            InboxItem(
                id=m.id,
                sender=profiles.get(m.sender) or UserPublic(id=m.sender),
                receiver=m.receiver,
                content=m.content,
                read=m.read,
                created_at=m.created_at,
                updated_at=m.updated_at,
            )
            for m in messages
        ]
        return Page(page=page_number, limit=page_size, items=items)

    async def list_sent(self, user_id: str, page: Any = None, limit: Any = None) -> Page[SentItem]:
        page_number, page_size = self.resolve_paging(page, limit)
        messages = await self.store.list_for_sender(user_id, (page_number - 1) * page_size, page_size)
        profiles = await self.store.get_profiles(m.receiver for m in messages)

        items = [
            SentItem(
                id=m.id,
                sender=m.sender,
                receiver=profiles.get(m.receiver) or UserPublic(id=m.receiver),
                content=m.content,
                read=m.read,
                created_at=m.created_at,
                updated_at=m.updated_at,
            )
            for m in messages
        ]
        return Page(page=page_number, limit=page_size, items=items)

    async def mark_read(self, user_id: str, message_id: str) -> MessageOut:
        """
        Flip ``read`` to true for the receiver.

        Checks, in order: InvalidId, NotFound, Forbidden, AlreadyRead. The
        final write is a conditional update, so a concurrent duplicate also
        ends in AlreadyRead.
        """
        normalized = normalize_id(message_id)
        if normalized is None:
            raise InvalidId()

        message = await self.store.get(normalized)
        if message is None:
            raise NotFound("Message not found")

        if not can(user_id, message, Action.MARK_READ):
            logger.warning("User %s may not mark message %s as read", user_id, normalized)
            raise Forbidden("You are not allowed to mark this message as read")

        if message.read:
            raise AlreadyRead()

        updated = await self.store.mark_read_if_unread(normalized, user_id)
        if updated is None:
            raise AlreadyRead()

        logger.info("Message %s marked as read by %s", normalized, user_id)
        return updated
