# backend/messenger/crud/messages.py
from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from messenger.models.message import Message


def create_message(db: Session, sender_id: str, receiver_id: str, content: str) -> Message:
    now = datetime.utcnow()
    msg = Message(
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        read=False,
        created_at=now,
        updated_at=now,
    )
    db.add(msg)
    db.flush()
    return msg


def get_message(db: Session, message_id: str) -> Message | None:
    return db.get(Message, message_id)


def list_received(db: Session, receiver_id: str, skip: int, limit: int) -> List[Message]:
    stmt = (
        select(Message)
        .where(Message.receiver_id == receiver_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars())


def list_sent(db: Session, sender_id: str, skip: int, limit: int) -> List[Message]:
    stmt = (
        select(Message)
        .where(Message.sender_id == sender_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars())


def mark_read_if_unread(db: Session, message_id: str, receiver_id: str) -> bool:
    """
    Flip ``read`` to true in a single conditional UPDATE.

    Returns False when no row matched, i.e. the message was already read
    (or is not addressed to ``receiver_id``). Two concurrent callers can
    never both see True.
    """
    stmt = (
        update(Message)
        .where(
            Message.id == message_id,
            Message.receiver_id == receiver_id,
            Message.read == False,  # noqa: E712
        )
        .values(read=True, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    return result.rowcount == 1
