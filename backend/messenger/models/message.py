# backend/messenger/models/message.py
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from messenger.db.base import Base
from messenger.models.user import new_id


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_receiver_created", "receiver_id", "created_at"),
        Index("ix_messages_sender_created", "sender_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)

    # Receiver is only checked syntactically, so neither side is a foreign key
    sender_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    receiver_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)

    # Trimmed and HTML-escaped text
    content: Mapped[str] = mapped_column(Text, nullable=False)

    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
