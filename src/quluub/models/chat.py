"""Models describing direct chat messages between matched users."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from quluub.db.session import Base
from quluub.db.time import utcnow

from .types import string_enum


class MessageStatus(str, Enum):
    UNREAD = "UNREAD"
    READ = "READ"


class ChatMessage(Base):
    """Plain-text message from ``sender_id`` to ``receiver_id``."""

    __tablename__ = "chat_message"
    __table_args__ = (
        Index("ix_chat_message_pair", "sender_id", "receiver_id", "created"),
        Index("ix_chat_message_receiver_status", "receiver_id", "status"),
    )

    # Autoincrement id breaks ties between messages with equal timestamps.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False
    )
    receiver_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[MessageStatus] = mapped_column(
        string_enum(MessageStatus),
        nullable=False,
        default=MessageStatus.UNREAD,
    )
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
