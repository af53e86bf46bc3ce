"""Append-only audit trail of actions users take towards each other."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from quluub.db.session import Base
from quluub.db.time import utcnow

from .types import string_enum


class ActivityAction(str, Enum):
    FOLLOWED = "FOLLOWED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WITHDREW = "WITHDREW"
    VIEWED = "VIEWED"


class UserActivityLog(Base):
    """One action by ``user_id`` (the actor) towards ``receiver_id``."""

    __tablename__ = "user_activity_log"
    __table_args__ = (Index("ix_user_activity_log_user", "user_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False
    )
    receiver_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False
    )
    action: Mapped[ActivityAction] = mapped_column(string_enum(ActivityAction), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
