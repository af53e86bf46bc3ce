"""Models describing follow/match proposals between two users."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from quluub.db.session import Base
from quluub.db.time import utcnow

from .types import string_enum


class RelationshipStatus(str, Enum):
    """Lifecycle of a relationship: pending is initial, the others are terminal."""

    PENDING = "pending"
    MATCHED = "matched"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not RelationshipStatus.PENDING


# Decisions a recipient may apply to a pending request.
RESPONSE_DECISIONS = frozenset({RelationshipStatus.MATCHED, RelationshipStatus.REJECTED})


def pair_key(user_a: int, user_b: int) -> tuple[int, int]:
    """Return the canonical (low, high) ordering of an unordered user pair."""
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


class Relationship(Base):
    """Directed request from ``follower_user_id`` to ``followed_user_id``.

    ``user_low_id``/``user_high_id`` hold the same two users in canonical order
    so the store itself guarantees one relationship per unordered pair.
    """

    __tablename__ = "relationship"
    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_relationship_pair"),
        CheckConstraint("user_low_id < user_high_id", name="ck_relationship_pair_order"),
        CheckConstraint(
            "follower_user_id <> followed_user_id", name="ck_relationship_not_self"
        ),
        Index("ix_relationship_follower_status", "follower_user_id", "status"),
        Index("ix_relationship_followed_status", "followed_user_id", "status"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    follower_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False
    )
    followed_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False
    )
    user_low_id: Mapped[int] = mapped_column(Integer, nullable=False)
    user_high_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[RelationshipStatus] = mapped_column(
        string_enum(RelationshipStatus),
        nullable=False,
        default=RelationshipStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    @classmethod
    def request(cls, follower_user_id: int, followed_user_id: int) -> Relationship:
        """Build a new pending request with its canonical pair columns filled in."""
        low, high = pair_key(follower_user_id, followed_user_id)
        return cls(
            id=str(uuid.uuid4()),
            follower_user_id=follower_user_id,
            followed_user_id=followed_user_id,
            user_low_id=low,
            user_high_id=high,
            status=RelationshipStatus.PENDING,
        )

    def counterpart_of(self, user_id: int) -> int:
        """Return the other party of the relationship."""
        if user_id == self.follower_user_id:
            return self.followed_user_id
        return self.follower_user_id
