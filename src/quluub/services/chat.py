"""Chat gateway: match-gated direct messaging.

Every read and write first consults the match predicate; unmatched pairs can
neither send nor read messages, and stale messages from unmatched senders do
not count as unread.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import ColumnElement, and_, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quluub.core.errors import ForbiddenError, NotFoundError
from quluub.db.unit_of_work import store_guard, unit_of_work
from quluub.models import ChatMessage, MessageStatus, User
from quluub.schemas.chat import ChatMessageResponse
from quluub.services.matching import is_matched, matched_counterparts_query, matched_user_ids

logger = logging.getLogger(__name__)

NOT_MATCHED_DETAIL = "Only matched connections may message each other"


@dataclass(frozen=True)
class Conversation:
    """Most recent message exchanged with one counterparty."""

    user_id: int
    user: User | None
    last_message: ChatMessage
    unread_count: int


def _pair_filter(user_a: int, user_b: int) -> ColumnElement[bool]:
    return or_(
        and_(ChatMessage.sender_id == user_a, ChatMessage.receiver_id == user_b),
        and_(ChatMessage.sender_id == user_b, ChatMessage.receiver_id == user_a),
    )


class ChatService:
    """Send and read messages between matched users."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _require_match(self, actor_id: int, other_id: int, *, missing: str) -> None:
        with store_guard(self.db):
            other = self.db.get(User, other_id)
            if other is None:
                raise NotFoundError(missing)
            matched = is_matched(self.db, actor_id, other_id)
        if not matched:
            logger.info("User %s refused chat access to user %s: not matched", actor_id, other_id)
            raise ForbiddenError(NOT_MATCHED_DETAIL)

    def send_message(self, sender_id: int, receiver_id: int, text: str) -> ChatMessage:
        """Persist an UNREAD message from ``sender_id`` to ``receiver_id``.

        Raises:
            NotFoundError: If the receiver does not exist.
            ForbiddenError: If the two users are not matched.
        """
        self._require_match(sender_id, receiver_id, missing="Receiver not found")

        message = ChatMessage(
            sender_id=sender_id,
            receiver_id=receiver_id,
            message=text,
            status=MessageStatus.UNREAD,
        )
        with unit_of_work(self.db):
            self.db.add(message)
        with store_guard(self.db):
            self.db.refresh(message)
        logger.debug("Message %s sent from user %s to user %s", message.id, sender_id, receiver_id)
        return message

    def get_messages(self, actor_id: int, other_user_id: int) -> list[ChatMessageResponse]:
        """Return the conversation with ``other_user_id`` oldest first.

        Messages addressed to the actor are then marked READ in one bulk
        update. The returned list reflects the state as read, before marking.
        A failure while marking is logged and does not fail the read.

        Raises:
            NotFoundError: If the other user does not exist.
            ForbiddenError: If the two users are not matched.
        """
        self._require_match(actor_id, other_user_id, missing="User not found")

        with store_guard(self.db):
            messages = self.db.scalars(
                select(ChatMessage)
                .where(_pair_filter(actor_id, other_user_id))
                .order_by(ChatMessage.created.asc(), ChatMessage.id.asc())
            ).all()
            conversation = [ChatMessageResponse.model_validate(message) for message in messages]

        self._mark_read(actor_id, other_user_id)
        return conversation

    def _mark_read(self, actor_id: int, other_user_id: int) -> None:
        try:
            self.db.execute(
                update(ChatMessage)
                .where(
                    ChatMessage.sender_id == other_user_id,
                    ChatMessage.receiver_id == actor_id,
                    ChatMessage.status == MessageStatus.UNREAD,
                )
                .values(status=MessageStatus.READ)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning(
                "Could not mark messages from user %s to user %s as read: %s",
                other_user_id,
                actor_id,
                exc,
            )

    def get_conversations(self, actor_id: int) -> list[Conversation]:
        """Return the latest message per matched counterparty, newest first."""
        with store_guard(self.db):
            matched = matched_user_ids(self.db, actor_id)
            if not matched:
                return []
            messages = self.db.scalars(
                select(ChatMessage)
                .where(
                    or_(
                        and_(ChatMessage.sender_id == actor_id, ChatMessage.receiver_id.in_(matched)),
                        and_(ChatMessage.receiver_id == actor_id, ChatMessage.sender_id.in_(matched)),
                    )
                )
                .order_by(ChatMessage.created.desc(), ChatMessage.id.desc())
            ).all()

            latest: dict[int, ChatMessage] = {}
            for message in messages:
                counterpart = (
                    message.receiver_id if message.sender_id == actor_id else message.sender_id
                )
                latest.setdefault(counterpart, message)

            users: dict[int, User] = {}
            if latest:
                users = {
                    user.id: user
                    for user in self.db.scalars(select(User).where(User.id.in_(latest)))
                }

        return [
            Conversation(
                user_id=counterpart,
                user=users.get(counterpart),
                last_message=message,
                unread_count=int(
                    message.receiver_id == actor_id and message.status is MessageStatus.UNREAD
                ),
            )
            for counterpart, message in latest.items()
        ]

    def get_unread_count(self, actor_id: int) -> int:
        """Count UNREAD messages addressed to ``actor_id`` from matched senders only."""
        with store_guard(self.db):
            count = self.db.scalar(
                select(func.count())
                .select_from(ChatMessage)
                .where(
                    ChatMessage.receiver_id == actor_id,
                    ChatMessage.status == MessageStatus.UNREAD,
                    ChatMessage.sender_id.in_(matched_counterparts_query(actor_id)),
                )
            )
        return int(count or 0)
