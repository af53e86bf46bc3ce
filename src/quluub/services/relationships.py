"""Relationship workflow: request, respond, withdraw and list matches.

This service is the only writer of the relationship table. Transitions are
applied with conditional statements so that two racing callers cannot both
succeed, and every transition appends its activity log entry in the same
transaction.

State machine::

    pending --(recipient: matched)--> matched
    pending --(recipient: rejected)--> rejected
    pending --(initiator: withdraw)--> (deleted)
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quluub.core.errors import (
    DuplicateError,
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
)
from quluub.db.time import utcnow
from quluub.db.unit_of_work import store_guard, unit_of_work
from quluub.models import ActivityAction, Relationship, RelationshipStatus, User
from quluub.models.relationship import RESPONSE_DECISIONS, pair_key
from quluub.schemas.relationship import RelationshipResponse
from quluub.services.activity import record_activity

logger = logging.getLogger(__name__)

# Activity recorded for each decision a recipient can make.
DECISION_ACTIONS = {
    RelationshipStatus.MATCHED: ActivityAction.ACCEPTED,
    RelationshipStatus.REJECTED: ActivityAction.REJECTED,
}


def _snapshot(relationship: Relationship) -> dict[str, Any]:
    return RelationshipResponse.model_validate(relationship).model_dump(mode="json", by_alias=True)


class RelationshipService:
    """Orchestrates the relationship lifecycle for a single database session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, relationship_id: str) -> Relationship:
        with store_guard(self.db):
            relationship = self.db.get(Relationship, relationship_id)
        if relationship is None:
            raise NotFoundError("Relationship not found")
        return relationship

    def find_between(self, user_a: int, user_b: int) -> Relationship | None:
        """Return the relationship for the unordered pair, whichever side initiated it."""
        low, high = pair_key(user_a, user_b)
        with store_guard(self.db):
            return self.db.scalars(
                select(Relationship).where(
                    Relationship.user_low_id == low,
                    Relationship.user_high_id == high,
                )
            ).first()

    def send_request(self, actor_id: int, target_id: int) -> Relationship:
        """Create a pending request from ``actor_id`` to ``target_id``.

        Raises:
            NotFoundError: If the target user does not exist.
            InvalidStateError: If the actor addresses themselves.
            DuplicateError: If any relationship already exists for the pair.
        """
        with store_guard(self.db):
            target = self.db.get(User, target_id)
        if target is None:
            raise NotFoundError("User to follow not found")
        if actor_id == target_id:
            raise InvalidStateError("You cannot send a request to yourself")

        existing = self.find_between(actor_id, target_id)
        if existing is not None:
            raise DuplicateError("Relationship already exists", existing=_snapshot(existing))

        relationship = Relationship.request(actor_id, target_id)
        try:
            with unit_of_work(self.db):
                self.db.add(relationship)
                record_activity(
                    self.db,
                    actor_id=actor_id,
                    receiver_id=target_id,
                    action=ActivityAction.FOLLOWED,
                )
        except IntegrityError as exc:
            # A concurrent request for the same pair won the unique constraint.
            existing = self.find_between(actor_id, target_id)
            if existing is None:
                raise
            raise DuplicateError(
                "Relationship already exists", existing=_snapshot(existing)
            ) from exc

        with store_guard(self.db):
            self.db.refresh(relationship)
        logger.info(
            "Relationship %s requested by user %s for user %s",
            relationship.id,
            actor_id,
            target_id,
        )
        return relationship

    def respond_to_request(
        self,
        actor_id: int,
        relationship_id: str,
        decision: str | RelationshipStatus,
    ) -> Relationship:
        """Apply the recipient's decision (``matched`` or ``rejected``).

        Raises:
            InvalidTransitionError: For an unsupported decision, or when the
                relationship is no longer pending.
            NotFoundError: If the relationship does not exist.
            ForbiddenError: If the actor is not the recipient.
        """
        try:
            new_status = RelationshipStatus(decision)
        except ValueError:
            new_status = None
        if new_status not in RESPONSE_DECISIONS:
            raise InvalidTransitionError("Invalid status")

        relationship = self.get(relationship_id)
        if relationship.followed_user_id != actor_id:
            logger.info(
                "User %s refused: not the recipient of relationship %s",
                actor_id,
                relationship_id,
            )
            raise ForbiddenError("Not authorized to update this relationship")
        if relationship.status.is_terminal:
            raise InvalidTransitionError(
                f"Relationship is already {relationship.status.value}"
            )

        follower_id = relationship.follower_user_id
        with unit_of_work(self.db):
            result = self.db.execute(
                update(Relationship)
                .where(
                    Relationship.id == relationship_id,
                    Relationship.followed_user_id == actor_id,
                    Relationship.status == RelationshipStatus.PENDING,
                )
                .values(status=new_status, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InvalidTransitionError("Relationship is no longer pending")
            record_activity(
                self.db,
                actor_id=actor_id,
                receiver_id=follower_id,
                action=DECISION_ACTIONS[new_status],
            )

        with store_guard(self.db):
            self.db.refresh(relationship)
        logger.info(
            "Relationship %s %s by user %s", relationship_id, new_status.value, actor_id
        )
        return relationship

    def withdraw_request(self, actor_id: int, relationship_id: str) -> None:
        """Delete a pending request on behalf of its initiator.

        Raises:
            NotFoundError: If the relationship does not exist.
            ForbiddenError: If the actor did not send the request.
            InvalidStateError: If the request has already been answered.
        """
        relationship = self.get(relationship_id)
        if relationship.follower_user_id != actor_id:
            logger.info(
                "User %s refused: not the initiator of relationship %s",
                actor_id,
                relationship_id,
            )
            raise ForbiddenError("Not authorized to withdraw this request")
        if relationship.status.is_terminal:
            raise InvalidStateError("Only pending requests can be withdrawn")

        followed_id = relationship.followed_user_id
        with unit_of_work(self.db):
            result = self.db.execute(
                delete(Relationship)
                .where(
                    Relationship.id == relationship_id,
                    Relationship.follower_user_id == actor_id,
                    Relationship.status == RelationshipStatus.PENDING,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InvalidStateError("Only pending requests can be withdrawn")
            # Detach while the row is still loaded so callers can keep reading it.
            self.db.expunge(relationship)
            record_activity(
                self.db,
                actor_id=actor_id,
                receiver_id=followed_id,
                action=ActivityAction.WITHDREW,
            )

        logger.info("Relationship %s withdrawn by user %s", relationship_id, actor_id)

    def _with_counterparts(
        self, actor_id: int, relationships: Sequence[Relationship]
    ) -> list[tuple[Relationship, User | None]]:
        counterpart_ids = {rel.counterpart_of(actor_id) for rel in relationships}
        users: dict[int, User] = {}
        if counterpart_ids:
            with store_guard(self.db):
                users = {
                    user.id: user
                    for user in self.db.scalars(select(User).where(User.id.in_(counterpart_ids)))
                }
        return [(rel, users.get(rel.counterpart_of(actor_id))) for rel in relationships]

    def get_matches(self, actor_id: int) -> list[tuple[Relationship, User | None]]:
        """Return matched relationships of ``actor_id`` with the other party's profile."""
        with store_guard(self.db):
            matches = self.db.scalars(
                select(Relationship)
                .where(
                    Relationship.status == RelationshipStatus.MATCHED,
                    or_(
                        Relationship.follower_user_id == actor_id,
                        Relationship.followed_user_id == actor_id,
                    ),
                )
                .order_by(Relationship.updated_at.desc(), Relationship.id)
            ).all()
        return self._with_counterparts(actor_id, matches)

    def get_pending_requests(self, actor_id: int) -> list[tuple[Relationship, User | None]]:
        """Return pending requests addressed to ``actor_id`` with the requester's profile."""
        with store_guard(self.db):
            pending = self.db.scalars(
                select(Relationship)
                .where(
                    Relationship.followed_user_id == actor_id,
                    Relationship.status == RelationshipStatus.PENDING,
                )
                .order_by(Relationship.created_at.desc(), Relationship.id)
            ).all()
        return self._with_counterparts(actor_id, pending)

    def get_sent_requests(self, actor_id: int) -> list[tuple[Relationship, User | None]]:
        """Return pending requests ``actor_id`` sent that are still awaiting an answer."""
        with store_guard(self.db):
            sent = self.db.scalars(
                select(Relationship)
                .where(
                    Relationship.follower_user_id == actor_id,
                    Relationship.status == RelationshipStatus.PENDING,
                )
                .order_by(Relationship.created_at.desc(), Relationship.id)
            ).all()
        return self._with_counterparts(actor_id, sent)
