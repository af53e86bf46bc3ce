"""Match predicate derived from the relationship store.

Two users are matched iff a relationship exists for their unordered pair with
status ``matched``. Nothing here is cached; every call reads the store.
"""
from __future__ import annotations

from sqlalchemy import Select, case, or_, select
from sqlalchemy.orm import Session

from quluub.models import Relationship, RelationshipStatus
from quluub.models.relationship import pair_key


def is_matched(db: Session, user_a: int, user_b: int) -> bool:
    """Return True when ``user_a`` and ``user_b`` are mutually matched."""
    if user_a == user_b:
        return False
    low, high = pair_key(user_a, user_b)
    stmt = select(Relationship.id).where(
        Relationship.user_low_id == low,
        Relationship.user_high_id == high,
        Relationship.status == RelationshipStatus.MATCHED,
    )
    return db.execute(stmt).first() is not None


def matched_counterparts_query(user_id: int) -> Select[tuple[int]]:
    """Select the ids of every user currently matched with ``user_id``.

    Usable directly as an ``IN`` subquery.
    """
    counterpart = case(
        (Relationship.follower_user_id == user_id, Relationship.followed_user_id),
        else_=Relationship.follower_user_id,
    )
    return select(counterpart).where(
        Relationship.status == RelationshipStatus.MATCHED,
        or_(
            Relationship.follower_user_id == user_id,
            Relationship.followed_user_id == user_id,
        ),
    )


def matched_user_ids(db: Session, user_id: int) -> set[int]:
    """Return the set of user ids matched with ``user_id``."""
    return set(db.scalars(matched_counterparts_query(user_id)))
