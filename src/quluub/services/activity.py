"""Append-only activity log writes."""
from __future__ import annotations

from sqlalchemy.orm import Session

from quluub.models import ActivityAction, UserActivityLog


def record_activity(
    db: Session,
    *,
    actor_id: int,
    receiver_id: int,
    action: ActivityAction,
) -> UserActivityLog:
    """Stage an activity entry on the session.

    The entry is committed together with whatever transition the caller is
    applying, so the log never records an action that did not happen.
    """
    entry = UserActivityLog(user_id=actor_id, receiver_id=receiver_id, action=action)
    db.add(entry)
    return entry
