"""CRUD-style helpers for the user directory."""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quluub.core import security
from quluub.core.errors import (
    AuthenticationError,
    DuplicateError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)
from quluub.core.settings import settings
from quluub.db.time import utcnow
from quluub.db.unit_of_work import store_guard, unit_of_work
from quluub.models import ActivityAction, Favorite, Plan, User, UserStatus
from quluub.schemas.user import ProfileUpdateRequest, SignupRequest
from quluub.services.activity import record_activity

__all__ = [
    "get_user",
    "require_user",
    "create_user",
    "authenticate",
    "view_user",
    "update_profile",
    "upgrade_plan",
    "browse_users",
    "add_favorite",
    "remove_favorite",
    "get_favorites",
]

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User | None:
    """Return a single user by primary key."""
    with store_guard(db):
        return db.get(User, user_id)


def require_user(db: Session, user_id: int) -> User:
    """Return a user or raise ``NotFoundError``."""
    user = get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def create_user(db: Session, payload: SignupRequest) -> User:
    """Persist a new account with a hashed password.

    Raises:
        DuplicateError: If the username or email is already registered.
    """
    with store_guard(db):
        clash = db.scalars(
            select(User.id).where(
                or_(User.username == payload.username, User.email == payload.email)
            )
        ).first()
    if clash is not None:
        raise DuplicateError("User already exists")

    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=security.hash_password(payload.password),
        fname=payload.fname,
        lname=payload.lname,
        gender=payload.gender,
        plan=Plan.FREEMIUM,
        status=UserStatus.ACTIVE,
        last_seen=utcnow(),
    )
    try:
        with unit_of_work(db):
            db.add(user)
    except IntegrityError as exc:
        raise DuplicateError("User already exists") from exc
    with store_guard(db):
        db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.username)
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    """Return the user for valid credentials and stamp ``last_seen``.

    Raises:
        AuthenticationError: If the username is unknown or the password is wrong.
    """
    with store_guard(db):
        user = db.scalars(select(User).where(User.username == username)).first()
    if user is None or not security.verify_password(password, user.password_hash):
        logger.info("Failed login attempt for username %s", username)
        raise AuthenticationError("Invalid credentials")

    with unit_of_work(db):
        user.last_seen = utcnow()
    with store_guard(db):
        db.refresh(user)
    return user


def view_user(db: Session, viewer_id: int, user_id: int) -> User:
    """Return a profile and log the view when it is someone else's."""
    user = require_user(db, user_id)
    if viewer_id != user_id:
        with unit_of_work(db):
            record_activity(
                db,
                actor_id=viewer_id,
                receiver_id=user_id,
                action=ActivityAction.VIEWED,
            )
    return user


def update_profile(
    db: Session, actor_id: int, user_id: int, update_data: ProfileUpdateRequest
) -> User:
    """Apply a partial profile update. Only the owner may edit a profile."""
    if actor_id != user_id:
        raise ForbiddenError("Not authorized to update this profile")
    user = require_user(db, user_id)

    update_dict = update_data.model_dump(exclude_unset=True)
    with unit_of_work(db):
        for key, value in update_dict.items():
            setattr(user, key, value)
    with store_guard(db):
        db.refresh(user)
    return user


def upgrade_plan(db: Session, email: str, plan: Plan = Plan.PREMIUM) -> User:
    """Move the account registered under ``email`` to ``plan``.

    Raises:
        NotFoundError: If no account uses that email.
    """
    with store_guard(db):
        user = db.scalars(select(User).where(User.email == email.strip().lower())).first()
    if user is None:
        raise NotFoundError("User not found")

    previous = user.plan
    with unit_of_work(db):
        user.plan = plan
    with store_guard(db):
        db.refresh(user)
    logger.info("User %s plan changed from %s to %s", user.id, previous.value, plan.value)
    return user


def browse_users(
    db: Session,
    actor: User,
    *,
    show_all: bool = False,
    country: str | None = None,
    nationality: str | None = None,
    limit: int | None = None,
) -> Sequence[User]:
    """List other visible members, most recently active first.

    Unless ``show_all`` is set, results are limited to the opposite gender and
    to the actor's own country when it is known.
    """
    stmt = select(User).where(User.id != actor.id, User.hidden.is_(False))

    if not show_all:
        stmt = stmt.where(User.gender == actor.gender.opposite)
        if actor.country and not country:
            stmt = stmt.where(User.country == actor.country)
    if country:
        stmt = stmt.where(User.country == country)
    if nationality:
        stmt = stmt.where(User.nationality == nationality)

    limit = min(limit or settings.browse_default_limit, settings.browse_max_limit)
    stmt = stmt.order_by(User.last_seen.desc().nulls_last(), User.id).limit(limit)
    with store_guard(db):
        return db.scalars(stmt).all()


def get_favorites(db: Session, user_id: int) -> Sequence[User]:
    """Return the users ``user_id`` has favourited, most recent first."""
    with store_guard(db):
        return db.scalars(
            select(User)
            .join(Favorite, Favorite.favorite_user_id == User.id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), User.id)
        ).all()


def add_favorite(db: Session, user_id: int, favorite_user_id: int) -> Sequence[User]:
    """Add a user to the favourites list. Adding twice is a no-op."""
    if user_id == favorite_user_id:
        raise InvalidStateError("You cannot add yourself to favorites")
    require_user(db, favorite_user_id)

    with store_guard(db):
        existing = db.get(Favorite, (user_id, favorite_user_id))
    if existing is None:
        try:
            with unit_of_work(db):
                db.add(Favorite(user_id=user_id, favorite_user_id=favorite_user_id))
        except IntegrityError:
            # Added concurrently; the end state is the same.
            logger.debug("Favorite %s -> %s already present", user_id, favorite_user_id)
    return get_favorites(db, user_id)


def remove_favorite(db: Session, user_id: int, favorite_user_id: int) -> Sequence[User]:
    """Remove a user from the favourites list. Removing an absent entry is a no-op."""
    with unit_of_work(db):
        db.execute(
            delete(Favorite)
            .where(
                Favorite.user_id == user_id,
                Favorite.favorite_user_id == favorite_user_id,
            )
            .execution_options(synchronize_session=False)
        )
    return get_favorites(db, user_id)
