"""User directory endpoints: own profile, browsing, profile views and favourites."""

from __future__ import annotations

import hmac
from collections.abc import Sequence

from fastapi import APIRouter, Header, HTTPException, Query, status

from quluub.core.settings import settings
from quluub.models import User
from quluub.schemas.common import MessageResponse
from quluub.schemas.user import (
    FavoritesResponse,
    PlanUpgradeRequest,
    ProfileUpdateRequest,
    PublicUser,
    UserProfile,
)
from quluub.services import user_service

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/users", tags=["users"])


def _favorites(users: Sequence[User], message: str | None = None) -> FavoritesResponse:
    return FavoritesResponse(
        message=message,
        favorites=[PublicUser.model_validate(user) for user in users],
    )


@router.get("/me", response_model=UserProfile)
async def get_me(current_user: CurrentUserDep) -> User:
    """Return the signed-in user's own profile."""
    return current_user


@router.put("/me", response_model=UserProfile)
async def update_me(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> User:
    """Update the signed-in user's profile."""
    return user_service.update_profile(db, current_user.id, current_user.id, payload)


@router.get("/browse", response_model=list[PublicUser])
async def browse_users(
    current_user: CurrentUserDep,
    db: SessionDep,
    show_all: bool = Query(False, alias="showAll"),
    country: str | None = Query(None),
    nationality: str | None = Query(None),
    limit: int | None = Query(None, ge=1),
) -> Sequence[User]:
    """List candidate profiles for the signed-in user."""
    return user_service.browse_users(
        db,
        current_user,
        show_all=show_all,
        country=country,
        nationality=nationality,
        limit=limit,
    )


@router.post("/upgrade-plan", response_model=MessageResponse)
async def upgrade_plan(
    payload: PlanUpgradeRequest,
    db: SessionDep,
    webhook_secret: str | None = Header(None, alias="X-Webhook-Secret"),
) -> MessageResponse:
    """Billing webhook: move an account to a paid plan (defaults to premium)."""
    expected = settings.plan_webhook_secret
    if expected and not hmac.compare_digest(webhook_secret or "", expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook secret",
        )
    user_service.upgrade_plan(db, payload.email, payload.plan)
    return MessageResponse(message="Plan upgraded successfully")


@router.get("/favorites", response_model=FavoritesResponse)
async def list_favorites(current_user: CurrentUserDep, db: SessionDep) -> FavoritesResponse:
    """Return the signed-in user's favourites."""
    return _favorites(user_service.get_favorites(db, current_user.id))


@router.post("/favorites/{user_id}", response_model=FavoritesResponse)
async def add_favorite(
    user_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> FavoritesResponse:
    """Add a user to the signed-in user's favourites."""
    users = user_service.add_favorite(db, current_user.id, user_id)
    return _favorites(users, "User added to favorites")


@router.delete("/favorites/{user_id}", response_model=FavoritesResponse)
async def remove_favorite(
    user_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> FavoritesResponse:
    """Remove a user from the signed-in user's favourites."""
    users = user_service.remove_favorite(db, current_user.id, user_id)
    return _favorites(users, "User removed from favorites")


@router.get("/{user_id}", response_model=PublicUser)
async def get_user(user_id: int, current_user: CurrentUserDep, db: SessionDep) -> User:
    """Return another member's public profile and record the view."""
    return user_service.view_user(db, current_user.id, user_id)


@router.put("/{user_id}", response_model=UserProfile)
async def update_user(
    user_id: int,
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> User:
    """Update a profile; only its owner may do so."""
    return user_service.update_profile(db, current_user.id, user_id, payload)
