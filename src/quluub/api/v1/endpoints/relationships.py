"""Relationship workflow endpoints: requests, responses, withdrawals and matches."""

from __future__ import annotations

from fastapi import APIRouter, status

from quluub.models import Relationship, User
from quluub.schemas.common import MessageResponse
from quluub.schemas.relationship import (
    RelationshipRequest,
    RelationshipResponse,
    RelationshipStatusUpdate,
    RelationshipWithUser,
)
from quluub.schemas.user import PublicUser

from ..dependencies import CurrentUserDep, RelationshipServiceDep

router = APIRouter(prefix="/relationships", tags=["relationships"])


def _with_user(pairs: list[tuple[Relationship, User | None]]) -> list[RelationshipWithUser]:
    return [
        RelationshipWithUser(
            relationship=RelationshipResponse.model_validate(relationship),
            user=PublicUser.model_validate(user) if user is not None else None,
        )
        for relationship, user in pairs
    ]


@router.post(
    "/request",
    status_code=status.HTTP_201_CREATED,
    response_model=RelationshipResponse,
)
async def send_request(
    payload: RelationshipRequest,
    current_user: CurrentUserDep,
    service: RelationshipServiceDep,
) -> Relationship:
    """Send a follow/match request to another user."""
    return service.send_request(current_user.id, payload.followed_user_id)


@router.put("/{relationship_id}/status", response_model=RelationshipResponse)
async def respond_to_request(
    relationship_id: str,
    payload: RelationshipStatusUpdate,
    current_user: CurrentUserDep,
    service: RelationshipServiceDep,
) -> Relationship:
    """Accept (``matched``) or reject a request addressed to the current user."""
    return service.respond_to_request(current_user.id, relationship_id, payload.status)


@router.delete("/withdraw/{relationship_id}", response_model=MessageResponse)
async def withdraw_request(
    relationship_id: str,
    current_user: CurrentUserDep,
    service: RelationshipServiceDep,
) -> MessageResponse:
    """Withdraw a pending request the current user sent."""
    service.withdraw_request(current_user.id, relationship_id)
    return MessageResponse(message="Request withdrawn successfully")


@router.get("/matches", response_model=list[RelationshipWithUser])
async def get_matches(
    current_user: CurrentUserDep,
    service: RelationshipServiceDep,
) -> list[RelationshipWithUser]:
    """List matched relationships with the other party's profile."""
    return _with_user(service.get_matches(current_user.id))


@router.get("/pending", response_model=list[RelationshipWithUser])
async def get_pending_requests(
    current_user: CurrentUserDep,
    service: RelationshipServiceDep,
) -> list[RelationshipWithUser]:
    """List requests awaiting the current user's answer."""
    return _with_user(service.get_pending_requests(current_user.id))


@router.get("/sent", response_model=list[RelationshipWithUser])
async def get_sent_requests(
    current_user: CurrentUserDep,
    service: RelationshipServiceDep,
) -> list[RelationshipWithUser]:
    """List requests the current user sent that are still pending."""
    return _with_user(service.get_sent_requests(current_user.id))
