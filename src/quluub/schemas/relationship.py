"""Relationship (follow/match request) Pydantic schemas."""

from pydantic import Field

from quluub.models import RelationshipStatus

from .common import CamelModel, UtcDatetime
from .user import PublicUser


class RelationshipRequest(CamelModel):
    """Schema for sending a new request."""

    followed_user_id: int = Field(..., description="User the request is addressed to")


class RelationshipStatusUpdate(CamelModel):
    """Recipient's decision on a pending request.

    Kept as a plain string so that unsupported values are reported by the
    workflow as an invalid transition rather than a schema error.
    """

    status: str = Field(..., description='Either "matched" or "rejected"')


class RelationshipResponse(CamelModel):
    """Relationship record as returned by the API."""

    id: str
    follower_user_id: int
    followed_user_id: int
    status: RelationshipStatus
    created_at: UtcDatetime | None = None
    updated_at: UtcDatetime | None = None


class RelationshipWithUser(CamelModel):
    """A relationship paired with the counterparty's public profile."""

    relationship: RelationshipResponse
    user: PublicUser | None
