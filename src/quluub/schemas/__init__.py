"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .chat import (
    ChatMessageResponse,
    ConversationResponse,
    SendMessageRequest,
    UnreadCountResponse,
)
from .common import CamelModel, MessageResponse
from .relationship import (
    RelationshipRequest,
    RelationshipResponse,
    RelationshipStatusUpdate,
    RelationshipWithUser,
)
from .user import (
    AuthResponse,
    FavoritesResponse,
    LoginRequest,
    PlanUpgradeRequest,
    ProfileUpdateRequest,
    PublicUser,
    SignupRequest,
    UserProfile,
)

__all__ = [
    "ChatMessageResponse", "ConversationResponse", "SendMessageRequest", "UnreadCountResponse",
    "CamelModel", "MessageResponse",
    "RelationshipRequest", "RelationshipResponse", "RelationshipStatusUpdate",
    "RelationshipWithUser",
    "AuthResponse", "FavoritesResponse", "LoginRequest", "ProfileUpdateRequest",
    "PlanUpgradeRequest", "PublicUser", "SignupRequest", "UserProfile",
]
