"""SQLAlchemy models for the Quluub application."""

from .activity_log import ActivityAction, UserActivityLog
from .chat import ChatMessage, MessageStatus
from .relationship import Relationship, RelationshipStatus
from .user import Favorite, Gender, Plan, User, UserStatus

__all__ = [
    "ActivityAction", "UserActivityLog",
    "ChatMessage", "MessageStatus",
    "Relationship", "RelationshipStatus",
    "Favorite", "Gender", "Plan", "User", "UserStatus",
]
