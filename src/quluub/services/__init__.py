"""Business logic services for the Quluub application."""

from .chat import ChatService, Conversation
from .matching import is_matched
from .relationships import RelationshipService

__all__ = [
    "ChatService",
    "Conversation",
    "RelationshipService",
    "is_matched",
]
