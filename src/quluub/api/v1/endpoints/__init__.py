"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .chats import router as chats_router
from .relationships import router as relationships_router
from .system import router as system_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "chats_router",
    "relationships_router",
    "system_router",
    "users_router",
]
