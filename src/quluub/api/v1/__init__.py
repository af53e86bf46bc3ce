"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    chats_router,
    relationships_router,
    system_router,
    users_router,
)

__all__ = [
    "auth_router",
    "chats_router",
    "relationships_router",
    "system_router",
    "users_router",
]
