"""Chat endpoints. Every route is restricted to matched pairs."""

from __future__ import annotations

from fastapi import APIRouter, status

from quluub.models import ChatMessage
from quluub.schemas.chat import (
    ChatMessageResponse,
    ConversationResponse,
    SendMessageRequest,
    UnreadCountResponse,
)
from quluub.schemas.user import PublicUser

from ..dependencies import ChatServiceDep, CurrentUserDep

router = APIRouter(prefix="/chats", tags=["chats"])


@router.get("/conversations", response_model=list[ConversationResponse])
async def get_conversations(
    current_user: CurrentUserDep,
    service: ChatServiceDep,
) -> list[ConversationResponse]:
    """List the latest message with each matched counterparty."""
    return [
        ConversationResponse(
            user_id=conversation.user_id,
            user=PublicUser.model_validate(conversation.user) if conversation.user else None,
            last_message=ChatMessageResponse.model_validate(conversation.last_message),
            unread_count=conversation.unread_count,
        )
        for conversation in service.get_conversations(current_user.id)
    ]


@router.get("/messages/{user_id}", response_model=list[ChatMessageResponse])
async def get_messages(
    user_id: int,
    current_user: CurrentUserDep,
    service: ChatServiceDep,
) -> list[ChatMessageResponse]:
    """Return the conversation with ``user_id`` and mark it read."""
    return service.get_messages(current_user.id, user_id)


@router.post("/send", status_code=status.HTTP_201_CREATED, response_model=ChatMessageResponse)
async def send_message(
    payload: SendMessageRequest,
    current_user: CurrentUserDep,
    service: ChatServiceDep,
) -> ChatMessage:
    """Send a message to a matched user."""
    return service.send_message(current_user.id, payload.receiver_id, payload.message)


@router.get("/unread", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: CurrentUserDep,
    service: ChatServiceDep,
) -> UnreadCountResponse:
    """Count unread messages from matched users."""
    return UnreadCountResponse(unread_count=service.get_unread_count(current_user.id))
