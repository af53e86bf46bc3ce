"""Chat message Pydantic schemas."""

from pydantic import Field, field_validator

from quluub.core.settings import settings
from quluub.models import MessageStatus

from .common import CamelModel, UtcDatetime
from .user import PublicUser


class SendMessageRequest(CamelModel):
    """Schema for sending a chat message."""

    receiver_id: int
    message: str = Field(..., min_length=1, max_length=settings.message_max_length)

    @field_validator("message")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message cannot be blank")
        return v


class ChatMessageResponse(CamelModel):
    """Chat message as returned by the API."""

    id: int
    sender_id: int
    receiver_id: int
    message: str
    status: MessageStatus
    created: UtcDatetime


class ConversationResponse(CamelModel):
    """Latest message exchanged with one matched counterparty."""

    user_id: int
    user: PublicUser | None
    last_message: ChatMessageResponse
    unread_count: int = Field(..., description="1 when the latest message awaits the caller")


class UnreadCountResponse(CamelModel):
    unread_count: int
