"""Pydantic schemas for conversations and messages."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from learning_lab.schemas.base import BaseSchema, CreatedAtMixin, IDMixin
from learning_lab.schemas.generation import MindMap

DEFAULT_CONVERSATION_TITLE = "New Learning Session"


# Request schemas
class ConversationCreateRequest(BaseSchema):
    """Request to create a new conversation."""

    user_id: str = Field(..., min_length=1, max_length=255)
    title: str = Field(DEFAULT_CONVERSATION_TITLE, min_length=1, max_length=255)


class ConversationTitleRequest(BaseSchema):
    """Request to (re)generate a conversation title from an opening message."""

    model_config = ConfigDict(str_strip_whitespace=False)

    content: str = Field(..., min_length=1, max_length=10000)


class SendMessageRequest(BaseSchema):
    """Request to send a chat message through the tutoring pipeline."""

    # Message text is stored verbatim; blank messages are rejected by the pipeline
    model_config = ConfigDict(str_strip_whitespace=False)

    content: str = Field(..., min_length=1, max_length=10000)
    generate_image: bool = False
    generate_mind_map: bool = False
    add_emojis: bool = True


# Response schemas
class ConversationResponse(BaseSchema, IDMixin, CreatedAtMixin):
    """Conversation response."""

    user_id: str
    title: str
    updated_at: datetime


class MessageResponse(BaseSchema, IDMixin, CreatedAtMixin):
    """Chat message response."""

    model_config = ConfigDict(str_strip_whitespace=False)

    conversation_id: UUID
    role: str
    content: str
    image_url: str | None = None
    mind_map_data: MindMap | None = None


class SendMessageResponse(BaseSchema):
    """Both messages produced by one pipeline run."""

    user_message: MessageResponse
    assistant_message: MessageResponse


class SuccessResponse(BaseModel):
    """Generic success marker."""

    success: bool = True
