"""API routes for conversations, their messages and the tutoring pipeline."""

import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, status

from learning_lab.api.deps import CapabilitiesDep, PipelineDep, RepositoryDep, SettingsDep
from learning_lab.errors import NotFoundError, ValidationError
from learning_lab.schemas.conversations import (
    ConversationCreateRequest,
    ConversationResponse,
    ConversationTitleRequest,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
    SuccessResponse,
)
from learning_lab.services.pipeline import MessageFlags

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversations", tags=["conversations"])

_FALLBACK_TITLE_WORDS = 5


# =============================================================================
# CONVERSATION MANAGEMENT
# =============================================================================


@router.get("/{user_id}", response_model=list[ConversationResponse])
async def list_conversations(user_id: str, repository: RepositoryDep):
    """List a user's conversations, most recently updated first."""
    conversations = await repository.list_conversations(user_id)
    return [ConversationResponse.model_validate(c) for c in conversations]


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(request: ConversationCreateRequest, repository: RepositoryDep):
    """Start a new conversation (the "new chat" action)."""
    conversation = await repository.create_conversation(request.user_id, request.title)
    return ConversationResponse.model_validate(conversation)


@router.patch("/{conversation_id}/title", response_model=ConversationResponse)
async def generate_conversation_title(
    conversation_id: UUID,
    request: ConversationTitleRequest,
    repository: RepositoryDep,
    capabilities: CapabilitiesDep,
    settings: SettingsDep,
):
    """
    Rename a conversation with an AI-generated title for the given opening message.

    Falls back to the first five words of the message if generation fails.
    """
    if not request.content.strip():
        raise ValidationError("Message content is required")
    if await repository.get_conversation(conversation_id) is None:
        raise NotFoundError("Conversation not found")

    try:
        title = await asyncio.wait_for(
            capabilities.titles.title_for(request.content),
            timeout=settings.capability_timeout_seconds,
        )
    except Exception as e:
        logger.warning("Title generation failed for conversation %s: %s", conversation_id, e)
        title = " ".join(request.content.split()[:_FALLBACK_TITLE_WORDS])

    conversation = await repository.update_conversation(conversation_id, title=title)
    if conversation is None:
        raise NotFoundError("Conversation not found")
    return ConversationResponse.model_validate(conversation)


@router.delete("/user/{user_id}/clear", response_model=SuccessResponse)
async def clear_conversations(user_id: str, repository: RepositoryDep):
    """Delete all of a user's conversations and their messages."""
    await repository.clear_conversations(user_id)
    return SuccessResponse()


@router.delete("/{conversation_id}", response_model=SuccessResponse)
async def delete_conversation(conversation_id: UUID, repository: RepositoryDep):
    """Delete a conversation and all its messages."""
    if not await repository.delete_conversation(conversation_id):
        raise NotFoundError("Conversation not found")
    return SuccessResponse()


# =============================================================================
# MESSAGES
# =============================================================================


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(conversation_id: UUID, repository: RepositoryDep):
    """Messages of a conversation in creation order (empty for unknown ids)."""
    messages = await repository.list_messages(conversation_id)
    return [MessageResponse.model_validate(m) for m in messages]


@router.post("/{conversation_id}/messages", response_model=SendMessageResponse)
async def send_message(
    conversation_id: UUID,
    request: SendMessageRequest,
    pipeline: PipelineDep,
):
    """
    Send a user message and get the tutor's reply.

    Runs subject detection, title generation (first message only), interest and
    progress bookkeeping, the tutor reply and automatic visuals. Returns 404 if
    the conversation does not exist; AI failures degrade to fallbacks.
    """
    result = await pipeline.handle_incoming_message(
        conversation_id,
        request.content,
        MessageFlags(
            generate_image=request.generate_image,
            generate_mind_map=request.generate_mind_map,
            add_emojis=request.add_emojis,
        ),
    )
    return SendMessageResponse(
        user_message=MessageResponse.model_validate(result.user_message),
        assistant_message=MessageResponse.model_validate(result.assistant_message),
    )
