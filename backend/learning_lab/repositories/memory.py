"""In-process repository backed by dictionaries."""

import logging
from typing import Any
from uuid import UUID, uuid4

from learning_lab.db.models import (
    Conversation,
    LearningProgress,
    Message,
    MessageRole,
    UserInterest,
    utcnow,
)

logger = logging.getLogger(__name__)


class MemoryRepository:
    """
    Dictionary-backed repository with the same behaviour as SqlRepository.

    Data lives for the lifetime of the process. Progress rows are indexed by
    (user_id, topic) so upserts are a keyed lookup rather than a scan.
    """

    def __init__(self):
        self._conversations: dict[UUID, Conversation] = {}
        self._messages: dict[UUID, Message] = {}
        self._interests: dict[UUID, UserInterest] = {}
        self._progress: dict[UUID, LearningProgress] = {}
        self._progress_index: dict[tuple[str, str], UUID] = {}

    # =========================================================================
    # CONVERSATIONS
    # =========================================================================

    async def list_conversations(self, user_id: str) -> list[Conversation]:
        conversations = [c for c in self._conversations.values() if c.user_id == user_id]
        return sorted(conversations, key=lambda c: c.updated_at, reverse=True)

    async def create_conversation(self, user_id: str, title: str) -> Conversation:
        now = utcnow()
        conversation = Conversation(
            id=uuid4(), user_id=user_id, title=title, created_at=now, updated_at=now
        )
        self._conversations[conversation.id] = conversation
        return conversation

    async def get_conversation(self, conversation_id: UUID) -> Conversation | None:
        return self._conversations.get(conversation_id)

    async def update_conversation(
        self, conversation_id: UUID, *, title: str | None = None
    ) -> Conversation | None:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            return None
        if title is not None:
            conversation.title = title
        conversation.updated_at = utcnow()
        return conversation

    async def delete_conversation(self, conversation_id: UUID) -> bool:
        if conversation_id not in self._conversations:
            return False
        self._delete_messages_for({conversation_id})
        del self._conversations[conversation_id]
        return True

    async def clear_conversations(self, user_id: str) -> int:
        conversation_ids = {c.id for c in self._conversations.values() if c.user_id == user_id}
        self._delete_messages_for(conversation_ids)
        for conversation_id in conversation_ids:
            del self._conversations[conversation_id]
        return len(conversation_ids)

    def _delete_messages_for(self, conversation_ids: set[UUID]) -> None:
        doomed = [m.id for m in self._messages.values() if m.conversation_id in conversation_ids]
        for message_id in doomed:
            del self._messages[message_id]

    # =========================================================================
    # MESSAGES
    # =========================================================================

    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        # sorted() is stable, so equal timestamps keep insertion order
        messages = [m for m in self._messages.values() if m.conversation_id == conversation_id]
        return sorted(messages, key=lambda m: m.created_at)

    async def count_messages(self, conversation_id: UUID) -> int:
        return sum(1 for m in self._messages.values() if m.conversation_id == conversation_id)

    async def create_message(
        self,
        conversation_id: UUID,
        role: MessageRole,
        content: str,
        *,
        image_url: str | None = None,
        mind_map_data: dict[str, Any] | None = None,
    ) -> Message:
        # No referential integrity here: a message for an unknown conversation is
        # stored and the caller decides what to do about the missing parent.
        message = Message(
            id=uuid4(),
            conversation_id=conversation_id,
            role=MessageRole(role).value,
            content=content,
            image_url=image_url,
            mind_map_data=mind_map_data,
            created_at=utcnow(),
        )
        self._messages[message.id] = message
        return message

    # =========================================================================
    # INTERESTS
    # =========================================================================

    async def list_interests(self, user_id: str) -> list[UserInterest]:
        return [i for i in self._interests.values() if i.user_id == user_id]

    async def create_interest(self, user_id: str, interest: str, progress: int = 0) -> UserInterest:
        record = UserInterest(
            id=uuid4(), user_id=user_id, interest=interest, progress=progress, created_at=utcnow()
        )
        self._interests[record.id] = record
        return record

    async def delete_interest(self, user_id: str, interest_id: UUID) -> bool:
        record = self._interests.get(interest_id)
        if record is None or record.user_id != user_id:
            return False
        del self._interests[interest_id]
        return True

    # =========================================================================
    # LEARNING PROGRESS
    # =========================================================================

    async def list_progress(self, user_id: str) -> list[LearningProgress]:
        return [p for p in self._progress.values() if p.user_id == user_id]

    async def upsert_learning_progress(
        self,
        user_id: str,
        topic: str,
        progress: int,
        visuals_generated: int,
    ) -> LearningProgress:
        existing_id = self._progress_index.get((user_id, topic))
        if existing_id is not None:
            record = self._progress[existing_id]
            record.progress_percentage = progress
            record.visuals_generated = visuals_generated
            record.last_activity = utcnow()
            return record

        record = LearningProgress(
            id=uuid4(),
            user_id=user_id,
            topic=topic,
            progress_percentage=progress,
            visuals_generated=visuals_generated,
            last_activity=utcnow(),
        )
        self._progress[record.id] = record
        self._progress_index[(user_id, topic)] = record.id
        logger.debug("Created progress row for user=%s topic=%r", user_id, topic)
        return record
