"""
Repository contract over conversations, messages, interests and progress.

Both implementations return the ORM model classes from learning_lab.db.models
(the in-memory one simply never attaches them to a session), so everything
above this layer works with a single set of types.

Behavioural requirements shared by every implementation:
- upsert_learning_progress looks rows up by exact (user_id, topic); an existing
  row gets progress/visuals overwritten and last_activity bumped, otherwise a
  new row is inserted.
- delete_conversation removes the conversation's messages before the
  conversation itself.
- clear_conversations removes all messages of all of a user's conversations
  before removing the conversations.
- Every write is durable as soon as the call returns.
"""

from typing import Any, Protocol
from uuid import UUID

from learning_lab.db.models import Conversation, LearningProgress, Message, MessageRole, UserInterest


class Repository(Protocol):
    """Persistence operations used by the pipeline and the API."""

    # Conversations
    async def list_conversations(self, user_id: str) -> list[Conversation]:
        """Conversations for a user, most recently updated first."""
        ...

    async def create_conversation(self, user_id: str, title: str) -> Conversation: ...

    async def get_conversation(self, conversation_id: UUID) -> Conversation | None: ...

    async def update_conversation(
        self, conversation_id: UUID, *, title: str | None = None
    ) -> Conversation | None:
        """Apply the given changes (possibly none) and bump updated_at."""
        ...

    async def delete_conversation(self, conversation_id: UUID) -> bool: ...

    async def clear_conversations(self, user_id: str) -> int:
        """Delete every conversation of a user; returns how many were removed."""
        ...

    # Messages
    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        """Messages in creation order."""
        ...

    async def count_messages(self, conversation_id: UUID) -> int: ...

    async def create_message(
        self,
        conversation_id: UUID,
        role: MessageRole,
        content: str,
        *,
        image_url: str | None = None,
        mind_map_data: dict[str, Any] | None = None,
    ) -> Message: ...

    # Interests
    async def list_interests(self, user_id: str) -> list[UserInterest]: ...

    async def create_interest(self, user_id: str, interest: str, progress: int = 0) -> UserInterest: ...

    async def delete_interest(self, user_id: str, interest_id: UUID) -> bool: ...

    # Learning progress
    async def list_progress(self, user_id: str) -> list[LearningProgress]: ...

    async def upsert_learning_progress(
        self,
        user_id: str,
        topic: str,
        progress: int,
        visuals_generated: int,
    ) -> LearningProgress: ...
