"""SQLAlchemy-backed repository."""

import functools
import logging
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from learning_lab.db.models import (
    Conversation,
    LearningProgress,
    Message,
    MessageRole,
    UserInterest,
    utcnow,
)
from learning_lab.errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


def _persistence_errors(method):
    """Roll back and re-raise database failures as PersistenceError."""

    @functools.wraps(method)
    async def wrapper(self: "SqlRepository", *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Repository call %s failed", method.__name__)
            raise PersistenceError() from e

    return wrapper


def _insert_for(dialect_name: str):
    """Dialect-specific INSERT supporting ON CONFLICT."""
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise PersistenceError(f"Unsupported database dialect: {dialect_name}")
    return insert


class SqlRepository:
    """
    Repository over an AsyncSession.

    Each write commits immediately: the chat pipeline relies on every step
    being durable on its own, with nothing rolled back if a later step fails.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # CONVERSATIONS
    # =========================================================================

    @_persistence_errors
    async def list_conversations(self, user_id: str) -> list[Conversation]:
        stmt = (
            select(Conversation)
            .where(Conversation.user_id == user_id)
            .order_by(Conversation.updated_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @_persistence_errors
    async def create_conversation(self, user_id: str, title: str) -> Conversation:
        conversation = Conversation(user_id=user_id, title=title)
        self.session.add(conversation)
        await self.session.commit()
        await self.session.refresh(conversation)
        return conversation

    @_persistence_errors
    async def get_conversation(self, conversation_id: UUID) -> Conversation | None:
        return await self.session.get(Conversation, conversation_id)

    @_persistence_errors
    async def update_conversation(
        self, conversation_id: UUID, *, title: str | None = None
    ) -> Conversation | None:
        conversation = await self.session.get(Conversation, conversation_id)
        if conversation is None:
            return None
        if title is not None:
            conversation.title = title
        conversation.updated_at = utcnow()
        await self.session.commit()
        return conversation

    @_persistence_errors
    async def delete_conversation(self, conversation_id: UUID) -> bool:
        conversation = await self.session.get(Conversation, conversation_id)
        if conversation is None:
            return False

        # Messages first so no orphans survive even without ON DELETE CASCADE
        await self.session.execute(delete(Message).where(Message.conversation_id == conversation_id))
        await self.session.delete(conversation)
        await self.session.commit()
        logger.info("Deleted conversation %s", conversation_id)
        return True

    @_persistence_errors
    async def clear_conversations(self, user_id: str) -> int:
        conversation_ids = select(Conversation.id).where(Conversation.user_id == user_id)
        await self.session.execute(
            delete(Message).where(Message.conversation_id.in_(conversation_ids))
        )
        result = await self.session.execute(
            delete(Conversation).where(Conversation.user_id == user_id)
        )
        await self.session.commit()
        self.session.expunge_all()
        logger.info("Cleared %d conversations for user %s", result.rowcount, user_id)
        return result.rowcount

    # =========================================================================
    # MESSAGES
    # =========================================================================

    @_persistence_errors
    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @_persistence_errors
    async def count_messages(self, conversation_id: UUID) -> int:
        stmt = select(func.count()).select_from(Message).where(
            Message.conversation_id == conversation_id
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    @_persistence_errors
    async def create_message(
        self,
        conversation_id: UUID,
        role: MessageRole,
        content: str,
        *,
        image_url: str | None = None,
        mind_map_data: dict[str, Any] | None = None,
    ) -> Message:
        message = Message(
            conversation_id=conversation_id,
            role=MessageRole(role).value,
            content=content,
            image_url=image_url,
            mind_map_data=mind_map_data,
        )
        self.session.add(message)
        try:
            await self.session.commit()
        except IntegrityError as e:
            # The only constraint a message can break is its conversation FK
            await self.session.rollback()
            raise NotFoundError("Conversation not found") from e
        await self.session.refresh(message)
        return message

    # =========================================================================
    # INTERESTS
    # =========================================================================

    @_persistence_errors
    async def list_interests(self, user_id: str) -> list[UserInterest]:
        stmt = (
            select(UserInterest)
            .where(UserInterest.user_id == user_id)
            .order_by(UserInterest.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @_persistence_errors
    async def create_interest(self, user_id: str, interest: str, progress: int = 0) -> UserInterest:
        record = UserInterest(user_id=user_id, interest=interest, progress=progress)
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    @_persistence_errors
    async def delete_interest(self, user_id: str, interest_id: UUID) -> bool:
        result = await self.session.execute(
            delete(UserInterest).where(
                UserInterest.id == interest_id, UserInterest.user_id == user_id
            )
        )
        await self.session.commit()
        return result.rowcount > 0

    # =========================================================================
    # LEARNING PROGRESS
    # =========================================================================

    @_persistence_errors
    async def list_progress(self, user_id: str) -> list[LearningProgress]:
        stmt = (
            select(LearningProgress)
            .where(LearningProgress.user_id == user_id)
            .order_by(LearningProgress.last_activity.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @_persistence_errors
    async def upsert_learning_progress(
        self,
        user_id: str,
        topic: str,
        progress: int,
        visuals_generated: int,
    ) -> LearningProgress:
        """Single-statement upsert on the (user_id, topic) unique constraint."""
        insert = _insert_for(self.session.get_bind().dialect.name)
        now = utcnow()
        stmt = insert(LearningProgress).values(
            user_id=user_id,
            topic=topic,
            progress_percentage=progress,
            visuals_generated=visuals_generated,
            last_activity=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[LearningProgress.user_id, LearningProgress.topic],
            set_={
                "progress_percentage": stmt.excluded.progress_percentage,
                "visuals_generated": stmt.excluded.visuals_generated,
                "last_activity": stmt.excluded.last_activity,
            },
        ).returning(LearningProgress)

        result = await self.session.scalars(
            stmt, execution_options={"populate_existing": True}
        )
        record = result.one()
        await self.session.commit()
        return record
