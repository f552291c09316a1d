"""
Message-processing pipeline for one incoming chat message.

Order of operations:
1. persist the user message
2. load the conversation (missing -> NotFoundError; the user message stays)
3. load the user's interests
4. classify the subject (fallback: "General Learning" / 📚)
5. on the conversation's first message, rename it "<icon> <title>"
6. record an interest for a newly seen subject
7. upsert subject progress
8. generate the tutor reply (fallback: apology text)
9-10. generate image + mind map for any reply longer than 50 characters
11. persist the assistant message
12. upsert progress keyed by the message prefix
13. touch the conversation

Only steps 1, 2, 11 and 13 can fail the request. Every other step logs a
warning and continues with a fallback value; nothing is retried and nothing
already written is rolled back.
"""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar
from uuid import UUID

from learning_lab.db.models import Message, MessageRole
from learning_lab.errors import NotFoundError, ValidationError
from learning_lab.repositories.base import Repository
from learning_lab.schemas.generation import MindMap
from learning_lab.services import prompts
from learning_lab.services.capabilities import Capabilities
from learning_lab.services.progress import GENERAL_SUBJECT, ProgressTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERAL_ICON = "📚"
CONFIDENCE_THRESHOLD = 0.7
VISUALS_MIN_RESPONSE_CHARS = 50
FALLBACK_RESPONSE = "I apologize, but I couldn't generate a response at this time."


@dataclass
class MessageFlags:
    """Caller options for one message."""

    generate_image: bool = False
    generate_mind_map: bool = False
    add_emojis: bool = True


@dataclass
class PipelineResult:
    """Both persisted messages plus the subject they were filed under."""

    user_message: Message
    assistant_message: Message
    subject: str
    icon: str


class MessagePipeline:
    """Runs the full tutoring pipeline against a repository and capability set."""

    def __init__(
        self,
        repository: Repository,
        capabilities: Capabilities,
        *,
        capability_timeout: float = 30.0,
    ):
        self.repository = repository
        self.capabilities = capabilities
        self.capability_timeout = capability_timeout
        self.progress = ProgressTracker(repository)

    async def _attempt(self, step: str, conversation_id: UUID, call: Awaitable[T], fallback: T) -> T:
        """Await a capability call under the timeout; log and return fallback on any failure."""
        try:
            return await asyncio.wait_for(call, timeout=self.capability_timeout)
        except Exception as e:
            self._log_fallback(step, conversation_id, e)
            return fallback

    async def _best_effort(self, step: str, conversation_id: UUID, call: Awaitable[T], fallback: T) -> T:
        """Await an optional repository call; log and return fallback on any failure.

        No timeout here: cancelling mid-commit would leave the shared session unusable.
        """
        try:
            return await call
        except Exception as e:
            self._log_fallback(step, conversation_id, e)
            return fallback

    def _log_fallback(self, step: str, conversation_id: UUID, error: Exception) -> None:
        logger.warning(
            "Pipeline step '%s' failed for conversation %s (%s: %s); continuing with fallback",
            step, conversation_id, type(error).__name__, error,
        )

    async def handle_incoming_message(
        self,
        conversation_id: UUID,
        content: str,
        flags: MessageFlags | None = None,
    ) -> PipelineResult:
        """
        Process a user message end to end.

        Args:
            conversation_id: Target conversation
            content: User's message text (must be non-empty)
            flags: Emoji/visual options from the caller

        Returns:
            PipelineResult with the stored user and assistant messages

        Raises:
            ValidationError: content is empty
            NotFoundError: the conversation does not exist
            PersistenceError: storing either message or touching the conversation failed
        """
        if not content or not content.strip():
            raise ValidationError("Message content is required")
        flags = flags or MessageFlags()

        prior_message_count = await self.repository.count_messages(conversation_id)

        # 1. User message is stored before anything else can fail
        user_message = await self.repository.create_message(
            conversation_id, MessageRole.USER, content
        )

        # 2. Conversation must exist
        conversation = await self.repository.get_conversation(conversation_id)
        if conversation is None:
            logger.warning("Message for unknown conversation %s", conversation_id)
            raise NotFoundError("Conversation not found")
        user_id = conversation.user_id

        # 3. Interests for personalization
        interests = await self._best_effort(
            "load-interests", conversation_id, self.repository.list_interests(user_id), []
        )

        # 4. Subject detection
        subject, icon = await self._classify(conversation_id, content)

        # 5. First message names the conversation
        if prior_message_count == 0:
            await self._rename_conversation(conversation_id, content, subject, icon)

        # 6. Interest bookkeeping
        await self._best_effort(
            "interest",
            conversation_id,
            self.progress.ensure_interest(user_id, subject, interests),
            None,
        )

        # 7. Subject progress
        await self._best_effort(
            "subject-progress",
            conversation_id,
            self.progress.record_subject_progress(
                user_id,
                subject,
                prior_message_count,
                generate_image=flags.generate_image,
                generate_mind_map=flags.generate_mind_map,
            ),
            None,
        )

        # 8. Tutor reply
        system_prompt = prompts.tutor_system_prompt(
            subject,
            add_emojis=flags.add_emojis,
            interests=[i.interest for i in interests],
        )
        assistant_text = await self._attempt(
            "tutor",
            conversation_id,
            self.capabilities.tutor.respond(system_prompt, content),
            FALLBACK_RESPONSE,
        )
        if not assistant_text or not assistant_text.strip():
            assistant_text = FALLBACK_RESPONSE

        # 9-10. Visuals follow the reply length; the caller's visual flags only feed progress
        should_generate_visuals = len(assistant_text) > VISUALS_MIN_RESPONSE_CHARS
        image_url: str | None = None
        mind_map: MindMap | None = None
        if should_generate_visuals:
            image_url, mind_map = await self._generate_visuals(conversation_id, content)

        # 11. Assistant message
        assistant_message = await self.repository.create_message(
            conversation_id,
            MessageRole.ASSISTANT,
            assistant_text,
            image_url=image_url,
            mind_map_data=mind_map.model_dump(by_alias=True) if mind_map else None,
        )

        # 12. Progress keyed by the raw message prefix
        await self._best_effort(
            "exchange-progress",
            conversation_id,
            self.progress.record_exchange_progress(
                user_id, content, visuals_generated=should_generate_visuals
            ),
            None,
        )

        # 13. Touch updated_at
        await self.repository.update_conversation(conversation_id)

        logger.info(
            "Processed message for conversation %s (subject=%r, image=%s, mindmap=%s)",
            conversation_id, subject, image_url is not None, mind_map is not None,
        )
        return PipelineResult(
            user_message=user_message,
            assistant_message=assistant_message,
            subject=subject,
            icon=icon,
        )

    async def _classify(self, conversation_id: UUID, content: str) -> tuple[str, str]:
        classification = await self._attempt(
            "classify", conversation_id, self.capabilities.classifier.classify(content), None
        )
        if classification is None or classification.confidence <= CONFIDENCE_THRESHOLD:
            return GENERAL_SUBJECT, GENERAL_ICON
        return classification.subject, classification.icon

    async def _rename_conversation(
        self, conversation_id: UUID, content: str, subject: str, icon: str
    ) -> None:
        generated = await self._attempt(
            "title", conversation_id, self.capabilities.titles.title_for(content), None
        )
        title = f"{icon} {generated}" if generated else f"{icon} {subject}"
        await self._best_effort(
            "title-persist",
            conversation_id,
            self.repository.update_conversation(conversation_id, title=title),
            None,
        )

    async def _generate_visuals(
        self, conversation_id: UUID, content: str
    ) -> tuple[str | None, MindMap | None]:
        """Issue the image and mind-map calls concurrently; each may fail alone."""
        visuals = self.capabilities.visuals
        return await asyncio.gather(
            self._attempt(
                "image", conversation_id, visuals.image(prompts.chat_image_prompt(content)), None
            ),
            self._attempt(
                "mindmap", conversation_id, visuals.mindmap(prompts.mindmap_prompt(content)), None
            ),
        )
