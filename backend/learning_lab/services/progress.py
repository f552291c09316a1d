"""Interest and learning-progress bookkeeping plus derived dashboard stats."""

import logging
import math
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from learning_lab.db.models import LearningProgress, UserInterest
from learning_lab.repositories.base import Repository
from learning_lab.schemas.learning import UserStats

logger = logging.getLogger(__name__)

GENERAL_SUBJECT = "General Learning"
NEW_INTEREST_PROGRESS = 10
PROGRESS_PER_MESSAGE = 5
EXCHANGE_PROGRESS = 10
TOPIC_PREFIX_CHARS = 100
STREAK_WINDOW_DAYS = 7


def has_matching_interest(interests: Sequence[UserInterest], subject: str) -> bool:
    """True if any interest label case-insensitively contains subject."""
    needle = subject.lower()
    return any(needle in interest.interest.lower() for interest in interests)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ProgressTracker:
    """Derives and persists interests and per-topic progress for a user."""

    def __init__(self, repository: Repository):
        self.repository = repository

    async def ensure_interest(
        self, user_id: str, subject: str, interests: Sequence[UserInterest]
    ) -> UserInterest | None:
        """
        Create an interest for a newly detected subject.

        Nothing is created for the general fallback subject or when an existing
        label already contains the subject (case-insensitive).
        """
        if subject == GENERAL_SUBJECT or has_matching_interest(interests, subject):
            return None
        interest = await self.repository.create_interest(
            user_id, subject, progress=NEW_INTEREST_PROGRESS
        )
        logger.info("Created interest %r for user %s", subject, user_id)
        return interest

    async def record_subject_progress(
        self,
        user_id: str,
        subject: str,
        prior_message_count: int,
        *,
        generate_image: bool,
        generate_mind_map: bool,
    ) -> LearningProgress:
        """Progress grows 5 points per message already in the conversation, capped at 100."""
        progress = min(100, (prior_message_count + 1) * PROGRESS_PER_MESSAGE)
        visuals = int(generate_image) + int(generate_mind_map)
        return await self.repository.upsert_learning_progress(user_id, subject, progress, visuals)

    async def record_exchange_progress(
        self, user_id: str, content: str, *, visuals_generated: bool
    ) -> LearningProgress:
        """Progress row keyed by the first 100 characters of the user's message."""
        return await self.repository.upsert_learning_progress(
            user_id,
            content[:TOPIC_PREFIX_CHARS],
            EXCHANGE_PROGRESS,
            2 if visuals_generated else 0,
        )

    async def get_user_stats(self, user_id: str, *, now: datetime | None = None) -> UserStats:
        """
        Aggregate a user's progress rows.

        learning_streak is a placeholder rather than a consecutive-day count:
        it is 7 when any row saw activity in the last 7 days, else 0.
        """
        rows = await self.repository.list_progress(user_id)
        if not rows:
            return UserStats()

        now = now or datetime.now(timezone.utc)
        window_start = now - timedelta(days=STREAK_WINDOW_DAYS)
        recently_active = any(_as_utc(row.last_activity) >= window_start for row in rows)

        return UserStats(
            overall_progress=math.floor(sum(row.progress_percentage for row in rows) / len(rows) + 0.5),
            learning_streak=STREAK_WINDOW_DAYS if recently_active else 0,
            visuals_generated=sum(row.visuals_generated for row in rows),
            topics_explored=len(rows),
        )
