"""Pydantic schemas for interests and learning progress."""

from datetime import datetime

from pydantic import Field

from learning_lab.schemas.base import BaseSchema, CreatedAtMixin, IDMixin


class InterestCreate(BaseSchema):
    """Schema for creating an interest. The owner comes from the path."""

    interest: str = Field(..., min_length=1, max_length=255)
    progress: int = Field(0, ge=0, le=100)


class InterestRead(BaseSchema, IDMixin, CreatedAtMixin):
    """Schema for reading an interest."""

    user_id: str
    interest: str
    progress: int


class LearningProgressRead(BaseSchema, IDMixin):
    """Schema for reading a per-topic progress row."""

    user_id: str
    topic: str
    progress_percentage: int
    visuals_generated: int
    last_activity: datetime


class UserStats(BaseSchema):
    """Dashboard statistics derived from a user's progress rows."""

    overall_progress: int = 0
    learning_streak: int = 0
    visuals_generated: int = 0
    topics_explored: int = 0


class ProgressResponse(BaseSchema):
    """Progress rows together with their derived statistics."""

    progress: list[LearningProgressRead]
    stats: UserStats
