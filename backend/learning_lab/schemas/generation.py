"""Pydantic schemas for generated content and the standalone generation endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from learning_lab.schemas.base import BaseSchema


# Capability outputs
class SubjectClassification(BaseSchema):
    """Structured classifier response. Every field is required."""

    subject: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(..., min_length=1, max_length=16)
    confidence: float = Field(..., ge=0.0, le=1.0)


class MindMapBranch(BaseSchema):
    """One branch of a mind map."""

    label: str = Field(..., min_length=1)
    children: list[str] = Field(default_factory=list)


class MindMap(BaseSchema):
    """Central topic with ordered branches, each holding ordered child strings."""

    central_topic: str = Field(..., min_length=1)
    branches: list[MindMapBranch] = Field(default_factory=list)


class LearningGoal(BaseSchema):
    """A recommended learning goal."""

    goal: str
    difficulty: Literal["easy", "medium", "hard"] = "medium"
    estimated_time: str = ""


class AssessmentQuestion(BaseSchema):
    """Multiple-choice question; correct_answer indexes into options."""

    question: str
    options: list[str] = Field(..., min_length=2)
    correct_answer: int = Field(..., ge=0)
    topic: str = ""


class KnowledgeAssessment(BaseSchema):
    """Best-effort assessment report for a user."""

    current_level: Literal["beginner", "intermediate", "advanced"]
    strength_areas: list[str] = Field(default_factory=list)
    improvement_areas: list[str] = Field(default_factory=list)
    learning_goals: list[LearningGoal] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    assessment_questions: list[AssessmentQuestion] = Field(default_factory=list)


# Request schemas
class ImageRequest(BaseModel):
    """Request to generate an educational image."""

    prompt: str = Field(..., min_length=1, max_length=4000)


class MindMapRequest(BaseModel):
    """Request to generate a mind map."""

    topic: str = Field(..., min_length=1, max_length=1000)


class SpeechRequest(BaseModel):
    """Request to synthesize speech."""

    text: str = Field(..., min_length=1, max_length=4096)


class KnowledgeTestRequest(BaseSchema):
    """Request to generate a knowledge test for a user."""

    user_id: str = Field(..., min_length=1, max_length=255)


# Response schemas
class ImageResponse(BaseSchema):
    """Generated image URL, null when generation failed."""

    url: str | None = None


class KnowledgeTestResponse(BaseSchema):
    """Wrapper matching the client's expected {"assessment": ...} shape."""

    assessment: KnowledgeAssessment
