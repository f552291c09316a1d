"""Pydantic schemas for API request/response validation."""

from learning_lab.schemas.conversations import (
    DEFAULT_CONVERSATION_TITLE,
    ConversationCreateRequest,
    ConversationResponse,
    ConversationTitleRequest,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
    SuccessResponse,
)
from learning_lab.schemas.generation import (
    AssessmentQuestion,
    ImageRequest,
    ImageResponse,
    KnowledgeAssessment,
    KnowledgeTestRequest,
    KnowledgeTestResponse,
    LearningGoal,
    MindMap,
    MindMapBranch,
    MindMapRequest,
    SpeechRequest,
    SubjectClassification,
)
from learning_lab.schemas.learning import (
    InterestCreate,
    InterestRead,
    LearningProgressRead,
    ProgressResponse,
    UserStats,
)

__all__ = [
    # Conversations
    "DEFAULT_CONVERSATION_TITLE",
    "ConversationCreateRequest",
    "ConversationResponse",
    "ConversationTitleRequest",
    "MessageResponse",
    "SendMessageRequest",
    "SendMessageResponse",
    "SuccessResponse",
    # Generation
    "AssessmentQuestion",
    "ImageRequest",
    "ImageResponse",
    "KnowledgeAssessment",
    "KnowledgeTestRequest",
    "KnowledgeTestResponse",
    "LearningGoal",
    "MindMap",
    "MindMapBranch",
    "MindMapRequest",
    "SpeechRequest",
    "SubjectClassification",
    # Learning
    "InterestCreate",
    "InterestRead",
    "LearningProgressRead",
    "ProgressResponse",
    "UserStats",
]
