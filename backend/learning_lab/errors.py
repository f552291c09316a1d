"""
Error taxonomy shared by the repository, capability and API layers.

Each error carries the HTTP status it maps to and a message that is safe to
show to a client. Only ValidationError, NotFoundError and PersistenceError ever
reach the HTTP layer from the chat pipeline; CapabilityError is always turned
into a fallback value by whoever made the call.
"""

from fastapi import status


class LearningLabError(Exception):
    """Base class for application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "An internal error occurred."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(LearningLabError):
    """Malformed or missing request fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid request data"


class NotFoundError(LearningLabError):
    """Unknown conversation or interest id."""

    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Resource not found"


class PersistenceError(LearningLabError):
    """A repository call failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "A storage error occurred."


class CapabilityError(LearningLabError):
    """A generative text/image/speech call failed, timed out or returned garbage."""

    status_code = status.HTTP_502_BAD_GATEWAY
    public_message = "The AI service is currently unavailable."
