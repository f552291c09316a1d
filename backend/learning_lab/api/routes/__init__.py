"""API routes package."""

from learning_lab.api.routes import conversations, generation, learning

__all__ = [
    "conversations",
    "generation",
    "learning",
]
