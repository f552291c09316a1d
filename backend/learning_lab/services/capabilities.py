"""
Generative capability contracts.

The pipeline and the API only depend on these protocols. Concrete adapters
(Anthropic for text, OpenAI for images and speech) are assembled by
build_capabilities() and injected, so tests can swap in plain fakes.

Every method may raise; callers treat any exception as a CapabilityError and
substitute their own fallback.
"""

from dataclasses import dataclass
from typing import Protocol

from learning_lab.schemas.generation import MindMap, SubjectClassification


class Classifier(Protocol):
    async def classify(self, text: str) -> SubjectClassification: ...


class TitleGenerator(Protocol):
    async def title_for(self, text: str) -> str:
        """Short (at most five words) label for a conversation opening with text."""
        ...


class TutorResponder(Protocol):
    async def respond(self, system_prompt: str, user_text: str, *, max_tokens: int | None = None) -> str: ...


class VisualGenerator(Protocol):
    """Two independent calls that fail independently."""

    async def image(self, prompt: str) -> str:
        """Return the URL of a generated image."""
        ...

    async def mindmap(self, prompt: str) -> MindMap: ...


class SpeechSynthesizer(Protocol):
    async def speak(self, text: str) -> bytes:
        """Return MP3 audio for text."""
        ...


@dataclass
class Capabilities:
    """Bundle of capability adapters handed to the pipeline and routes."""

    classifier: Classifier
    titles: TitleGenerator
    tutor: TutorResponder
    visuals: VisualGenerator
    speech: SpeechSynthesizer
