"""Services: capability adapters, progress bookkeeping and the message pipeline."""

from learning_lab.config import Settings
from learning_lab.services.anthropic_text import AnthropicTextService
from learning_lab.services.capabilities import Capabilities
from learning_lab.services.knowledge_test import KnowledgeTestService
from learning_lab.services.openai_media import OpenAIMediaService
from learning_lab.services.pipeline import MessageFlags, MessagePipeline, PipelineResult
from learning_lab.services.progress import ProgressTracker
from learning_lab.services.visuals import VisualService


def build_capabilities(settings: Settings) -> Capabilities:
    """Wire the provider-backed adapters. Missing API keys yield adapters that always fail."""
    text = AnthropicTextService(settings)
    media = OpenAIMediaService(settings)
    return Capabilities(
        classifier=text,
        titles=text,
        tutor=text,
        visuals=VisualService(images=media, mindmaps=text),
        speech=media,
    )


__all__ = [
    "AnthropicTextService",
    "Capabilities",
    "KnowledgeTestService",
    "MessageFlags",
    "MessagePipeline",
    "OpenAIMediaService",
    "PipelineResult",
    "ProgressTracker",
    "VisualService",
    "build_capabilities",
]
