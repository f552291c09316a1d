"""Text capabilities backed by the Anthropic Messages API."""

import json
import logging
from typing import TypeVar

from anthropic import AsyncAnthropic, APIError
from pydantic import BaseModel, ValidationError as PydanticValidationError

from learning_lab.config import Settings
from learning_lab.errors import CapabilityError
from learning_lab.schemas.generation import MindMap, SubjectClassification
from learning_lab.services import prompts

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_TITLE_MAX_WORDS = 5
_TITLE_STRIP_CHARS = "\"'`“”‘’.,;:!?*#- \n\t"


def extract_json_object(text: str) -> str:
    """
    Return the outermost {...} span of a model reply.

    Models sometimes wrap JSON in prose or ``` fences; anything outside the
    first "{" and the last "}" is discarded.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise CapabilityError("Model reply did not contain a JSON object")
    return text[start : end + 1]


def parse_structured(text: str, model: type[ModelT]) -> ModelT:
    """Validate a model reply against a schema. Any failure is a CapabilityError."""
    try:
        return model.model_validate_json(extract_json_object(text))
    except (PydanticValidationError, json.JSONDecodeError) as e:
        raise CapabilityError(f"Malformed {model.__name__} response") from e


def normalize_title(raw: str) -> str:
    """Strip quotes/markdown/punctuation and cap at five words."""
    first_line = next((line for line in raw.splitlines() if line.strip()), "")
    words = first_line.strip(_TITLE_STRIP_CHARS).split()
    title = " ".join(words[:_TITLE_MAX_WORDS]).strip(_TITLE_STRIP_CHARS)
    if not title:
        raise CapabilityError("Empty title")
    return title


class AnthropicTextService:
    """
    Classifier, title generator, tutor responder and structured-JSON generator.

    Calls are made once (max_retries=0) with the configured request timeout;
    the pipeline decides what to do when they fail.
    """

    def __init__(self, settings: Settings, client: AsyncAnthropic | None = None):
        self.settings = settings
        if client is not None:
            self.client = client
        elif settings.anthropic_api_key:
            self.client = AsyncAnthropic(
                api_key=settings.anthropic_api_key,
                timeout=settings.capability_timeout_seconds,
                max_retries=0,
            )
        else:
            logger.warning("ANTHROPIC_API_KEY not set; text capabilities will use fallbacks")
            self.client = None

    async def _complete(self, *, user_text: str, max_tokens: int, system: str | None = None) -> str:
        if self.client is None:
            raise CapabilityError("Text generation is not configured")

        kwargs = {"system": system} if system else {}
        try:
            message = await self.client.messages.create(
                model=self.settings.llm_model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": user_text}],
                **kwargs,
            )
        except APIError as e:
            raise CapabilityError("Text generation request failed") from e

        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise CapabilityError("Text generation returned an empty reply")
        return text

    async def classify(self, text: str) -> SubjectClassification:
        reply = await self._complete(
            user_text=prompts.classification_prompt(text),
            max_tokens=self.settings.classifier_max_tokens,
        )
        return parse_structured(reply, SubjectClassification)

    async def title_for(self, text: str) -> str:
        reply = await self._complete(
            user_text=prompts.title_prompt(text),
            max_tokens=self.settings.title_max_tokens,
        )
        return normalize_title(reply)

    async def respond(self, system_prompt: str, user_text: str, *, max_tokens: int | None = None) -> str:
        return await self._complete(
            system=system_prompt,
            user_text=user_text,
            max_tokens=max_tokens or self.settings.tutor_max_tokens,
        )

    async def mindmap(self, prompt: str) -> MindMap:
        reply = await self._complete(
            user_text=prompt,
            max_tokens=self.settings.mindmap_max_tokens,
        )
        return parse_structured(reply, MindMap)

