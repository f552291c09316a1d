"""Image synthesis and speech backed by the OpenAI API."""

import logging

from openai import AsyncOpenAI, OpenAIError

from learning_lab.config import Settings
from learning_lab.errors import CapabilityError

logger = logging.getLogger(__name__)


class OpenAIMediaService:
    """Generates images (DALL-E) and MP3 speech (TTS)."""

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None):
        self.settings = settings
        if client is not None:
            self.client = client
        elif settings.openai_api_key:
            self.client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.capability_timeout_seconds,
                max_retries=0,
            )
        else:
            logger.warning("OPENAI_API_KEY not set; image and speech generation are disabled")
            self.client = None

    def _require_client(self) -> AsyncOpenAI:
        if self.client is None:
            raise CapabilityError("Media generation is not configured")
        return self.client

    async def image(self, prompt: str) -> str:
        client = self._require_client()
        try:
            response = await client.images.generate(
                model=self.settings.image_model,
                prompt=prompt,
                n=1,
                size=self.settings.image_size,
                quality=self.settings.image_quality,
            )
        except OpenAIError as e:
            raise CapabilityError("Image generation request failed") from e

        url = response.data[0].url if response.data else None
        if not url:
            raise CapabilityError("Image generation returned no URL")
        return url

    async def speak(self, text: str) -> bytes:
        client = self._require_client()
        try:
            response = await client.audio.speech.create(
                model=self.settings.tts_model,
                voice=self.settings.tts_voice,
                input=text,
                speed=1.0,
                response_format="mp3",
            )
        except OpenAIError as e:
            raise CapabilityError("Speech generation request failed") from e
        return response.content
