"""Direct pass-through routes to the generative capabilities."""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Response, status

from learning_lab.api.deps import CapabilitiesDep, KnowledgeTestDep, SettingsDep
from learning_lab.schemas.generation import (
    ImageRequest,
    ImageResponse,
    KnowledgeTestRequest,
    KnowledgeTestResponse,
    MindMap,
    MindMapRequest,
    SpeechRequest,
)
from learning_lab.services import prompts

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generation"])


@router.post("/text-to-speech")
async def text_to_speech(
    request: SpeechRequest,
    capabilities: CapabilitiesDep,
    settings: SettingsDep,
) -> Response:
    """Synthesize MP3 audio for the given text. 503 when speech is unavailable."""
    try:
        audio = await asyncio.wait_for(
            capabilities.speech.speak(request.text),
            timeout=settings.capability_timeout_seconds,
        )
    except Exception as e:
        logger.warning("Text-to-speech failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Speech generation is currently unavailable.",
        ) from e
    return Response(content=audio, media_type="audio/mpeg")


@router.post("/generate-image", response_model=ImageResponse)
async def generate_image(
    request: ImageRequest,
    capabilities: CapabilitiesDep,
    settings: SettingsDep,
) -> ImageResponse:
    """Generate an educational diagram; url is null when generation fails."""
    try:
        url = await asyncio.wait_for(
            capabilities.visuals.image(prompts.diagram_image_prompt(request.prompt)),
            timeout=settings.capability_timeout_seconds,
        )
    except Exception as e:
        logger.warning("Image generation failed: %s", e)
        url = None
    return ImageResponse(url=url)


@router.post("/generate-mindmap", response_model=MindMap)
async def generate_mindmap(
    request: MindMapRequest,
    capabilities: CapabilitiesDep,
    settings: SettingsDep,
) -> MindMap:
    """Generate a mind map; falls back to the bare topic with no branches."""
    try:
        return await asyncio.wait_for(
            capabilities.visuals.mindmap(prompts.mindmap_prompt(request.topic)),
            timeout=settings.capability_timeout_seconds,
        )
    except Exception as e:
        logger.warning("Mind map generation failed: %s", e)
        return MindMap(central_topic=request.topic, branches=[])


@router.post("/generate-knowledge-test", response_model=KnowledgeTestResponse)
async def generate_knowledge_test(
    request: KnowledgeTestRequest,
    service: KnowledgeTestDep,
) -> KnowledgeTestResponse:
    """Assessment report derived from the user's conversation titles and interests."""
    assessment = await service.generate(request.user_id)
    return KnowledgeTestResponse(assessment=assessment)
