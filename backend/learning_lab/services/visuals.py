"""Visual generator combining an image backend with a mind-map backend."""

from typing import Protocol

from learning_lab.schemas.generation import MindMap


class _ImageBackend(Protocol):
    async def image(self, prompt: str) -> str: ...


class _MindMapBackend(Protocol):
    async def mindmap(self, prompt: str) -> MindMap: ...


class VisualService:
    """Routes image prompts and mind-map prompts to separate providers."""

    def __init__(self, images: _ImageBackend, mindmaps: _MindMapBackend):
        self.images = images
        self.mindmaps = mindmaps

    async def image(self, prompt: str) -> str:
        return await self.images.image(prompt)

    async def mindmap(self, prompt: str) -> MindMap:
        return await self.mindmaps.mindmap(prompt)
