"""
FastAPI dependencies.

Key patterns:
1. get_repository: one repository per request (SQL session or the shared in-memory store)
2. get_capabilities: provider adapters built once at startup and kept on app.state
3. Services (pipeline, progress tracker, knowledge test) are assembled per request
   from those two, so tests override only the first two.

Authentication is not implemented: user ids arrive in the path/body. A
get_current_user dependency would slot in here and be checked against the
repository's user_id columns.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request

from learning_lab.config import Settings, get_settings
from learning_lab.repositories import Repository, SqlRepository
from learning_lab.services import (
    Capabilities,
    KnowledgeTestService,
    MessagePipeline,
    ProgressTracker,
)


async def get_repository(request: Request) -> AsyncGenerator[Repository, None]:
    """Yield the repository for this request."""
    memory_repository = getattr(request.app.state, "memory_repository", None)
    if memory_repository is not None:
        yield memory_repository
        return

    from learning_lab.db.session import AsyncSessionLocal

    async with AsyncSessionLocal() as session:
        yield SqlRepository(session)


def get_capabilities(request: Request) -> Capabilities:
    """Capability adapters created during application startup."""
    return request.app.state.capabilities


RepositoryDep = Annotated[Repository, Depends(get_repository)]
CapabilitiesDep = Annotated[Capabilities, Depends(get_capabilities)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_pipeline(
    repository: RepositoryDep,
    capabilities: CapabilitiesDep,
    settings: SettingsDep,
) -> MessagePipeline:
    return MessagePipeline(
        repository,
        capabilities,
        capability_timeout=settings.capability_timeout_seconds,
    )


def get_progress_tracker(repository: RepositoryDep) -> ProgressTracker:
    return ProgressTracker(repository)


def get_knowledge_test_service(
    repository: RepositoryDep,
    capabilities: CapabilitiesDep,
    settings: SettingsDep,
) -> KnowledgeTestService:
    return KnowledgeTestService(
        repository,
        capabilities.tutor,
        max_tokens=settings.knowledge_test_max_tokens,
        capability_timeout=settings.capability_timeout_seconds,
    )


PipelineDep = Annotated[MessagePipeline, Depends(get_pipeline)]
ProgressTrackerDep = Annotated[ProgressTracker, Depends(get_progress_tracker)]
KnowledgeTestDep = Annotated[KnowledgeTestService, Depends(get_knowledge_test_service)]
