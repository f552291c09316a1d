"""Interest CRUD and learning progress routes."""

from uuid import UUID

from fastapi import APIRouter, status

from learning_lab.api.deps import ProgressTrackerDep, RepositoryDep
from learning_lab.errors import NotFoundError
from learning_lab.schemas.conversations import SuccessResponse
from learning_lab.schemas.learning import (
    InterestCreate,
    InterestRead,
    LearningProgressRead,
    ProgressResponse,
)

router = APIRouter(prefix="/users/{user_id}", tags=["learning"])


@router.get("/interests", response_model=list[InterestRead])
async def list_interests(user_id: str, repository: RepositoryDep) -> list[InterestRead]:
    """List a user's interests."""
    interests = await repository.list_interests(user_id)
    return [InterestRead.model_validate(i) for i in interests]


@router.post("/interests", response_model=InterestRead, status_code=status.HTTP_201_CREATED)
async def create_interest(
    user_id: str,
    data: InterestCreate,
    repository: RepositoryDep,
) -> InterestRead:
    """Add an interest for a user."""
    interest = await repository.create_interest(user_id, data.interest, progress=data.progress)
    return InterestRead.model_validate(interest)


@router.delete("/interests/{interest_id}", response_model=SuccessResponse)
async def delete_interest(
    user_id: str,
    interest_id: UUID,
    repository: RepositoryDep,
) -> SuccessResponse:
    """Delete one of a user's interests."""
    if not await repository.delete_interest(user_id, interest_id):
        raise NotFoundError("Interest not found")
    return SuccessResponse()


@router.get("/progress", response_model=ProgressResponse)
async def get_progress(
    user_id: str,
    repository: RepositoryDep,
    tracker: ProgressTrackerDep,
) -> ProgressResponse:
    """Per-topic progress rows with dashboard statistics."""
    rows = await repository.list_progress(user_id)
    stats = await tracker.get_user_stats(user_id)
    return ProgressResponse(
        progress=[LearningProgressRead.model_validate(row) for row in rows],
        stats=stats,
    )
