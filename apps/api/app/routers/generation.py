"""AI flashcard generation endpoints."""

from fastapi import APIRouter, Depends, status

from app.deps import get_current_user_id, get_generation_service
from app.schemas.api import (
    AIGenerateRequest,
    AIGenerateResponse,
    AIUsageResponse,
    ErrorResponse,
)
from app.services.generation import GenerationService

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post(
    "/ai/generate",
    response_model=AIGenerateResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def generate_flashcards(
    data: AIGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    service: GenerationService = Depends(get_generation_service),
) -> AIGenerateResponse:
    """Generate draft flashcards from text and save them into a deck."""
    result = await service.generate_and_save(
        user_id=user_id,
        deck_id=data.deck_id,
        text=data.text,
        max_cards=data.max_cards,
    )
    return AIGenerateResponse.from_result(result)


@router.get(
    "/ai/usage",
    response_model=AIUsageResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_usage(
    user_id: str = Depends(get_current_user_id),
    service: GenerationService = Depends(get_generation_service),
) -> AIUsageResponse:
    """Return today's card usage and the remaining daily allowance."""
    snapshot = await service.get_usage(user_id)
    return AIUsageResponse.from_snapshot(snapshot)
