"""Pydantic schemas for API request and response models."""

from datetime import datetime
from typing import Annotated, Any

from flashgen_core.generation import (
    MAX_CARDS,
    MAX_TEXT_LENGTH,
    MIN_CARDS,
    MIN_TEXT_LENGTH,
)
from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from app.schemas.generation import (
    FlashcardSource,
    FlashcardStatus,
    GenerationResult,
    UsageSnapshot,
)

DEFAULT_MAX_CARDS = 10


class AIGenerateRequest(BaseModel):
    """Payload for generating flashcards from source text."""

    text: Annotated[
        str,
        StringConstraints(
            strip_whitespace=True,
            min_length=MIN_TEXT_LENGTH,
            max_length=MAX_TEXT_LENGTH,
        ),
    ]
    deck_id: int = Field(..., gt=0, description="Target deck")
    max_cards: int = Field(DEFAULT_MAX_CARDS, ge=MIN_CARDS, le=MAX_CARDS)


class AIGeneratedFlashcard(BaseModel):
    """A generated draft as returned to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    front: str
    back: str
    status: FlashcardStatus
    source: FlashcardSource


class AIGenerateResponse(BaseModel):
    """Response returned after generating and saving drafts."""

    generation_id: int
    deck_id: int
    flashcards: list[AIGeneratedFlashcard]
    cards_generated: int

    @classmethod
    def from_result(cls, result: GenerationResult) -> "AIGenerateResponse":
        return cls(
            generation_id=result.log_id,
            deck_id=result.deck_id,
            flashcards=[
                AIGeneratedFlashcard.model_validate(draft) for draft in result.drafts
            ],
            cards_generated=result.cards_generated,
        )


class AIUsageResponse(BaseModel):
    """Current AI usage and limits for the authenticated user."""

    daily_limit: int
    used_today: int
    remaining: int
    reset_at: datetime

    @classmethod
    def from_snapshot(cls, snapshot: UsageSnapshot) -> "AIUsageResponse":
        return cls(
            daily_limit=snapshot.daily_limit,
            used_today=snapshot.used_today,
            remaining=snapshot.remaining,
            reset_at=snapshot.reset_at,
        )


class ErrorBody(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    field: str | None = None
    details: Any | None = None


class ErrorResponse(BaseModel):
    """Error envelope shared by every endpoint."""

    success: bool = False
    error: ErrorBody
