"""Data schemas for flashcard generation."""

from flashgen_core.schemas.cards import (
    BACK_MAX_LENGTH,
    FRONT_MAX_LENGTH,
    CandidateFlashcard,
    FlashcardBatch,
    flashcard_response_schema,
)

__all__ = [
    "BACK_MAX_LENGTH",
    "FRONT_MAX_LENGTH",
    "CandidateFlashcard",
    "FlashcardBatch",
    "flashcard_response_schema",
]
