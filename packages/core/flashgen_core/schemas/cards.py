"""Flashcard schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

FRONT_MAX_LENGTH = 200
BACK_MAX_LENGTH = 500


class CandidateFlashcard(BaseModel):
    """An unpersisted front/back pair produced by the model."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    front: str = Field(
        ...,
        min_length=1,
        max_length=FRONT_MAX_LENGTH,
        description="Question/prompt side",
    )
    back: str = Field(
        ...,
        min_length=1,
        max_length=BACK_MAX_LENGTH,
        description="Answer side",
    )

    @field_validator("front", "back")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class FlashcardBatch(BaseModel):
    """Envelope the model is asked to return.

    Elements stay untyped here so that one malformed entry does not reject
    the whole batch; each is validated into ``CandidateFlashcard`` later.
    """

    model_config = ConfigDict(extra="ignore")

    flashcards: list[Any] = Field(..., description="Generated flashcards")


def flashcard_response_schema(max_cards: int) -> dict[str, Any]:
    """Build the JSON schema sent with the structured-output request.

    Args:
        max_cards: Upper bound for the number of flashcards

    Returns:
        JSON schema dictionary
    """
    return {
        "type": "object",
        "properties": {
            "flashcards": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "front": {
                            "type": "string",
                            "description": "The question or prompt for the flashcard",
                            "minLength": 1,
                            "maxLength": FRONT_MAX_LENGTH,
                        },
                        "back": {
                            "type": "string",
                            "description": "The answer or explanation for the flashcard",
                            "minLength": 1,
                            "maxLength": BACK_MAX_LENGTH,
                        },
                    },
                    "required": ["front", "back"],
                    "additionalProperties": False,
                },
                "minItems": 1,
                "maxItems": max_cards,
            },
        },
        "required": ["flashcards"],
        "additionalProperties": False,
    }
