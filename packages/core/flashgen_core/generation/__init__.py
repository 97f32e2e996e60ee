"""Flashcard generation: sanitize, prompt, call, parse."""

from flashgen_core.generation.client import (
    MAX_CARDS,
    MAX_TEXT_LENGTH,
    MIN_CARDS,
    MIN_TEXT_LENGTH,
    GenerationClient,
    validate_generation_input,
)
from flashgen_core.generation.parse import parse_completion, parse_flashcards
from flashgen_core.generation.sanitize import sanitize_text

__all__ = [
    "MAX_CARDS",
    "MAX_TEXT_LENGTH",
    "MIN_CARDS",
    "MIN_TEXT_LENGTH",
    "GenerationClient",
    "parse_completion",
    "parse_flashcards",
    "sanitize_text",
    "validate_generation_input",
]
