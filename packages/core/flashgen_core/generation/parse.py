"""Defensive parsing of gateway responses into candidate flashcards."""

import json
import re
from typing import Any

from pydantic import ValidationError as SchemaValidationError

from flashgen_core.errors import ParseError
from flashgen_core.schemas.cards import CandidateFlashcard, FlashcardBatch
from flashgen_core.utils.logging import get_logger

logger = get_logger(__name__)

# Outermost {...} block that mentions the flashcards key
_FLASHCARDS_OBJECT = re.compile(r"\{[\s\S]*\"flashcards\"[\s\S]*\}")


def extract_content(response: dict[str, Any]) -> str:
    """Return the first choice's message content.

    Raises:
        ParseError: If the response carries no content
    """
    choices = response.get("choices") or []
    content: Any = None
    if choices and isinstance(choices[0], dict):
        message = choices[0].get("message") or {}
        if isinstance(message, dict):
            content = message.get("content")

    if not isinstance(content, str) or not content.strip():
        raise ParseError("No content in API response")
    return content


def _load_payload(content: str) -> Any:
    """Decode JSON content, falling back to scanning for an embedded object."""
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        logger.warning("Response is not strict JSON, scanning for flashcards object")

    match = _FLASHCARDS_OBJECT.search(content)
    if not match:
        raise ParseError("No valid JSON found in response", content)
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ParseError("Failed to parse JSON from response", content) from e


def parse_flashcards(content: str, max_cards: int) -> list[CandidateFlashcard]:
    """Parse model output into validated candidates.

    Malformed entries are dropped rather than failing the batch. At most
    ``max_cards`` candidates are returned.

    Args:
        content: Raw message content from the model
        max_cards: Ceiling on the number of returned candidates

    Returns:
        Non-empty list of candidates

    Raises:
        ParseError: If the content is not usable or holds no valid entry
    """
    payload = _load_payload(content)

    try:
        batch = FlashcardBatch.model_validate(payload)
    except SchemaValidationError as e:
        raise ParseError("Response does not contain flashcards array", content) from e

    candidates: list[CandidateFlashcard] = []
    for index, item in enumerate(batch.flashcards):
        try:
            candidates.append(CandidateFlashcard.model_validate(item))
        except SchemaValidationError as e:
            logger.debug(f"Dropping invalid flashcard at index {index}: {e}")

    if not candidates:
        raise ParseError("No valid flashcards found in response", content)

    dropped = len(batch.flashcards) - len(candidates)
    if dropped:
        logger.info(f"Dropped {dropped} invalid flashcards from response")
    if len(candidates) > max_cards:
        logger.info(f"Model returned {len(candidates)} cards, keeping {max_cards}")
        candidates = candidates[:max_cards]

    return candidates


def parse_completion(
    response: dict[str, Any], max_cards: int
) -> list[CandidateFlashcard]:
    """Extract and parse the flashcards from a chat-completion response."""
    return parse_flashcards(extract_content(response), max_cards)
