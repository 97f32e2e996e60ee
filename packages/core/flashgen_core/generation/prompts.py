"""Prompt and request builders for flashcard generation."""

from typing import Any

from flashgen_core.schemas.cards import flashcard_response_schema

RESPONSE_SCHEMA_NAME = "flashcard_generation"

SYSTEM_PROMPT = """You are an expert at creating high-quality flashcards for learning and memorization.

Your task is to analyze the provided text and generate flashcards that:
- Focus on the most important concepts, facts, and relationships
- Cover one concept per card
- Have clear, concise questions on the front
- Provide complete, accurate answers on the back
- Avoid ambiguity or trick questions
- Use active recall principles

You must respond ONLY with valid JSON matching the provided schema.
Do not include any explanations, comments, or text outside the JSON structure."""

USER_PROMPT = """Generate up to {max_cards} flashcards from the following text. Focus on the most important concepts and information.

Text:
{text}"""


def build_user_prompt(text: str, max_cards: int) -> str:
    """Build the user prompt embedding the sanitized text and card ceiling."""
    return USER_PROMPT.format(max_cards=max_cards, text=text)


def build_messages(text: str, max_cards: int) -> list[dict[str, str]]:
    """Build the chat messages for a generation request.

    Args:
        text: Sanitized source text
        max_cards: Maximum number of cards to request

    Returns:
        System and user messages
    """
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(text, max_cards)},
    ]


def build_response_format(max_cards: int) -> dict[str, Any]:
    """Build the structured-output ``response_format`` block."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": RESPONSE_SCHEMA_NAME,
            "strict": True,
            "schema": flashcard_response_schema(max_cards),
        },
    }
