"""flashgen-core: Resilient AI flashcard generation client.

This package turns untrusted source text into validated flashcard
candidates by calling a chat-completion gateway (OpenRouter by default).
It knows nothing about users, decks, or quotas.

    >>> from flashgen_core import GenerationClient
    >>> client = GenerationClient(api_key)
    >>> cards = await client.generate(text, max_cards=10)

Failures surface as the typed errors in ``flashgen_core.errors``.
"""

from flashgen_core.errors import (
    ConfigurationError,
    GatewayError,
    GenerationClientError,
    ParseError,
    ValidationError,
)
from flashgen_core.generation import GenerationClient, sanitize_text
from flashgen_core.schemas.cards import CandidateFlashcard

__version__ = "0.1.0"

__all__ = [
    # Client
    "GenerationClient",
    "sanitize_text",
    # Schemas
    "CandidateFlashcard",
    # Errors
    "ConfigurationError",
    "GatewayError",
    "GenerationClientError",
    "ParseError",
    "ValidationError",
]
