"""Resilient client that turns source text into candidate flashcards."""

import asyncio
from typing import Any

from flashgen_core.errors import (
    ConfigurationError,
    GatewayError,
    GenerationClientError,
    ValidationError,
)
from flashgen_core.generation.parse import parse_completion
from flashgen_core.generation.prompts import build_messages, build_response_format
from flashgen_core.generation.sanitize import sanitize_text
from flashgen_core.model_adapters.base import BaseGateway
from flashgen_core.model_adapters.openrouter import (
    DEFAULT_APP_TITLE,
    DEFAULT_BASE_URL,
    DEFAULT_HTTP_REFERER,
    DEFAULT_TIMEOUT,
    OpenRouterGateway,
)
from flashgen_core.schemas.cards import CandidateFlashcard
from flashgen_core.utils.logging import get_logger
from flashgen_core.utils.retry import (
    DEFAULT_BACKOFF_BASE,
    DEFAULT_MAX_ATTEMPTS,
    SleepFunc,
    with_retry,
)

logger = get_logger(__name__)

DEFAULT_MODEL = "openai/gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000

MIN_TEXT_LENGTH = 1000
MAX_TEXT_LENGTH = 10000
MIN_CARDS = 1
MAX_CARDS = 50


def validate_generation_input(text: Any, max_cards: Any) -> None:
    """Check caller input before anything is sent to the gateway.

    Raises:
        ValidationError: If the text length or card count is out of bounds
    """
    if not isinstance(text, str):
        raise ValidationError("Text must be a string", {"provided": type(text).__name__})

    length = len(text.strip())
    if length < MIN_TEXT_LENGTH:
        raise ValidationError(
            f"Text must be at least {MIN_TEXT_LENGTH} characters",
            {"provided": length, "minimum": MIN_TEXT_LENGTH},
        )
    if length > MAX_TEXT_LENGTH:
        raise ValidationError(
            f"Text must not exceed {MAX_TEXT_LENGTH} characters",
            {"provided": length, "maximum": MAX_TEXT_LENGTH},
        )

    if (
        isinstance(max_cards, bool)
        or not isinstance(max_cards, int)
        or not MIN_CARDS <= max_cards <= MAX_CARDS
    ):
        raise ValidationError(
            f"max_cards must be between {MIN_CARDS} and {MAX_CARDS}",
            {"provided": max_cards, "minimum": MIN_CARDS, "maximum": MAX_CARDS},
        )


class GenerationClient:
    """Generate flashcards through a chat-completion gateway.

    The client holds configuration only and is safe to share between
    concurrent requests.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        http_referer: str = DEFAULT_HTTP_REFERER,
        app_title: str = DEFAULT_APP_TITLE,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
        backoff_jitter: float = 0.0,
        gateway: BaseGateway | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """Initialize the generation client.

        Args:
            api_key: Gateway API key
            model: Model identifier routed by the gateway
            base_url: Gateway base URL
            http_referer: Attribution referer header
            app_title: Attribution title header
            temperature: Sampling temperature in [0.0, 1.0]
            max_tokens: Completion token budget
            timeout: Per-attempt timeout in seconds
            max_attempts: Total attempts for retryable failures
            backoff_base: Wait before the second attempt, doubled afterwards
            backoff_jitter: Upper bound of random jitter added to each wait
            gateway: Gateway override (defaults to OpenRouter)
            sleep: Awaitable sleep used between attempts

        Raises:
            ConfigurationError: If any setting is unusable
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError("OpenRouter API key is required")
        if not 0.0 <= temperature <= 1.0:
            raise ConfigurationError(
                f"Temperature must be between 0.0 and 1.0, got {temperature}"
            )
        if max_tokens <= 0:
            raise ConfigurationError(f"Max tokens must be positive, got {max_tokens}")
        if timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {timeout}")
        if max_attempts < 1:
            raise ConfigurationError(
                f"Max attempts must be at least 1, got {max_attempts}"
            )

        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.backoff_jitter = backoff_jitter
        self._sleep = sleep

        self.gateway = gateway or OpenRouterGateway(
            api_key=api_key.strip(),
            base_url=base_url,
            http_referer=http_referer,
            app_title=app_title,
            timeout=timeout,
        )
        logger.info(f"Initialized generation client (model={model})")

    def build_request(self, text: str, max_cards: int) -> dict[str, Any]:
        """Build the chat-completion request body for sanitized text."""
        return {
            "model": self.model,
            "messages": build_messages(text, max_cards),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "response_format": build_response_format(max_cards),
        }

    async def generate(self, text: str, max_cards: int) -> list[CandidateFlashcard]:
        """Generate up to ``max_cards`` candidate flashcards from ``text``.

        Args:
            text: Untrusted source text (1000 to 10000 characters)
            max_cards: Maximum number of cards (1 to 50)

        Returns:
            Non-empty list of validated candidates, never longer than
            ``max_cards``

        Raises:
            ValidationError: If input is out of bounds
            GatewayError: If the gateway failed after retries
            ParseError: If the response held no usable flashcards
        """
        validate_generation_input(text, max_cards)

        try:
            request = self.build_request(sanitize_text(text), max_cards)
            logger.info(f"Generating up to {max_cards} flashcards")
            response = await with_retry(
                self.gateway.complete,
                request,
                max_attempts=self.max_attempts,
                operation_name="generate_flashcards",
                backoff_base=self.backoff_base,
                jitter=self.backoff_jitter,
                sleep=self._sleep,
            )
            cards = parse_completion(response, max_cards)
        except GenerationClientError:
            raise
        except Exception as e:
            raise GatewayError(
                f"Unexpected error during flashcard generation: {e}"
            ) from e

        logger.info(f"Generated {len(cards)} flashcards")
        return cards
