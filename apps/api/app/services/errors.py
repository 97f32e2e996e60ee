"""Errors raised by the generation service.

Each error carries a stable ``code`` and an HTTP ``status_code`` so the
routing layer can render it without inspecting the message.
"""

from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes exposed to API clients."""

    INVALID_INPUT = "INVALID_INPUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    DAILY_LIMIT_EXCEEDED = "DAILY_LIMIT_EXCEEDED"
    AI_SERVICE_ERROR = "AI_SERVICE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class GenerationServiceError(Exception):
    """Base class for generation service failures."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def details(self) -> dict[str, Any] | None:
        return None


class QuotaExceededError(GenerationServiceError):
    """The user has used up today's generation quota."""

    code = ErrorCode.DAILY_LIMIT_EXCEEDED
    status_code = 403

    def __init__(self, limit: int, used_today: int, reset_at: datetime):
        super().__init__(
            f"Daily generation limit of {limit} cards exceeded. "
            "Limit resets at midnight UTC."
        )
        self.limit = limit
        self.used_today = used_today
        self.reset_at = reset_at

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used_today)

    @property
    def details(self) -> dict[str, Any]:
        return {
            "daily_limit": self.limit,
            "used_today": self.used_today,
            "remaining": self.remaining,
            "reset_at": self.reset_at.isoformat(),
        }


class NotFoundError(GenerationServiceError):
    """The deck does not exist or is not owned by the caller.

    The two cases are deliberately indistinguishable.
    """

    code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(self, deck_id: int):
        super().__init__("Deck not found or access denied")
        self.deck_id = deck_id

    @property
    def details(self) -> dict[str, Any]:
        return {"deck_id": self.deck_id}


class EmptyGenerationError(GenerationServiceError):
    """Generation finished without a single usable candidate."""

    code = ErrorCode.AI_SERVICE_ERROR
    status_code = 503

    def __init__(self) -> None:
        super().__init__(
            "AI failed to generate any valid flashcards from the provided text"
        )


class StorageError(GenerationServiceError):
    """The persistence layer failed."""

    code = ErrorCode.INTERNAL_ERROR
    status_code = 500

    def __init__(self, operation: str, cause: Exception | None = None):
        super().__init__(f"Failed to {operation}")
        self.operation = operation
        self.cause = cause
