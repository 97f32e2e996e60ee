"""Domain models exchanged between the generation service and storage."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FlashcardStatus(str, Enum):
    """Lifecycle status of a flashcard."""

    DRAFT = "draft"
    NEW = "new"
    FINALIZED = "finalized"


class FlashcardSource(str, Enum):
    """Origin of a flashcard."""

    AI = "ai"
    MANUAL = "manual"


DEFAULT_EASE_FACTOR = Decimal("2.50")
DEFAULT_INTERVAL = 0


class DeckRef(BaseModel):
    """The two deck fields needed for the ownership check."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    user_id: str


class DraftFlashcard(BaseModel):
    """A persisted AI-generated flashcard awaiting review."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    deck_id: int
    front: str
    back: str
    status: FlashcardStatus = FlashcardStatus.DRAFT
    source: FlashcardSource = FlashcardSource.AI
    ease_factor: Decimal = DEFAULT_EASE_FACTOR
    interval: int = DEFAULT_INTERVAL


class UsageSnapshot(BaseModel):
    """A user's generation usage inside the current quota window."""

    daily_limit: int
    used_today: int
    reset_at: datetime

    @property
    def remaining(self) -> int:
        return max(0, self.daily_limit - self.used_today)

    @property
    def exhausted(self) -> bool:
        return self.used_today >= self.daily_limit


class GenerationResult(BaseModel):
    """Outcome of a successful generate-and-save call.

    ``log_id`` is 0 when the usage log entry could not be written.
    """

    log_id: int
    deck_id: int
    drafts: list[DraftFlashcard] = Field(default_factory=list)

    @property
    def cards_generated(self) -> int:
        return len(self.drafts)
