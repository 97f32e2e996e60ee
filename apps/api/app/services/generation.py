"""Generation orchestrator: quota, ownership, generation, persistence.

Steps run strictly in order and the first failure ends the call, so a quota
or ownership failure never reaches the gateway and a failed draft insert
never writes a usage log entry.

The quota check is a snapshot read, not an isolated counter. Two concurrent
requests from one user near the limit can overshoot it by at most one
request's worth of cards.
"""

from collections.abc import Callable, Sequence
from datetime import datetime, time, timedelta, timezone

import structlog
from flashgen_core.generation import GenerationClient
from flashgen_core.schemas.cards import CandidateFlashcard

from app.schemas.generation import (
    DeckRef,
    DraftFlashcard,
    GenerationResult,
    UsageSnapshot,
)
from app.services.errors import (
    EmptyGenerationError,
    NotFoundError,
    QuotaExceededError,
    StorageError,
)
from app.services.storage import GenerationStore

logger = structlog.get_logger()

DAILY_CARD_LIMIT = 50

# Returned in place of a log id when the usage log write failed
MISSING_LOG_ID = 0


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class GenerationService:
    """Sequence quota enforcement, ownership, generation and persistence."""

    def __init__(
        self,
        store: GenerationStore,
        client: GenerationClient,
        *,
        daily_limit: int = DAILY_CARD_LIMIT,
        now: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.client = client
        self.daily_limit = daily_limit
        self._now = now

    def quota_window(self) -> tuple[datetime, datetime]:
        """Return the current UTC calendar day as ``[start, end)``."""
        now = self._now().astimezone(timezone.utc)
        start = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
        return start, start + timedelta(days=1)

    async def get_usage(self, user_id: str) -> UsageSnapshot:
        """Return today's usage for ``user_id`` without enforcing the limit."""
        start, end = self.quota_window()
        used_today = await self.store.sum_cards_count(user_id, start, end)
        return UsageSnapshot(
            daily_limit=self.daily_limit,
            used_today=used_today,
            reset_at=end,
        )

    async def check_daily_limit(self, user_id: str) -> UsageSnapshot:
        """Fail if the user already generated ``daily_limit`` cards today.

        Raises:
            QuotaExceededError: If today's total is at or over the limit
            StorageError: If usage cannot be read (fails closed)
        """
        usage = await self.get_usage(user_id)
        if usage.exhausted:
            logger.info(
                "daily_limit_exceeded",
                user_id=user_id,
                used_today=usage.used_today,
                daily_limit=usage.daily_limit,
            )
            raise QuotaExceededError(
                limit=usage.daily_limit,
                used_today=usage.used_today,
                reset_at=usage.reset_at,
            )
        return usage

    async def verify_ownership(self, user_id: str, deck_id: int) -> DeckRef:
        """Return the deck if ``user_id`` owns it.

        Raises:
            NotFoundError: If the deck is missing or owned by someone else
            StorageError: If the lookup fails
        """
        deck = await self.store.find_deck(deck_id, user_id)
        if deck is None:
            logger.info("deck_not_accessible", user_id=user_id, deck_id=deck_id)
            raise NotFoundError(deck_id)
        return deck

    async def save_drafts(
        self,
        user_id: str,
        deck_id: int,
        candidates: Sequence[CandidateFlashcard],
    ) -> tuple[list[DraftFlashcard], int]:
        """Persist candidates as drafts, then record the usage log entry.

        The log write is best effort: if it fails the drafts are kept and
        ``MISSING_LOG_ID`` is returned in place of the log id.

        Raises:
            EmptyGenerationError: If there is nothing to save
            StorageError: If the draft insert fails (nothing is saved)
        """
        if not candidates:
            raise EmptyGenerationError()

        drafts = await self.store.insert_flashcards(deck_id, candidates)

        # Drafts are already committed; any log failure must not undo the call
        try:
            log_id = await self.store.insert_generation_log(user_id, len(candidates))
        except Exception as e:
            cause = e.cause if isinstance(e, StorageError) and e.cause else e
            logger.error(
                "generation_log_failed",
                user_id=user_id,
                deck_id=deck_id,
                cards_count=len(candidates),
                error=str(cause),
                error_type=type(cause).__name__,
            )
            log_id = MISSING_LOG_ID

        return drafts, log_id

    async def generate_and_save(
        self,
        user_id: str,
        deck_id: int,
        text: str,
        max_cards: int,
    ) -> GenerationResult:
        """Generate flashcards from ``text`` and save them as drafts.

        Raises:
            QuotaExceededError: Daily limit reached
            NotFoundError: Deck missing or not owned
            ValidationError: Text or max_cards out of bounds
            GatewayError: The gateway failed after retries
            ParseError: The gateway returned unusable content
            EmptyGenerationError: No candidates were produced
            StorageError: Persistence failed
        """
        log = logger.bind(user_id=user_id, deck_id=deck_id)

        await self.check_daily_limit(user_id)
        await self.verify_ownership(user_id, deck_id)

        log.info("generation_started", max_cards=max_cards)
        candidates = await self.client.generate(text, max_cards)
        if not candidates:
            raise EmptyGenerationError()

        drafts, log_id = await self.save_drafts(user_id, deck_id, candidates)
        log.info("generation_saved", cards_count=len(drafts), log_id=log_id)

        return GenerationResult(log_id=log_id, deck_id=deck_id, drafts=drafts)
