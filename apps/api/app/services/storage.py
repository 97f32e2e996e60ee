"""SQLAlchemy-backed storage for generation quota, decks and drafts."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

from flashgen_core.schemas.cards import CandidateFlashcard
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import models
from app.schemas.generation import (
    DEFAULT_EASE_FACTOR,
    DEFAULT_INTERVAL,
    DeckRef,
    DraftFlashcard,
    FlashcardSource,
    FlashcardStatus,
)
from app.services.errors import StorageError


class GenerationStore(ABC):
    """Storage operations the generation service depends on."""

    @abstractmethod
    async def sum_cards_count(
        self, user_id: str, start: datetime, end: datetime
    ) -> int:
        """Sum ``cards_count`` of the user's log entries in ``[start, end)``."""
        pass

    @abstractmethod
    async def find_deck(self, deck_id: int, user_id: str) -> DeckRef | None:
        """Return the deck if it exists and is owned by ``user_id``."""
        pass

    @abstractmethod
    async def insert_flashcards(
        self, deck_id: int, candidates: Sequence[CandidateFlashcard]
    ) -> list[DraftFlashcard]:
        """Insert all candidates as drafts in one write, or none at all."""
        pass

    @abstractmethod
    async def insert_generation_log(self, user_id: str, cards_count: int) -> int:
        """Append a usage log entry and return its id."""
        pass


class SqlAlchemyGenerationStore(GenerationStore):
    """``GenerationStore`` backed by an async SQLAlchemy session.

    Every ``SQLAlchemyError`` is rolled back and re-raised as
    ``StorageError``.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def sum_cards_count(
        self, user_id: str, start: datetime, end: datetime
    ) -> int:
        query = select(
            func.coalesce(func.sum(models.AIGenerationLog.cards_count), 0)
        ).where(
            models.AIGenerationLog.user_id == user_id,
            models.AIGenerationLog.generated_at >= start,
            models.AIGenerationLog.generated_at < end,
        )
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError("check daily limit", e) from e
        return int(result.scalar_one())

    async def find_deck(self, deck_id: int, user_id: str) -> DeckRef | None:
        query = select(models.Deck.id, models.Deck.user_id).where(
            models.Deck.id == deck_id,
            models.Deck.user_id == user_id,
        )
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError("verify deck ownership", e) from e

        row = result.one_or_none()
        if row is None:
            return None
        return DeckRef(id=row.id, user_id=row.user_id)

    async def insert_flashcards(
        self, deck_id: int, candidates: Sequence[CandidateFlashcard]
    ) -> list[DraftFlashcard]:
        rows = [
            models.Flashcard(
                deck_id=deck_id,
                front=candidate.front,
                back=candidate.back,
                status=FlashcardStatus.DRAFT.value,
                source=FlashcardSource.AI.value,
                ease_factor=DEFAULT_EASE_FACTOR,
                interval=DEFAULT_INTERVAL,
            )
            for candidate in candidates
        ]
        try:
            self.session.add_all(rows)
            await self.session.flush()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError("save flashcards", e) from e

        return [DraftFlashcard.model_validate(row) for row in rows]

    async def insert_generation_log(self, user_id: str, cards_count: int) -> int:
        entry = models.AIGenerationLog(user_id=user_id, cards_count=cards_count)
        try:
            self.session.add(entry)
            await self.session.flush()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError("log generation", e) from e
        return entry.id
