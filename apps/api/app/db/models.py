"""Database models for the flashgen API."""

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# SQLite only autoincrements INTEGER primary keys
BigIntegerId = BigInteger().with_variant(Integer, "sqlite")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Deck(Base):
    """A collection of flashcards owned by one user."""

    __tablename__ = "decks"
    __table_args__ = (UniqueConstraint("user_id", "name", name="unique_user_deck_name"),)

    id: Mapped[int] = mapped_column(BigIntegerId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    flashcards: Mapped[list["Flashcard"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )


class Flashcard(Base):
    """A flashcard with spaced-repetition state.

    Status workflow: draft (AI-generated) -> new (accepted) -> finalized (studied).
    """

    __tablename__ = "flashcards"
    __table_args__ = (
        CheckConstraint("status in ('draft', 'new', 'finalized')", name="valid_status"),
        CheckConstraint("source in ('ai', 'manual')", name="valid_source"),
    )

    id: Mapped[int] = mapped_column(BigIntegerId, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("decks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    front: Mapped[str] = mapped_column(String(200), nullable=False)
    back: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="new")
    source: Mapped[str] = mapped_column(String(20), nullable=False)
    ease_factor: Mapped[Decimal] = mapped_column(
        Numeric(4, 2), nullable=False, default=Decimal("2.50")
    )
    interval: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_review_date: Mapped[date] = mapped_column(
        Date, nullable=False, default=date.today
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    deck: Mapped["Deck"] = relationship(back_populates="flashcards")


class AIGenerationLog(Base):
    """Append-only record of AI generation usage, used for the daily quota."""

    __tablename__ = "ai_generation_logs"
    __table_args__ = (
        Index("idx_ai_generation_logs_user_generated", "user_id", "generated_at"),
    )

    id: Mapped[int] = mapped_column(BigIntegerId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    cards_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
