"""
SQLAlchemy models for save slots.

One row per slot; the whole GameState is stored as a JSON document next
to a few columns duplicated from it for listing.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


def utc_now() -> datetime:
    """Generate timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


class SaveSlot(Base):
    """A saved game."""

    __tablename__ = "save_slots"

    slot_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    version: Mapped[str] = mapped_column(String(32), nullable=False)
    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    game_id: Mapped[str] = mapped_column(String(128), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    total_years: Mapped[int] = mapped_column(Integer, nullable=False)
    player_names: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    game_state: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        comment="Serialized GameState",
    )

    def __repr__(self) -> str:
        return f"<SaveSlot(slot_id={self.slot_id}, game_id={self.game_id}, year={self.year})>"
