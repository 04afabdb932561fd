"""
Repository for save slots.

Encapsulates all database access for saving and restoring games.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sugoroku.data.models import SaveSlot
from sugoroku.data.schemas import SAVE_VERSION, SaveEnvelope, SlotSummary
from sugoroku.exceptions import PersistenceError
from sugoroku.snapshot import state_from_dict, state_to_dict
from sugoroku.state import GameState

logger = logging.getLogger(__name__)


def _major(version: Optional[str]) -> str:
    return (version or "").split(".")[0]


class SaveRepository:
    """
    Save-slot CRUD on top of a SQLAlchemy session.

    Writes flush but do not commit; the caller's ``session_scope`` owns
    the transaction.
    """

    def __init__(self, session: Session):
        """
        Initialize repository with a database session.

        Args:
            session: Active SQLAlchemy session
        """
        self.session = session

    def save(self, slot_id: str, state: GameState) -> bool:
        """
        Write ``state`` to a slot, replacing whatever was there.

        Returns:
            True on success, False if the database rejected the write.
        """
        try:
            row = self.session.get(SaveSlot, slot_id)
            if row is None:
                row = SaveSlot(slot_id=slot_id)
                self.session.add(row)
            row.version = SAVE_VERSION
            row.saved_at = datetime.now(timezone.utc)
            row.game_id = state.game_id
            row.year = state.year
            row.total_years = state.total_years
            row.player_names = [p.name for p in state.players]
            row.game_state = state_to_dict(state)
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save slot {slot_id}: {e}")
            self.session.rollback()
            return False

        logger.info(f"Saved game {state.game_id} to slot {slot_id} (year {state.year})")
        return True

    def load(self, slot_id: str) -> Optional[SaveEnvelope]:
        """
        Read a slot.

        A different major version is logged as a warning; the data is
        returned anyway.

        Returns:
            SaveEnvelope, or None if the slot is empty.

        Raises:
            PersistenceError: If the stored state cannot be decoded.
        """
        row = self.session.get(SaveSlot, slot_id)
        if row is None:
            return None
        if _major(row.version) != _major(SAVE_VERSION):
            logger.warning(f"Slot {slot_id} has save version {row.version}, expected {SAVE_VERSION}")
        state_from_dict(row.game_state)
        return SaveEnvelope(version=row.version, saved_at=row.saved_at, game_state=row.game_state)

    def load_state(self, slot_id: str) -> Optional[GameState]:
        """Load a slot straight into a GameState."""
        envelope = self.load(slot_id)
        if envelope is None:
            return None
        return state_from_dict(envelope.game_state)

    def list_slots(self) -> List[SlotSummary]:
        """Summaries of every occupied slot, ordered by slot id."""
        rows = self.session.execute(select(SaveSlot).order_by(SaveSlot.slot_id)).scalars().all()
        return [
            SlotSummary(
                slot_id=row.slot_id,
                saved_at=row.saved_at,
                game_id=row.game_id,
                year=row.year,
                total_years=row.total_years,
                player_names=list(row.player_names or []),
            )
            for row in rows
        ]

    def delete_slot(self, slot_id: str) -> bool:
        """Delete a slot. Deleting an empty slot succeeds."""
        try:
            self.session.execute(delete(SaveSlot).where(SaveSlot.slot_id == slot_id))
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete slot {slot_id}: {e}")
            self.session.rollback()
            return False
        logger.info(f"Deleted slot {slot_id}")
        return True

    def has_slot(self, slot_id: str) -> bool:
        return self.session.get(SaveSlot, slot_id) is not None
