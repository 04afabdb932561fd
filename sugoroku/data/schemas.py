from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field

SAVE_VERSION = "1.0.0"


class SaveEnvelope(BaseModel):
    """A loaded save: format version, when it was written and the state."""

    version: str
    saved_at: datetime
    game_state: Dict[str, Any]


class SlotSummary(BaseModel):
    slot_id: str
    saved_at: datetime
    game_id: str
    year: int
    total_years: int
    player_names: List[str] = Field(default_factory=list)
