from sugoroku.data.config import DatabaseSettings, get_settings
from sugoroku.data.models import Base, SaveSlot
from sugoroku.data.repository import SaveRepository
from sugoroku.data.schemas import SAVE_VERSION, SaveEnvelope, SlotSummary
from sugoroku.data.session import (
    close_db,
    create_tables,
    get_engine,
    init_db,
    session_scope,
)

__all__ = [
    "DatabaseSettings",
    "get_settings",
    "Base",
    "SaveSlot",
    "SaveRepository",
    "SAVE_VERSION",
    "SaveEnvelope",
    "SlotSummary",
    "init_db",
    "close_db",
    "session_scope",
    "create_tables",
    "get_engine",
]
