"""
Narration of what happened during a turn.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class EventType(Enum):
    """Types of turn events."""

    GAME_START = "game_start"
    TURN_START = "turn_start"
    CARD_USE = "card_use"
    CARD_DISCARD = "card_discard"
    CARD_FAILED = "card_failed"
    DICE_ROLL = "dice_roll"
    MOVE = "move"
    CARD_DRAW = "card_draw"
    HAND_FULL = "hand_full"

    DESTINATION_ARRIVAL = "destination_arrival"
    CARD_PURCHASE = "card_purchase"
    PURCHASE = "purchase"
    UPGRADE = "upgrade"
    RENT_PAYMENT = "rent_payment"
    LIQUIDATION = "liquidation"

    BOMBEE_ACTION = "bombee_action"
    BOMBEE_ATTACH = "bombee_attach"
    CALENDAR_EVENT = "calendar_event"
    MONTH_END = "month_end"
    YEAR_END = "year_end"
    GAME_END = "game_end"


@dataclass
class TurnEvent:
    """A narrated event."""

    event_type: EventType
    player_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        player_str = self.player_id if self.player_id is not None else "System"
        return f"[{player_str}] {self.event_type.value}: {self.details}"


class EventLog:
    """Collects turn events across a game."""

    def __init__(self):
        self.events: List[TurnEvent] = []

    def log(self, event_type: EventType, player_id: Optional[str] = None, **details: Any) -> TurnEvent:
        """Log an event and return it."""
        event = TurnEvent(event_type, player_id, details)
        self.events.append(event)
        return event

    def extend(self, events: List[TurnEvent]) -> None:
        self.events.extend(events)

    def get_events(self) -> List[TurnEvent]:
        """Get all logged events."""
        return self.events.copy()

    def get_recent_events(self, count: int = 10) -> List[TurnEvent]:
        """Get the most recent N events."""
        return self.events[-count:]

    def of_type(self, event_type: EventType) -> List[TurnEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def clear(self) -> None:
        """Clear the event log."""
        self.events.clear()
