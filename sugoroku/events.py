"""
Calendar events drawn at the end of each non-settlement month.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from sugoroku import economy
from sugoroku.board import Board
from sugoroku.rng import RandomSource
from sugoroku.state import GameState


class EventCategory(Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    RANDOM = "random"


class EventKind(Enum):
    MONEY_PERCENT = "money_percent"
    MONEY_FIXED = "money_fixed"
    PROPERTY_INCOME_BONUS = "property_income_bonus"
    ALL_MONEY_EQUALIZER = "all_money_equalizer"
    RANDOM_TELEPORT = "random_teleport"
    NONE = "none"


EVENT_TARGETS = ("all", "self", "other", "first_place", "last_place")


@dataclass(frozen=True)
class EventEffect:
    kind: EventKind
    value: Optional[float] = None
    target_type: Optional[str] = None


@dataclass(frozen=True)
class GameEvent:
    """
    A calendar event.

    Monthly events fire whenever ``month`` comes round; yearly and random
    events fire with ``probability`` each month.
    """

    id: str
    category: EventCategory
    name: str
    description: str
    effect: EventEffect
    month: Optional[int] = None
    probability: float = 0.0


@dataclass(frozen=True)
class EventResult:
    event: GameEvent
    state: GameState
    affected: Tuple[Tuple[str, int], ...] = ()

    @property
    def deltas(self) -> Dict[str, int]:
        return dict(self.affected)


def draw_monthly_events(
    events: Sequence[GameEvent], month: int, rng: RandomSource
) -> List[GameEvent]:
    """Events that fire this month, in catalog order."""
    drawn = []
    for event in events:
        if event.category == EventCategory.MONTHLY:
            if event.month == month:
                drawn.append(event)
        elif rng.random() < event.probability:
            drawn.append(event)
    return drawn


def resolve_targets(state: GameState, target_type: Optional[str], actor_id: Optional[str]) -> List[str]:
    """Player ids an event applies to. Unknown target types mean everyone."""
    if target_type == "self":
        return [actor_id] if actor_id else []
    if target_type == "other":
        return [p.id for p in state.players if p.id != actor_id]
    if target_type == "first_place":
        first = economy.first_place_player(state.players)
        return [first.id] if first else []
    if target_type == "last_place":
        last = economy.last_place_player(state.players)
        return [last.id] if last else []
    return [p.id for p in state.players]


def _capped(delta: int, money: int) -> int:
    """Penalties never take more than the money a player has."""
    if delta >= 0:
        return delta
    return max(delta, -max(0, money))


def apply_event(
    state: GameState,
    event: GameEvent,
    player_id: Optional[str],
    board: Board,
    rng: RandomSource,
) -> EventResult:
    """
    Apply an event.

    Args:
        state: Current game state.
        event: Event to apply.
        player_id: Player whose turn triggered it (``self`` target).
        board: Board, for random teleports.
        rng: Random source.

    Returns:
        EventResult with the money delta actually applied to each player.
    """
    effect = event.effect
    value = effect.value or 0
    deltas: Dict[str, int] = {}

    if effect.kind == EventKind.MONEY_PERCENT:
        for pid in resolve_targets(state, effect.target_type, player_id):
            p = state.get_player(pid)
            deltas[pid] = _capped(math.floor(p.total_assets * value / 100), p.money)

    elif effect.kind == EventKind.MONEY_FIXED:
        for pid in resolve_targets(state, effect.target_type, player_id):
            deltas[pid] = _capped(int(value), state.get_player(pid).money)

    elif effect.kind == EventKind.PROPERTY_INCOME_BONUS:
        for p in state.players:
            owned = economy.owned_by(state.properties, p.id)
            bonus = math.floor(sum(prop.income for prop in owned) * value / 100)
            if bonus:
                deltas[p.id] = bonus

    elif effect.kind == EventKind.ALL_MONEY_EQUALIZER:
        for p in state.players:
            deltas[p.id] = _capped(int(value), p.money)

    elif effect.kind == EventKind.RANDOM_TELEPORT:
        player = state.get_player(player_id)
        if player is not None and board.cities:
            city_id = rng.pick([c.id for c in board.cities])
            state = state.with_player(replace(player, city_id=city_id))
        return EventResult(event, state)

    if not deltas:
        return EventResult(event, state)
    return EventResult(event, economy.adjust_money(state, deltas), tuple(deltas.items()))
