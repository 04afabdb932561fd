"""
Destination arrival bonus and rotation.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

from sugoroku import economy
from sugoroku.board import Board
from sugoroku.config import DESTINATION_MIN_BONUS
from sugoroku.rng import RandomSource
from sugoroku.state import GameState, Player

BONUS_RATE = 0.1


@dataclass(frozen=True)
class ArrivalResult:
    state: GameState
    bonus: int
    new_destination_city_id: str


def is_at_destination(state: GameState, player: Player) -> bool:
    return player.city_id == state.destination_city_id


def calc_arrival_bonus(state: GameState, player_id: str) -> int:
    """
    Bonus for reaching the destination.

    Ten percent of the other players' average total assets times the
    number of players, never less than the minimum bonus.
    """
    others = [p for p in state.players if p.id != player_id]
    others_total = sum(p.total_assets for p in others)
    if not others or others_total == 0:
        return DESTINATION_MIN_BONUS
    average = others_total / len(others)
    return max(DESTINATION_MIN_BONUS, math.floor(average * len(state.players) * BONUS_RATE))


def process_arrival(
    state: GameState, board: Board, player_id: str, rng: RandomSource
) -> ArrivalResult:
    """Credit the arrival bonus and pick a fresh destination elsewhere."""
    bonus = calc_arrival_bonus(state, player_id)
    new_state = economy.adjust_money(state, {player_id: bonus})

    reached = state.destination_city_id
    new_destination: Optional[str] = board.random_destination(rng, exclude=[reached])
    if new_destination is None:
        new_destination = reached
    new_state = replace(new_state, destination_city_id=new_destination)
    return ArrivalResult(new_state, bonus, new_destination)
