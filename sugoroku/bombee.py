"""
Bombee: a roaming debuff that sticks to one player at a time.

It attaches to the poorest eligible player, grows from mini to normal to
king the longer it stays, takes money or property every turn, and drifts
toward whoever is currently last.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from sugoroku import economy
from sugoroku.config import (
    BOMBEE_MIGRATION_CHANCE,
    MINI_TO_NORMAL_TURNS,
    NORMAL_TO_KING_TURNS,
)
from sugoroku.rng import RandomSource
from sugoroku.state import BombeeType, GameState, Player

NORMAL_SELL_CHANCE = 0.5
NORMAL_SELL_RATE = 0.7
KING_SELL_LIMIT = 3
KING_SELL_LOSS_RATE = 0.3
KING_ACTIONS = ("sell_all", "steal_big", "affect_all")

BOMBEE_NAMES = {
    BombeeType.NONE: "None",
    BombeeType.MINI: "Mini Bombee",
    BombeeType.NORMAL: "Bombee",
    BombeeType.KING: "King Bombee",
}


@dataclass(frozen=True)
class BombeeResult:
    """
    Outcome of one Bombee action.

    ``evolved_to`` is set only when the tier changed this turn and
    ``moved_to`` only when the debuff migrated to another player.
    """

    state: GameState
    message: str = ""
    player_id: Optional[str] = None
    evolved_to: Optional[BombeeType] = None
    moved_to: Optional[str] = None
    action: Optional[str] = None


def bombee_player(state: GameState) -> Optional[Player]:
    """The player currently carrying the Bombee, if any."""
    for player in state.players:
        if player.has_bombee:
            return player
    return None


def remove(state: GameState, player_id: str) -> GameState:
    player = state.get_player(player_id)
    if player is None:
        return state
    return state.with_player(replace(player, bombee=BombeeType.NONE, bombee_elapsed_turns=0))


def transfer(state: GameState, from_id: str, to_id: str) -> GameState:
    """Move the Bombee (keeping its tier) and restart its counter."""
    source = state.get_player(from_id)
    target = state.get_player(to_id)
    if source is None or target is None or not source.has_bombee:
        return state
    return state.with_players([
        replace(source, bombee=BombeeType.NONE, bombee_elapsed_turns=0),
        replace(target, bombee=source.bombee, bombee_elapsed_turns=0),
    ])


def attach_to_last_place(state: GameState) -> GameState:
    """
    Attach a mini Bombee to the poorest player not currently immune.

    Does nothing when someone already carries it or there are fewer than
    two players. If everyone is immune the nominal last place gets it.
    """
    if bombee_player(state) is not None or len(state.players) < 2:
        return state
    eligible = [p for p in state.players if not p.is_immune]
    target = economy.last_place_player(eligible) or economy.last_place_player(state.players)
    return state.with_player(replace(target, bombee=BombeeType.MINI, bombee_elapsed_turns=0))


def decrement_immunity(state: GameState) -> GameState:
    """Take one year off every running immunity."""
    return state.with_players(
        replace(p, bombee_immune_years=p.bombee_immune_years - 1)
        for p in state.players
        if p.bombee_immune_years > 0
    )


def _evolve(current: BombeeType, elapsed: int) -> BombeeType:
    if current == BombeeType.MINI and elapsed >= MINI_TO_NORMAL_TURNS:
        return BombeeType.NORMAL
    if current == BombeeType.NORMAL and elapsed >= NORMAL_TO_KING_TURNS:
        return BombeeType.KING
    return current


def _steal(
    state: GameState,
    player: Player,
    floor_amount: int,
    low: float,
    high: float,
    rng: RandomSource,
    label: str,
) -> Tuple[GameState, str]:
    rate = rng.uniform(low, high)
    wanted = max(floor_amount, math.floor(player.money * rate))
    stolen = max(0, min(wanted, player.money))
    if stolen == 0:
        return state, f"{label} showed up but {player.name} had no money"
    new_state = economy.adjust_money(state, {player.id: -stolen})
    return new_state, f"{label} took {stolen} from {player.name}"


def _mini_action(state: GameState, player: Player, rng: RandomSource):
    new_state, message = _steal(state, player, 100, 0.05, 0.15, rng, "Mini Bombee")
    return new_state, message, "steal"


def _normal_action(state: GameState, player: Player, rng: RandomSource):
    owned = economy.owned_by(state.properties, player.id)
    if owned and rng.random() < NORMAL_SELL_CHANCE:
        prop = rng.pick(owned)
        result = economy.sell_property(state, player.id, prop.id, NORMAL_SELL_RATE * 100)
        return result.state, f"Bombee sold {player.name}'s {prop.name} for {result.amount}", "sell"
    new_state, message = _steal(state, player, 500, 0.2, 0.4, rng, "Bombee")
    return new_state, message, "steal"


def _king_action(state: GameState, player: Player, rng: RandomSource):
    action = rng.pick(KING_ACTIONS)

    if action == "sell_all":
        owned = economy.owned_by(state.properties, player.id)[:KING_SELL_LIMIT]
        if owned:
            loss = sum(math.floor(p.price * KING_SELL_LOSS_RATE) for p in owned)
            new_state = economy.return_to_market(state, [p.id for p in owned])
            current = new_state.get_player(player.id)
            new_state = new_state.with_player(replace(current, money=max(0, current.money - loss)))
            return (
                economy.recalc_total_assets(new_state),
                f"King Bombee dumped {len(owned)} of {player.name}'s properties",
                "sell_all",
            )

    elif action == "affect_all":
        deltas = {}
        for p in state.players:
            damage = max(100, math.floor(p.money * 0.1))
            deltas[p.id] = -max(0, min(damage, p.money))
        return economy.adjust_money(state, deltas), "King Bombee took 10% from everyone", "affect_all"

    new_state, message = _steal(state, player, 2000, 0.4, 0.6, rng, "King Bombee")
    return new_state, message, "steal_big"


_ACTIONS = {
    BombeeType.MINI: _mini_action,
    BombeeType.NORMAL: _normal_action,
    BombeeType.KING: _king_action,
}


def _maybe_migrate(state: GameState, carrier_id: str, rng: RandomSource) -> Optional[str]:
    """Id of the player the Bombee should jump to, or None to stay put."""
    carrier = state.get_player(carrier_id)
    eligible = [p for p in state.players if p.id != carrier_id and not p.is_immune]
    last = economy.last_place_player(eligible)
    if carrier is None or last is None or carrier.total_assets <= last.total_assets:
        return None
    if rng.random() < BOMBEE_MIGRATION_CHANCE:
        return last.id
    return None


def process_action(state: GameState, rng: RandomSource) -> BombeeResult:
    """
    Run the Bombee's end-of-turn action.

    Increments the carrier's counter, evolves the tier when a threshold is
    reached, applies the tier's effect and finally may migrate the
    Bombee to the current last place.
    """
    carrier = bombee_player(state)
    if carrier is None:
        return BombeeResult(state)

    elapsed = carrier.bombee_elapsed_turns + 1
    tier = _evolve(carrier.bombee, elapsed)
    carrier = replace(carrier, bombee=tier, bombee_elapsed_turns=elapsed)
    new_state = state.with_player(carrier)

    new_state, message, action = _ACTIONS[tier](new_state, carrier, rng)
    evolved_to = tier if tier != state.get_player(carrier.id).bombee else None
    if evolved_to is not None:
        message = f"Bombee evolved into {BOMBEE_NAMES[tier]}! {message}"

    moved_to = _maybe_migrate(new_state, carrier.id, rng)
    if moved_to is not None:
        new_state = transfer(new_state, carrier.id, moved_to)
        message = f"{message} It moved on to {new_state.get_player(moved_to).name}."

    return BombeeResult(
        state=economy.recalc_total_assets(new_state),
        message=message,
        player_id=carrier.id,
        evolved_to=evolved_to,
        moved_to=moved_to,
        action=action,
    )
