"""
GameState serialization to and from JSON-compatible dicts.

Enums are stored by value and tuples as lists, so the output of
``state_to_dict`` can go straight through ``json.dumps``.
"""

from typing import Any, Dict

from sugoroku.exceptions import PersistenceError
from sugoroku.state import (
    BombeeType,
    Difficulty,
    GamePhase,
    GameState,
    Player,
    PlayerKind,
    Property,
)


def _player_to_dict(player: Player) -> Dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "kind": player.kind.value,
        "difficulty": player.difficulty.value,
        "money": player.money,
        "total_assets": player.total_assets,
        "city_id": player.city_id,
        "previous_city_id": player.previous_city_id,
        "hand": list(player.hand),
        "bombee": player.bombee.value,
        "bombee_elapsed_turns": player.bombee_elapsed_turns,
        "bombee_immune_years": player.bombee_immune_years,
        "income_multiplier": player.income_multiplier,
        "dice_multiplier": player.dice_multiplier,
    }


def _property_to_dict(prop: Property) -> Dict[str, Any]:
    return {
        "id": prop.id,
        "city_id": prop.city_id,
        "name": prop.name,
        "price": prop.price,
        "income": prop.income,
        "upgrade_prices": list(prop.upgrade_prices),
        "upgrade_incomes": list(prop.upgrade_incomes),
        "upgrade_level": prop.upgrade_level,
        "owner_id": prop.owner_id,
    }


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """Serialize a GameState."""
    return {
        "game_id": state.game_id,
        "year": state.year,
        "month": state.month,
        "total_years": state.total_years,
        "turn_count": state.turn_count,
        "phase": state.phase.value,
        "current_player_index": state.current_player_index,
        "destination_city_id": state.destination_city_id,
        "players": [_player_to_dict(p) for p in state.players],
        "properties": [_property_to_dict(p) for p in state.properties],
    }


def _player_from_dict(data: Dict[str, Any]) -> Player:
    return Player(
        id=data["id"],
        name=data["name"],
        kind=PlayerKind(data.get("kind", PlayerKind.CPU.value)),
        difficulty=Difficulty(data.get("difficulty", Difficulty.NORMAL.value)),
        money=data["money"],
        total_assets=data.get("total_assets", data["money"]),
        city_id=data["city_id"],
        previous_city_id=data.get("previous_city_id"),
        hand=tuple(data.get("hand", ())),
        bombee=BombeeType(data.get("bombee", BombeeType.NONE.value)),
        bombee_elapsed_turns=data.get("bombee_elapsed_turns", 0),
        bombee_immune_years=data.get("bombee_immune_years", 0),
        income_multiplier=data.get("income_multiplier", 1),
        dice_multiplier=data.get("dice_multiplier", 1),
    )


def _property_from_dict(data: Dict[str, Any]) -> Property:
    return Property(
        id=data["id"],
        city_id=data["city_id"],
        name=data["name"],
        price=data["price"],
        income=data["income"],
        upgrade_prices=tuple(data.get("upgrade_prices", ())),
        upgrade_incomes=tuple(data.get("upgrade_incomes", ())),
        upgrade_level=data.get("upgrade_level", 0),
        owner_id=data.get("owner_id"),
    )


def state_from_dict(data: Dict[str, Any]) -> GameState:
    """
    Rebuild a GameState from ``state_to_dict`` output.

    Raises:
        PersistenceError: If a required field is missing or an enum value
            is unknown.
    """
    try:
        players = tuple(_player_from_dict(p) for p in data["players"])
        state = GameState(
            game_id=data["game_id"],
            year=data["year"],
            month=data["month"],
            total_years=data["total_years"],
            turn_count=data.get("turn_count", 0),
            phase=GamePhase(data["phase"]),
            current_player_index=data.get("current_player_index", 0),
            destination_city_id=data["destination_city_id"],
            players=players,
            properties=tuple(_property_from_dict(p) for p in data.get("properties", ())),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceError(f"Malformed game state: {e}") from e

    if not players or not 0 <= state.current_player_index < len(players):
        raise PersistenceError("Game state has no valid current player")
    return state
