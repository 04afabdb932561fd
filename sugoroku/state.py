"""
Game state model.

Every value here is frozen. Rules build a new GameState with the
``with_*`` helpers instead of editing players or properties in place.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple


class PlayerKind(Enum):
    """Who controls a player."""

    HUMAN = "human"
    CPU = "cpu"


class Difficulty(Enum):
    """CPU difficulty tiers."""

    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


class BombeeType(Enum):
    """Tiers of the roaming debuff."""

    NONE = "none"
    MINI = "mini"
    NORMAL = "normal"
    KING = "king"


class GamePhase(Enum):
    """Phase of the current turn."""

    CARD_USE = "card_use"
    DICE_ROLL = "dice_roll"
    MOVING = "moving"
    JUNCTION = "junction"
    SQUARE_ACTION = "square_action"
    BOMBEE_ACTION = "bombee_action"
    YEAR_END = "year_end"
    GAME_OVER = "game_over"


class Reason(Enum):
    """Why a rule operation did not go through."""

    NOT_FOUND = "not_found"
    NOT_OWNER = "not_owner"
    ALREADY_OWNED = "already_owned"
    NOT_ENOUGH_MONEY = "not_enough_money"
    HAND_FULL = "hand_full"
    NO_TARGET = "no_target"


@dataclass(frozen=True)
class Player:
    """A seat at the table."""

    id: str
    name: str
    kind: PlayerKind = PlayerKind.CPU
    difficulty: Difficulty = Difficulty.NORMAL
    money: int = 0
    total_assets: int = 0
    city_id: str = ""
    previous_city_id: Optional[str] = None
    hand: Tuple[str, ...] = ()
    bombee: BombeeType = BombeeType.NONE
    bombee_elapsed_turns: int = 0
    bombee_immune_years: int = 0
    income_multiplier: float = 1
    dice_multiplier: float = 1

    @property
    def is_cpu(self) -> bool:
        return self.kind == PlayerKind.CPU

    @property
    def has_bombee(self) -> bool:
        return self.bombee != BombeeType.NONE

    @property
    def is_immune(self) -> bool:
        return self.bombee_immune_years > 0


@dataclass(frozen=True)
class Property:
    """
    A purchasable property in a city.

    ``upgrade_prices[i]`` is the cost of going from level i to i + 1 and
    ``upgrade_incomes[i]`` the income earned at level i + 1.
    """

    id: str
    city_id: str
    name: str
    price: int
    income: int
    upgrade_prices: Tuple[int, ...] = ()
    upgrade_incomes: Tuple[int, ...] = ()
    upgrade_level: int = 0
    owner_id: Optional[str] = None

    @property
    def max_level(self) -> int:
        return len(self.upgrade_prices)

    @property
    def is_owned(self) -> bool:
        return self.owner_id is not None


@dataclass(frozen=True)
class GameState:
    """
    Complete state of a game in progress.

    This is the only value that is saved and restored.
    """

    game_id: str
    year: int
    month: int
    total_years: int
    turn_count: int
    phase: GamePhase
    current_player_index: int
    destination_city_id: str
    players: Tuple[Player, ...]
    properties: Tuple[Property, ...]

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def years_remaining(self) -> int:
        return self.total_years - self.year

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        """Look up a player by id."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_property(self, property_id: Optional[str]) -> Optional[Property]:
        """Look up a property by id."""
        for prop in self.properties:
            if prop.id == property_id:
                return prop
        return None

    def opponents_of(self, player_id: str) -> Tuple[Player, ...]:
        return tuple(p for p in self.players if p.id != player_id)

    def with_player(self, player: Player) -> "GameState":
        """Return a copy with the player of the same id replaced."""
        return self.with_players([player])

    def with_players(self, players: Iterable[Player]) -> "GameState":
        updates: Dict[str, Player] = {p.id: p for p in players}
        return replace(self, players=tuple(updates.get(p.id, p) for p in self.players))

    def with_property(self, prop: Property) -> "GameState":
        """Return a copy with the property of the same id replaced."""
        return self.with_properties([prop])

    def with_properties(self, properties: Iterable[Property]) -> "GameState":
        updates: Dict[str, Property] = {p.id: p for p in properties}
        return replace(
            self, properties=tuple(updates.get(p.id, p) for p in self.properties)
        )


@dataclass(frozen=True)
class Outcome:
    """Result of a rule operation: the new state plus whether it went through."""

    success: bool
    state: GameState
    reason: Optional[Reason] = None
    message: str = ""
