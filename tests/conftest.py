"""Shared test fixtures for the Sugoroku engine tests."""

from dataclasses import replace
from typing import Iterable, Optional

import pytest

from sugoroku import economy
from sugoroku.board import Board, City, Route, RouteKind, SquareKind
from sugoroku.config import GameConfig
from sugoroku.engine import TurnEngine
from sugoroku.rng import RandomSource
from sugoroku.standard import standard_catalog
from sugoroku.state import GamePhase, GameState, Player, PlayerKind, Property


class ScriptedRandom(RandomSource):
    """
    RandomSource that replays fixed values.

    ``random()`` pops from ``randoms`` and falls back to 0.999 (so no
    chance-based effect fires); ``randint`` pops from ``ints`` and falls
    back to the low bound.
    """

    def __init__(self, randoms: Iterable[float] = (), ints: Iterable[int] = ()):
        super().__init__(0)
        self.randoms = list(randoms)
        self.ints = list(ints)

    def random(self) -> float:
        if self.randoms:
            return self.randoms.pop(0)
        return 0.999

    def randint(self, low: int, high: int) -> int:
        if self.ints:
            return self.ints.pop(0)
        return low


@pytest.fixture
def scripted():
    """Factory for scripted random sources."""
    return ScriptedRandom


@pytest.fixture
def board():
    """
    Small line with one branch.

    tokyo - yokohama - nagoya - osaka
                          \\- kyoto
    """
    cities = [
        City("tokyo", "Tokyo", "kanto", has_shop=True),
        City("yokohama", "Yokohama", "kanto"),
        City("nagoya", "Nagoya", "chubu"),
        City("osaka", "Osaka", "kinki", has_shop=True),
        City("kyoto", "Kyoto", "kinki"),
    ]
    routes = [
        Route("r1", "tokyo", "yokohama", RouteKind.LOCAL, (SquareKind.CARD,)),
        Route("r2", "yokohama", "nagoya", RouteKind.SHINKANSEN, (SquareKind.NORMAL,)),
        Route("r3", "nagoya", "osaka", RouteKind.LOCAL, (SquareKind.CARD,)),
        Route("r4", "nagoya", "kyoto", RouteKind.LOCAL, (SquareKind.NORMAL,)),
    ]
    return Board(cities, routes)


@pytest.fixture
def properties():
    """Properties for the small board. Nagoya has none."""
    return (
        Property("tokyo_1", "tokyo", "Sushi Bar", 1000, 100, (500, 800), (150, 200)),
        Property("tokyo_2", "tokyo", "Tower Shop", 3000, 300),
        Property("yokohama_1", "yokohama", "Harbor Cafe", 2000, 200),
        Property("osaka_1", "osaka", "Takoyaki Stand", 500, 50),
        Property("kyoto_1", "kyoto", "Temple Inn", 4000, 400),
        Property("kyoto_2", "kyoto", "Tea House", 1000, 100),
    )


@pytest.fixture
def cards():
    """The built-in card catalog (hand limit 8)."""
    return standard_catalog().cards


@pytest.fixture
def make_player():
    """Factory for players; CPU at normal difficulty in Tokyo by default."""

    def _make(player_id: str, money: int = 10000, city_id: str = "tokyo", **kwargs) -> Player:
        return Player(
            id=player_id,
            name=kwargs.pop("name", player_id.capitalize()),
            money=money,
            total_assets=money,
            city_id=city_id,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_state(properties, make_player):
    """
    Factory for game states.

    Properties default to the small board's; ``owners`` maps property id
    to owner id. Total assets are recomputed.
    """

    def _make(
        players: Optional[Iterable[Player]] = None,
        owners: Optional[dict] = None,
        props: Optional[Iterable[Property]] = None,
        destination: str = "osaka",
        year: int = 1,
        month: int = 4,
        total_years: int = 10,
        phase: GamePhase = GamePhase.DICE_ROLL,
        current: int = 0,
    ) -> GameState:
        if players is None:
            players = [make_player("alice"), make_player("bob")]
        owners = owners or {}
        base = properties if props is None else tuple(props)
        state = GameState(
            game_id="game_test",
            year=year,
            month=month,
            total_years=total_years,
            turn_count=0,
            phase=phase,
            current_player_index=current,
            destination_city_id=destination,
            players=tuple(players),
            properties=tuple(
                replace(p, owner_id=owners.get(p.id, p.owner_id)) for p in base
            ),
        )
        return economy.recalc_total_assets(state)

    return _make


@pytest.fixture
def alice_and_bob(make_player):
    """Two human players in Tokyo with 10000 each."""
    return [
        make_player("alice", kind=PlayerKind.HUMAN),
        make_player("bob", kind=PlayerKind.HUMAN),
    ]


@pytest.fixture
def make_engine(board, cards, properties):
    """Factory for engines on the small board with a given random source."""

    def _make(rng: Optional[RandomSource] = None, events=(), **config) -> TurnEngine:
        return TurnEngine(board, cards, properties, events, GameConfig(**config), rng or RandomSource(42))

    return _make
