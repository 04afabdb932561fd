"""
Sugoroku Rules Engine

A deterministic, replayable simulation of a Japanese railway board game:
travel between cities, buy local businesses, play cards and survive the
Bombee.
"""

from .board import Board
from .config import GameConfig
from .content import Catalog, load_catalog, parse_catalog
from .engine import Decision, DecisionKind, DecisionRequest, PlayerConfig, Step, TurnEngine
from .rng import RandomSource
from .standard import standard_catalog
from .state import Difficulty, GamePhase, GameState, Player, PlayerKind, Property

__all__ = [
    "Board",
    "GameConfig",
    "Catalog",
    "load_catalog",
    "parse_catalog",
    "Decision",
    "DecisionKind",
    "DecisionRequest",
    "PlayerConfig",
    "Step",
    "TurnEngine",
    "RandomSource",
    "standard_catalog",
    "Difficulty",
    "GamePhase",
    "GameState",
    "Player",
    "PlayerKind",
    "Property",
]
