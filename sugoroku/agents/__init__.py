"""CPU opponents, one class per difficulty."""

from typing import Dict, Type

from sugoroku.agents.base import CardPlay, CpuAgent, RouteChoice
from sugoroku.agents.easy import EasyAgent
from sugoroku.agents.hard import HardAgent
from sugoroku.agents.normal import NormalAgent
from sugoroku.board import Board
from sugoroku.cards import CardCatalog
from sugoroku.state import Difficulty

AGENT_CLASSES: Dict[Difficulty, Type[CpuAgent]] = {
    Difficulty.EASY: EasyAgent,
    Difficulty.NORMAL: NormalAgent,
    Difficulty.HARD: HardAgent,
}


def create_agent(difficulty: Difficulty, board: Board, cards: CardCatalog) -> CpuAgent:
    """Build the agent for a difficulty tier."""
    return AGENT_CLASSES[difficulty](board, cards)


__all__ = [
    "AGENT_CLASSES",
    "CardPlay",
    "CpuAgent",
    "EasyAgent",
    "HardAgent",
    "NormalAgent",
    "RouteChoice",
    "create_agent",
]
