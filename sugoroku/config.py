"""
Game configuration settings and rule constants.
"""

from dataclasses import dataclass
from typing import Dict, Optional


MAX_PLAYERS = 4
MAX_HAND_SIZE = 8

# Bombee evolution thresholds (elapsed turns attached)
MINI_TO_NORMAL_TURNS = 5
NORMAL_TO_KING_TURNS = 10
BOMBEE_MIGRATION_CHANCE = 0.75

RARITY_WEIGHTS: Dict[str, int] = {
    "common": 60,
    "uncommon": 30,
    "rare": 10,
}

CARD_SHOP_PRICES: Dict[str, int] = {
    "common": 500,
    "uncommon": 1500,
    "rare": 5000,
}

CPU_SHOP_LIMIT = 2
CPU_SHOP_RESERVE_FACTOR = 3

DESTINATION_MIN_BONUS = 1000

# Presentation only: drivers may wait this long before showing a CPU move.
THINKING_DELAY_MS: Dict[str, int] = {
    "easy": 800,
    "normal": 1200,
    "hard": 1800,
}


@dataclass
class GameConfig:
    """Configuration for a new game."""

    total_years: int = 10
    starting_money: int = 10000
    start_city_id: str = "tokyo"
    start_month: int = 4

    max_hand_size: int = MAX_HAND_SIZE
    shop_lineup_size: int = 5

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.total_years < 1:
            raise ValueError("total_years must be at least 1")
        if not 1 <= self.start_month <= 12:
            raise ValueError("start_month must be between 1 and 12")
        if self.max_hand_size < 1:
            raise ValueError("max_hand_size must be at least 1")
