"""Easy CPU: mostly random."""

from typing import Optional, Sequence

from sugoroku.agents.base import CpuAgent, RouteChoice
from sugoroku.cards import Card
from sugoroku.rng import RandomSource
from sugoroku.state import Difficulty, GameState, Player, Property

CARD_USE_CHANCE = 0.3
PURCHASE_CHANCE = 0.5
MAX_SPEND_RATIO = 0.5


class EasyAgent(CpuAgent):
    """
    Picks routes at random, buys cheap properties on a coin flip and plays
    a random card now and then.
    """

    difficulty = Difficulty.EASY

    def _choose_route(
        self, state: GameState, player: Player, choices: Sequence[RouteChoice], rng: RandomSource
    ) -> RouteChoice:
        return rng.pick(choices)

    def decide_purchase(
        self, state: GameState, player: Player, prop: Property, rng: RandomSource
    ) -> bool:
        if player.money < prop.price or prop.price > player.money * MAX_SPEND_RATIO:
            return False
        return rng.random() < PURCHASE_CHANCE

    def _choose_card(self, state: GameState, player: Player, rng: RandomSource) -> Optional[Card]:
        if rng.random() >= CARD_USE_CHANCE:
            return None
        return self.cards.get(rng.pick(player.hand))
