"""Normal CPU: heads for the destination and buys on payback period."""

from typing import Optional, Sequence

from sugoroku import economy
from sugoroku.agents.base import CpuAgent, RouteChoice
from sugoroku.cards import Card, CardType
from sugoroku.rng import RandomSource
from sugoroku.state import Difficulty, GameState, Player, Property

PAYBACK_MARGIN = 0.8
ENDGAME_YEARS = 3


class NormalAgent(CpuAgent):
    """
    Takes the branch closest to the destination and buys a property when
    it pays for itself within the remaining years (with some margin) or
    completes a monopoly.
    """

    difficulty = Difficulty.NORMAL

    def _choose_route(
        self, state: GameState, player: Player, choices: Sequence[RouteChoice], rng: RandomSource
    ) -> RouteChoice:
        # min() keeps the first of equally close branches
        return min(choices, key=lambda choice: self.distance_to_destination(state, choice[1]))

    def decide_purchase(
        self, state: GameState, player: Player, prop: Property, rng: RandomSource
    ) -> bool:
        price = economy.current_price(prop)
        income = economy.current_income(prop)
        if player.money < price or income <= 0:
            return False
        if price / income <= PAYBACK_MARGIN * state.years_remaining:
            return True
        return economy.completes_monopoly(state.properties, prop, player.id)

    def _choose_card(self, state: GameState, player: Player, rng: RandomSource) -> Optional[Card]:
        hand = self.hand_cards(player)
        if state.years_remaining <= ENDGAME_YEARS:
            for card in hand:
                if card.type == CardType.MOVE_TO_DESTINATION:
                    return card
        if player.has_bombee:
            for card in hand:
                if card.type == CardType.BOMBEE_AWAY:
                    return card
        return None
