"""Hard CPU: weighs income along the way and scores every card."""

from typing import Optional, Sequence

from sugoroku import economy
from sugoroku.agents.base import CpuAgent, RouteChoice
from sugoroku.cards import Card, CardType
from sugoroku.rng import RandomSource
from sugoroku.state import Difficulty, GameState, Player, Property

INCOME_WEIGHT = 0.01
MIN_YIELD = 0.15
CARD_SCORE_THRESHOLD = 50


class HardAgent(CpuAgent):
    """
    Scores each branch by distance to the destination offset by the income
    available in the next city, buys aggressively toward monopolies and
    high-yield properties, and plays its best-scoring card.
    """

    difficulty = Difficulty.HARD

    def _route_score(self, state: GameState, player: Player, choice: RouteChoice) -> float:
        distance = self.distance_to_destination(state, choice[1])
        return -distance + self.city_property_value(state, player, choice[1]) * INCOME_WEIGHT

    def _choose_route(
        self, state: GameState, player: Player, choices: Sequence[RouteChoice], rng: RandomSource
    ) -> RouteChoice:
        return max(choices, key=lambda choice: self._route_score(state, player, choice))

    def decide_purchase(
        self, state: GameState, player: Player, prop: Property, rng: RandomSource
    ) -> bool:
        price = economy.current_price(prop)
        if player.money < price:
            return False
        if economy.completes_monopoly(state.properties, prop, player.id):
            return True
        income = economy.current_income(prop)
        if price > 0 and income / price >= MIN_YIELD:
            return True
        return income > 0 and price / income <= state.years_remaining

    def score_card(self, state: GameState, player: Player, card: Card) -> float:
        """Heuristic value of playing ``card`` now."""
        if card.type == CardType.MOVE_TO_DESTINATION:
            return self.distance_to_destination(state, player.city_id) * 10
        if card.type == CardType.BOMBEE_AWAY:
            return 100 if player.has_bombee else 0
        if card.type == CardType.BOMBEE_TRANSFER:
            return 80 if player.has_bombee else 0
        if card.type == CardType.GET_MONEY:
            return 40
        if card.type == CardType.STEAL_PROPERTY:
            return 60
        return 20

    def _choose_card(self, state: GameState, player: Player, rng: RandomSource) -> Optional[Card]:
        hand = self.hand_cards(player)
        if not hand:
            return None
        best = max(hand, key=lambda card: self.score_card(state, player, card))
        if self.score_card(state, player, best) >= CARD_SCORE_THRESHOLD:
            return best
        return None
