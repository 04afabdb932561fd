"""Base class for CPU opponents."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from sugoroku import economy
from sugoroku.board import Board, Route
from sugoroku.cards import Card, CardCatalog, CardTarget, CardType
from sugoroku.config import CPU_SHOP_LIMIT, CPU_SHOP_RESERVE_FACTOR, THINKING_DELAY_MS
from sugoroku.rng import RandomSource
from sugoroku.state import Difficulty, GameState, Player, Property

RouteChoice = Tuple[Route, str]


@dataclass(frozen=True)
class CardPlay:
    """A card the agent wants to play, with its targets resolved."""

    card_id: str
    target: CardTarget = field(default_factory=CardTarget)


class CpuAgent(ABC):
    """
    Abstract base class for CPU opponents.

    Agents only ever return decisions; the turn engine carries them out.
    Subclasses implement the three difficulty-dependent heuristics:
    route choice, property purchase and card use.

    Attributes:
        board: Board the game is played on.
        cards: Card catalog.
        difficulty: Difficulty tier this agent plays at.
    """

    difficulty: Difficulty = Difficulty.NORMAL

    def __init__(self, board: Board, cards: CardCatalog):
        """
        Initialize the agent.

        Args:
            board: Board the game is played on.
            cards: Card catalog, used to look up hand cards.
        """
        self.board = board
        self.cards = cards

    @property
    def thinking_delay_ms(self) -> int:
        """How long a presentation layer may pause before showing a move."""
        return THINKING_DELAY_MS[self.difficulty.value]

    def choose_route(
        self, state: GameState, player: Player, choices: Sequence[RouteChoice], rng: RandomSource
    ) -> RouteChoice:
        """
        Pick a route at a junction.

        Args:
            state: Current game state.
            player: The moving player.
            choices: (route, next city id) pairs in board order.
            rng: Random source.

        Returns:
            One of ``choices``.
        """
        if len(choices) == 1:
            return choices[0]
        return self._choose_route(state, player, choices, rng)

    @abstractmethod
    def _choose_route(
        self, state: GameState, player: Player, choices: Sequence[RouteChoice], rng: RandomSource
    ) -> RouteChoice:
        pass

    @abstractmethod
    def decide_purchase(
        self, state: GameState, player: Player, prop: Property, rng: RandomSource
    ) -> bool:
        """Whether to buy an unowned property the player landed on."""
        pass

    def decide_card_use(
        self, state: GameState, player: Player, rng: RandomSource
    ) -> Optional[CardPlay]:
        """
        Decide which card, if any, to play at the start of the turn.

        Returns:
            A CardPlay with targets filled in, or None to skip.
        """
        if not player.hand:
            return None
        card = self._choose_card(state, player, rng)
        if card is None:
            return None
        return CardPlay(card.id, self.choose_card_target(state, player, card))

    @abstractmethod
    def _choose_card(self, state: GameState, player: Player, rng: RandomSource) -> Optional[Card]:
        pass

    # ---- Shared heuristics ----

    def distance_to_destination(self, state: GameState, city_id: str) -> int:
        return self.board.distance(city_id, state.destination_city_id)

    def hand_cards(self, player: Player) -> List[Card]:
        return [card for card in (self.cards.get(cid) for cid in player.hand) if card is not None]

    @staticmethod
    def strongest_opponent(state: GameState, player: Player) -> Optional[Player]:
        """Opponent with the highest total assets."""
        return economy.first_place_player(state.opponents_of(player.id))

    @staticmethod
    def city_property_value(state: GameState, player: Player, city_id: str) -> int:
        """Income of the properties in a city that are free or already ours."""
        return sum(
            economy.current_income(p)
            for p in economy.properties_in_city(state.properties, city_id)
            if p.owner_id is None or p.owner_id == player.id
        )

    def choose_card_target(self, state: GameState, player: Player, card: Card) -> CardTarget:
        """Aim targeted cards at the richest opponent or the destination."""
        variant = card.effect.target_type
        needs_opponent = (
            (card.type == CardType.BOMBEE_TRANSFER and variant != "last_to_second")
            or card.type == CardType.CARD_STEAL
            or (card.type == CardType.SELL_PROPERTY and variant == "opponent_forced")
        )
        if needs_opponent:
            opponent = self.strongest_opponent(state, player)
            return CardTarget(player_id=opponent.id if opponent else None)
        if card.type == CardType.MOVE_STEPS and variant == "any_station":
            return CardTarget(city_id=state.destination_city_id)
        return CardTarget()

    def shop_purchases(self, state: GameState, player: Player, lineup: Sequence[Card]) -> List[str]:
        """
        Cards to buy at a shop.

        Buys up to two cards in lineup order, each only while the player
        keeps at least three times its price in cash.
        """
        money = player.money
        room = self.cards.max_hand_size - len(player.hand)
        bought: List[str] = []
        for card in lineup:
            if len(bought) >= CPU_SHOP_LIMIT or room <= 0:
                break
            price = self.cards.shop_price(card)
            if money >= price * CPU_SHOP_RESERVE_FACTOR:
                bought.append(card.id)
                money -= price
                room -= 1
        return bought

    def accepts_upgrade(self, state: GameState, player: Player, prop: Property) -> bool:
        """CPUs always upgrade when they can afford it."""
        cost = economy.next_upgrade_cost(prop)
        return cost is not None and player.money >= cost
