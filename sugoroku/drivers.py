"""
Drivers answer the decisions the turn engine asks of human seats.

A presentation layer implements ``Driver``; ``AgentDriver`` lets a CPU
heuristic sit in a human seat (auto-play), ``ScriptedDriver`` replays a
fixed list of answers and ``ConsoleDriver`` asks on a terminal.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional, Sequence

from sugoroku import economy
from sugoroku.agents import CpuAgent, create_agent
from sugoroku.board import Board
from sugoroku.cards import Card, CardCatalog, CardTarget, CardType
from sugoroku.config import CPU_SHOP_LIMIT
from sugoroku.engine import Decision, DecisionKind, DecisionRequest
from sugoroku.exceptions import InvalidActionError
from sugoroku.rng import RandomSource
from sugoroku.state import Difficulty, GameState, Player, Property

logger = logging.getLogger(__name__)


class Driver(ABC):
    """Answers decision requests for human players."""

    @abstractmethod
    def decide(self, state: GameState, request: DecisionRequest) -> Decision:
        """
        Answer a pending request.

        Args:
            state: Game state at the moment of the request.
            request: What is being asked, with the allowed options.

        Returns:
            The Decision to feed back into ``TurnEngine.advance``.
        """
        pass


class AgentDriver(Driver):
    """Answers every request with a CPU heuristic."""

    def __init__(
        self,
        board: Board,
        cards: CardCatalog,
        difficulty: Difficulty = Difficulty.NORMAL,
        rng: Optional[RandomSource] = None,
    ):
        self.agent: CpuAgent = create_agent(difficulty, board, cards)
        self.board = board
        self.cards = cards
        self.rng = rng or RandomSource()

    def decide(self, state: GameState, request: DecisionRequest) -> Decision:
        player = state.get_player(request.player_id)
        kind = request.kind

        if kind == DecisionKind.USE_CARD:
            # One attempt per turn, like a CPU seat
            if request.details.get("attempts", 0) > 0:
                return Decision()
            play = self.agent.decide_card_use(state, player, self.rng)
            if play is None or play.card_id not in request.options:
                return Decision()
            return Decision(choice=play.card_id, target=play.target)

        if kind == DecisionKind.CHOOSE_ROUTE:
            choices = []
            for route_id in request.options:
                route = self.board.get_route(route_id)
                choices.append((route, self.board.other_city_id(route, player.city_id)))
            route, _ = self.agent.choose_route(state, player, choices, self.rng)
            return Decision(choice=route.id)

        if kind == DecisionKind.BUY_PROPERTY:
            prop = state.get_property(request.options[0])
            return Decision(accept=self.agent.decide_purchase(state, player, prop, self.rng))

        if kind == DecisionKind.UPGRADE_PROPERTY:
            prop = state.get_property(request.options[0])
            return Decision(accept=self.agent.accepts_upgrade(state, player, prop))

        if kind == DecisionKind.SHOP:
            if request.details.get("purchases", 0) >= CPU_SHOP_LIMIT:
                return Decision()
            lineup = [self.cards.get(card_id) for card_id in request.options]
            picks = self.agent.shop_purchases(state, player, lineup)
            return Decision(choice=picks[0] if picks else None)

        if kind == DecisionKind.LIQUIDATE:
            owned = [state.get_property(pid) for pid in request.options]
            cheapest = economy.cheapest_owned(owned, player.id)
            return Decision(choice=cheapest.id if cheapest else None)

        raise InvalidActionError(f"Unsupported decision kind: {kind}")


class ScriptedDriver(Driver):
    """Replays a fixed sequence of decisions; used for tests and replays."""

    def __init__(self, decisions: Iterable[Decision]):
        self._decisions: List[Decision] = list(decisions)
        self.requests: List[DecisionRequest] = []

    @property
    def remaining(self) -> int:
        return len(self._decisions)

    def decide(self, state: GameState, request: DecisionRequest) -> Decision:
        self.requests.append(request)
        if not self._decisions:
            raise InvalidActionError(f"No scripted answer left for {request.kind.value}")
        return self._decisions.pop(0)


class ConsoleDriver(Driver):
    """Prompts on a terminal. Input and output are injectable for testing."""

    def __init__(
        self,
        cards: CardCatalog,
        board: Board,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        self.cards = cards
        self.board = board
        self.input_fn = input_fn
        self.output_fn = output_fn

    def _ask_option(self, options: Sequence[str], labels: List[str], allow_skip: bool) -> Optional[str]:
        for i, label in enumerate(labels, start=1):
            self.output_fn(f"  {i}. {label}")
        hint = " (0 to skip)" if allow_skip else ""
        while True:
            answer = self.input_fn(f"Choose 1-{len(labels)}{hint}: ").strip()
            if allow_skip and answer in ("", "0"):
                return None
            if answer.isdigit() and 1 <= int(answer) <= len(labels):
                return options[int(answer) - 1]
            self.output_fn("Invalid choice.")

    def _ask_yes_no(self, prompt: str) -> bool:
        return self.input_fn(f"{prompt} [y/N]: ").strip().lower() in ("y", "yes")

    def _ask_property(self, title: str, props: List[Property]) -> Optional[str]:
        if not props:
            return None
        self.output_fn(title)
        return self._ask_option([p.id for p in props], [f"{p.name} ({p.price})" for p in props], False)

    def _card_target(self, state: GameState, player: Player, card: Card) -> CardTarget:
        """Ask for whatever the chosen card needs: a station, a property or a rival."""
        variant = card.effect.target_type

        if card.type == CardType.MOVE_STEPS and variant == "any_station":
            cities = self.board.cities
            self.output_fn("Teleport to which station?")
            city_id = self._ask_option([c.id for c in cities], [c.name for c in cities], False)
            return CardTarget(city_id=city_id)

        if card.type == CardType.SELL_PROPERTY and variant not in ("current_city_all", "opponent_forced"):
            owned = economy.owned_by(state.properties, player.id)
            return CardTarget(property_id=self._ask_property("Sell which property?", owned))

        if card.type == CardType.BUY_PROPERTY and variant == "current_city_free_one":
            free = [
                p for p in economy.properties_in_city(state.properties, player.city_id) if not p.is_owned
            ]
            return CardTarget(property_id=self._ask_property("Take which property?", free))

        needs_rival = (
            card.type == CardType.CARD_STEAL
            or (card.type == CardType.SELL_PROPERTY and variant == "opponent_forced")
            or (card.type == CardType.BOMBEE_TRANSFER and variant != "last_to_second")
        )
        opponents = state.opponents_of(player.id)
        if not needs_rival or not opponents:
            return CardTarget()
        self.output_fn("Target which player?")
        victim_id = self._ask_option([p.id for p in opponents], [p.name for p in opponents], False)

        victim = state.get_player(victim_id)
        if card.type == CardType.CARD_STEAL and variant == "selected_card" and victim.hand:
            hand = list(dict.fromkeys(victim.hand))
            self.output_fn(f"Take which of {victim.name}'s cards?")
            card_id = self._ask_option(hand, [self.cards.get(cid).name for cid in hand], False)
            return CardTarget(player_id=victim_id, card_id=card_id)
        return CardTarget(player_id=victim_id)

    def decide(self, state: GameState, request: DecisionRequest) -> Decision:
        player = state.get_player(request.player_id)
        kind = request.kind
        self.output_fn(f"\n{player.name} ({player.money}) - {kind.value.replace('_', ' ')}")

        if kind == DecisionKind.USE_CARD:
            labels = [self.cards.get(cid).name for cid in request.options]
            choice = self._ask_option(request.options, labels, allow_skip=True)
            if choice is None:
                return Decision()
            return Decision(choice=choice, target=self._card_target(state, player, self.cards.get(choice)))

        if kind == DecisionKind.CHOOSE_ROUTE:
            labels = [f"{c['city_id']} via {c['kind']}" for c in request.details.get("choices", [])]
            return Decision(choice=self._ask_option(request.options, labels, allow_skip=False))

        if kind == DecisionKind.BUY_PROPERTY:
            prop = state.get_property(request.options[0])
            return Decision(accept=self._ask_yes_no(f"Buy {prop.name} for {prop.price}?"))

        if kind == DecisionKind.UPGRADE_PROPERTY:
            prop = state.get_property(request.options[0])
            cost = request.details.get("cost")
            return Decision(accept=self._ask_yes_no(f"Upgrade {prop.name} for {cost}?"))

        if kind == DecisionKind.SHOP:
            prices = request.details.get("prices", {})
            labels = [f"{self.cards.get(cid).name} ({prices.get(cid)})" for cid in request.options]
            return Decision(choice=self._ask_option(request.options, labels, allow_skip=True))

        if kind == DecisionKind.LIQUIDATE:
            self.output_fn(f"Rent due: {request.details.get('fee')}. Sell a property or skip to go into debt.")
            labels = [state.get_property(pid).name for pid in request.options]
            return Decision(choice=self._ask_option(request.options, labels, allow_skip=True))

        raise InvalidActionError(f"Unsupported decision kind: {kind}")
