"""
Turn engine: drives a game one phase at a time.

``TurnEngine.advance`` runs the phase machine until a human has to decide
something, the turn ends, or the game is over. Human choices come back as
``Decision`` values on the next ``advance`` call; CPU players are decided
by their agents without ever suspending.
"""

import logging
import math
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sugoroku import bombee, economy
from sugoroku.agents import CpuAgent, create_agent
from sugoroku.board import Board, Route
from sugoroku.cards import (
    CardCatalog,
    CardResult,
    CardTarget,
    buy_card,
    can_draw_card,
    discard_card,
    gain_card,
    use_card,
)
from sugoroku.config import MAX_PLAYERS, GameConfig
from sugoroku.destination import process_arrival
from sugoroku.events import GameEvent, apply_event, draw_monthly_events
from sugoroku.exceptions import ContentError, InvalidActionError
from sugoroku.rng import RandomSource
from sugoroku.state import (
    Difficulty,
    GamePhase,
    GameState,
    Player,
    PlayerKind,
    Property,
    Reason,
)
from sugoroku.turn_events import EventLog, EventType, TurnEvent

if TYPE_CHECKING:
    from sugoroku.content import Catalog
    from sugoroku.drivers import Driver

logger = logging.getLogger(__name__)


class DecisionKind(Enum):
    """Choices a human player can be asked to make."""

    USE_CARD = "use_card"
    CHOOSE_ROUTE = "choose_route"
    BUY_PROPERTY = "buy_property"
    UPGRADE_PROPERTY = "upgrade_property"
    SHOP = "shop"
    LIQUIDATE = "liquidate"


class SquareStage(Enum):
    """Progress through resolving the city a player stopped in."""

    DESTINATION = "destination"
    SHOP = "shop"
    PROPERTY = "property"
    RENT = "rent"
    DONE = "done"


@dataclass(frozen=True)
class PlayerConfig:
    """Seat description used to start a new game."""

    name: str
    kind: PlayerKind = PlayerKind.CPU
    difficulty: Difficulty = Difficulty.NORMAL


@dataclass(frozen=True)
class DecisionRequest:
    """
    A question for the driver.

    ``options`` lists the ids that may be chosen (card, route, property or
    card-shop ids depending on ``kind``); ``details`` carries context for
    display.
    """

    kind: DecisionKind
    player_id: str
    options: Tuple[str, ...] = ()
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Decision:
    """
    A driver's answer.

    ``choice`` picks one of the request's options; None means skip, leave
    the shop, or accept debt. ``accept`` answers yes/no requests.
    ``discard`` turns a card choice into a discard.
    """

    choice: Optional[str] = None
    accept: bool = False
    target: Optional[CardTarget] = None
    discard: bool = False


@dataclass(frozen=True)
class TurnContext:
    """Transient per-turn data that is not part of the saved game."""

    dice_bonus: int = 0
    card_phase_done: bool = False
    cards_used: int = 0
    card_attempts: int = 0
    card_drawn_this_move: bool = False
    dice_total: int = 0
    remaining_steps: int = 0
    city_id: Optional[str] = None
    square_stage: SquareStage = SquareStage.DESTINATION
    shop_lineup: Tuple[str, ...] = ()
    shop_purchases: int = 0
    rent_due: int = 0
    rent_property_id: Optional[str] = None
    pending: Optional[DecisionRequest] = None


@dataclass(frozen=True)
class Step:
    """What one ``advance`` call produced."""

    state: GameState
    context: TurnContext
    request: Optional[DecisionRequest] = None
    events: Tuple[TurnEvent, ...] = ()
    turn_complete: bool = False

    @property
    def game_over(self) -> bool:
        return self.state.phase == GamePhase.GAME_OVER


class _Turn:
    """Working copy of state, context and narration within one advance call."""

    def __init__(self, state: GameState, context: TurnContext):
        self.state = state
        self.ctx = context
        self.events: List[TurnEvent] = []
        self.complete = False

    @property
    def player(self) -> Player:
        return self.state.current_player

    def log(self, event_type: EventType, player_id: Optional[str] = None, **details: Any) -> None:
        self.events.append(TurnEvent(event_type, player_id, details))

    def phase(self, phase: GamePhase) -> None:
        self.state = replace(self.state, phase=phase)

    def update(self, **changes: Any) -> None:
        self.ctx = replace(self.ctx, **changes)

    def request(self, kind: DecisionKind, options: Iterable[str], **details: Any) -> None:
        self.update(pending=DecisionRequest(kind, self.player.id, tuple(options), details))


class TurnEngine:
    """
    Renderer-agnostic orchestrator for a game.

    Board, cards, properties and events are the immutable content of the
    game; every call takes and returns a GameState.
    """

    def __init__(
        self,
        board: Board,
        cards: CardCatalog,
        properties: Sequence[Property] = (),
        events: Sequence[GameEvent] = (),
        config: Optional[GameConfig] = None,
        rng: Optional[RandomSource] = None,
    ):
        self.config = config or GameConfig()
        # The configured hand limit wins over the catalog's
        if cards.max_hand_size != self.config.max_hand_size:
            cards = CardCatalog(cards.all(), self.config.max_hand_size)
        self.board = board
        self.cards = cards
        self.properties = tuple(properties)
        self.events = tuple(events)
        self.rng = rng or RandomSource(self.config.seed)
        self._agents: Dict[Difficulty, CpuAgent] = {}
        self._phases = {
            GamePhase.CARD_USE: self._card_use,
            GamePhase.DICE_ROLL: self._dice_roll,
            GamePhase.MOVING: self._moving,
            GamePhase.JUNCTION: self._junction,
            GamePhase.SQUARE_ACTION: self._square_action,
            GamePhase.BOMBEE_ACTION: self._bombee_action,
            GamePhase.YEAR_END: self._year_end,
        }
        self._answers = {
            DecisionKind.USE_CARD: self._answer_use_card,
            DecisionKind.CHOOSE_ROUTE: self._answer_route,
            DecisionKind.BUY_PROPERTY: self._answer_buy,
            DecisionKind.UPGRADE_PROPERTY: self._answer_upgrade,
            DecisionKind.SHOP: self._answer_shop,
            DecisionKind.LIQUIDATE: self._answer_liquidate,
        }

    @classmethod
    def from_catalog(
        cls, catalog: "Catalog", config: Optional[GameConfig] = None, rng: Optional[RandomSource] = None
    ) -> "TurnEngine":
        return cls(catalog.board, catalog.cards, catalog.properties, catalog.events, config, rng)

    def agent_for(self, difficulty: Difficulty) -> CpuAgent:
        if difficulty not in self._agents:
            self._agents[difficulty] = create_agent(difficulty, self.board, self.cards)
        return self._agents[difficulty]

    # ---- Game lifecycle ----

    def new_game(self, player_configs: Sequence[PlayerConfig]) -> GameState:
        """
        Create the opening state.

        Everyone starts in the start city with the starting money; the
        destination is drawn from the other cities and the Bombee attaches
        to last place.
        """
        if not 1 <= len(player_configs) <= MAX_PLAYERS:
            raise ValueError(f"A game needs between 1 and {MAX_PLAYERS} players")
        start = self.config.start_city_id
        if not self.board.has_city(start):
            raise ContentError(f"Start city {start} is not on the board")

        money = self.config.starting_money
        players = tuple(
            Player(
                id=f"player_{i}",
                name=cfg.name,
                kind=cfg.kind,
                difficulty=cfg.difficulty,
                money=money,
                total_assets=money,
                city_id=start,
            )
            for i, cfg in enumerate(player_configs)
        )
        destination = self.board.random_destination(self.rng, exclude=[start]) or start
        state = GameState(
            game_id=f"game_{uuid.uuid4().hex[:12]}",
            year=1,
            month=self.config.start_month,
            total_years=self.config.total_years,
            turn_count=0,
            phase=GamePhase.DICE_ROLL,
            current_player_index=0,
            destination_city_id=destination,
            players=players,
            properties=tuple(replace(p, owner_id=None, upgrade_level=0) for p in self.properties),
        )
        state = bombee.attach_to_last_place(economy.recalc_total_assets(state))
        logger.info(
            f"Created game {state.game_id} with {len(players)} players, "
            f"{state.total_years} years, destination {destination}"
        )
        return state

    def advance(
        self,
        state: GameState,
        context: Optional[TurnContext] = None,
        decision: Optional[Decision] = None,
    ) -> Step:
        """
        Run the phase machine.

        Args:
            state: Current game state.
            context: Context returned by the previous step of this turn, or
                None at the start of a turn.
            decision: Answer to the pending request, if any.

        Returns:
            A Step holding the new state and context plus either a pending
            request or ``turn_complete=True``.

        Raises:
            InvalidActionError: If a decision is given with nothing pending,
                or names an option that was not offered.
        """
        turn = _Turn(state, context or TurnContext())
        if decision is not None:
            self._apply_decision(turn, decision)
        elif turn.ctx.pending is not None:
            return Step(state, turn.ctx, turn.ctx.pending)

        while turn.ctx.pending is None and not turn.complete:
            if turn.state.phase == GamePhase.GAME_OVER:
                turn.complete = True
                break
            self._phases[turn.state.phase](turn)

        return Step(turn.state, turn.ctx, turn.ctx.pending, tuple(turn.events), turn.complete)

    def play_turn(self, state: GameState, driver: "Driver") -> Step:
        """Play one full turn, asking ``driver`` whenever a human must decide."""
        context: Optional[TurnContext] = None
        decision: Optional[Decision] = None
        events: List[TurnEvent] = []
        while True:
            step = self.advance(state, context, decision)
            events.extend(step.events)
            state, context = step.state, step.context
            if step.request is None:
                return replace(step, events=tuple(events))
            decision = driver.decide(state, step.request)

    def run(
        self,
        state: GameState,
        driver: "Driver",
        max_turns: Optional[int] = None,
        log: Optional[EventLog] = None,
    ) -> GameState:
        """Play turns until the game ends or ``max_turns`` turns were played."""
        played = 0
        while state.phase != GamePhase.GAME_OVER:
            if max_turns is not None and played >= max_turns:
                break
            step = self.play_turn(state, driver)
            state = step.state
            if log is not None:
                log.extend(list(step.events))
            played += 1
        return state

    # ---- Decisions ----

    def _apply_decision(self, turn: _Turn, decision: Decision) -> None:
        request = turn.ctx.pending
        if request is None:
            raise InvalidActionError("No decision is pending")
        turn.update(pending=None)
        self._answers[request.kind](turn, request, decision)

    @staticmethod
    def _check_option(request: DecisionRequest, choice: Optional[str]) -> None:
        if choice is not None and choice not in request.options:
            raise InvalidActionError(f"{choice!r} is not an option for {request.kind.value}")

    def _answer_use_card(self, turn: _Turn, request: DecisionRequest, decision: Decision) -> None:
        self._check_option(request, decision.choice)
        if decision.choice is None:
            turn.update(card_phase_done=True)
            turn.phase(GamePhase.DICE_ROLL)
            return
        player = turn.player
        if decision.discard:
            result = discard_card(turn.state, player.id, decision.choice)
            turn.state = result.state
            turn.log(EventType.CARD_DISCARD, player.id, card_id=decision.choice)
            return
        turn.update(card_attempts=turn.ctx.card_attempts + 1)
        result = use_card(
            turn.state, self.cards, self.board, player.id, decision.choice, decision.target, self.rng
        )
        self._resolve_card(turn, decision.choice, result)

    def _answer_route(self, turn: _Turn, request: DecisionRequest, decision: Decision) -> None:
        if decision.choice is None:
            raise InvalidActionError("A route must be chosen")
        self._check_option(request, decision.choice)
        route = self.board.get_route(decision.choice)
        self._step(turn, route, self.board.other_city_id(route, turn.player.city_id))

    def _answer_buy(self, turn: _Turn, request: DecisionRequest, decision: Decision) -> None:
        if decision.accept:
            self._buy(turn, request.options[0])
        turn.update(square_stage=SquareStage.DONE)

    def _answer_upgrade(self, turn: _Turn, request: DecisionRequest, decision: Decision) -> None:
        if decision.accept:
            self._upgrade(turn, request.options[0])
        turn.update(square_stage=SquareStage.DONE)

    def _answer_shop(self, turn: _Turn, request: DecisionRequest, decision: Decision) -> None:
        self._check_option(request, decision.choice)
        if decision.choice is None:
            turn.update(square_stage=SquareStage.PROPERTY, shop_lineup=(), shop_purchases=0)
            return
        self._buy_card(turn, decision.choice)

    def _answer_liquidate(self, turn: _Turn, request: DecisionRequest, decision: Decision) -> None:
        self._check_option(request, decision.choice)
        if decision.choice is None:
            self._charge_rent(turn)
            return
        player = turn.player
        result = economy.sell_property_forcibly(turn.state, player.id, decision.choice)
        turn.state = result.state
        turn.log(EventType.LIQUIDATION, player.id, property_ids=[decision.choice], raised=result.amount)

    # ---- Phases ----

    def _card_use(self, turn: _Turn) -> None:
        player = turn.player
        if turn.ctx.card_phase_done or not player.hand:
            turn.update(card_phase_done=True)
            turn.phase(GamePhase.DICE_ROLL)
            return
        if not player.is_cpu:
            turn.request(
                DecisionKind.USE_CARD,
                dict.fromkeys(player.hand),
                cards_used=turn.ctx.cards_used,
                attempts=turn.ctx.card_attempts,
            )
            return

        turn.update(card_phase_done=True)
        play = self.agent_for(player.difficulty).decide_card_use(turn.state, player, self.rng)
        if play is None:
            turn.phase(GamePhase.DICE_ROLL)
            return
        result = use_card(
            turn.state, self.cards, self.board, player.id, play.card_id, play.target, self.rng
        )
        if not self._resolve_card(turn, play.card_id, result):
            turn.phase(GamePhase.DICE_ROLL)

    def _resolve_card(self, turn: _Turn, card_id: str, result: CardResult) -> bool:
        """Apply a card outcome. Returns True when the card moved the player."""
        player_id = turn.player.id
        if not result.success:
            turn.log(
                EventType.CARD_FAILED,
                player_id,
                card_id=card_id,
                reason=result.reason.value if result.reason else None,
                message=result.message,
            )
            return False

        turn.state = result.state
        turn.update(cards_used=turn.ctx.cards_used + 1)
        turn.log(EventType.CARD_USE, player_id, card_id=card_id, message=result.message)
        if result.dice_bonus:
            turn.update(dice_bonus=result.dice_bonus)

        if result.move_steps > 0:
            turn.update(
                card_phase_done=True,
                remaining_steps=result.move_steps,
                card_drawn_this_move=False,
            )
            turn.phase(GamePhase.MOVING)
            return True
        if result.moved_to is not None:
            turn.update(card_phase_done=True, card_drawn_this_move=False)
            for route_id in result.path:
                self._maybe_draw(turn, self.board.get_route(route_id))
            self._arrive(turn, result.moved_to)
            return True
        return False

    def _dice_roll(self, turn: _Turn) -> None:
        if not turn.ctx.card_phase_done:
            turn.phase(GamePhase.CARD_USE)
            return
        player = turn.player
        die = self.rng.roll_dice()
        total = math.floor((die + turn.ctx.dice_bonus) * player.dice_multiplier)
        turn.state = turn.state.with_player(replace(player, dice_multiplier=1))
        turn.log(
            EventType.DICE_ROLL,
            player.id,
            die=die,
            bonus=turn.ctx.dice_bonus,
            multiplier=player.dice_multiplier,
            total=total,
        )
        turn.update(dice_bonus=0, dice_total=total, remaining_steps=total, card_drawn_this_move=False)
        turn.phase(GamePhase.MOVING)

    def _moving(self, turn: _Turn) -> None:
        player = turn.player
        if turn.ctx.remaining_steps <= 0:
            self._arrive(turn, player.city_id)
            return
        choices = self.board.route_choices(player.city_id)
        if not choices:
            turn.update(remaining_steps=0)
            return
        if len(choices) > 1:
            turn.phase(GamePhase.JUNCTION)
            return
        route, next_city = choices[0]
        self._step(turn, route, next_city)

    def _junction(self, turn: _Turn) -> None:
        player = turn.player
        choices = self.board.route_choices(player.city_id)
        if not player.is_cpu:
            turn.request(
                DecisionKind.CHOOSE_ROUTE,
                [route.id for route, _ in choices],
                choices=[
                    {"route_id": route.id, "city_id": city_id, "kind": route.kind.value}
                    for route, city_id in choices
                ],
                remaining_steps=turn.ctx.remaining_steps,
            )
            return
        route, next_city = self.agent_for(player.difficulty).choose_route(
            turn.state, player, choices, self.rng
        )
        self._step(turn, route, next_city)

    def _step(self, turn: _Turn, route: Route, next_city: str) -> None:
        player = turn.player
        turn.state = turn.state.with_player(
            replace(player, city_id=next_city, previous_city_id=player.city_id)
        )
        turn.update(remaining_steps=turn.ctx.remaining_steps - 1)
        turn.log(EventType.MOVE, player.id, from_city=player.city_id, to_city=next_city, route_id=route.id)
        self._maybe_draw(turn, route)
        turn.phase(GamePhase.MOVING)

    def _maybe_draw(self, turn: _Turn, route: Optional[Route]) -> None:
        """At most one card per move, from the first card square passed."""
        if route is None or turn.ctx.card_drawn_this_move or not route.has_card_square:
            return
        player = turn.player
        turn.update(card_drawn_this_move=True)
        result = gain_card(turn.state, self.cards, player.id, self.rng)
        if result.success:
            turn.state = result.state
            turn.log(EventType.CARD_DRAW, player.id, card_id=result.card_id)
        elif result.reason == Reason.HAND_FULL:
            turn.log(EventType.HAND_FULL, player.id)

    def _arrive(self, turn: _Turn, city_id: str) -> None:
        turn.update(city_id=city_id, square_stage=SquareStage.DESTINATION, remaining_steps=0)
        turn.phase(GamePhase.SQUARE_ACTION)

    def _square_action(self, turn: _Turn) -> None:
        stage = turn.ctx.square_stage
        if stage == SquareStage.DESTINATION:
            self._destination(turn)
        elif stage == SquareStage.SHOP:
            self._shop(turn)
        elif stage == SquareStage.PROPERTY:
            self._property(turn)
        elif stage == SquareStage.RENT:
            self._rent(turn)
        else:
            turn.phase(GamePhase.BOMBEE_ACTION)

    def _destination(self, turn: _Turn) -> None:
        player = turn.player
        if turn.ctx.city_id == turn.state.destination_city_id:
            arrival = process_arrival(turn.state, self.board, player.id, self.rng)
            turn.state = arrival.state
            turn.log(
                EventType.DESTINATION_ARRIVAL,
                player.id,
                city_id=turn.ctx.city_id,
                bonus=arrival.bonus,
                next_destination=arrival.new_destination_city_id,
            )
            logger.debug(f"{player.name} reached {turn.ctx.city_id} for {arrival.bonus}")
        turn.update(square_stage=SquareStage.SHOP)

    def _shop(self, turn: _Turn) -> None:
        player = turn.player
        if not self.board.is_shop_city(turn.ctx.city_id) or len(self.cards) == 0:
            turn.update(square_stage=SquareStage.PROPERTY)
            return

        if player.is_cpu:
            lineup = self.cards.shop_lineup(self.rng, self.config.shop_lineup_size)
            for card_id in self.agent_for(player.difficulty).shop_purchases(turn.state, player, lineup):
                self._buy_card(turn, card_id)
            turn.update(square_stage=SquareStage.PROPERTY)
            return

        if not can_draw_card(turn.state, self.cards, player.id):
            turn.update(square_stage=SquareStage.PROPERTY, shop_lineup=(), shop_purchases=0)
            return
        lineup = turn.ctx.shop_lineup
        if not lineup:
            lineup = tuple(
                c.id for c in self.cards.shop_lineup(self.rng, self.config.shop_lineup_size)
            )
            turn.update(shop_lineup=lineup)
        turn.request(
            DecisionKind.SHOP,
            lineup,
            prices={cid: self.cards.shop_price(self.cards.get(cid)) for cid in lineup},
            money=player.money,
            purchases=turn.ctx.shop_purchases,
        )

    def _buy_card(self, turn: _Turn, card_id: str) -> None:
        player = turn.player
        result = buy_card(turn.state, self.cards, player.id, card_id)
        if result.success:
            turn.state = result.state
            turn.update(shop_purchases=turn.ctx.shop_purchases + 1)
            price = self.cards.shop_price(self.cards.get(card_id))
            turn.log(EventType.CARD_PURCHASE, player.id, card_id=card_id, price=price)
        else:
            turn.log(
                EventType.CARD_FAILED,
                player.id,
                card_id=card_id,
                reason=result.reason.value if result.reason else None,
            )

    def _property(self, turn: _Turn) -> None:
        player = turn.player
        in_city = economy.properties_in_city(turn.state.properties, turn.ctx.city_id)

        unowned = next((p for p in in_city if not p.is_owned), None)
        if unowned is not None and player.money >= economy.current_price(unowned):
            if not player.is_cpu:
                turn.request(
                    DecisionKind.BUY_PROPERTY,
                    [unowned.id],
                    price=unowned.price,
                    income=economy.current_income(unowned),
                )
                return
            if self.agent_for(player.difficulty).decide_purchase(turn.state, player, unowned, self.rng):
                self._buy(turn, unowned.id)
            turn.update(square_stage=SquareStage.DONE)
            return

        theirs = next((p for p in in_city if p.is_owned and p.owner_id != player.id), None)
        if theirs is not None:
            turn.update(
                square_stage=SquareStage.RENT,
                rent_property_id=theirs.id,
                rent_due=economy.land_fee(theirs),
            )
            return

        upgradable = next(
            (
                p for p in in_city
                if p.owner_id == player.id
                and economy.next_upgrade_cost(p) is not None
                and player.money >= economy.next_upgrade_cost(p)
            ),
            None,
        )
        if upgradable is not None:
            if not player.is_cpu:
                turn.request(
                    DecisionKind.UPGRADE_PROPERTY,
                    [upgradable.id],
                    cost=economy.next_upgrade_cost(upgradable),
                    level=upgradable.upgrade_level,
                )
                return
            if self.agent_for(player.difficulty).accepts_upgrade(turn.state, player, upgradable):
                self._upgrade(turn, upgradable.id)
        turn.update(square_stage=SquareStage.DONE)

    def _buy(self, turn: _Turn, property_id: str) -> None:
        player = turn.player
        outcome = economy.buy_property(turn.state, player.id, property_id)
        if not outcome.success:
            return
        turn.state = outcome.state
        prop = turn.state.get_property(property_id)
        monopoly = economy.has_monopoly(turn.state.properties, prop.city_id, player.id)
        turn.log(EventType.PURCHASE, player.id, property_id=property_id, price=prop.price, monopoly=monopoly)

    def _upgrade(self, turn: _Turn, property_id: str) -> None:
        player = turn.player
        outcome = economy.upgrade_property(turn.state, player.id, property_id)
        if outcome.success:
            turn.state = outcome.state
            level = turn.state.get_property(property_id).upgrade_level
            turn.log(EventType.UPGRADE, player.id, property_id=property_id, level=level)

    def _rent(self, turn: _Turn) -> None:
        player = turn.player
        fee = turn.ctx.rent_due
        if player.money < fee:
            if player.is_cpu:
                result = economy.liquidate_cheapest_first(turn.state, player.id, fee)
                if result.sold_property_ids:
                    turn.state = result.state
                    turn.log(
                        EventType.LIQUIDATION,
                        player.id,
                        property_ids=list(result.sold_property_ids),
                        raised=result.raised,
                    )
            else:
                owned = economy.owned_by(turn.state.properties, player.id)
                if owned:
                    turn.request(
                        DecisionKind.LIQUIDATE,
                        [p.id for p in owned],
                        fee=fee,
                        money=player.money,
                        refunds={p.id: p.price // 2 for p in owned},
                    )
                    return
        self._charge_rent(turn)

    def _charge_rent(self, turn: _Turn) -> None:
        player = turn.player
        prop = turn.state.get_property(turn.ctx.rent_property_id)
        result = economy.charge_land_fee(turn.state, player.id, prop.id)
        turn.state = result.state
        turn.log(EventType.RENT_PAYMENT, player.id, owner_id=prop.owner_id, property_id=prop.id, amount=result.amount)
        turn.update(square_stage=SquareStage.DONE, rent_due=0, rent_property_id=None)

    def _bombee_action(self, turn: _Turn) -> None:
        result = bombee.process_action(turn.state, self.rng)
        turn.state = result.state
        if result.player_id is not None:
            turn.log(
                EventType.BOMBEE_ACTION,
                result.player_id,
                action=result.action,
                evolved_to=result.evolved_to.value if result.evolved_to else None,
                moved_to=result.moved_to,
                message=result.message,
            )
        self._advance_calendar(turn)

    def _advance_calendar(self, turn: _Turn) -> None:
        state = turn.state
        month = state.month + 1
        if month > 12:
            turn.state = replace(state, year=state.year + 1, month=1)
            if turn.state.year > turn.state.total_years:
                self._game_over(turn)
            else:
                turn.phase(GamePhase.YEAR_END)
            return

        turn.state = replace(state, month=month)
        actor = turn.player
        for event in draw_monthly_events(self.events, month, self.rng):
            result = apply_event(turn.state, event, actor.id, self.board, self.rng)
            turn.state = result.state
            turn.log(EventType.CALENDAR_EVENT, actor.id, event_id=event.id, name=event.name, deltas=result.deltas)
        self._next_player(turn)

    def _year_end(self, turn: _Turn) -> None:
        settlement = economy.calc_year_end_income(turn.state)
        state = bombee.decrement_immunity(settlement.state)
        carrier = bombee.bombee_player(state)
        state = bombee.attach_to_last_place(state)
        turn.state = state
        turn.log(
            EventType.YEAR_END,
            year=state.year - 1,
            incomes={r.player_id: r.total_income for r in settlement.results},
        )
        if carrier is None:
            attached = bombee.bombee_player(state)
            if attached is not None:
                turn.log(EventType.BOMBEE_ATTACH, attached.id)
        logger.info(f"Game {state.game_id}: settled year {state.year - 1}")
        self._next_player(turn)

    def _game_over(self, turn: _Turn) -> None:
        turn.phase(GamePhase.GAME_OVER)
        ranking = [
            {"player_id": p.id, "name": p.name, "total_assets": p.total_assets}
            for p in economy.standings(turn.state)
        ]
        turn.log(EventType.GAME_END, standings=ranking)
        turn.update(pending=None)
        turn.complete = True
        logger.info(f"Game {turn.state.game_id} over, winner {ranking[0]['name']}")

    def _next_player(self, turn: _Turn) -> None:
        state = turn.state
        turn.state = replace(
            state,
            current_player_index=(state.current_player_index + 1) % len(state.players),
            phase=GamePhase.DICE_ROLL,
            turn_count=state.turn_count + 1,
        )
        turn.ctx = TurnContext()
        turn.complete = True
