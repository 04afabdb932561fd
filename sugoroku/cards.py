"""
Card catalog, hands and the card effect resolver.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from sugoroku import bombee, economy
from sugoroku.board import Board
from sugoroku.config import CARD_SHOP_PRICES, MAX_HAND_SIZE, RARITY_WEIGHTS
from sugoroku.rng import RandomSource
from sugoroku.state import GameState, Outcome, Player, Reason

MONOPOLY_BREAK_REFUND_RATE = 0.8


class CardType(Enum):
    """Closed set of card behaviours."""

    MOVE_TO_DESTINATION = "move_to_destination"
    MOVE_STEPS = "move_steps"
    MOVE_TO_CITY = "move_to_city"
    BUY_PROPERTY = "buy_property"
    STEAL_PROPERTY = "steal_property"
    SELL_PROPERTY = "sell_property"
    GET_MONEY = "get_money"
    PAY_MONEY = "pay_money"
    BOMBEE_AWAY = "bombee_away"
    BOMBEE_TRANSFER = "bombee_transfer"
    MONOPOLY_BREAK = "monopoly_break"
    CARD_STEAL = "card_steal"
    PLUS_DICE = "plus_dice"
    DOUBLE_INCOME = "double_income"


class Rarity(Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"


@dataclass(frozen=True)
class CardEffect:
    """
    Effect descriptor.

    ``target_type`` selects the variant of a card type (for example
    ``all_players_each`` for money cards); for ``move_to_city`` it is the
    destination city id.
    """

    kind: str
    value: Optional[float] = None
    target_type: Optional[str] = None


@dataclass(frozen=True)
class Card:
    id: str
    type: CardType
    name: str
    description: str
    effect: CardEffect
    rarity: Rarity = Rarity.COMMON

    def value_or(self, default: float) -> float:
        return default if self.effect.value is None else self.effect.value


@dataclass(frozen=True)
class CardTarget:
    """Caller-resolved targets for cards that need one."""

    player_id: Optional[str] = None
    property_id: Optional[str] = None
    city_id: Optional[str] = None
    card_id: Optional[str] = None


@dataclass(frozen=True)
class CardResult(Outcome):
    """
    Outcome of a card operation.

    ``moved_to`` is set when the card relocated the actor; ``path`` lists
    the route ids walked by a backward move. ``move_steps`` and
    ``dice_bonus`` are left for the turn engine to act on.
    """

    card_id: Optional[str] = None
    moved_to: Optional[str] = None
    path: Tuple[str, ...] = ()
    move_steps: int = 0
    dice_bonus: int = 0


class CardCatalog:
    """Immutable set of cards available in a game."""

    def __init__(self, cards: Iterable[Card], max_hand_size: int = MAX_HAND_SIZE):
        self._cards: Dict[str, Card] = {}
        for card in cards:
            self._cards[card.id] = card
        self.max_hand_size = max_hand_size

    def get(self, card_id: Optional[str]) -> Optional[Card]:
        if card_id is None:
            return None
        return self._cards.get(card_id)

    def all(self) -> List[Card]:
        return list(self._cards.values())

    def __len__(self) -> int:
        return len(self._cards)

    def draw_random(self, rng: RandomSource) -> Optional[Card]:
        """Draw one card weighted by rarity."""
        cards = self.all()
        if not cards:
            return None
        weights = [RARITY_WEIGHTS.get(c.rarity.value, 10) for c in cards]
        return rng.weighted_random(cards, weights)

    @staticmethod
    def shop_price(card: Card) -> int:
        return CARD_SHOP_PRICES.get(card.rarity.value, 1000)

    def shop_lineup(self, rng: RandomSource, count: int = 5) -> List[Card]:
        """Cards offered at a shop visit."""
        cards = self.all()
        if len(cards) <= count:
            return cards
        return rng.pick_n(cards, count)


# ---- Hand helpers ----

def _without_one(hand: Tuple[str, ...], card_id: str) -> Tuple[str, ...]:
    """Remove a single copy of ``card_id`` from a hand."""
    items = list(hand)
    items.remove(card_id)
    return tuple(items)


def can_draw_card(state: GameState, catalog: CardCatalog, player_id: str) -> bool:
    player = state.get_player(player_id)
    return player is not None and len(player.hand) < catalog.max_hand_size


def player_hand(state: GameState, catalog: CardCatalog, player_id: str) -> List[Card]:
    player = state.get_player(player_id)
    if player is None:
        return []
    return [card for card in (catalog.get(cid) for cid in player.hand) if card is not None]


def gain_card(
    state: GameState, catalog: CardCatalog, player_id: str, rng: RandomSource
) -> CardResult:
    """Draw a rarity-weighted card into a player's hand."""
    player = state.get_player(player_id)
    if player is None:
        return CardResult(False, state, Reason.NOT_FOUND)
    if not can_draw_card(state, catalog, player_id):
        return CardResult(False, state, Reason.HAND_FULL, f"{player.name}'s hand is full")
    card = catalog.draw_random(rng)
    if card is None:
        return CardResult(False, state, Reason.NOT_FOUND, "No cards in the catalog")
    new_state = state.with_player(replace(player, hand=player.hand + (card.id,)))
    return CardResult(True, new_state, message=f"{player.name} drew {card.name}", card_id=card.id)


def buy_card(state: GameState, catalog: CardCatalog, player_id: str, card_id: str) -> CardResult:
    """Buy a card at a shop for its rarity price."""
    player = state.get_player(player_id)
    card = catalog.get(card_id)
    if player is None or card is None:
        return CardResult(False, state, Reason.NOT_FOUND)
    if not can_draw_card(state, catalog, player_id):
        return CardResult(False, state, Reason.HAND_FULL, f"{player.name}'s hand is full")
    price = catalog.shop_price(card)
    if player.money < price:
        return CardResult(False, state, Reason.NOT_ENOUGH_MONEY, f"{player.name} cannot afford {card.name}")
    new_state = state.with_player(
        replace(player, money=player.money - price, hand=player.hand + (card.id,))
    )
    return CardResult(
        True,
        economy.recalc_total_assets(new_state),
        message=f"{player.name} bought {card.name} for {price}",
        card_id=card.id,
    )


def discard_card(state: GameState, player_id: str, card_id: str) -> CardResult:
    player = state.get_player(player_id)
    if player is None:
        return CardResult(False, state, Reason.NOT_FOUND)
    if card_id not in player.hand:
        return CardResult(False, state, Reason.NOT_OWNER)
    new_state = state.with_player(replace(player, hand=_without_one(player.hand, card_id)))
    return CardResult(True, new_state, message=f"{player.name} discarded a card", card_id=card_id)


# ---- Resolver ----

@dataclass(frozen=True)
class _Play:
    """Everything an effect handler needs. ``state`` already lacks the card."""

    state: GameState
    actor: Player
    card: Card
    target: CardTarget
    board: Board
    catalog: CardCatalog
    rng: RandomSource

    def done(self, state: GameState, message: str, **extra) -> CardResult:
        return CardResult(True, state, message=message, card_id=self.card.id, **extra)

    def fail(self, reason: Reason, message: str = "") -> CardResult:
        return CardResult(False, self.state, reason, message or f"{self.card.name} had no effect")

    def opponents(self) -> Tuple[Player, ...]:
        return self.state.opponents_of(self.actor.id)


def use_card(
    state: GameState,
    catalog: CardCatalog,
    board: Board,
    player_id: str,
    card_id: str,
    target: Optional[CardTarget] = None,
    rng: Optional[RandomSource] = None,
) -> CardResult:
    """
    Play a card from a player's hand.

    Args:
        state: Current game state.
        catalog: Card catalog.
        board: Board, for movement and city checks.
        player_id: Player using the card.
        card_id: Card to play; must be in the player's hand.
        target: Caller-chosen targets for cards that need one.
        rng: Random source for effects that pick at random.

    Returns:
        CardResult. On failure the input state is returned and the card
        stays in hand.
    """
    player = state.get_player(player_id)
    card = catalog.get(card_id)
    if player is None or card is None:
        return CardResult(False, state, Reason.NOT_FOUND, "Unknown player or card")
    if card_id not in player.hand:
        return CardResult(False, state, Reason.NOT_OWNER, f"{card.name} is not in {player.name}'s hand")

    actor = replace(player, hand=_without_one(player.hand, card_id))
    play = _Play(
        state=state.with_player(actor),
        actor=actor,
        card=card,
        target=target or CardTarget(),
        board=board,
        catalog=catalog,
        rng=rng or RandomSource(),
    )
    result = _HANDLERS[card.type](play)
    if not result.success:
        return replace(result, state=state)
    return replace(result, state=economy.recalc_total_assets(result.state))


def _move_actor(play: _Play, city_id: str) -> GameState:
    return play.state.with_player(replace(play.actor, city_id=city_id))


def _move_to_destination(play: _Play) -> CardResult:
    if play.card.effect.target_type == "double_move_next_turn":
        multiplier = play.card.value_or(2)
        state = play.state.with_player(replace(play.actor, dice_multiplier=multiplier))
        return play.done(state, f"{play.card.name}: next roll is multiplied by {multiplier:g}")
    destination = play.state.destination_city_id
    return play.done(
        _move_actor(play, destination),
        f"{play.card.name}: {play.actor.name} heads to the destination",
        moved_to=destination,
    )


def _move_to_city(play: _Play) -> CardResult:
    city_id = play.card.effect.target_type
    if not play.board.has_city(city_id):
        return play.fail(Reason.NO_TARGET, f"Unknown city: {city_id}")
    return play.done(
        _move_actor(play, city_id), f"{play.card.name}: {play.actor.name} moves", moved_to=city_id
    )


def _move_steps(play: _Play) -> CardResult:
    if play.card.effect.target_type == "any_station":
        city_id = play.target.city_id
        if not play.board.has_city(city_id):
            return play.fail(Reason.NO_TARGET, "No station chosen")
        return play.done(
            _move_actor(play, city_id), f"{play.card.name}: teleported", moved_to=city_id
        )

    steps = int(play.card.value_or(3))
    if steps > 0:
        return play.done(play.state, f"{play.card.name}: move {steps} steps", move_steps=steps)

    # Backward: prefer the city we came from, else the first route.
    actor = play.actor
    path: List[str] = []
    for _ in range(abs(steps)):
        choices = play.board.route_choices(actor.city_id)
        if not choices:
            break
        route, next_city = next(
            ((r, c) for r, c in choices if c == actor.previous_city_id), choices[0]
        )
        actor = replace(actor, city_id=next_city, previous_city_id=actor.city_id)
        path.append(route.id)
    return play.done(
        play.state.with_player(actor),
        f"{play.card.name}: {actor.name} moves back {len(path)} steps",
        moved_to=actor.city_id,
        path=tuple(path),
    )


def _get_money(play: _Play) -> CardResult:
    value = int(play.card.value_or(1000))
    variant = play.card.effect.target_type
    actor_id = play.actor.id

    if variant == "property_value_percent":
        gain = math.floor(economy.owned_value(play.state.properties, actor_id) * value / 100)
        return play.done(economy.adjust_money(play.state, {actor_id: gain}), f"Received {gain}")

    if variant == "all_players_each":
        deltas: Dict[str, int] = {}
        received = 0
        for opponent in play.opponents():
            actual = max(0, min(value, opponent.money))
            deltas[opponent.id] = -actual
            received += actual
        deltas[actor_id] = received
        return play.done(economy.adjust_money(play.state, deltas), f"Collected {received} in total")

    return play.done(economy.adjust_money(play.state, {actor_id: value}), f"Received {value}")


def _pay_money(play: _Play) -> CardResult:
    value = int(play.card.value_or(1000))
    variant = play.card.effect.target_type
    actor = play.actor
    available = max(0, actor.money)

    if variant == "all_players_each":
        deltas: Dict[str, int] = {}
        paid = 0
        for opponent in play.opponents():
            remaining = available - paid
            if remaining <= 0:
                break
            actual = min(value, remaining)
            deltas[opponent.id] = actual
            paid += actual
        deltas[actor.id] = -paid
        return play.done(economy.adjust_money(play.state, deltas), f"Paid {paid} in total")

    if variant == "property_value_percent":
        requested = math.floor(economy.owned_value(play.state.properties, actor.id) * value / 100)
    elif variant == "total_assets_percent":
        requested = math.floor(actor.total_assets * value / 100)
    else:
        requested = value
    paid = min(requested, available)
    return play.done(economy.adjust_money(play.state, {actor.id: -paid}), f"Paid {paid}")


def _sell_property(play: _Play) -> CardResult:
    rate = play.card.value_or(100)
    variant = play.card.effect.target_type
    state = play.state
    actor = play.actor

    if variant == "current_city_all":
        mine = [
            p for p in economy.properties_in_city(state.properties, actor.city_id)
            if p.owner_id == actor.id
        ]
        if not mine:
            return play.fail(Reason.NO_TARGET)
        total = 0
        for prop in mine:
            result = economy.sell_property(state, actor.id, prop.id, rate)
            state = result.state
            total += result.amount
        return play.done(state, f"Sold {len(mine)} properties for {total}")

    if variant == "opponent_forced":
        victim = state.get_player(play.target.player_id)
        if victim is None or victim.id == actor.id:
            return play.fail(Reason.NO_TARGET)
        prop = economy.cheapest_owned(state.properties, victim.id)
        if prop is None:
            return play.fail(Reason.NO_TARGET)
        result = economy.sell_property(state, victim.id, prop.id, rate)
        return play.done(result.state, f"{victim.name} was forced to sell {prop.name}")

    owned = economy.owned_by(state.properties, actor.id)
    if not owned:
        return play.fail(Reason.NO_TARGET)
    chosen = next((p for p in owned if p.id == play.target.property_id), owned[0])
    result = economy.sell_property(state, actor.id, chosen.id, rate)
    return play.done(result.state, result.message)


def _transfer_ownership(state: GameState, property_ids: Iterable[str], owner_id: str) -> GameState:
    ids = set(property_ids)
    return state.with_properties(
        replace(p, owner_id=owner_id) for p in state.properties if p.id in ids
    )


def _steal_property(play: _Play) -> CardResult:
    state = play.state
    actor = play.actor

    if play.card.effect.target_type == "current_city_all":
        taken = [
            p for p in economy.properties_in_city(state.properties, actor.city_id)
            if p.is_owned and p.owner_id != actor.id
        ]
        if not taken:
            return play.fail(Reason.NO_TARGET)
        return play.done(
            _transfer_ownership(state, [p.id for p in taken], actor.id),
            f"Took {len(taken)} properties in town",
        )

    richest = economy.first_place_player(play.opponents())
    if richest is None:
        return play.fail(Reason.NO_TARGET)
    prop = economy.cheapest_owned(state.properties, richest.id)
    if prop is None:
        return play.fail(Reason.NO_TARGET)
    return play.done(
        _transfer_ownership(state, [prop.id], actor.id), f"Took {prop.name} from {richest.name}"
    )


def _monopoly_break(play: _Play) -> CardResult:
    state = play.state
    opponents = play.opponents()
    city_ids = list(dict.fromkeys(p.city_id for p in state.properties))

    victim = None
    prop = None
    for city_id in city_ids:
        for opponent in opponents:
            if economy.has_monopoly(state.properties, city_id, opponent.id):
                victim = opponent
                prop = min(economy.properties_in_city(state.properties, city_id), key=lambda p: p.price)
                break
        if victim is not None:
            break

    if victim is None:
        best_ratio = 0.0
        for city_id in city_ids:
            city_props = economy.properties_in_city(state.properties, city_id)
            if len(city_props) <= 1:
                continue
            for opponent in opponents:
                theirs = [p for p in city_props if p.owner_id == opponent.id]
                ratio = len(theirs) / len(city_props)
                if 0 < ratio < 1 and ratio > best_ratio:
                    best_ratio = ratio
                    victim = opponent
                    prop = theirs[0]

    if victim is None:
        return play.fail(Reason.NO_TARGET)

    refund = math.floor(prop.price * MONOPOLY_BREAK_REFUND_RATE)
    new_state = economy.return_to_market(state, [prop.id])
    new_state = economy.adjust_money(new_state, {victim.id: refund})
    return play.done(new_state, f"Broke up {victim.name}'s hold on {prop.name} ({refund} refunded)")


def _buy_property(play: _Play) -> CardResult:
    state = play.state
    actor = play.actor
    variant = play.card.effect.target_type
    unowned_here = [
        p for p in economy.properties_in_city(state.properties, actor.city_id) if not p.is_owned
    ]

    if variant == "current_city_free_one":
        if not unowned_here:
            return play.fail(Reason.NO_TARGET)
        prop = next((p for p in unowned_here if p.id == play.target.property_id), unowned_here[0])
        return play.done(economy.assign_property(state, actor.id, prop.id), f"Got {prop.name} for free")

    if variant == "any_location":
        affordable = sorted(
            (p for p in state.properties if not p.is_owned and p.price <= actor.money),
            key=lambda p: p.price,
        )
        if not affordable:
            return play.fail(Reason.NO_TARGET)
        prop = affordable[0]
        return play.done(
            economy.assign_property(state, actor.id, prop.id, prop.price),
            f"Bought {prop.name} for {prop.price}",
        )

    if not unowned_here:
        return play.fail(Reason.NO_TARGET)
    discount = play.card.value_or(0)
    prop = min(unowned_here, key=lambda p: p.price)
    price = math.floor(prop.price * (1 - discount / 100))
    if actor.money < price:
        return play.fail(Reason.NO_TARGET)
    return play.done(
        economy.assign_property(state, actor.id, prop.id, price),
        f"Bought {prop.name} at {discount:g}% off for {price}",
    )


def _bombee_away(play: _Play) -> CardResult:
    actor = play.actor
    if not actor.has_bombee:
        return play.done(play.state, f"{actor.name} has no Bombee")
    state = bombee.remove(play.state, actor.id)
    if play.card.effect.target_type == "self_permanent":
        years = int(play.card.value_or(1))
        cleared = state.get_player(actor.id)
        state = state.with_player(replace(cleared, bombee_immune_years=years))
        return play.done(state, f"Bombee driven away for {years} years")
    return play.done(state, "Bombee driven away")


def _bombee_transfer(play: _Play) -> CardResult:
    state = play.state
    if play.card.effect.target_type == "last_to_second":
        ranked = sorted(state.players, key=lambda p: p.total_assets)
        if len(ranked) < 2 or not ranked[0].has_bombee:
            return play.fail(Reason.NO_TARGET)
        last, second = ranked[0], ranked[1]
        return play.done(
            bombee.transfer(state, last.id, second.id),
            f"Bombee moved from {last.name} to {second.name}",
        )

    recipient = state.get_player(play.target.player_id)
    if recipient is None or recipient.id == play.actor.id or not play.actor.has_bombee:
        return play.fail(Reason.NO_TARGET)
    return play.done(
        bombee.transfer(state, play.actor.id, recipient.id), f"Bombee passed to {recipient.name}"
    )


def _card_steal(play: _Play) -> CardResult:
    state = play.state
    victim = state.get_player(play.target.player_id)
    if victim is None or victim.id == play.actor.id or not victim.hand:
        return play.fail(Reason.NO_TARGET)
    if len(play.actor.hand) >= play.catalog.max_hand_size:
        return play.fail(Reason.HAND_FULL)
    if play.target.card_id in victim.hand:
        stolen = play.target.card_id
    else:
        stolen = play.rng.pick(victim.hand)
    new_state = state.with_players([
        replace(victim, hand=_without_one(victim.hand, stolen)),
        replace(play.actor, hand=play.actor.hand + (stolen,)),
    ])
    card = play.catalog.get(stolen)
    return play.done(new_state, f"Took {card.name if card else stolen} from {victim.name}")


def _plus_dice(play: _Play) -> CardResult:
    bonus = int(play.card.value_or(1))
    return play.done(play.state, f"Next roll +{bonus}", dice_bonus=bonus)


def _double_income(play: _Play) -> CardResult:
    multiplier = play.card.value_or(2)
    actor = play.actor
    if play.card.effect.target_type == "one_month":
        gain = math.floor(economy.monthly_income(play.state.properties, actor.id) * multiplier)
        return play.done(economy.adjust_money(play.state, {actor.id: gain}), f"Received {gain} now")
    state = play.state.with_player(replace(actor, income_multiplier=multiplier))
    return play.done(state, f"Income x{multiplier:g} until settlement")


_HANDLERS: Dict[CardType, Callable[[_Play], CardResult]] = {
    CardType.MOVE_TO_DESTINATION: _move_to_destination,
    CardType.MOVE_TO_CITY: _move_to_city,
    CardType.MOVE_STEPS: _move_steps,
    CardType.GET_MONEY: _get_money,
    CardType.PAY_MONEY: _pay_money,
    CardType.SELL_PROPERTY: _sell_property,
    CardType.STEAL_PROPERTY: _steal_property,
    CardType.MONOPOLY_BREAK: _monopoly_break,
    CardType.BUY_PROPERTY: _buy_property,
    CardType.BOMBEE_AWAY: _bombee_away,
    CardType.BOMBEE_TRANSFER: _bombee_transfer,
    CardType.CARD_STEAL: _card_steal,
    CardType.PLUS_DICE: _plus_dice,
    CardType.DOUBLE_INCOME: _double_income,
}
