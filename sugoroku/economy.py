"""
Property economy: ownership, upgrades, rent, annual income and liquidation.

Every function takes a GameState and returns a new one. Total assets are
recomputed from scratch after each change to money or ownership.
"""

import math
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sugoroku.state import GameState, Outcome, Player, Property, Reason

LAND_FEE_RATE = 0.5
FORCED_SALE_RATE = 0.5


@dataclass(frozen=True)
class PaymentResult(Outcome):
    """Outcome that also reports how much money actually moved."""

    amount: int = 0


@dataclass(frozen=True)
class IncomeResult:
    """Annual income breakdown for one player."""

    player_id: str
    property_income: int
    monopoly_bonus: int
    total_income: int


@dataclass(frozen=True)
class SettlementResult:
    """Year-end settlement: new state and what each player was credited."""

    state: GameState
    results: Tuple[IncomeResult, ...]


@dataclass(frozen=True)
class LiquidationResult:
    state: GameState
    sold_property_ids: Tuple[str, ...]
    raised: int


# ---- Queries ----

def properties_in_city(properties: Iterable[Property], city_id: str) -> List[Property]:
    return [p for p in properties if p.city_id == city_id]


def owned_by(properties: Iterable[Property], player_id: str) -> List[Property]:
    return [p for p in properties if p.owner_id == player_id]


def has_monopoly(properties: Sequence[Property], city_id: str, player_id: str) -> bool:
    """True if the player owns every property in the city. Empty cities never count."""
    city_props = properties_in_city(properties, city_id)
    return bool(city_props) and all(p.owner_id == player_id for p in city_props)


def completes_monopoly(properties: Sequence[Property], prop: Property, player_id: str) -> bool:
    """True if buying ``prop`` would leave the player owning its whole city."""
    others = [p for p in properties_in_city(properties, prop.city_id) if p.id != prop.id]
    return all(p.owner_id == player_id for p in others)


def current_income(prop: Property) -> int:
    """Income at the property's current upgrade level."""
    if prop.upgrade_level == 0:
        return prop.income
    if prop.upgrade_level - 1 < len(prop.upgrade_incomes):
        return prop.upgrade_incomes[prop.upgrade_level - 1]
    return prop.income


def current_price(prop: Property) -> int:
    """Purchase price. Upgrades never change it."""
    return prop.price


def land_fee(prop: Property) -> int:
    """Rent owed by a visitor: half the current income, floored."""
    return math.floor(current_income(prop) * LAND_FEE_RATE)


def next_upgrade_cost(prop: Property) -> Optional[int]:
    """Cost of the next upgrade, or None when already at max level."""
    if prop.upgrade_level >= prop.max_level:
        return None
    return prop.upgrade_prices[prop.upgrade_level]


def owned_value(properties: Iterable[Property], player_id: str) -> int:
    return sum(p.price for p in owned_by(properties, player_id))


def monthly_income(properties: Iterable[Property], player_id: str) -> int:
    return sum(math.floor(current_income(p) / 12) for p in owned_by(properties, player_id))


def last_place_player(players: Sequence[Player]) -> Optional[Player]:
    """Player with the lowest total assets; earliest seat wins ties."""
    if not players:
        return None
    return min(players, key=lambda p: p.total_assets)


def first_place_player(players: Sequence[Player]) -> Optional[Player]:
    """Player with the highest total assets; earliest seat wins ties."""
    if not players:
        return None
    return max(players, key=lambda p: p.total_assets)


def standings(state: GameState) -> List[Player]:
    """Players ranked by total assets, richest first."""
    return sorted(state.players, key=lambda p: p.total_assets, reverse=True)


# ---- Mutations ----

def recalc_total_assets(state: GameState) -> GameState:
    """Recompute every player's total assets from money and owned prices."""
    players = tuple(
        replace(p, total_assets=p.money + owned_value(state.properties, p.id))
        for p in state.players
    )
    return replace(state, players=players)


def adjust_money(state: GameState, deltas: Dict[str, int]) -> GameState:
    """Apply signed money deltas by player id, then recompute assets."""
    players = [
        replace(p, money=p.money + deltas[p.id]) for p in state.players if p.id in deltas
    ]
    return recalc_total_assets(state.with_players(players))


def assign_property(
    state: GameState, player_id: str, property_id: str, cost: int = 0
) -> GameState:
    """Give a property to a player at ``cost``. No validation; callers check."""
    prop = state.get_property(property_id)
    player = state.get_player(player_id)
    state = state.with_property(replace(prop, owner_id=player_id))
    state = state.with_player(replace(player, money=player.money - cost))
    return recalc_total_assets(state)


def return_to_market(state: GameState, property_ids: Iterable[str]) -> GameState:
    """Clear ownership and upgrades on the given properties."""
    ids = set(property_ids)
    props = [
        replace(p, owner_id=None, upgrade_level=0) for p in state.properties if p.id in ids
    ]
    return recalc_total_assets(state.with_properties(props))


def buy_property(state: GameState, player_id: str, property_id: str) -> Outcome:
    """
    Buy an unowned property at its price.

    Args:
        state: Current game state.
        player_id: Buyer.
        property_id: Property to buy.

    Returns:
        Outcome with ``not_found``, ``already_owned`` or ``not_enough_money``
        on failure; the input state is returned unchanged in that case.
    """
    player = state.get_player(player_id)
    prop = state.get_property(property_id)
    if player is None or prop is None:
        return Outcome(False, state, Reason.NOT_FOUND, "Unknown player or property")
    if prop.is_owned:
        return Outcome(False, state, Reason.ALREADY_OWNED, f"{prop.name} is already owned")
    price = current_price(prop)
    if player.money < price:
        return Outcome(False, state, Reason.NOT_ENOUGH_MONEY, f"{player.name} cannot afford {prop.name}")

    new_state = assign_property(state, player_id, property_id, price)
    return Outcome(True, new_state, message=f"{player.name} bought {prop.name} for {price}")


def upgrade_property(state: GameState, player_id: str, property_id: str) -> Outcome:
    """
    Raise a property's upgrade level by one.

    Not owning the property or being at max level is a silent failure with
    no reason attached.
    """
    player = state.get_player(player_id)
    prop = state.get_property(property_id)
    if player is None or prop is None or prop.owner_id != player_id:
        return Outcome(False, state)
    cost = next_upgrade_cost(prop)
    if cost is None:
        return Outcome(False, state)
    if player.money < cost:
        return Outcome(False, state, Reason.NOT_ENOUGH_MONEY, f"{player.name} cannot afford the upgrade")

    new_state = state.with_property(replace(prop, upgrade_level=prop.upgrade_level + 1))
    new_state = new_state.with_player(replace(player, money=player.money - cost))
    return Outcome(
        True,
        recalc_total_assets(new_state),
        message=f"{player.name} upgraded {prop.name} to level {prop.upgrade_level + 1}",
    )


def _fee_context(state: GameState, payer_id: str, property_id: str):
    payer = state.get_player(payer_id)
    prop = state.get_property(property_id)
    if payer is None or prop is None or not prop.is_owned or prop.owner_id == payer_id:
        return None
    return payer, prop


def pay_land_fee(state: GameState, payer_id: str, property_id: str) -> PaymentResult:
    """
    Pay rent on another player's property, capped at the payer's money.

    The owner receives exactly what was paid.
    """
    context = _fee_context(state, payer_id, property_id)
    if context is None:
        return PaymentResult(False, state)
    payer, prop = context
    paid = max(0, min(land_fee(prop), payer.money))
    new_state = adjust_money(state, {payer_id: -paid, prop.owner_id: paid})
    return PaymentResult(True, new_state, message=f"{payer.name} paid {paid} in rent", amount=paid)


def charge_land_fee(state: GameState, payer_id: str, property_id: str) -> PaymentResult:
    """Charge the full rent even if it leaves the payer in debt."""
    context = _fee_context(state, payer_id, property_id)
    if context is None:
        return PaymentResult(False, state)
    payer, prop = context
    fee = land_fee(prop)
    new_state = adjust_money(state, {payer_id: -fee, prop.owner_id: fee})
    return PaymentResult(True, new_state, message=f"{payer.name} paid {fee} in rent", amount=fee)


def calc_player_annual_income(properties: Sequence[Property], player_id: str) -> IncomeResult:
    """
    Annual income of a player, grouped by city.

    A fully monopolized city adds its subtotal again as a bonus.
    """
    by_city: Dict[str, int] = {}
    for prop in owned_by(properties, player_id):
        by_city[prop.city_id] = by_city.get(prop.city_id, 0) + current_income(prop)

    property_income = 0
    monopoly_bonus = 0
    for city_id, subtotal in by_city.items():
        property_income += subtotal
        if has_monopoly(properties, city_id, player_id):
            monopoly_bonus += subtotal

    return IncomeResult(
        player_id=player_id,
        property_income=property_income,
        monopoly_bonus=monopoly_bonus,
        total_income=property_income + monopoly_bonus,
    )


def calc_year_end_income(state: GameState) -> SettlementResult:
    """Credit every player's annual income, applying and resetting multipliers."""
    results = []
    players = []
    for player in state.players:
        income = calc_player_annual_income(state.properties, player.id)
        boosted = math.floor(income.total_income * player.income_multiplier)
        results.append(replace(income, total_income=boosted))
        players.append(replace(player, money=player.money + boosted, income_multiplier=1))
    new_state = recalc_total_assets(state.with_players(players))
    return SettlementResult(new_state, tuple(results))


def sell_property(
    state: GameState, player_id: str, property_id: str, rate_percent: float
) -> PaymentResult:
    """Sell an owned property back to the market for ``rate_percent`` of its price."""
    player = state.get_player(player_id)
    prop = state.get_property(property_id)
    if player is None or prop is None or prop.owner_id != player_id:
        return PaymentResult(False, state)
    proceeds = math.floor(prop.price * rate_percent / 100)
    new_state = return_to_market(state, [property_id])
    new_state = adjust_money(new_state, {player_id: proceeds})
    return PaymentResult(
        True, new_state, message=f"{player.name} sold {prop.name} for {proceeds}", amount=proceeds
    )


def sell_property_forcibly(state: GameState, player_id: str, property_id: str) -> PaymentResult:
    """Forced sale: half the purchase price, whatever the upgrade level."""
    return sell_property(state, player_id, property_id, FORCED_SALE_RATE * 100)


def cheapest_owned(properties: Iterable[Property], player_id: str) -> Optional[Property]:
    owned = owned_by(properties, player_id)
    if not owned:
        return None
    return min(owned, key=lambda p: p.price)


def liquidate_cheapest_first(state: GameState, player_id: str, required: int) -> LiquidationResult:
    """
    Forcibly sell the cheapest owned property until money covers ``required``.

    Stops early when the player owns nothing more.
    """
    sold: List[str] = []
    raised = 0
    player = state.get_player(player_id)
    while player is not None and player.money < required:
        prop = cheapest_owned(state.properties, player_id)
        if prop is None:
            break
        result = sell_property_forcibly(state, player_id, prop.id)
        state = result.state
        sold.append(prop.id)
        raised += result.amount
        player = state.get_player(player_id)
    return LiquidationResult(state, tuple(sold), raised)
