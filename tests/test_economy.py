"""Tests for the property economy."""

from dataclasses import replace

import pytest

from sugoroku import economy
from sugoroku.state import Property, Reason


def assert_assets_consistent(state):
    """Every player's total assets equal money plus owned prices."""
    for player in state.players:
        owned = sum(p.price for p in state.properties if p.owner_id == player.id)
        assert player.total_assets == player.money + owned


@pytest.fixture
def city_pair():
    """Two properties in one city and one elsewhere."""
    return (
        Property("a1", "alpha", "Shop", 1000, 200),
        Property("a2", "alpha", "Mill", 2000, 400),
        Property("b1", "beta", "Inn", 3000, 300),
    )


class TestQueries:
    """Tests for read-only helpers."""

    def test_properties_in_city(self, properties):
        assert [p.id for p in economy.properties_in_city(properties, "kyoto")] == ["kyoto_1", "kyoto_2"]

    def test_owned_by(self, make_state):
        state = make_state(owners={"tokyo_1": "alice", "kyoto_1": "bob"})

        assert [p.id for p in economy.owned_by(state.properties, "alice")] == ["tokyo_1"]

    def test_has_monopoly(self, make_state):
        """Test that monopoly needs every property in the city."""
        state = make_state(owners={"kyoto_1": "alice", "kyoto_2": "alice", "tokyo_1": "alice"})

        assert economy.has_monopoly(state.properties, "kyoto", "alice")
        assert not economy.has_monopoly(state.properties, "tokyo", "alice")

    def test_empty_city_is_never_a_monopoly(self, make_state):
        state = make_state()

        assert not economy.has_monopoly(state.properties, "nagoya", "alice")

    def test_completes_monopoly(self, make_state):
        state = make_state(owners={"kyoto_1": "alice"})
        kyoto_2 = state.get_property("kyoto_2")

        assert economy.completes_monopoly(state.properties, kyoto_2, "alice")
        assert not economy.completes_monopoly(state.properties, kyoto_2, "bob")

    def test_current_income_by_level(self, properties):
        """Test that income follows the upgrade table."""
        sushi = properties[0]

        assert economy.current_income(sushi) == 100
        assert economy.current_income(replace(sushi, upgrade_level=1)) == 150
        assert economy.current_income(replace(sushi, upgrade_level=2)) == 200

    def test_price_ignores_upgrades(self, properties):
        sushi = replace(properties[0], upgrade_level=2)

        assert economy.current_price(sushi) == 1000

    def test_land_fee_is_half_income(self, properties):
        """Test that rent is floor(income * 0.5)."""
        assert economy.land_fee(properties[2]) == 100
        assert economy.land_fee(Property("x", "c", "X", 100, 75)) == 37

    def test_next_upgrade_cost(self, properties):
        sushi = properties[0]

        assert economy.next_upgrade_cost(sushi) == 500
        assert economy.next_upgrade_cost(replace(sushi, upgrade_level=2)) is None

    def test_standings(self, make_state, make_player):
        state = make_state([make_player("a", 100), make_player("b", 300), make_player("c", 200)])

        assert [p.id for p in economy.standings(state)] == ["b", "c", "a"]
        assert economy.last_place_player(state.players).id == "a"
        assert economy.first_place_player(state.players).id == "b"


class TestBuyProperty:
    """Tests for buying properties."""

    def test_buy_success(self, make_state):
        """Test buying a 1000 property with 10000 money."""
        state = make_state()

        outcome = economy.buy_property(state, "alice", "tokyo_1")

        alice = outcome.state.get_player("alice")
        assert outcome.success
        assert alice.money == 9000
        assert alice.total_assets == 10000
        assert outcome.state.get_property("tokyo_1").owner_id == "alice"
        assert_assets_consistent(outcome.state)

    def test_not_enough_money(self, make_state, make_player):
        """Test that a poor buyer fails and the state is untouched."""
        state = make_state([make_player("alice", 500), make_player("bob")])

        outcome = economy.buy_property(state, "alice", "tokyo_1")

        assert not outcome.success
        assert outcome.reason == Reason.NOT_ENOUGH_MONEY
        assert outcome.state is state

    def test_already_owned(self, make_state):
        state = make_state(owners={"tokyo_1": "bob"})

        outcome = economy.buy_property(state, "alice", "tokyo_1")

        assert outcome.reason == Reason.ALREADY_OWNED
        assert outcome.state is state

    def test_unknown_property(self, make_state):
        outcome = economy.buy_property(make_state(), "alice", "nowhere_1")

        assert outcome.reason == Reason.NOT_FOUND


class TestUpgradeProperty:
    """Tests for upgrades."""

    def test_upgrade_success(self, make_state):
        """Test that an upgrade raises the level and charges the cost."""
        state = make_state(owners={"tokyo_1": "alice"})

        outcome = economy.upgrade_property(state, "alice", "tokyo_1")

        alice = outcome.state.get_player("alice")
        assert outcome.success
        assert outcome.state.get_property("tokyo_1").upgrade_level == 1
        assert alice.money == 9500
        assert alice.total_assets == 10500
        assert_assets_consistent(outcome.state)

    def test_not_owner_fails_silently(self, make_state):
        state = make_state(owners={"tokyo_1": "bob"})

        outcome = economy.upgrade_property(state, "alice", "tokyo_1")

        assert not outcome.success
        assert outcome.reason is None
        assert outcome.state is state

    def test_max_level_fails_silently(self, make_state, properties):
        maxed = replace(properties[0], upgrade_level=2, owner_id="alice")
        state = make_state(props=[maxed] + list(properties[1:]))

        outcome = economy.upgrade_property(state, "alice", "tokyo_1")

        assert not outcome.success
        assert outcome.reason is None

    def test_upgrade_not_enough_money(self, make_state, make_player):
        state = make_state([make_player("alice", 100), make_player("bob")], owners={"tokyo_1": "alice"})

        outcome = economy.upgrade_property(state, "alice", "tokyo_1")

        assert outcome.reason == Reason.NOT_ENOUGH_MONEY
        assert outcome.state is state


class TestLandFee:
    """Tests for rent payment."""

    def test_pay_full_fee(self, make_state):
        """Test that the owner receives the fee."""
        state = make_state(owners={"yokohama_1": "bob"})

        result = economy.pay_land_fee(state, "alice", "yokohama_1")

        assert result.success
        assert result.amount == 100
        assert result.state.get_player("alice").money == 9900
        assert result.state.get_player("bob").money == 10100
        assert_assets_consistent(result.state)

    def test_partial_payment(self, make_state, make_player):
        """Test that a short payer pays what they have and the owner gets only that."""
        state = make_state([make_player("alice", 40), make_player("bob")], owners={"yokohama_1": "bob"})

        result = economy.pay_land_fee(state, "alice", "yokohama_1")

        assert result.amount == 40
        assert result.state.get_player("alice").money == 0
        assert result.state.get_player("bob").money == 10040

    def test_own_property_is_free(self, make_state):
        state = make_state(owners={"yokohama_1": "alice"})

        result = economy.pay_land_fee(state, "alice", "yokohama_1")

        assert not result.success
        assert result.state is state

    def test_unowned_property_is_free(self, make_state):
        state = make_state()

        assert not economy.pay_land_fee(state, "alice", "yokohama_1").success

    def test_charge_can_leave_debt(self, make_state, make_player):
        """Test that charging the full fee may push money below zero."""
        state = make_state([make_player("alice", 40), make_player("bob")], owners={"yokohama_1": "bob"})

        result = economy.charge_land_fee(state, "alice", "yokohama_1")

        assert result.amount == 100
        assert result.state.get_player("alice").money == -60
        assert result.state.get_player("bob").money == 10100


class TestAnnualIncome:
    """Tests for annual income and year-end settlement."""

    def test_monopoly_doubles_income(self, make_state, city_pair):
        """Test incomes 200 + 400 in one fully owned city."""
        state = make_state(props=city_pair, owners={"a1": "alice", "a2": "alice"})

        income = economy.calc_player_annual_income(state.properties, "alice")

        assert income.property_income == 600
        assert income.monopoly_bonus == 600
        assert income.total_income == 1200

    def test_partial_ownership_has_no_bonus(self, make_state, city_pair):
        state = make_state(props=city_pair, owners={"a1": "alice", "b1": "alice"})

        income = economy.calc_player_annual_income(state.properties, "alice")

        assert income.property_income == 500
        assert income.monopoly_bonus == 300
        assert income.total_income == 800

    def test_upgraded_income_counts(self, make_state, properties):
        upgraded = replace(properties[0], upgrade_level=1, owner_id="alice")
        state = make_state(props=[upgraded] + list(properties[1:]))

        income = economy.calc_player_annual_income(state.properties, "alice")

        assert income.property_income == 150

    def test_year_end_scenario(self, make_state, city_pair):
        """Test buy then settle: money rises by exactly the property's income."""
        state = make_state(props=city_pair)
        state = economy.buy_property(state, "alice", "a1").state
        alice = state.get_player("alice")
        assert alice.money == 9000
        assert alice.total_assets == 10000

        settlement = economy.calc_year_end_income(state)

        assert settlement.state.get_player("alice").money == 9200
        assert settlement.state.get_player("bob").money == 10000
        assert_assets_consistent(settlement.state)

    def test_multiplier_applied_and_reset(self, make_state, make_player, city_pair):
        """Test that the income multiplier is floored in and reset to 1."""
        players = [make_player("alice", income_multiplier=1.5), make_player("bob")]
        state = make_state(players, props=city_pair, owners={"b1": "alice"})

        settlement = economy.calc_year_end_income(state)

        alice = settlement.state.get_player("alice")
        assert alice.money == 10000 + 900
        assert alice.income_multiplier == 1
        assert settlement.results[0].total_income == 900


class TestForcedSale:
    """Tests for forced sales and liquidation."""

    def test_refund_ignores_upgrades(self, make_state, properties):
        """Test that a forced sale refunds half the price at any level."""
        upgraded = replace(properties[0], upgrade_level=2, owner_id="alice")
        state = make_state(props=[upgraded] + list(properties[1:]))

        result = economy.sell_property_forcibly(state, "alice", "tokyo_1")

        prop = result.state.get_property("tokyo_1")
        assert result.amount == 500
        assert prop.owner_id is None
        assert prop.upgrade_level == 0
        assert result.state.get_player("alice").money == 10500
        assert_assets_consistent(result.state)

    def test_wrong_owner_is_noop(self, make_state):
        state = make_state(owners={"tokyo_1": "bob"})

        result = economy.sell_property_forcibly(state, "alice", "tokyo_1")

        assert not result.success
        assert result.state is state

    def test_liquidate_cheapest_first(self, make_state, make_player):
        """Test selling the cheapest properties until solvent."""
        state = make_state(
            [make_player("alice", 0), make_player("bob")],
            owners={"tokyo_1": "alice", "tokyo_2": "alice", "kyoto_1": "alice"},
        )

        result = economy.liquidate_cheapest_first(state, "alice", 1000)

        assert result.sold_property_ids == ("tokyo_1", "tokyo_2")
        assert result.raised == 2000
        assert result.state.get_player("alice").money == 2000
        assert result.state.get_property("kyoto_1").owner_id == "alice"
        assert_assets_consistent(result.state)

    def test_liquidate_runs_out_of_properties(self, make_state, make_player):
        state = make_state([make_player("alice", 0), make_player("bob")], owners={"osaka_1": "alice"})

        result = economy.liquidate_cheapest_first(state, "alice", 5000)

        assert result.sold_property_ids == ("osaka_1",)
        assert result.state.get_player("alice").money == 250

    def test_adjust_money_recalculates_assets(self, make_state):
        state = make_state(owners={"tokyo_1": "alice"})

        state = economy.adjust_money(state, {"alice": -300, "bob": 300})

        assert state.get_player("alice").total_assets == 10700
        assert state.get_player("bob").total_assets == 10300
