"""Tests for the card catalog, hands and card effect resolver."""

import pytest

from sugoroku.cards import (
    Card,
    CardCatalog,
    CardEffect,
    CardTarget,
    CardType,
    Rarity,
    buy_card,
    discard_card,
    gain_card,
    use_card,
)
from sugoroku.state import BombeeType, Reason


@pytest.fixture
def trio(make_player):
    """Alice, Bob and Carol with 10000 each in Tokyo."""

    def _make(alice_hand=(), **alice_kwargs):
        return [
            make_player("alice", hand=tuple(alice_hand), **alice_kwargs),
            make_player("bob"),
            make_player("carol"),
        ]

    return _make


def play(state, cards, board, card_id, target=None, rng=None, player_id="alice"):
    return use_card(state, cards, board, player_id, card_id, target, rng)


class TestCardCatalog:
    """Tests for catalog lookups, draws and shop prices."""

    def test_shop_price_by_rarity(self, cards):
        assert cards.shop_price(cards.get("bonus")) == 500
        assert cards.shop_price(cards.get("step_6")) == 1500
        assert cards.shop_price(cards.get("express")) == 5000

    def test_every_card_type_is_in_the_standard_catalog(self, cards):
        assert {c.type for c in cards.all()} == set(CardType)

    def test_shop_lineup_is_distinct(self, cards, scripted):
        lineup = cards.shop_lineup(scripted(ints=[3, 3, 3, 3, 3]), 5)

        assert len(lineup) == 5
        assert len({c.id for c in lineup}) == 5

    def test_draw_is_weighted(self, cards, scripted):
        """Test that a zero threshold draws the first catalog card."""
        assert cards.draw_random(scripted(randoms=[0.0])).id == cards.all()[0].id


class TestHand:
    """Tests for drawing, buying and discarding cards."""

    def test_gain_card(self, make_state, trio, cards, scripted):
        state = make_state(trio())

        result = gain_card(state, cards, "alice", scripted(randoms=[0.0]))

        assert result.success
        assert result.state.get_player("alice").hand == (result.card_id,)

    def test_gain_card_hand_full(self, make_state, trio, cards, scripted):
        state = make_state(trio(["bonus"] * 8))

        result = gain_card(state, cards, "alice", scripted())

        assert result.reason == Reason.HAND_FULL
        assert result.state is state

    def test_buy_card(self, make_state, trio, cards):
        """Test that buying charges the rarity price."""
        state = make_state(trio())

        result = buy_card(state, cards, "alice", "bonus")

        alice = result.state.get_player("alice")
        assert result.success
        assert alice.money == 9500
        assert alice.total_assets == 9500
        assert alice.hand == ("bonus",)

    def test_buy_card_not_enough_money(self, make_state, make_player, cards):
        state = make_state([make_player("alice", 400), make_player("bob")])

        result = buy_card(state, cards, "alice", "bonus")

        assert result.reason == Reason.NOT_ENOUGH_MONEY

    def test_buy_card_hand_full(self, make_state, trio, cards):
        state = make_state(trio(["bonus"] * 8))

        assert buy_card(state, cards, "alice", "bonus").reason == Reason.HAND_FULL

    def test_discard_removes_one_copy(self, make_state, trio):
        state = make_state(trio(["bonus", "bonus"]))

        result = discard_card(state, "alice", "bonus")

        assert result.state.get_player("alice").hand == ("bonus",)

    def test_discard_not_in_hand(self, make_state, trio):
        state = make_state(trio())

        assert discard_card(state, "alice", "bonus").reason == Reason.NOT_OWNER


class TestUseCardErrors:
    """Tests for card use failures."""

    def test_unknown_card(self, make_state, trio, cards, board):
        """Test that an unknown card id fails without mutating state."""
        state = make_state(trio(["bonus"]))

        result = play(state, cards, board, "no_such_card")

        assert result.reason == Reason.NOT_FOUND
        assert result.state is state

    def test_unknown_player(self, make_state, trio, cards, board):
        state = make_state(trio(["bonus"]))

        result = play(state, cards, board, "bonus", player_id="zed")

        assert result.reason == Reason.NOT_FOUND

    def test_card_not_in_hand(self, make_state, trio, cards, board):
        """Test that a card outside the hand fails without mutating state."""
        state = make_state(trio(["tax_bill"]))

        result = play(state, cards, board, "bonus")

        assert result.reason == Reason.NOT_OWNER
        assert result.state is state

    def test_failed_effect_keeps_card(self, make_state, trio, cards, board):
        """Test that a card with no target stays in hand."""
        owners = {"tokyo_1": "bob", "tokyo_2": "bob"}
        state = make_state(trio(["free_property"]), owners=owners)

        result = play(state, cards, board, "free_property")

        assert result.reason == Reason.NO_TARGET
        assert result.state is state
        assert result.state.get_player("alice").hand == ("free_property",)

    def test_success_removes_card(self, make_state, trio, cards, board):
        state = make_state(trio(["bonus", "bonus"]))

        result = play(state, cards, board, "bonus")

        assert result.state.get_player("alice").hand == ("bonus",)


class TestMovementCards:
    """Tests for movement cards."""

    def test_express_moves_to_destination(self, make_state, trio, cards, board):
        state = make_state(trio(["express"]), destination="kyoto")

        result = play(state, cards, board, "express")

        assert result.moved_to == "kyoto"
        assert result.state.get_player("alice").city_id == "kyoto"

    def test_double_move_sets_multiplier(self, make_state, trio, cards, board):
        """Test that the double-move variant only sets the dice multiplier."""
        state = make_state(trio(["super_express"]))

        result = play(state, cards, board, "super_express")

        alice = result.state.get_player("alice")
        assert result.moved_to is None
        assert alice.dice_multiplier == 2
        assert alice.city_id == "tokyo"

    def test_move_to_city(self, make_state, trio, cards, board):
        state = make_state(trio(["go_osaka"]))

        result = play(state, cards, board, "go_osaka")

        assert result.moved_to == "osaka"

    def test_move_to_city_not_on_board(self, make_state, trio, board):
        catalog = CardCatalog([
            Card("go_mars", CardType.MOVE_TO_CITY, "Mars", "", CardEffect("move_to_city", None, "mars")),
        ])
        state = make_state(trio(["go_mars"]))

        assert play(state, catalog, board, "go_mars").reason == Reason.NO_TARGET

    def test_forward_steps_left_to_engine(self, make_state, trio, cards, board):
        state = make_state(trio(["step_3"]))

        result = play(state, cards, board, "step_3")

        assert result.move_steps == 3
        assert result.moved_to is None
        assert result.state.get_player("alice").city_id == "tokyo"

    def test_backward_without_previous_city(self, make_state, trio, cards, board):
        """Test that a backward walk takes the first route and then heads back."""
        state = make_state(trio(["back_2"]))

        result = play(state, cards, board, "back_2")

        assert result.path == ("r1", "r1")
        assert result.moved_to == "tokyo"

    def test_backward_prefers_previous_city(self, make_state, make_player, board):
        catalog = CardCatalog([
            Card("back_1", CardType.MOVE_STEPS, "Back", "", CardEffect("move_steps", -1)),
        ])
        alice = make_player("alice", city_id="nagoya", previous_city_id="kyoto", hand=("back_1",))
        state = make_state([alice, make_player("bob")])

        result = play(state, catalog, board, "back_1")

        moved = result.state.get_player("alice")
        assert result.path == ("r4",)
        assert moved.city_id == "kyoto"
        assert moved.previous_city_id == "nagoya"

    def test_teleport_needs_a_city(self, make_state, trio, cards, board):
        state = make_state(trio(["any_station"]))

        assert play(state, cards, board, "any_station").reason == Reason.NO_TARGET
        result = play(state, cards, board, "any_station", CardTarget(city_id="kyoto"))
        assert result.moved_to == "kyoto"


class TestMoneyCards:
    """Tests for money gain and payment cards."""

    def test_flat_gain(self, make_state, trio, cards, board):
        state = make_state(trio(["bonus"]))

        result = play(state, cards, board, "bonus")

        assert result.state.get_player("alice").money == 11000
        assert result.state.get_player("alice").total_assets == 11000

    def test_property_value_percent(self, make_state, trio, cards, board):
        state = make_state(trio(["dividend"]), owners={"tokyo_1": "alice", "tokyo_2": "alice"})

        result = play(state, cards, board, "dividend")

        assert result.state.get_player("alice").money == 10400

    def test_collect_from_each_capped(self, make_state, make_player, cards, board):
        """Test that each opponent pays at most what they have."""
        players = [
            make_player("alice", hand=("collection",)),
            make_player("bob", 300),
            make_player("carol"),
        ]
        state = make_state(players)

        result = play(state, cards, board, "collection")

        assert result.state.get_player("alice").money == 10800
        assert result.state.get_player("bob").money == 0
        assert result.state.get_player("carol").money == 9500

    def test_flat_payment_capped(self, make_state, make_player, cards, board):
        state = make_state([make_player("alice", 500, hand=("tax_bill",)), make_player("bob")])

        result = play(state, cards, board, "tax_bill")

        assert result.state.get_player("alice").money == 0

    def test_pay_each_never_invents_money(self, make_state, make_player, cards, board):
        """Test that paying everyone stops when the payer runs out."""
        players = [
            make_player("alice", 500, hand=("treat_everyone",)),
            make_player("bob"),
            make_player("carol"),
        ]
        state = make_state(players)

        result = play(state, cards, board, "treat_everyone")

        assert result.state.get_player("alice").money == 0
        assert result.state.get_player("bob").money == 10300
        assert result.state.get_player("carol").money == 10200

    def test_total_assets_percent(self, make_state, trio, board):
        catalog = CardCatalog([
            Card("audit", CardType.PAY_MONEY, "Audit", "", CardEffect("pay_money", 10, "total_assets_percent")),
        ])
        state = make_state(trio(["audit"]), owners={"tokyo_2": "alice"})

        result = play(state, catalog, board, "audit")

        assert result.state.get_player("alice").money == 8700


class TestPropertyCards:
    """Tests for buying, selling, stealing and monopoly breaking."""

    def test_sell_chosen_property(self, make_state, trio, cards, board):
        state = make_state(trio(["quick_sale"]), owners={"tokyo_1": "alice", "tokyo_2": "alice"})

        result = play(state, cards, board, "quick_sale", CardTarget(property_id="tokyo_2"))

        assert result.state.get_property("tokyo_2").owner_id is None
        assert result.state.get_player("alice").money == 12400

    def test_sell_defaults_to_first_owned(self, make_state, trio, cards, board):
        state = make_state(trio(["quick_sale"]), owners={"tokyo_1": "alice", "tokyo_2": "alice"})

        result = play(state, cards, board, "quick_sale")

        assert result.state.get_property("tokyo_1").owner_id is None
        assert result.state.get_player("alice").money == 10800

    def test_sell_all_in_current_city(self, make_state, trio, cards, board):
        owners = {"tokyo_1": "alice", "tokyo_2": "alice", "kyoto_1": "alice"}
        state = make_state(trio(["sell_here"]), owners=owners)

        result = play(state, cards, board, "sell_here")

        assert result.state.get_player("alice").money == 14000
        assert result.state.get_property("kyoto_1").owner_id == "alice"

    def test_forced_sale_pays_opponent(self, make_state, trio, cards, board):
        state = make_state(trio(["forced_sale"]), owners={"kyoto_1": "bob", "kyoto_2": "bob"})

        result = play(state, cards, board, "forced_sale", CardTarget(player_id="bob"))

        assert result.state.get_property("kyoto_2").owner_id is None
        assert result.state.get_player("bob").money == 10500

    def test_steal_from_richest(self, make_state, trio, cards, board):
        """Test that the richest opponent loses their cheapest property."""
        state = make_state(trio(["takeover"]), owners={"kyoto_1": "bob", "kyoto_2": "bob"})

        result = play(state, cards, board, "takeover")

        assert result.state.get_property("kyoto_2").owner_id == "alice"
        assert result.state.get_player("alice").total_assets == 11000
        assert result.state.get_player("bob").total_assets == 14000

    def test_steal_richest_has_nothing(self, make_state, make_player, cards, board):
        players = [make_player("alice", hand=("takeover",)), make_player("bob", 50000), make_player("carol")]
        state = make_state(players, owners={"kyoto_1": "carol"})

        assert play(state, cards, board, "takeover").reason == Reason.NO_TARGET

    def test_steal_all_in_current_city(self, make_state, trio, cards, board):
        players = trio(["hostile_bid"], city_id="kyoto")
        state = make_state(players, owners={"kyoto_1": "bob", "kyoto_2": "carol"})

        result = play(state, cards, board, "hostile_bid")

        assert result.state.get_property("kyoto_1").owner_id == "alice"
        assert result.state.get_property("kyoto_2").owner_id == "alice"

    def test_monopoly_break(self, make_state, trio, cards, board):
        """Test that a full monopoly loses its cheapest property with an 80% refund."""
        state = make_state(trio(["antitrust"]), owners={"kyoto_1": "bob", "kyoto_2": "bob"})

        result = play(state, cards, board, "antitrust")

        assert result.state.get_property("kyoto_2").owner_id is None
        assert result.state.get_property("kyoto_1").owner_id == "bob"
        assert result.state.get_player("bob").money == 10800

    def test_monopoly_break_falls_back_to_partial(self, make_state, trio, cards, board):
        state = make_state(trio(["antitrust"]), owners={"tokyo_1": "bob"})

        result = play(state, cards, board, "antitrust")

        assert result.state.get_property("tokyo_1").owner_id is None
        assert result.state.get_player("bob").money == 10800

    def test_monopoly_break_no_target(self, make_state, trio, cards, board):
        state = make_state(trio(["antitrust"]))

        assert play(state, cards, board, "antitrust").reason == Reason.NO_TARGET

    def test_free_property_here(self, make_state, trio, cards, board):
        state = make_state(trio(["free_property"]), owners={"tokyo_1": "bob"})

        result = play(state, cards, board, "free_property")

        assert result.state.get_property("tokyo_2").owner_id == "alice"
        assert result.state.get_player("alice").money == 10000
        assert result.state.get_player("alice").total_assets == 13000

    def test_free_property_takes_chosen(self, make_state, trio, cards, board):
        """Test that the free pick honours a named property and ignores one not on offer."""
        state = make_state(trio(["free_property"]))

        chosen = play(state, cards, board, "free_property", CardTarget(property_id="tokyo_2"))
        elsewhere = play(state, cards, board, "free_property", CardTarget(property_id="kyoto_1"))

        assert chosen.state.get_property("tokyo_2").owner_id == "alice"
        assert chosen.state.get_property("tokyo_1").owner_id is None
        assert elsewhere.state.get_property("tokyo_1").owner_id == "alice"
        assert elsewhere.state.get_property("kyoto_1").owner_id is None

    def test_cheapest_anywhere(self, make_state, trio, cards, board):
        state = make_state(trio(["remote_purchase"]))

        result = play(state, cards, board, "remote_purchase")

        assert result.state.get_property("osaka_1").owner_id == "alice"
        assert result.state.get_player("alice").money == 9500

    def test_discounted_purchase(self, make_state, trio, cards, board):
        state = make_state(trio(["bargain"]))

        result = play(state, cards, board, "bargain")

        assert result.state.get_property("tokyo_1").owner_id == "alice"
        assert result.state.get_player("alice").money == 9300


class TestBombeeCards:
    """Tests for Bombee removal and transfer cards."""

    def test_remove_bombee(self, make_state, trio, cards, board):
        state = make_state(trio(["exorcism"], bombee=BombeeType.NORMAL, bombee_elapsed_turns=6))

        result = play(state, cards, board, "exorcism")

        alice = result.state.get_player("alice")
        assert alice.bombee == BombeeType.NONE
        assert alice.bombee_elapsed_turns == 0

    def test_remove_with_immunity(self, make_state, trio, cards, board):
        state = make_state(trio(["charm"], bombee=BombeeType.MINI))

        result = play(state, cards, board, "charm")

        assert result.state.get_player("alice").bombee_immune_years == 2

    def test_transfer_to_chosen_opponent(self, make_state, trio, cards, board):
        state = make_state(trio(["pass_bombee"], bombee=BombeeType.KING, bombee_elapsed_turns=12))

        result = play(state, cards, board, "pass_bombee", CardTarget(player_id="carol"))

        carol = result.state.get_player("carol")
        assert result.state.get_player("alice").bombee == BombeeType.NONE
        assert carol.bombee == BombeeType.KING
        assert carol.bombee_elapsed_turns == 0

    def test_transfer_without_bombee(self, make_state, trio, cards, board):
        state = make_state(trio(["pass_bombee"]))

        result = play(state, cards, board, "pass_bombee", CardTarget(player_id="bob"))

        assert result.reason == Reason.NO_TARGET

    def test_last_to_second(self, make_state, make_player, cards, board):
        """Test that last place's Bombee moves to second-to-last."""
        players = [
            make_player("alice", hand=("bombee_shuffle",)),
            make_player("bob", 100, bombee=BombeeType.MINI),
            make_player("carol", 5000),
        ]
        state = make_state(players)

        result = play(state, cards, board, "bombee_shuffle")

        assert result.state.get_player("bob").bombee == BombeeType.NONE
        assert result.state.get_player("carol").bombee == BombeeType.MINI

    def test_last_to_second_needs_bombee_on_last(self, make_state, make_player, cards, board):
        players = [
            make_player("alice", hand=("bombee_shuffle",), bombee=BombeeType.MINI),
            make_player("bob", 100),
        ]
        state = make_state(players)

        assert play(state, cards, board, "bombee_shuffle").reason == Reason.NO_TARGET


class TestOtherCards:
    """Tests for card theft, dice and income cards."""

    def test_steal_chosen_card(self, make_state, make_player, cards, board):
        players = [make_player("alice", hand=("pickpocket",)), make_player("bob", hand=("bonus", "tax_bill"))]
        state = make_state(players)

        result = play(state, cards, board, "pickpocket", CardTarget(player_id="bob", card_id="tax_bill"))

        assert result.state.get_player("alice").hand == ("tax_bill",)
        assert result.state.get_player("bob").hand == ("bonus",)

    def test_steal_random_card(self, make_state, make_player, cards, board, scripted):
        players = [make_player("alice", hand=("pickpocket",)), make_player("bob", hand=("bonus", "tax_bill"))]
        state = make_state(players)

        result = play(state, cards, board, "pickpocket", CardTarget(player_id="bob"), scripted(ints=[1]))

        assert result.state.get_player("alice").hand == ("tax_bill",)

    def test_steal_from_empty_hand(self, make_state, make_player, cards, board):
        state = make_state([make_player("alice", hand=("pickpocket",)), make_player("bob")])

        result = play(state, cards, board, "pickpocket", CardTarget(player_id="bob"))

        assert result.reason == Reason.NO_TARGET

    def test_steal_with_full_hand(self, make_state, make_player, cards, board):
        small = CardCatalog(cards.all(), max_hand_size=2)
        players = [
            make_player("alice", hand=("pickpocket", "bonus", "bonus")),
            make_player("bob", hand=("tax_bill",)),
        ]
        state = make_state(players)

        result = play(state, small, board, "pickpocket", CardTarget(player_id="bob"))

        assert result.reason == Reason.HAND_FULL

    def test_plus_dice(self, make_state, trio, cards, board):
        result = play(make_state(trio(["plus_three"])), cards, board, "plus_three")

        assert result.dice_bonus == 3

    def test_one_month_income_now(self, make_state, trio, cards, board):
        """Test that one month of income is doubled and paid at once."""
        state = make_state(trio(["payday"]), owners={"tokyo_1": "alice", "tokyo_2": "alice"})

        result = play(state, cards, board, "payday")

        alice = result.state.get_player("alice")
        assert alice.money == 10066
        assert alice.income_multiplier == 1

    def test_double_until_settlement(self, make_state, trio, cards, board):
        result = play(make_state(trio(["boom"])), cards, board, "boom")

        assert result.state.get_player("alice").income_multiplier == 2

    def test_card_rarity_default(self):
        card = Card("x", CardType.PLUS_DICE, "X", "", CardEffect("plus_dice", 1))

        assert card.rarity == Rarity.COMMON
