"""Tests for the decision drivers."""

import pytest

from sugoroku.cards import Card, CardCatalog, CardEffect, CardTarget, CardType, use_card
from sugoroku.drivers import AgentDriver, ConsoleDriver, ScriptedDriver
from sugoroku.engine import Decision, DecisionKind, DecisionRequest
from sugoroku.exceptions import InvalidActionError
from sugoroku.state import BombeeType


def request(kind, options=(), **details):
    return DecisionRequest(kind, "alice", tuple(options), details)


@pytest.fixture
def agent_driver(board, cards, scripted):
    return AgentDriver(board, cards, rng=scripted())


class TestAgentDriver:
    """Tests for auto-play through a CPU heuristic."""

    def test_plays_one_card_attempt_per_turn(self, agent_driver, make_state, make_player):
        players = [make_player("alice", hand=("exorcism",), bombee=BombeeType.MINI), make_player("bob")]
        state = make_state(players)

        first = agent_driver.decide(state, request(DecisionKind.USE_CARD, ["exorcism"], attempts=0))
        second = agent_driver.decide(state, request(DecisionKind.USE_CARD, ["exorcism"], attempts=1))

        assert first.choice == "exorcism"
        assert second == Decision()

    def test_route_towards_destination(self, agent_driver, make_state, make_player):
        state = make_state([make_player("alice", city_id="nagoya"), make_player("bob")], destination="kyoto")

        decision = agent_driver.decide(state, request(DecisionKind.CHOOSE_ROUTE, ["r2", "r3", "r4"]))

        assert decision.choice == "r4"

    def test_buy_and_upgrade(self, agent_driver, make_state):
        state = make_state(owners={"tokyo_1": "alice"})

        buy = agent_driver.decide(state, request(DecisionKind.BUY_PROPERTY, ["yokohama_1"]))
        upgrade = agent_driver.decide(state, request(DecisionKind.UPGRADE_PROPERTY, ["tokyo_1"]))

        assert buy.accept
        assert upgrade.accept

    def test_shop_stops_after_limit(self, agent_driver, make_state):
        """Test that auto-play buys the first affordable pick and stops at two."""
        state = make_state()
        lineup = ["express", "bonus", "step_6", "tax_bill"]

        assert agent_driver.decide(state, request(DecisionKind.SHOP, lineup, purchases=0)).choice == "bonus"
        assert agent_driver.decide(state, request(DecisionKind.SHOP, lineup, purchases=2)) == Decision()

    def test_liquidates_cheapest(self, agent_driver, make_state):
        state = make_state(owners={"tokyo_2": "alice", "osaka_1": "alice"})

        decision = agent_driver.decide(state, request(DecisionKind.LIQUIDATE, ["tokyo_2", "osaka_1"]))

        assert decision.choice == "osaka_1"


class TestScriptedDriver:
    """Tests for replaying fixed answers."""

    def test_replays_in_order(self, make_state):
        driver = ScriptedDriver([Decision(accept=True), Decision(choice="r2")])
        state = make_state()

        assert driver.decide(state, request(DecisionKind.BUY_PROPERTY, ["tokyo_1"])).accept
        assert driver.decide(state, request(DecisionKind.CHOOSE_ROUTE, ["r1", "r2"])).choice == "r2"
        assert driver.remaining == 0
        assert len(driver.requests) == 2

    def test_runs_out(self, make_state):
        driver = ScriptedDriver([])

        with pytest.raises(InvalidActionError):
            driver.decide(make_state(), request(DecisionKind.SHOP, ["bonus"]))


class TestConsoleDriver:
    """Tests for terminal prompts with injected input."""

    @staticmethod
    def console(cards, board, answers):
        output = []
        driver = ConsoleDriver(cards, board, input_fn=lambda prompt: answers.pop(0), output_fn=output.append)
        return driver, output

    def test_reprompts_on_invalid_choice(self, cards, board, make_state):
        driver, output = self.console(cards, board, ["9", "x", "2"])
        choices = [
            {"route_id": "r1", "city_id": "tokyo", "kind": "local"},
            {"route_id": "r2", "city_id": "nagoya", "kind": "shinkansen"},
        ]

        decision = driver.decide(make_state(), request(DecisionKind.CHOOSE_ROUTE, ["r1", "r2"], choices=choices))

        assert decision.choice == "r2"
        assert output.count("Invalid choice.") == 2
        assert "  2. nagoya via shinkansen" in output

    def test_yes_no(self, cards, board, make_state):
        driver, _ = self.console(cards, board, ["y", "n"])
        state = make_state()

        assert driver.decide(state, request(DecisionKind.BUY_PROPERTY, ["tokyo_1"])).accept
        assert not driver.decide(state, request(DecisionKind.UPGRADE_PROPERTY, ["tokyo_1"], cost=500)).accept

    def test_skip(self, cards, board, make_state):
        driver, _ = self.console(cards, board, ["0", ""])
        state = make_state(owners={"tokyo_1": "alice"})

        assert driver.decide(state, request(DecisionKind.USE_CARD, ["bonus"])) == Decision()
        assert driver.decide(state, request(DecisionKind.LIQUIDATE, ["tokyo_1"], fee=100)).choice is None


class TestConsoleCardTargets:
    """Tests for the follow-up prompts a card choice brings up."""

    @staticmethod
    def choose(cards, board, state, options, answers):
        output = []
        driver = ConsoleDriver(cards, board, input_fn=lambda prompt: answers.pop(0), output_fn=output.append)
        decision = driver.decide(state, request(DecisionKind.USE_CARD, options))
        assert answers == []
        return decision, output

    def test_card_without_target_asks_nothing(self, cards, board, make_state):
        decision, _ = self.choose(cards, board, make_state(), ["bonus", "bombee_shuffle"], ["1"])

        assert decision.choice == "bonus"
        assert decision.target == CardTarget()

    def test_teleport_lists_stations(self, cards, board, make_state, make_player):
        """Test that the Anywhere Card gets a station the card can actually use."""
        state = make_state([make_player("alice", hand=("any_station",)), make_player("bob")])

        decision, output = self.choose(cards, board, state, ["any_station"], ["1", "4"])

        assert decision.target == CardTarget(city_id="osaka")
        assert "  5. Kyoto" in output
        result = use_card(state, cards, board, "alice", "any_station", decision.target)
        assert result.success
        assert result.state.get_player("alice").city_id == "osaka"

    def test_sell_lists_own_properties(self, cards, board, make_state):
        state = make_state(owners={"tokyo_1": "alice", "kyoto_2": "alice", "osaka_1": "bob"})

        decision, output = self.choose(cards, board, state, ["quick_sale"], ["1", "2"])

        assert decision.target == CardTarget(property_id="kyoto_2")
        assert "  1. Sushi Bar (1000)" in output
        assert not any("Takoyaki" in line for line in output)

    def test_free_property_lists_unowned_here(self, cards, board, make_state):
        state = make_state(owners={"tokyo_1": "bob"})

        decision, _ = self.choose(cards, board, state, ["free_property"], ["1", "1"])

        assert decision.target == CardTarget(property_id="tokyo_2")

    def test_rival_cards_ask_for_player(self, cards, board, make_state, make_player):
        state = make_state([make_player("alice"), make_player("bob"), make_player("carol")])

        steal, output = self.choose(cards, board, state, ["pickpocket"], ["1", "2"])
        forced, _ = self.choose(cards, board, state, ["forced_sale"], ["1", "1"])
        passed, _ = self.choose(cards, board, state, ["pass_bombee"], ["1", "2"])

        assert steal.target == CardTarget(player_id="carol")
        assert "  1. Bob" in output
        assert not any("Alice" in line for line in output[1:])
        assert forced.target == CardTarget(player_id="bob")
        assert passed.target == CardTarget(player_id="carol")

    def test_selected_card_steal_lists_victim_hand(self, cards, board, make_state, make_player):
        sneak = Card("sneak", CardType.CARD_STEAL, "Sneak Thief Card", "Take a chosen card.",
                     CardEffect("card_steal", None, "selected_card"))
        catalog = CardCatalog(cards.all() + [sneak])
        state = make_state([make_player("alice", hand=("sneak",)), make_player("bob", hand=("bonus", "express"))])

        decision, output = self.choose(catalog, board, state, ["sneak"], ["1", "1", "2"])

        assert decision.target == CardTarget(player_id="bob", card_id="express")
        assert "  2. Express Card" in output
        result = use_card(state, catalog, board, "alice", "sneak", decision.target)
        assert result.state.get_player("alice").hand == ("express",)
        assert result.state.get_player("bob").hand == ("bonus",)
