"""Tests for the destination arrival bonus."""

from sugoroku.destination import calc_arrival_bonus, is_at_destination, process_arrival


class TestArrivalBonus:
    """Tests for bonus calculation."""

    def test_single_player_gets_minimum(self, make_state, make_player):
        """Test that a lone player always gets exactly 1000."""
        state = make_state([make_player("alice", 500000)])

        assert calc_arrival_bonus(state, "alice") == 1000

    def test_scaled_by_rival_assets(self, make_state, make_player):
        """Test avg(others) * players * 0.1."""
        state = make_state([make_player("alice"), make_player("bob", 20000), make_player("carol", 40000)])

        assert calc_arrival_bonus(state, "alice") == 9000

    def test_never_below_minimum(self, make_state, make_player):
        state = make_state([make_player("alice"), make_player("bob", 100)])

        assert calc_arrival_bonus(state, "alice") == 1000

    def test_broke_rivals_give_minimum(self, make_state, make_player):
        state = make_state([make_player("alice"), make_player("bob", 0)])

        assert calc_arrival_bonus(state, "alice") == 1000


class TestProcessArrival:
    """Tests for crediting the bonus and rotating the destination."""

    def test_credits_bonus(self, make_state, board, scripted):
        state = make_state(destination="tokyo")
        assert is_at_destination(state, state.players[0])

        result = process_arrival(state, board, "alice", scripted())

        alice = result.state.get_player("alice")
        assert result.bonus == 2000
        assert alice.money == 12000
        assert alice.total_assets == 12000

    def test_new_destination_excludes_reached(self, make_state, board, scripted):
        """Test that the next destination is never the city just reached."""
        state = make_state(destination="tokyo")

        result = process_arrival(state, board, "alice", scripted(ints=[0]))

        assert result.new_destination_city_id == "yokohama"
        assert result.state.destination_city_id == "yokohama"
