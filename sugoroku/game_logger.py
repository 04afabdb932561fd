"""
JSONL logger for Sugoroku game events.

Every line is a JSON object with a running ``event_id``, a timestamp and
an ``event_type``.
"""

import json
from datetime import datetime
from typing import Iterable, List, Optional

from sugoroku import economy
from sugoroku.state import GameState
from sugoroku.turn_events import TurnEvent


class GameLogger:
    """Logger that writes game events to a JSONL file."""

    def __init__(self, log_file: Optional[str] = None, game_id: Optional[str] = None):
        """
        Initialize game logger.

        Args:
            log_file: Path to log file. If None, generates timestamped filename.
            game_id: Game id stamped on every line.
        """
        if log_file is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = f"sugoroku_game_{timestamp}.jsonl"

        self.log_file = log_file
        self.game_id = game_id
        self.event_count = 0

        # Create/clear log file
        with open(self.log_file, "w", encoding="utf-8"):
            pass

    def log_event(self, event_type: str, **kwargs) -> None:
        """
        Append one event.

        Args:
            event_type: Type of event (e.g. "game_start", "dice_roll", "purchase")
            **kwargs: Additional event data
        """
        event = {
            "event_id": self.event_count,
            "timestamp": datetime.now().isoformat(),
            "game_id": self.game_id,
            "event_type": event_type,
            **kwargs,
        }
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(event, default=str) + "\n")
        self.event_count += 1

    def log_turn_events(self, state: GameState, events: Iterable[TurnEvent]) -> int:
        """
        Write engine narration stamped with the calendar.

        Event-specific data goes under ``details`` so it never shadows the
        stamp fields.

        Returns:
            Number of lines written.
        """
        wrote = 0
        for event in events:
            self.log_event(
                event.event_type.value,
                turn_number=state.turn_count,
                year=state.year,
                month=state.month,
                player_id=event.player_id,
                details=event.details,
            )
            wrote += 1
        return wrote

    def log_game_start(self, state: GameState, seed: Optional[int]) -> None:
        self.log_event(
            "game_start",
            num_players=len(state.players),
            player_names=[p.name for p in state.players],
            difficulties=[p.difficulty.value for p in state.players],
            total_years=state.total_years,
            destination=state.destination_city_id,
            seed=seed,
        )

    def log_player_states(self, state: GameState) -> None:
        """Snapshot every player's finances."""
        for player in state.players:
            owned = economy.owned_by(state.properties, player.id)
            self.log_event(
                "player_state",
                turn_number=state.turn_count,
                player_id=player.id,
                player_name=player.name,
                money=player.money,
                total_assets=player.total_assets,
                city_id=player.city_id,
                properties=[p.id for p in owned],
                hand=list(player.hand),
                bombee=player.bombee.value,
            )

    def log_game_end(self, state: GameState, reason: str = "years_elapsed") -> None:
        standings: List[dict] = [
            {"rank": i, "player_id": p.id, "name": p.name, "total_assets": p.total_assets}
            for i, p in enumerate(economy.standings(state), start=1)
        ]
        winner = standings[0] if standings else None
        self.log_event(
            "game_end",
            turn_number=state.turn_count,
            winner_id=winner["player_id"] if winner else None,
            winner_name=winner["name"] if winner else None,
            reason=reason,
            final_standings=standings,
        )
