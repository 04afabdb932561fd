#!/usr/bin/env python3
"""
Minimal CLI for simulating Sugoroku games.

Runs CPU-only games (or one human seat on the terminal) on the built-in
map or a JSON catalog, prints the standings and writes a JSONL log.
"""

import argparse
import logging
import os
from datetime import datetime
from typing import List, Optional

from sugoroku import economy
from sugoroku.config import MAX_PLAYERS, GameConfig
from sugoroku.content import load_catalog
from sugoroku.drivers import AgentDriver, ConsoleDriver, Driver
from sugoroku.engine import PlayerConfig, TurnEngine
from sugoroku.game_logger import GameLogger
from sugoroku.rng import RandomSource
from sugoroku.settings import get_settings
from sugoroku.standard import standard_catalog
from sugoroku.state import Difficulty, GamePhase, GameState, PlayerKind
from sugoroku.turn_events import EventType

logger = logging.getLogger(__name__)

PLAYER_NAMES = ["Momotaro", "Yasha", "Kintaro", "Urashima"]
NARRATED = {
    EventType.PURCHASE,
    EventType.DESTINATION_ARRIVAL,
    EventType.CARD_USE,
    EventType.BOMBEE_ACTION,
    EventType.LIQUIDATION,
    EventType.CALENDAR_EVENT,
}


def print_game_state(state: GameState) -> None:
    """Print current game state."""
    print("\n" + "=" * 60)
    print(f"YEAR {state.year}/{state.total_years}  MONTH {state.month}  -> {state.destination_city_id}")
    print("=" * 60)

    for player in state.players:
        owned = economy.owned_by(state.properties, player.id)
        bombee = f" [{player.bombee.value} bombee]" if player.has_bombee else ""
        print(
            f"{player.name}: {player.money} | assets {player.total_assets} | "
            f"{len(owned)} properties | {len(player.hand)} cards | at {player.city_id}{bombee}"
        )


def print_game_summary(state: GameState) -> None:
    """Print final game summary."""
    print("\n" + "=" * 60)
    print("GAME OVER")
    print("=" * 60)

    ranking = economy.standings(state)
    print(f"\nWinner: {ranking[0].name}")
    print("\nFinal Standings:")
    for rank, player in enumerate(ranking, start=1):
        owned = economy.owned_by(state.properties, player.id)
        print(f"  {rank}. {player.name}: {player.total_assets} ({len(owned)} properties)")

    print(f"\nTotal Turns: {state.turn_count}")


def _difficulties(names_csv: str, count: int) -> List[Difficulty]:
    """``normal`` for everyone, or a comma list such as ``easy,hard``."""
    names = [s.strip() for s in names_csv.split(",") if s.strip()]
    if not names:
        raise ValueError("no difficulty given")
    return [Difficulty(names[i % len(names)]) for i in range(count)]


def simulate_game(
    num_players: int = 4,
    difficulty: str = "normal",
    years: int = 10,
    seed: Optional[int] = None,
    verbose: bool = True,
    log_file: Optional[str] = None,
    save_slot: Optional[str] = None,
    catalog_path: Optional[str] = None,
    human: bool = False,
) -> GameState:
    """
    Simulate a complete game.

    Args:
        num_players: Number of players (1-4)
        difficulty: CPU difficulty, or a comma list cycled over the seats
        years: Game length in years
        seed: Random seed for reproducibility
        verbose: Whether to print detailed output
        log_file: Path to JSONL log file (None = auto-generate)
        save_slot: Save the final state to this slot when set
        catalog_path: JSON catalog file or directory (None = built-in map)
        human: Seat 1 is played on the terminal
    """
    catalog = load_catalog(catalog_path) if catalog_path else standard_catalog()
    config = GameConfig(total_years=years, seed=seed)
    rng = RandomSource(seed)
    engine = TurnEngine.from_catalog(catalog, config, rng)

    seats = [
        PlayerConfig(PLAYER_NAMES[i], PlayerKind.CPU, level)
        for i, level in enumerate(_difficulties(difficulty, num_players))
    ]
    driver: Driver = AgentDriver(engine.board, engine.cards, rng=rng)
    if human:
        seats[0] = PlayerConfig(seats[0].name, PlayerKind.HUMAN, seats[0].difficulty)
        driver = ConsoleDriver(engine.cards, engine.board)

    state = engine.new_game(seats)
    game_log = GameLogger(log_file, game_id=state.game_id)
    game_log.log_game_start(state, seed)

    if verbose:
        print(f"Starting {years}-year game with {num_players} players ({difficulty})")
        print(f"Seed: {seed}")
        print(f"Logging to: {game_log.log_file}")

    while state.phase != GamePhase.GAME_OVER:
        year = state.year
        step = engine.play_turn(state, driver)
        game_log.log_turn_events(state, step.events)
        state = step.state

        if verbose:
            for event in step.events:
                if event.event_type in NARRATED:
                    print(f"  {event}")
            if state.year != year and state.phase != GamePhase.GAME_OVER:
                print_game_state(state)
                game_log.log_player_states(state)

    game_log.log_game_end(state)

    if save_slot is not None:
        _save(save_slot, state)

    if verbose:
        print_game_summary(state)
        print(f"\nGame logged to: {game_log.log_file}")

    return state


def _save(slot_id: str, state: GameState) -> None:
    from sugoroku.data import SaveRepository, create_tables, init_db, session_scope

    init_db()
    create_tables()
    with session_scope() as session:
        if SaveRepository(session).save(slot_id, state):
            print(f"Saved to slot {slot_id}")
        else:
            print(f"Could not save slot {slot_id}")


def main():
    """Main entry point for CLI."""
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Simulate a Sugoroku game")
    parser.add_argument(
        "--players",
        type=int,
        default=4,
        choices=range(1, MAX_PLAYERS + 1),
        help=f"Number of players (1-{MAX_PLAYERS})",
    )
    parser.add_argument(
        "--difficulty",
        type=str,
        default=settings.default_difficulty.value,
        help="CPU difficulty: easy, normal, hard or a comma list (e.g. easy,hard)",
    )
    parser.add_argument("--years", type=int, default=settings.total_years, help="Game length in years")
    parser.add_argument("--seed", type=int, default=settings.seed, help="Random seed")
    parser.add_argument("--quiet", action="store_true", help="Reduce output verbosity")
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Path to JSONL log file (default: timestamped file in the log directory)",
    )
    parser.add_argument("--save-slot", type=str, default=None, help="Save the final state to this slot")
    parser.add_argument(
        "--catalog",
        type=str,
        default=settings.catalog_path,
        help="Catalog JSON file or directory (default: built-in map)",
    )
    parser.add_argument("--human", action="store_true", help="Play the first seat on the terminal")

    args = parser.parse_args()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        _difficulties(args.difficulty, args.players)
    except ValueError:
        parser.error(f"invalid difficulty: {args.difficulty}")

    log_file = args.log_file
    if log_file is None:
        os.makedirs(settings.log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = os.path.join(settings.log_dir, f"sugoroku_game_{timestamp}.jsonl")

    simulate_game(
        num_players=args.players,
        difficulty=args.difficulty,
        years=args.years,
        seed=args.seed,
        verbose=not args.quiet,
        log_file=log_file,
        save_slot=args.save_slot,
        catalog_path=args.catalog,
        human=args.human,
    )


if __name__ == "__main__":
    main()
