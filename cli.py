"""
cli.py
======
Command-line interface for Informant Trail: Where in the World is Nadine Vuan?

Provides a text-based game loop for development, testing, and running the
game without Streamlit. All game logic is delegated to GameEngine; this
module only handles I/O.

Usage:
    python cli.py

Commands during play:
    /ask              : ask the local informant for a clue (also: Enter)
    /travel           : head to the airport
    /back             : leave the airport and keep investigating
    /go <city id>     : fly to a city while travelling (e.g. /go rome)
    /cities           : list destinations you can still fly to
    /clues            : show the evidence board
    /continue         : advance the final encounter
    /status           : show score, attempts and route progress
    /restart          : abandon this case and open a new one
    /quit             : exit the game
"""

from __future__ import annotations

import logging

from dotenv import load_dotenv

from config import RuntimeSettings
from errors import CatalogLoadError, InvalidActionError, RouteGenerationError
from game_engine import ActionResult, GameEngine, build_engine
from models import PHASE_CONCLUSION, PHASE_GAME_OVER, PHASE_INTRO, PHASE_TRAVEL
from scoring import summary
from ui_helpers import format_clue, group_clues_by_tier, progress_line

logger = logging.getLogger("informant_trail.cli")

HELP_TEXT = (
    "Commands: /ask, /travel, /back, /go <city>, /cities, /clues, "
    "/continue, /status, /restart, /quit"
)


def print_result(result: ActionResult) -> None:
    for speaker, text in result.dialogue:
        print(f"\n[{speaker}]: {text}")
    if result.message:
        print(f"\n» {result.message}")


def print_status(engine: GameEngine) -> None:
    snap = engine.snapshot()
    print("  " + progress_line(
        snap.route_index,
        snap.route_length,
        snap.stats.score,
        snap.stats.attempts_remaining,
    ))
    if snap.current_city is not None:
        print(f"  Location     : {snap.current_city.name}, {snap.current_city.country}")
    print(f"  Clue level   : {snap.current_clue_level}")
    if snap.clues_remaining:
        left = " · ".join(f"{tier} {n}" for tier, n in snap.clues_remaining.items())
        print(f"  Clues left   : {left}")
    fairness = engine.manager.fairness_tracker.stats()
    logger.debug("Fairness stats: %s", fairness)
    if fairness["underrepresented_tiers"]:
        print(f"  Rarely heard : {', '.join(fairness['underrepresented_tiers'])} clues")
    if snap.milestone:
        print("  You are one step away from Nadine's final hideout!")


def print_evidence(engine: GameEngine) -> None:
    board = group_clues_by_tier(engine.snapshot().clues)
    if not any(board.values()):
        print("  No evidence collected yet.")
        return
    for clues in board.values():
        for clue in clues:
            print(f"  {format_clue(clue)}")


def print_destinations(engine: GameEngine) -> None:
    for city in engine.destination_options():
        print(f"  {city.id:<14} {city.name}, {city.country}")


def print_ending(engine: GameEngine) -> None:
    snap = engine.snapshot()
    stats = summary(engine.state, engine.manager.catalog)
    print("\n" + "=" * 60)
    if snap.has_won:
        print("   🎉 CASE CLOSED!")
    else:
        print("   ❌ THE TRAIL HAS GONE COLD")
        if snap.failure_details is not None and snap.failure_details.next_destination:
            print(f"   Nadine was heading to {snap.failure_details.next_destination}.")
    print("=" * 60)
    print(f"  Score      : {stats['score']}")
    print(f"  Progress   : {stats['route_progress']}")
    print(f"  Clues      : {stats['clues_collected']}")
    print(f"  Efficiency : {stats['efficiency']}%")
    print(f"  Time       : {stats['elapsed']}")
    print(f"  Path       : {stats['path']}")
    print("\nType /restart for a new case or /quit to leave.")


def handle_command(engine: GameEngine, user_input: str) -> bool:
    """
    Run one command. Returns False when the player wants to quit.

    Raises:
        InvalidActionError: the command is not allowed right now.
    """
    lower = user_input.strip().lower()

    if lower in {"/quit", "quit", "exit"}:
        print("Thanks for playing!")
        return False

    if lower == "/status":
        print_status(engine)
    elif lower == "/clues":
        print_evidence(engine)
    elif lower == "/cities":
        print_destinations(engine)
    elif lower == "/restart":
        print_result(engine.restart())
        print_result(engine.start_game())
    elif lower == "/travel":
        print_result(engine.begin_travel())
        print_destinations(engine)
    elif lower == "/back":
        print_result(engine.back_to_investigation())
    elif lower == "/continue":
        print_result(engine.continue_encounter())
    elif lower.startswith("/go"):
        parts = lower.split()
        if len(parts) < 2:
            print("Usage: /go <city id>")
        else:
            print_result(engine.guess_destination(parts[1]))
    elif lower in {"", "/ask"}:
        if engine.state.phase == PHASE_TRAVEL:
            print("You are at the airport. Use /go <city> or /back.")
        elif engine.state.final_encounter_step is not None:
            print_result(engine.continue_encounter())
        else:
            print_result(engine.request_clues())
    else:
        print(HELP_TEXT)

    if engine.state.phase in (PHASE_CONCLUSION, PHASE_GAME_OVER) and lower != "/status":
        print_ending(engine)
    return True


def run_cli(settings: RuntimeSettings) -> None:
    """
    Main CLI game loop.

    Loads the catalog, restores or starts a case, prints the briefing, then
    processes player input until the player quits.
    """
    try:
        engine = build_engine(settings)
        if engine.state.phase == PHASE_INTRO:
            opening = engine.start_game()
        else:
            opening = None
    except (CatalogLoadError, RouteGenerationError) as exc:
        logger.error("Cannot start game: %s", exc)
        print("The case files could not be loaded. Please try again later.")
        return

    # --- Case briefing banner ---
    print("\n" + "=" * 60)
    print("   INFORMANT TRAIL: WHERE IN THE WORLD IS NADINE VUAN?")
    print("=" * 60)
    print("\nNadine Vuan has vanished. Follow the informants, read the clues,")
    print("and guess each next city before your attempts run out.")
    print("\n" + HELP_TEXT)
    print("-" * 60)
    if opening is not None:
        print_result(opening)
    else:
        print("\n» Resuming your saved investigation.")
        print_status(engine)

    while True:
        snap = engine.snapshot()
        where = snap.current_city.name if snap.current_city else "?"
        try:
            user_input = input(f"\n[{snap.phase} · {where}]> ")
        except EOFError:
            print()
            break
        try:
            if not handle_command(engine, user_input):
                break
        except InvalidActionError as exc:
            print(f"  Not now: {exc.reason}")
        except RouteGenerationError as exc:
            logger.error("Route generation failed: %s", exc)
            print("Could not plan a new case. Please try /restart again.")


if __name__ == "__main__":
    load_dotenv()
    settings = RuntimeSettings.from_env()
    # Configure logging at the entry point so all informant_trail.* loggers
    # emit to stderr. Swap in a FileHandler here to redirect logs to disk.
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    run_cli(settings)
