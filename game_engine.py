"""
game_engine.py
==============
Core game engine for Informant Trail: Where in the World is Nadine Vuan?

Contains:
  GameEngine: the single orchestrating class that wires together the
             lifecycle manager, clue engine and scoring, runs the phase
             state machine, and exposes a clean API consumed by both the
             Streamlit UI (app.py) and the CLI runner (cli.py).

Phases:
    intro -> investigation <-> travel -> investigation | conclusion | game_over

    conclusion and game_over are terminal; only restart() leaves them.

Public API summary:
    engine = build_engine(RuntimeSettings.from_env())
    engine.start_game()                 -> ActionResult
    engine.request_clues()              -> ActionResult
    engine.begin_travel()               -> ActionResult
    engine.back_to_investigation()      -> ActionResult
    engine.guess_destination(city_id)   -> ActionResult
    engine.continue_encounter()         -> ActionResult
    engine.restart()                    -> ActionResult
    engine.snapshot()                   -> GameSnapshot (read-only)

Every action either completes and persists, or raises InvalidActionError
without touching the session.

Logging
-------
The logger name for this module is ``informant_trail.game_engine``.
Configure level and destination once at your entry point (cli.py / app.py).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from catalog import load_catalog
from clues import ClueProgressionEngine
from config import GAME_CONFIG, RuntimeSettings
from errors import InvalidActionError
from fairness import FairnessTracker
from models import (
    PHASE_CONCLUSION,
    PHASE_GAME_OVER,
    PHASE_INTRO,
    PHASE_INVESTIGATION,
    PHASE_TRAVEL,
    City,
    Clue,
    FailureDetails,
    FinalEncounter,
    GameStats,
    SessionState,
)
from random_source import make_random_source
from scoring import build_failure_details, point_value
from session import SessionLifecycleManager
from storage import make_store

logger = logging.getLogger("informant_trail.game_engine")

NO_MORE_INFO_LINE = "I have no more information."

_FALLBACK_ENCOUNTER = FinalEncounter(
    nadine_speech="Well done, detective. You finally caught up with me.",
    steve_response="Nadine! We have been looking everywhere for you.",
    victory_message="Case closed! You found Nadine Vuan.",
)

Dialogue = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class ActionResult:
    """
    Outcome of one gameplay action, ready for display.

    Attributes:
        action:         Name of the action that ran ("guess_destination", ...).
        outcome:        Short machine-readable result ("correct", "incorrect",
                        "game_over", "presented", "no_more_info", ...).
        message:        One-line narrator summary.
        points_awarded: Points added to the score by this action.
        clues:          Clues newly presented by this action.
        dialogue:       (speaker, text) lines to show, in order.
    """

    action:         str
    outcome:        str
    message:        str = ""
    points_awarded: int = 0
    clues:          Tuple[Clue, ...] = ()
    dialogue:       Dialogue = ()


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of the session for presentation layers."""

    session_id:         str
    phase:              str
    route_index:        int
    route_length:       int
    current_city:       Optional[City]
    current_clue_level: str
    stats:              GameStats
    clues:              Tuple[Clue, ...]
    visited_cities:     Tuple[City, ...]
    is_game_complete:   bool
    has_won:            bool
    failure_details:    Optional[FailureDetails]
    milestone:          bool
    clues_remaining:    Dict[str, int]
    encounter_line:     Optional[Tuple[str, str]]
    last_result:        Optional[ActionResult]


def should_present_final_destination(state: SessionState) -> bool:
    """True once four stops are behind the player on a full route."""
    return (
        state.stats.cities_completed == GAME_CONFIG.non_final_stops
        and len(state.route) == GAME_CONFIG.route_length
    )


class GameEngine:
    """
    Gameplay controller.

    The lifecycle manager owns the SessionState; this class mutates it one
    action at a time and persists after every change. Presentation code
    should only read GameSnapshot objects and call the action methods.

    Attributes:
        manager:     SessionLifecycleManager owning state, catalog and store.
        clue_engine: ClueProgressionEngine sharing the manager's tracker and
                     random source.
        last_result: ActionResult of the most recent successful action.
    """

    def __init__(
        self,
        manager: SessionLifecycleManager,
        clue_engine: Optional[ClueProgressionEngine] = None,
    ) -> None:
        self.manager = manager
        self.clue_engine = clue_engine or ClueProgressionEngine(
            manager.fairness_tracker, manager.random_source, manager.config
        )
        self.last_result: Optional[ActionResult] = None
        logger.info(
            "GameEngine ready: %d cities, session=%s",
            len(manager.catalog),
            manager.state.session_id,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self.manager.state

    def city(self, city_id: Optional[str]) -> Optional[City]:
        if city_id is None:
            return None
        return self.manager.cities_by_id.get(city_id)

    def _reject(self, action: str, reason: str) -> InvalidActionError:
        logger.warning("Rejected %s in phase %s: %s", action, self.state.phase, reason)
        return InvalidActionError(action, reason)

    def _require_phase(self, action: str, *phases: str) -> None:
        if self.state.phase not in phases:
            raise self._reject(
                action, f"not allowed in phase {self.state.phase} (needs {', '.join(phases)})"
            )

    def _finish(self, result: ActionResult) -> ActionResult:
        self.manager.persist()
        self.last_result = result
        return result

    def _encounter(self) -> FinalEncounter:
        final = self.city(self.state.current_city_id)
        if final is not None and final.final_encounter is not None:
            return final.final_encounter
        return _FALLBACK_ENCOUNTER

    def encounter_line(self) -> Optional[Tuple[str, str]]:
        step = self.state.final_encounter_step
        if step is None:
            return None
        return self._encounter().lines()[step]

    def clues_remaining(self) -> Dict[str, int]:
        """Unasked clues per tier from the current informant; {} with no next stop."""
        state = self.state
        source = self.city(state.current_city_id)
        target = self.city(state.next_city_id())
        if source is None or target is None:
            return {}
        return self.clue_engine.remaining_counts(source, target, state.collected_clues)

    def destination_options(self) -> List[City]:
        """Cities the player may guess: not the current city, not visited."""
        state = self.state
        return [
            city
            for city in self.manager.catalog
            if city.id != state.current_city_id and city.id not in state.visited_cities
        ]

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def start_game(self) -> ActionResult:
        """
        Leave the intro and begin investigating the first city.

        Routes the session first when it has no route yet.

        Raises:
            InvalidActionError:  not in the intro phase.
            RouteGenerationError: the catalog cannot yield a route.
        """
        self._require_phase("start_game", PHASE_INTRO)
        if not self.state.is_initialized:
            self.manager.initialize_game()

        state = self.state
        state.phase = PHASE_INVESTIGATION
        state.current_clue_level = "hard"

        city = self.city(state.current_city_id)
        logger.info("Session %s started in %s", state.session_id, state.current_city_id)
        return self._finish(
            ActionResult(
                action="start_game",
                outcome="started",
                message=f"Your investigation begins in {city.name}, {city.country}.",
                dialogue=((city.informant.name, city.informant.greeting),),
            )
        )

    def request_clues(self) -> ActionResult:
        """
        Ask the local informant about Nadine's next destination.

        At the final city this starts (or advances) the final encounter.
        """
        self._require_phase("request_clues", PHASE_INVESTIGATION)
        state = self.state

        if state.is_at_final_city():
            if state.final_encounter_step is not None:
                return self.continue_encounter()
            state.final_encounter_step = 0
            return self._finish(
                ActionResult(
                    action="request_clues",
                    outcome="encounter",
                    message="Someone familiar steps out of the crowd...",
                    dialogue=(self.encounter_line(),),
                )
            )

        source = self.city(state.current_city_id)
        target = self.city(state.next_city_id())
        request = self.clue_engine.request_clues(source, target, state.collected_clues)

        if request.is_exhausted:
            result = ActionResult(
                action="request_clues",
                outcome="no_more_info",
                message=f"{source.informant.name} has nothing more to tell you.",
                dialogue=((source.informant.name, NO_MORE_INFO_LINE),),
            )
            self.last_result = result
            return result

        added = tuple(clue for clue in request.clues if state.add_clue(clue))
        state.current_clue_level = request.level
        logger.info(
            "Session %s: %d clue(s) at level %s in %s",
            state.session_id,
            len(added),
            request.level,
            source.id,
        )
        return self._finish(
            ActionResult(
                action="request_clues",
                outcome="presented",
                message=f"{source.informant.name} shares a {request.level} clue.",
                clues=added,
                dialogue=tuple((source.informant.name, clue.text) for clue in added),
            )
        )

    def begin_travel(self) -> ActionResult:
        """Head to the airport and pick the next destination."""
        self._require_phase("begin_travel", PHASE_INVESTIGATION)
        state = self.state
        if state.is_at_final_city():
            raise self._reject("begin_travel", "already at the final destination")

        city = self.city(state.current_city_id)
        helped = bool(state.clues_from(city.id))
        farewell = city.informant.farewell_helpful if helped else city.informant.farewell_unhelpful

        state.phase = PHASE_TRAVEL
        return self._finish(
            ActionResult(
                action="begin_travel",
                outcome="travelling",
                message="Where do you think Nadine went next?",
                dialogue=((city.informant.name, farewell),),
            )
        )

    def back_to_investigation(self) -> ActionResult:
        """Leave the airport and keep questioning the current informant."""
        self._require_phase("back_to_investigation", PHASE_TRAVEL)
        self.state.phase = PHASE_INVESTIGATION
        city = self.city(self.state.current_city_id)
        return self._finish(
            ActionResult(
                action="back_to_investigation",
                outcome="investigating",
                message=f"You head back into {city.name}.",
            )
        )

    def guess_destination(self, city_id: str) -> ActionResult:
        """
        Fly to `city_id`.

        A correct guess scores the current clue level's points and moves the
        player along the route. A wrong guess costs one attempt; the last
        attempt ends the game.

        Raises:
            InvalidActionError: not travelling, no route, unknown city, the
                current city, or a city already visited.
        """
        action = "guess_destination"
        state = self.state

        if not state.is_initialized:
            raise self._reject(action, "no route has been generated")
        self._require_phase(action, PHASE_TRAVEL)
        guessed = self.city(city_id)
        if guessed is None:
            raise self._reject(action, f"unknown city {city_id!r}")
        if city_id == state.current_city_id:
            raise self._reject(action, "already in that city")
        if city_id in state.visited_cities:
            raise self._reject(action, f"{guessed.name} was already visited")

        expected = state.next_city_id()
        if expected is not None and city_id == expected:
            return self._correct_guess(guessed)
        return self._wrong_guess(guessed)

    def _correct_guess(self, destination: City) -> ActionResult:
        state = self.state
        points = point_value(state.current_clue_level)

        state.stats.score += points
        state.stats.cities_completed += 1
        state.mark_visited(state.current_city_id)
        state.route_index += 1
        state.current_city_id = state.route[state.route_index]
        state.current_clue_level = "hard"
        state.phase = PHASE_INVESTIGATION

        dialogue = [(destination.informant.name, destination.informant.greeting)]
        if state.is_at_final_city():
            state.final_encounter_step = 0
            dialogue.append(self.encounter_line())

        logger.info(
            "Session %s: correct guess %s (+%d, score=%d, completed=%d)",
            state.session_id,
            destination.id,
            points,
            state.stats.score,
            state.stats.cities_completed,
        )
        return self._finish(
            ActionResult(
                action="guess_destination",
                outcome="correct",
                message=f"Correct! Nadine was seen in {destination.name}. +{points} points.",
                points_awarded=points,
                dialogue=tuple(dialogue),
            )
        )

    def _wrong_guess(self, guessed: City) -> ActionResult:
        state = self.state
        state.stats.attempts_remaining = max(0, state.stats.attempts_remaining - 1)
        dialogue = ((guessed.informant.name, guessed.not_here_response),)

        logger.info(
            "Session %s: wrong guess %s (attempts left %d)",
            state.session_id,
            guessed.id,
            state.stats.attempts_remaining,
        )

        if state.stats.attempts_remaining <= 0:
            state.phase = PHASE_GAME_OVER
            state.is_game_complete = True
            state.has_won = False
            state.failure_details = build_failure_details(state, self.manager.catalog)
            logger.info("Session %s: game over at %s", state.session_id, state.failure_details.route_progress)
            return self._finish(
                ActionResult(
                    action="guess_destination",
                    outcome="game_over",
                    message=state.failure_details.message,
                    dialogue=dialogue,
                )
            )

        return self._finish(
            ActionResult(
                action="guess_destination",
                outcome="incorrect",
                message=(
                    f"Nadine is not in {guessed.name}. "
                    f"{state.stats.attempts_remaining} attempt(s) left."
                ),
                dialogue=dialogue,
            )
        )

    def continue_encounter(self) -> ActionResult:
        """Advance the final encounter; past the last line the case closes."""
        action = "continue_encounter"
        self._require_phase(action, PHASE_INVESTIGATION)
        state = self.state
        if state.final_encounter_step is None:
            raise self._reject(action, "no final encounter in progress")

        last_step = len(self._encounter().lines()) - 1
        if state.final_encounter_step < last_step:
            state.final_encounter_step += 1
            return self._finish(
                ActionResult(
                    action=action,
                    outcome="encounter",
                    dialogue=(self.encounter_line(),),
                )
            )

        state.final_encounter_step = None
        state.phase = PHASE_CONCLUSION
        state.is_game_complete = True
        state.has_won = True
        logger.info("Session %s: case closed, score=%d", state.session_id, state.stats.score)
        return self._finish(
            ActionResult(
                action=action,
                outcome="conclusion",
                message=f"Final score: {state.stats.score}",
            )
        )

    def restart(self) -> ActionResult:
        """Throw the current playthrough away; the new one starts in intro."""
        old_id = self.state.session_id
        self.manager.reset_game_state()
        self.last_result = ActionResult(
            action="restart",
            outcome="reset",
            message="A new case file lands on your desk.",
        )
        logger.info("Restarted: %s -> %s", old_id, self.state.session_id)
        return self.last_result

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def snapshot(self) -> GameSnapshot:
        state = self.state
        by_id = self.manager.cities_by_id
        return GameSnapshot(
            session_id=state.session_id,
            phase=state.phase,
            route_index=state.route_index,
            route_length=len(state.route),
            current_city=self.city(state.current_city_id),
            current_clue_level=state.current_clue_level,
            stats=replace(state.stats),
            clues=tuple(state.collected_clues),
            visited_cities=tuple(by_id[c] for c in state.visited_cities if c in by_id),
            is_game_complete=state.is_game_complete,
            has_won=state.has_won,
            failure_details=state.failure_details,
            milestone=should_present_final_destination(state),
            clues_remaining=self.clues_remaining(),
            encounter_line=self.encounter_line(),
            last_result=self.last_result,
        )


def build_engine(settings: Optional[RuntimeSettings] = None) -> GameEngine:
    """
    Wire catalog, store, randomness and lifecycle manager from settings.

    Restores a persisted session when a valid one exists.

    Raises:
        CatalogLoadError: the configured catalog cannot be loaded.
    """
    settings = settings or RuntimeSettings()
    catalog = load_catalog(settings.catalog_source)
    manager = SessionLifecycleManager(
        store=make_store(settings.state_file),
        catalog=catalog,
        random_source=make_random_source(settings.seed),
        fairness_tracker=FairnessTracker(),
    )
    manager.restore()
    return GameEngine(manager)
