"""
session.py
==========
Session lifecycle: create, reset, persist, restore and validate SessionState.

SessionLifecycleManager is the single owner of the current SessionState.
It is the only component allowed to REPLACE the state object; GameEngine
mutates fields on the object it gets from `manager.state` and calls
`manager.persist()` after every action.

Persisted records are versioned camelCase JSON (see models.PersistedSession)
written under GameConfig.storage_key. A record that fails to parse or breaks
an invariant is removed from the store and never partially adopted.

Logger name: ``informant_trail.session``.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from config import GAME_CONFIG, GameConfig
from errors import StorageError, ValidationError
from fairness import FairnessTracker
from models import (
    CLUE_LEVELS,
    CLUE_TIERS,
    PHASE_CONCLUSION,
    PHASE_GAME_OVER,
    PHASE_INTRO,
    City,
    GameStats,
    PersistedSession,
    SessionState,
    now_utc,
)
from random_source import RandomSource
from routing import RouteGenerator, validate_route
from storage import DurableStore

logger = logging.getLogger("informant_trail.session")


class SessionLifecycleManager:
    """
    Owns the session record and its durable copy.

    Args:
        store:            Durable key-value store for the persisted record.
        catalog:          City list routes are drawn from.
        random_source:    Injected randomness for route and clue draws.
        fairness_tracker: Shared tracker; a fresh one when omitted.
        route_generator:  RouteGenerator; a default one when omitted.
        config:           GameConfig (storage key, version, limits).
    """

    def __init__(
        self,
        store: DurableStore,
        catalog: Sequence[City],
        random_source: RandomSource,
        fairness_tracker: Optional[FairnessTracker] = None,
        route_generator: Optional[RouteGenerator] = None,
        config: GameConfig = GAME_CONFIG,
    ) -> None:
        self.store            = store
        self.catalog: List[City] = list(catalog)
        self.random_source    = random_source
        self.fairness_tracker = fairness_tracker or FairnessTracker()
        self.route_generator  = route_generator or RouteGenerator(config)
        self.config           = config
        self._state           = SessionState()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def cities_by_id(self) -> Dict[str, City]:
        return {city.id: city for city in self.catalog}

    # ------------------------------------------------------------------
    # Creation and reset
    # ------------------------------------------------------------------

    def initialize_game(
        self,
        catalog: Optional[Sequence[City]] = None,
        random_source: Optional[RandomSource] = None,
    ) -> SessionState:
        """
        Replace the state with a freshly routed session and persist it.

        Raises:
            RouteGenerationError: the catalog cannot yield a valid route.
                The previous state is kept in that case.
        """
        if catalog is not None:
            self.catalog = list(catalog)
        if random_source is not None:
            self.random_source = random_source

        route = self.route_generator.generate(
            self.catalog, self.fairness_tracker, self.random_source
        )
        self.fairness_tracker.reset_session_categories()

        self._state = SessionState(
            route=route,
            route_index=0,
            current_city_id=route[0],
            stats=GameStats(attempts_remaining=self.config.max_attempts),
            started_at=now_utc(),
        )
        logger.info(
            "Initialised session %s: %s",
            self._state.session_id,
            " -> ".join(route),
        )
        self.persist()
        return self._state

    def reset_game_state(self) -> SessionState:
        """
        Discard the current playthrough and start from a blank record.

        The new record has a new session id, an empty route and phase intro;
        start_game() routes it. Session-scoped fairness history is cleared,
        starting-city history is kept.
        """
        old_session_id = self._state.session_id
        self._state = SessionState(
            stats=GameStats(attempts_remaining=self.config.max_attempts),
        )
        self.fairness_tracker.reset_session_categories()
        self.persist()

        if not self.validate_session_reset(old_session_id):
            logger.warning("Session reset validation failed; forced a clean state")
        logger.info("Session %s reset to %s", old_session_id, self._state.session_id)
        return self._state

    def validate_session_reset(self, old_session_id: str) -> bool:
        """
        Check that the state is a clean slate distinct from `old_session_id`.

        On failure the whole state object is replaced (never patched field by
        field), persisted, and False is returned.
        """
        state = self._state
        defaults = GameStats(attempts_remaining=self.config.max_attempts)
        problems: List[str] = []

        if state.session_id == old_session_id:
            problems.append("session id unchanged")
        if state.visited_cities or state.collected_clues:
            problems.append("collections not empty")
        if state.stats != defaults:
            problems.append("stats not at defaults")
        if state.is_game_complete or state.has_won:
            problems.append("completion flags set")
        if state.failure_details is not None or state.final_encounter_step is not None:
            problems.append("failure details or encounter not cleared")

        if not problems:
            return True

        logger.warning("Reset validation problems: %s", problems)
        self._state = SessionState(
            stats=GameStats(attempts_remaining=self.config.max_attempts),
        )
        self.persist()
        return False

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def persist(self, state: Optional[SessionState] = None) -> bool:
        """
        Write the versioned record for `state` (default: the current state).

        Returns:
            True on success, False when the store failed (already logged).
        """
        target = state if state is not None else self._state
        record = PersistedSession.from_state(target, self.config.state_version)
        payload = record.model_dump_json(by_alias=True)
        try:
            self.store.set(self.config.storage_key, payload)
        except StorageError as exc:
            logger.error("Failed to persist session %s: %s", target.session_id, exc)
            return False
        logger.debug("Persisted session %s (%d bytes)", target.session_id, len(payload))
        return True

    def parse_record(self, raw: str) -> SessionState:
        """
        Decode and validate a persisted record into a brand-new SessionState.

        Raises:
            ValidationError: malformed JSON, wrong shape, wrong version or a
                broken invariant.
        """
        try:
            record = PersistedSession.model_validate_json(raw)
        except PydanticValidationError as exc:
            errors = [
                f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
                for err in exc.errors()
            ]
            raise ValidationError("Persisted record has the wrong shape", errors) from exc

        if record.version != self.config.state_version:
            raise ValidationError(
                "Unsupported record version",
                [f"expected {self.config.state_version}, got {record.version}"],
            )

        state = record.to_state()
        self.validate(state)
        return state

    def restore(self) -> Optional[SessionState]:
        """
        Adopt the persisted session if there is a valid one.

        Returns:
            The restored state, or None when nothing is stored or the stored
            record is unreadable or invalid. Bad records are removed.
        """
        try:
            raw = self.store.get(self.config.storage_key)
        except StorageError as exc:
            logger.error("Cannot read persisted session: %s", exc)
            return None
        if raw is None:
            logger.debug("No persisted session under %r", self.config.storage_key)
            return None

        try:
            state = self.parse_record(raw)
        except ValidationError as exc:
            logger.warning("Discarding persisted session: %s", exc)
            self._discard_record()
            return None

        self._state = state
        logger.info("Restored session %s in phase %s", state.session_id, state.phase)
        return state

    def restore_or_initialize(self) -> SessionState:
        """Restore the persisted session, or start a new routed one."""
        restored = self.restore()
        if restored is not None:
            return restored
        return self.initialize_game()

    def _discard_record(self) -> None:
        try:
            self.store.remove(self.config.storage_key)
        except StorageError as exc:
            logger.error("Cannot remove invalid session record: %s", exc)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, state: SessionState) -> None:
        """
        Check every cross-field invariant of `state` against the catalog.

        Raises:
            ValidationError: listing every broken invariant.
        """
        cfg = self.config
        errors: List[str] = []

        if state.route:
            result = validate_route(state.route, self.catalog, cfg)
            errors.extend(f"route: {e}" for e in result.errors)
            if not 0 <= state.route_index < len(state.route):
                errors.append(f"routeIndex {state.route_index} outside route")
            elif state.current_city_id != state.route[state.route_index]:
                errors.append("currentCityId does not match route[routeIndex]")
        else:
            if state.phase != PHASE_INTRO:
                errors.append(f"phase {state.phase} requires an initialised route")
            if state.route_index != 0 or state.current_city_id is not None:
                errors.append("uninitialised session has a position")

        stats = state.stats
        if not 0 <= stats.attempts_remaining <= cfg.max_attempts:
            errors.append(
                f"attemptsRemaining {stats.attempts_remaining} outside 0..{cfg.max_attempts}"
            )
        if stats.score < 0:
            errors.append("score is negative")
        if not 0 <= stats.cities_completed <= cfg.route_length:
            errors.append(f"citiesCompleted {stats.cities_completed} outside 0..{cfg.route_length}")

        if len(set(state.visited_cities)) != len(state.visited_cities):
            errors.append("visitedCities has duplicates")
        known = self.cities_by_id
        unknown = [c for c in state.visited_cities if c not in known]
        if unknown:
            errors.append(f"visitedCities has unknown ids {unknown}")

        if stats.attempts_remaining == 0 and state.phase != PHASE_GAME_OVER:
            errors.append(f"attemptsRemaining is 0 in phase {state.phase}")
        if state.route:
            if stats.cities_completed != state.route_index:
                errors.append(
                    f"citiesCompleted {stats.cities_completed} != routeIndex {state.route_index}"
                )
            # Order is display-only.
            if set(state.visited_cities) != set(state.route[: state.route_index]):
                errors.append("visitedCities does not match the route travelled so far")
        elif state.visited_cities or stats.cities_completed:
            errors.append("uninitialised session has progress")

        keys = [c.dedup_key for c in state.collected_clues]
        if len(set(keys)) != len(keys):
            errors.append("collectedClues has duplicate (text, sourceCity) pairs")
        for clue in state.collected_clues:
            if clue.difficulty not in CLUE_TIERS:
                errors.append(f"clue {clue.id} has unknown difficulty {clue.difficulty!r}")

        if state.current_clue_level not in CLUE_LEVELS:
            errors.append(f"currentClueLevel {state.current_clue_level!r} is unknown")

        if state.phase == PHASE_GAME_OVER and not (state.is_game_complete and not state.has_won):
            errors.append("game_over requires isGameComplete and not hasWon")
        elif state.phase == PHASE_CONCLUSION and not (state.is_game_complete and state.has_won):
            errors.append("conclusion requires isGameComplete and hasWon")
        elif not state.is_terminal and (state.is_game_complete or state.has_won):
            errors.append(f"phase {state.phase} cannot be complete or won")

        step = state.final_encounter_step
        if step is not None:
            if not 0 <= step <= 2:
                errors.append(f"finalEncounterStep {step} outside 0..2")
            if not state.is_at_final_city():
                errors.append("finalEncounterStep set away from the final city")

        if errors:
            raise ValidationError("Session state is invalid", errors)
