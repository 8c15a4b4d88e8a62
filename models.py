"""
models.py
=========
Shared data models for Informant Trail.

Contains:
  - City / CluePools / Informant / FinalEncounter : immutable catalog records.
  - Clue, GameStats, FailureDetails                : per-session values.
  - SessionState                                   : mutable per-playthrough record.
  - PersistedSession (+ nested)                    : Pydantic schema for the
                                                     JSON record written to the
                                                     durable store.

Keeping these in one module guarantees a single source of truth for data
shapes used across the route generator, clue engine, lifecycle manager,
game engine and the UIs.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from config import GAME_CONFIG


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

Phase = Literal["intro", "investigation", "travel", "conclusion", "game_over"]
ClueTier = Literal["difficult", "medium", "easy"]
ClueLevel = Literal["hard", "medium", "easy"]

PHASE_INTRO         = "intro"
PHASE_INVESTIGATION = "investigation"
PHASE_TRAVEL        = "travel"
PHASE_CONCLUSION    = "conclusion"
PHASE_GAME_OVER     = "game_over"

PHASES: Tuple[str, ...] = (
    PHASE_INTRO, PHASE_INVESTIGATION, PHASE_TRAVEL, PHASE_CONCLUSION, PHASE_GAME_OVER,
)
TERMINAL_PHASES: Tuple[str, ...] = (PHASE_CONCLUSION, PHASE_GAME_OVER)

# Order in which the clue engine tries tiers for a single request.
CLUE_TIERS: Tuple[str, ...] = ("difficult", "medium", "easy")
CLUE_LEVELS: Tuple[str, ...] = ("hard", "medium", "easy")

TIER_TO_LEVEL: Dict[str, str] = {"difficult": "hard", "medium": "medium", "easy": "easy"}
LEVEL_TO_TIER: Dict[str, str] = {level: tier for tier, level in TIER_TO_LEVEL.items()}


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def new_session_id() -> str:
    """Opaque session token; unique even for back-to-back resets."""
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


# ---------------------------------------------------------------------------
# Catalog records (immutable reference data)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CluePools:
    """Clue strings about a city, grouped by difficulty tier."""

    easy:      Tuple[str, ...] = ()
    medium:    Tuple[str, ...] = ()
    difficult: Tuple[str, ...] = ()

    def pool(self, tier: str) -> Tuple[str, ...]:
        if tier not in CLUE_TIERS:
            raise KeyError(f"Unknown clue tier: {tier!r}")
        return getattr(self, tier)


@dataclass(frozen=True)
class Informant:
    """The local contact the player talks to in a city."""

    name:               str
    greeting:           str
    farewell_helpful:   str
    farewell_unhelpful: str


@dataclass(frozen=True)
class FinalEncounter:
    """Three-step dialogue played at the final city."""

    nadine_speech:   str
    steve_response:  str
    victory_message: str

    def lines(self) -> Tuple[Tuple[str, str], ...]:
        """(speaker, text) pairs in play order."""
        return (
            ("Nadine Vuan", self.nadine_speech),
            ("Steve", self.steve_response),
            ("Case Closed", self.victory_message),
        )


@dataclass(frozen=True)
class City:
    """
    One destination in the catalog.

    Attributes:
        id:                Stable identifier used in routes and persisted state.
        name:              Display name.
        country:           Used for the route's geographic-diversity check.
        is_final:          True for exactly one city: where Nadine is hiding.
        clues:             Clues ABOUT this city, handed out by the informant
                           of the city visited just before it.
        informant:         Local contact and their dialogue lines.
        not_here_response: Shown when the player guesses this city wrongly.
        final_encounter:   Present only on the final city.
    """

    id:                str
    name:              str
    country:           str
    is_final:          bool
    clues:             CluePools
    informant:         Informant
    not_here_response: str
    final_encounter:   Optional[FinalEncounter] = None


# ---------------------------------------------------------------------------
# Per-session values
# ---------------------------------------------------------------------------

@dataclass
class Clue:
    """A clue the player has been shown, as recorded in the session."""

    text:       str
    difficulty: str
    source_city: str
    about_city: Optional[str]
    timestamp:  datetime = field(default_factory=now_utc)
    id:         str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = f"{self.source_city}_{self.difficulty}_{uuid.uuid4().hex[:8]}"

    @property
    def dedup_key(self) -> Tuple[str, str]:
        return (self.text, self.source_city)


@dataclass
class GameStats:
    score:              int = 0
    attempts_remaining: int = GAME_CONFIG.max_attempts
    cities_completed:   int = 0


@dataclass
class FailureDetails:
    """
    Structured record attached to the session when it enters game_over.

    Attributes:
        reason:              Machine-readable cause (e.g. "attempts_exhausted").
        message:             Short description, safe to show to the player.
        route_progress:      "<route_index>/<route length>".
        final_score:         Score when the game ended.
        cities_completed:    Stops reached by correct guesses.
        cities_visited:      Cities the player has left behind.
        clues_collected:     Clue count at the end.
        investigation_path:  Visited cities plus the current one, "A → B → C".
        next_destination:    The city the player failed to find.
        efficiency:          Investigation efficiency percentage.
    """

    reason:             str
    message:            str
    route_progress:     str
    final_score:        int
    cities_completed:   int
    cities_visited:     int
    clues_collected:    int
    investigation_path: str
    next_destination:   Optional[str] = None
    efficiency:         int = 0


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

@dataclass
class SessionState:
    """
    Mutable record of one playthrough.

    Owned by SessionLifecycleManager, which is the only component that may
    replace it wholesale. GameEngine mutates its fields in place, one action
    at a time, and asks the manager to persist after every mutation.

    Attributes:
        session_id:          Regenerated on every initialise/reset; the only
                             authority for spotting stale persisted data.
        phase:               One of PHASES.
        route:               Five city ids, empty until initialised.
        route_index:         Position within route (0..4).
        current_city_id:     Always route[route_index] once initialised.
        visited_cities:      Cities left behind, unique, display order.
        collected_clues:     Append-only, unique per (text, source_city).
        current_clue_level:  Tier currently offered ("hard" on arrival).
        stats:               Score, attempts and completed-city counters.
        is_game_complete:    True only in a terminal phase.
        has_won:             True only in the conclusion phase.
        failure_details:     Populated on entering game_over.
        final_encounter_step: Index into the final encounter (None outside it).
        started_at:          When the route was generated.
    """

    session_id:          str = field(default_factory=new_session_id)
    phase:               str = PHASE_INTRO
    route:               List[str] = field(default_factory=list)
    route_index:         int = 0
    current_city_id:     Optional[str] = None
    visited_cities:      List[str] = field(default_factory=list)
    collected_clues:     List[Clue] = field(default_factory=list)
    current_clue_level:  str = "hard"
    stats:               GameStats = field(default_factory=GameStats)
    is_game_complete:    bool = False
    has_won:             bool = False
    failure_details:     Optional[FailureDetails] = None
    final_encounter_step: Optional[int] = None
    started_at:          Optional[datetime] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return len(self.route) == GAME_CONFIG.route_length

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    def next_city_id(self) -> Optional[str]:
        """The expected next destination, or None at the end of the route."""
        if not self.route or self.route_index >= len(self.route) - 1:
            return None
        return self.route[self.route_index + 1]

    def is_at_final_city(self) -> bool:
        return bool(self.route) and self.route_index == len(self.route) - 1

    def has_clue(self, text: str, source_city: str) -> bool:
        return any(c.dedup_key == (text, source_city) for c in self.collected_clues)

    def clues_from(self, source_city: str) -> List[Clue]:
        return [c for c in self.collected_clues if c.source_city == source_city]

    # ------------------------------------------------------------------
    # Mutation helpers
    # ------------------------------------------------------------------

    def add_clue(self, clue: Clue) -> bool:
        """Append `clue` unless its (text, source_city) pair is already held."""
        if self.has_clue(clue.text, clue.source_city):
            return False
        self.collected_clues.append(clue)
        return True

    def mark_visited(self, city_id: str) -> None:
        if city_id and city_id not in self.visited_cities:
            self.visited_cities.append(city_id)


# ---------------------------------------------------------------------------
# Pydantic schema for the persisted record
#
# The durable store holds camelCase JSON mirroring SessionState plus savedAt
# and version. Strict mode stops "3" being read back as 3, so a hand-edited
# record is rejected instead of silently coerced.
# ---------------------------------------------------------------------------

_RECORD_CONFIG = ConfigDict(populate_by_name=True, extra="forbid", strict=True)


class PersistedClue(BaseModel):
    model_config = _RECORD_CONFIG

    text:        str = Field(min_length=1)
    difficulty:  ClueTier
    source_city: str = Field(alias="sourceCity", min_length=1)
    about_city:  Optional[str] = Field(default=None, alias="aboutCity")
    timestamp:   datetime
    id:          str = Field(min_length=1)


class PersistedStats(BaseModel):
    model_config = _RECORD_CONFIG

    score:              int = Field(ge=0)
    attempts_remaining: int = Field(alias="attemptsRemaining", ge=0)
    cities_completed:   int = Field(alias="citiesCompleted", ge=0)


class PersistedFailure(BaseModel):
    model_config = _RECORD_CONFIG

    reason:             str
    message:            str
    route_progress:     str = Field(alias="routeProgress")
    final_score:        int = Field(alias="finalScore", ge=0)
    cities_completed:   int = Field(alias="citiesCompleted", ge=0)
    cities_visited:     int = Field(alias="citiesVisited", ge=0)
    clues_collected:    int = Field(alias="cluesCollected", ge=0)
    investigation_path: str = Field(alias="investigationPath")
    next_destination:   Optional[str] = Field(default=None, alias="nextDestination")
    efficiency:         int = Field(default=0, ge=0, le=100)


class PersistedSession(BaseModel):
    """
    Versioned JSON record of a SessionState.

    Shape checks live here; cross-field invariants (phase flags, route
    contents, clue uniqueness) are checked by SessionLifecycleManager.validate().
    """

    model_config = _RECORD_CONFIG

    version:              int
    session_id:           str = Field(alias="sessionId", min_length=1)
    phase:                Phase
    route:                List[str]
    route_index:          int = Field(alias="routeIndex")
    current_city_id:      Optional[str] = Field(default=None, alias="currentCityId")
    visited_cities:       List[str] = Field(alias="visitedCities")
    collected_clues:      List[PersistedClue] = Field(alias="collectedClues")
    current_clue_level:   ClueLevel = Field(alias="currentClueLevel")
    stats:                PersistedStats
    is_game_complete:     bool = Field(alias="isGameComplete")
    has_won:              bool = Field(alias="hasWon")
    failure_details:      Optional[PersistedFailure] = Field(default=None, alias="failureDetails")
    final_encounter_step: Optional[int] = Field(default=None, alias="finalEncounterStep")
    started_at:           Optional[datetime] = Field(default=None, alias="startedAt")
    saved_at:             datetime = Field(alias="savedAt")

    @classmethod
    def from_state(cls, state: SessionState, version: int) -> "PersistedSession":
        failure = state.failure_details
        return cls(
            version=version,
            session_id=state.session_id,
            phase=state.phase,
            route=list(state.route),
            route_index=state.route_index,
            current_city_id=state.current_city_id,
            visited_cities=list(state.visited_cities),
            collected_clues=[
                PersistedClue(
                    text=c.text,
                    difficulty=c.difficulty,
                    source_city=c.source_city,
                    about_city=c.about_city,
                    timestamp=c.timestamp,
                    id=c.id,
                )
                for c in state.collected_clues
            ],
            current_clue_level=state.current_clue_level,
            stats=PersistedStats(
                score=state.stats.score,
                attempts_remaining=state.stats.attempts_remaining,
                cities_completed=state.stats.cities_completed,
            ),
            is_game_complete=state.is_game_complete,
            has_won=state.has_won,
            failure_details=(
                PersistedFailure(
                    reason=failure.reason,
                    message=failure.message,
                    route_progress=failure.route_progress,
                    final_score=failure.final_score,
                    cities_completed=failure.cities_completed,
                    cities_visited=failure.cities_visited,
                    clues_collected=failure.clues_collected,
                    investigation_path=failure.investigation_path,
                    next_destination=failure.next_destination,
                    efficiency=failure.efficiency,
                )
                if failure is not None
                else None
            ),
            final_encounter_step=state.final_encounter_step,
            started_at=state.started_at,
            saved_at=now_utc(),
        )

    def to_state(self) -> SessionState:
        """Build a brand-new SessionState; nothing is shared with this record."""
        failure = self.failure_details
        return SessionState(
            session_id=self.session_id,
            phase=self.phase,
            route=list(self.route),
            route_index=self.route_index,
            current_city_id=self.current_city_id,
            visited_cities=list(self.visited_cities),
            collected_clues=[
                Clue(
                    text=c.text,
                    difficulty=c.difficulty,
                    source_city=c.source_city,
                    about_city=c.about_city,
                    timestamp=c.timestamp,
                    id=c.id,
                )
                for c in self.collected_clues
            ],
            current_clue_level=self.current_clue_level,
            stats=GameStats(
                score=self.stats.score,
                attempts_remaining=self.stats.attempts_remaining,
                cities_completed=self.stats.cities_completed,
            ),
            is_game_complete=self.is_game_complete,
            has_won=self.has_won,
            failure_details=(
                FailureDetails(
                    reason=failure.reason,
                    message=failure.message,
                    route_progress=failure.route_progress,
                    final_score=failure.final_score,
                    cities_completed=failure.cities_completed,
                    cities_visited=failure.cities_visited,
                    clues_collected=failure.clues_collected,
                    investigation_path=failure.investigation_path,
                    next_destination=failure.next_destination,
                    efficiency=failure.efficiency,
                )
                if failure is not None
                else None
            ),
            final_encounter_step=self.final_encounter_step,
            started_at=self.started_at,
        )
