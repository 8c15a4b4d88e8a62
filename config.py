"""
config.py
=========
Central configuration module for Informant Trail: Where in the World is Nadine Vuan?

All tunable constants, scoring weights, fairness windows and persistence keys
live here so they can be adjusted without touching game logic.

Usage:
    from config import GAME_CONFIG, SCORING_CONFIG, RuntimeSettings
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


# ---------------------------------------------------------------------------
# Game-balance parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GameConfig:
    """
    Top-level game-balance, fairness and persistence settings.

    Attributes:
        route_length:               Cities per journey, final city included.
        max_attempts:               Wrong guesses allowed before game over.
        route_generation_attempts:  Times RouteGenerator rebuilds a route that
                                    fails validation before giving up.
        min_route_countries:        Distinct countries wanted among the
                                    non-final stops. Falling short only logs
                                    a warning.
        fairness_recent_window:     Number of most-recent selections excluded
                                    by FairnessTracker.get_eligible_set().
        starting_city_history_cap:  History length kept for the startingCity
                                    category.
        clue_history_cap:           History length kept for per-tier clue
                                    categories.
        clues_per_request:          Clue strings drawn per request.
        catalog_timeout_seconds:    Timeout for URL catalog sources.
        storage_key:                Durable-store key for the session record.
        state_version:              Version stamped into persisted records.
    """
    route_length:              int = 5
    max_attempts:              int = 3
    route_generation_attempts: int = 3
    min_route_countries:       int = 3

    fairness_recent_window:    int = 3
    starting_city_history_cap: int = 10
    clue_history_cap:          int = 6

    clues_per_request:         int = 1
    catalog_timeout_seconds:   float = 15.0

    storage_key:   str = "informant-trail-game-state"
    state_version: int = 1

    @property
    def non_final_stops(self) -> int:
        """Stops drawn at random before the mandatory final city."""
        return self.route_length - 1


# ---------------------------------------------------------------------------
# Scoring parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScoringConfig:
    """
    Points awarded for a correct guess, keyed by the clue tier that was last
    presented before the guess.

    Attributes:
        difficult_points: Guess made on a hard clue.
        medium_points:    Guess made on a medium clue.
        easy_points:      Guess made on an easy clue.
        max_points_per_city: Upper bound used by the efficiency metric.
    """
    difficult_points: int = 3
    medium_points:    int = 2
    easy_points:      int = 1

    max_points_per_city: int = 6


# ---------------------------------------------------------------------------
# Runtime settings (environment driven)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RuntimeSettings:
    """
    Deployment settings read from the environment.

    Entry points call ``load_dotenv()`` before ``RuntimeSettings.from_env()``
    so a local ``.env`` file can provide these values.

    Attributes:
        catalog_source: Path or http(s) URL of the city catalog JSON.
                        None selects the bundled catalog in case_data.py.
        state_file:     JSON file backing the durable store. None keeps
                        state in memory only.
        seed:           Optional integer seed for reproducible sessions.
        log_level:      Root log level name.
    """
    catalog_source: Optional[str] = None
    state_file:     Optional[str] = None
    seed:           Optional[int] = None
    log_level:      str = "INFO"

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        raw_seed = os.environ.get("GAME_SEED", "").strip()
        return cls(
            catalog_source=os.environ.get("CATALOG_SOURCE") or None,
            state_file=os.environ.get("GAME_STATE_FILE") or None,
            seed=int(raw_seed) if raw_seed else None,
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


# ---------------------------------------------------------------------------
# Singleton instances (import-ready)
# ---------------------------------------------------------------------------

GAME_CONFIG    = GameConfig()
SCORING_CONFIG = ScoringConfig()
