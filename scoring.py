"""
scoring.py
==========
Deterministic, side-effect-free scoring and summary logic.

Extracted from the game engine so it can be unit-tested independently and
adjusted by changing ScoringConfig values in config.py without touching
any game logic or UI code.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Dict, Optional, Sequence

from config import GAME_CONFIG, SCORING_CONFIG
from models import City, FailureDetails, SessionState, now_utc

ATTEMPTS_EXHAUSTED = "attempts_exhausted"


def point_value(level: str) -> int:
    """
    Points for a correct guess made while `level` was the current clue level.

    Accepts both level names ("hard") and tier names ("difficult").

    Examples:
        >>> point_value("hard")
        3
        >>> point_value("easy")
        1
    """
    cfg = SCORING_CONFIG
    table = {
        "hard":      cfg.difficult_points,
        "difficult": cfg.difficult_points,
        "medium":    cfg.medium_points,
        "easy":      cfg.easy_points,
    }
    if level not in table:
        raise ValueError(f"Unknown clue level: {level!r}")
    return table[level]


def calculate_investigation_efficiency(state: SessionState) -> int:
    """
    Weighted clue haul per city left behind, as a percentage in [0, 100].

    Each collected clue is worth its tier's points; a city is worth at most
    `max_points_per_city`. Before any city has been left behind the
    efficiency is 100.
    """
    visited = len(state.visited_cities)
    if visited == 0:
        return 100

    by_tier = Counter(c.difficulty for c in state.collected_clues)
    weighted = sum(point_value(tier) * count for tier, count in by_tier.items())
    max_possible = visited * SCORING_CONFIG.max_points_per_city
    return min(100, round(weighted / max_possible * 100))


def elapsed_seconds(state: SessionState, now: Optional[datetime] = None) -> int:
    """Whole seconds since the route was generated (0 before that)."""
    if state.started_at is None:
        return 0
    current = now or now_utc()
    return max(0, int((current - state.started_at).total_seconds()))


def format_elapsed(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes}:{secs:02d}"


def investigation_path(state: SessionState, catalog: Sequence[City]) -> str:
    """Visited cities followed by the current one, by display name: "A → B"."""
    names = {city.id: city.name for city in catalog}
    path = list(state.visited_cities)
    if state.current_city_id and state.current_city_id not in path:
        path.append(state.current_city_id)
    return " → ".join(names.get(city_id, city_id) for city_id in path)


def route_progress(state: SessionState) -> str:
    return f"{state.route_index}/{len(state.route) or GAME_CONFIG.route_length}"


def build_failure_details(
    state: SessionState,
    catalog: Sequence[City],
    reason: str = ATTEMPTS_EXHAUSTED,
) -> FailureDetails:
    """
    Summarise a failed investigation for the game-over screen.

    Args:
        state:   Session at the moment attempts ran out.
        catalog: Used to turn ids into display names.
        reason:  Machine-readable failure cause.
    """
    names = {city.id: city.name for city in catalog}
    next_id = state.next_city_id()
    return FailureDetails(
        reason=reason,
        message="You have exhausted all your investigation attempts. The trail has gone cold.",
        route_progress=route_progress(state),
        final_score=state.stats.score,
        cities_completed=state.stats.cities_completed,
        cities_visited=len(state.visited_cities),
        clues_collected=len(state.collected_clues),
        investigation_path=investigation_path(state, catalog),
        next_destination=names.get(next_id, next_id) if next_id else None,
        efficiency=calculate_investigation_efficiency(state),
    )


def summary(state: SessionState, catalog: Sequence[City]) -> Dict[str, object]:
    """Flat stats dict shown on the conclusion and game-over screens."""
    seconds = elapsed_seconds(state)
    return {
        "score":              state.stats.score,
        "attempts_remaining": state.stats.attempts_remaining,
        "cities_completed":   state.stats.cities_completed,
        "clues_collected":    len(state.collected_clues),
        "route_progress":     route_progress(state),
        "efficiency":         calculate_investigation_efficiency(state),
        "elapsed":            format_elapsed(seconds),
        "path":               investigation_path(state, catalog),
    }
