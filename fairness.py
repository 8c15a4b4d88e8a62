"""
fairness.py
===========
Selection-history tracking that nudges random picks away from recent repeats.

FairnessTracker keeps, per category key:
  - a bounded history of recent selections (drives get_eligible_set), and
  - cumulative counters (drive is_underrepresented and the balance score).

Categories used by the game:
    "startingCity"    : the four non-final route stops, across sessions.
    "clue:<tier>"     : clue strings drawn from each difficulty tier.
    "clueDifficulty"  : how many clues of each tier have been handed out.

Nothing here is persisted; history lives as long as the tracker instance.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, TypeVar

from config import GAME_CONFIG
from models import CLUE_TIERS

logger = logging.getLogger("informant_trail.fairness")

T = TypeVar("T")

STARTING_CITY = "startingCity"
CLUE_DIFFICULTY = "clueDifficulty"


def clue_category(tier: str) -> str:
    return f"clue:{tier}"


def _identity(value):
    return value


class FairnessTracker:
    """
    Bias random selection away from recently-chosen options without ever
    removing every option.

    Args:
        default_cap:    History length for categories without an explicit cap.
        caps:           Per-category history caps.
        recent_window:  How many of the latest selections get_eligible_set()
                        excludes once the history is at least that long.
    """

    def __init__(
        self,
        default_cap: int = GAME_CONFIG.clue_history_cap,
        caps: Optional[Dict[str, int]] = None,
        recent_window: int = GAME_CONFIG.fairness_recent_window,
    ) -> None:
        self.default_cap   = default_cap
        self.caps: Dict[str, int] = {STARTING_CITY: GAME_CONFIG.starting_city_history_cap}
        if caps:
            self.caps.update(caps)
        self.recent_window = recent_window

        self._history: Dict[str, List[Hashable]] = {}
        self._counts:  Dict[str, Counter] = {}

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def cap_for(self, category: str) -> int:
        return self.caps.get(category, self.default_cap)

    def record_selection(self, category: str, value: Hashable) -> None:
        """Append `value` to the category history and bump its counter."""
        history = self._history.setdefault(category, [])
        history.append(value)
        cap = self.cap_for(category)
        if len(history) > cap:
            del history[:-cap]
        self._counts.setdefault(category, Counter())[value] += 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def history(self, category: str) -> List[Hashable]:
        return list(self._history.get(category, []))

    def counts(self, category: str) -> Dict[Hashable, int]:
        return dict(self._counts.get(category, {}))

    def get_eligible_set(
        self,
        category: str,
        all_options: Sequence[T],
        key: Callable[[T], Hashable] = _identity,
    ) -> List[T]:
        """
        Return the options not picked in the last `recent_window` selections.

        The full list comes back unchanged while the history is shorter than
        the window, and also whenever the exclusion would leave nothing to
        pick from. With fewer than window + 1 options this means no effective
        exclusion at all.
        """
        options = list(all_options)
        history = self._history.get(category, [])
        if len(history) < self.recent_window:
            return options

        recent = set(history[-self.recent_window:])
        eligible = [opt for opt in options if key(opt) not in recent]
        if not eligible:
            logger.debug(
                "Fairness exclusion for %s would empty %d options; using all.",
                category,
                len(options),
            )
            return options
        return eligible

    def is_underrepresented(
        self,
        category: str,
        value: Hashable,
        options: Optional[Iterable[Hashable]] = None,
    ) -> bool:
        """
        True when `value` has been recorded fewer times than the mean count
        across `options` (defaults to every value seen in the category).
        """
        counts = self._counts.get(category, Counter())
        pool = list(options) if options is not None else list(counts.keys())
        if value not in pool:
            pool.append(value)
        total = sum(counts[o] for o in pool)
        if total == 0:
            return False
        return counts[value] < total / len(pool)

    def difficulty_balance(self) -> float:
        """
        How evenly clue tiers have been handed out: 1.0 is perfectly even,
        0.0 is as lopsided as possible.
        """
        counts = self._counts.get(CLUE_DIFFICULTY, Counter())
        total = sum(counts[t] for t in CLUE_TIERS)
        if total == 0:
            return 1.0
        expected = total / len(CLUE_TIERS)
        deviation = sum(abs(counts[t] - expected) for t in CLUE_TIERS)
        return max(0.0, 1.0 - deviation / total)

    def stats(self) -> Dict[str, object]:
        """Compact summary for logging and the debug panel."""
        return {
            "recent_starting_cities": self.history(STARTING_CITY)[-5:],
            "starting_city_selections": sum(self.counts(STARTING_CITY).values()),
            "difficulty_distribution": {
                t: self._counts.get(CLUE_DIFFICULTY, Counter())[t] for t in CLUE_TIERS
            },
            "difficulty_balance": round(self.difficulty_balance(), 3),
            "underrepresented_tiers": [
                t for t in CLUE_TIERS
                if self.is_underrepresented(CLUE_DIFFICULTY, t, CLUE_TIERS)
            ],
        }

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self, categories: Optional[Iterable[str]] = None) -> None:
        """Forget the given categories, or everything when None."""
        if categories is None:
            self._history.clear()
            self._counts.clear()
            return
        for category in categories:
            self._history.pop(category, None)
            self._counts.pop(category, None)

    def reset_session_categories(self) -> None:
        """Forget everything except cross-session starting-city fairness."""
        self.reset([c for c in set(self._history) | set(self._counts) if c != STARTING_CITY])
