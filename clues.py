"""
clues.py
========
Clue selection and tier progression.

When the player asks the informant in city S for news, the clues come from
the pools of the NEXT city on the route (T): they describe where Nadine went.
Each request walks the tiers hard -> medium -> easy and hands out the first
tier that still has an unpresented string. Once every tier is spent the
engine answers NO_MORE_INFO, a normal "nothing more to learn here" result.

The tier that actually produced a clue becomes the session's clue level, and
the correct-guess score is read from that level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from config import GAME_CONFIG, GameConfig
from fairness import CLUE_DIFFICULTY, FairnessTracker, clue_category
from models import CLUE_TIERS, TIER_TO_LEVEL, City, Clue
from random_source import RandomSource

logger = logging.getLogger("informant_trail.clues")

PRESENTED = "presented"
NO_MORE_INFO = "no_more_info"


@dataclass
class ClueRequest:
    """
    Result of one clue request.

    Attributes:
        status: PRESENTED or NO_MORE_INFO.
        clues:  Newly presented clues (empty for NO_MORE_INFO).
        level:  Clue level ("hard" / "medium" / "easy") of the presented tier.
    """

    status: str
    clues:  List[Clue] = field(default_factory=list)
    level:  Optional[str] = None

    @property
    def is_exhausted(self) -> bool:
        return self.status == NO_MORE_INFO


class ClueProgressionEngine:
    """Fair, non-repeating clue selection with hard -> medium -> easy fall-through."""

    def __init__(
        self,
        fairness_tracker: FairnessTracker,
        random_source: RandomSource,
        config: GameConfig = GAME_CONFIG,
    ) -> None:
        self.fairness_tracker = fairness_tracker
        self.random_source    = random_source
        self.config           = config

    # ------------------------------------------------------------------
    # Tier-level selection
    # ------------------------------------------------------------------

    def select_clues(
        self,
        city: City,
        tier: str,
        max_per_tier: int = 1,
        exclude: Iterable[str] = (),
    ) -> List[str]:
        """
        Draw up to `max_per_tier` strings from `city`'s `tier` pool without
        replacement, skipping `exclude`. An empty pool yields [].

        Among the fairness-eligible strings, ones drawn less often than
        average are preferred.
        """
        excluded = set(exclude)
        candidates = [text for text in city.clues.pool(tier) if text not in excluded]
        category = clue_category(tier)

        picked: List[str] = []
        for _ in range(min(max_per_tier, len(candidates))):
            eligible = self.fairness_tracker.get_eligible_set(category, candidates)
            rarer = [
                t for t in eligible
                if self.fairness_tracker.is_underrepresented(category, t, eligible)
            ]
            if rarer:
                eligible = rarer
            text = eligible[self.random_source.index(len(eligible))]
            candidates.remove(text)
            picked.append(text)
            self.fairness_tracker.record_selection(category, text)
            self.fairness_tracker.record_selection(CLUE_DIFFICULTY, tier)

        if not picked:
            logger.debug("No %s clues left for %s", tier, city.id)
        return picked

    # ------------------------------------------------------------------
    # Progression
    # ------------------------------------------------------------------

    def request_clues(
        self,
        source_city: City,
        target_city: City,
        collected: Sequence[Clue],
        max_per_tier: Optional[int] = None,
    ) -> ClueRequest:
        """
        Present the next clues about `target_city` from `source_city`'s informant.

        Strings already collected from `source_city` are never shown again,
        whatever their tier.
        """
        per_tier = max_per_tier or self.config.clues_per_request
        already_shown = {c.text for c in collected if c.source_city == source_city.id}

        for tier in CLUE_TIERS:
            texts = self.select_clues(target_city, tier, per_tier, exclude=already_shown)
            if not texts:
                continue
            clues = [
                Clue(
                    text=text,
                    difficulty=tier,
                    source_city=source_city.id,
                    about_city=target_city.id,
                )
                for text in texts
            ]
            logger.info(
                "Presented %d %s clue(s) in %s about %s",
                len(clues),
                tier,
                source_city.id,
                target_city.id,
            )
            return ClueRequest(status=PRESENTED, clues=clues, level=TIER_TO_LEVEL[tier])

        logger.info("No more information in %s about %s", source_city.id, target_city.id)
        return ClueRequest(status=NO_MORE_INFO)

    def remaining_counts(
        self,
        source_city: City,
        target_city: City,
        collected: Sequence[Clue],
    ) -> Dict[str, int]:
        """Unpresented strings per tier for this source/target pair."""
        shown = {c.text for c in collected if c.source_city == source_city.id}
        return {
            tier: sum(1 for text in target_city.clues.pool(tier) if text not in shown)
            for tier in CLUE_TIERS
        }
