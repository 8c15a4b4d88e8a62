"""
random_source.py
================
Injected random-number sources.

Route generation and clue selection never call the `random` module directly;
they receive a RandomSource so tests (and replays) can pin a seed and get the
same route, clue order and fairness history every run.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Optional


class RandomSource(ABC):
    """Uniform float generator in [0, 1)."""

    @abstractmethod
    def next(self) -> float:
        """Return the next float in [0, 1)."""

    def index(self, length: int) -> int:
        """Uniform index into a sequence of `length` items."""
        if length <= 0:
            raise ValueError("index() needs a positive length")
        # Clamp guards sources that hand back exactly 1.0.
        return min(int(self.next() * length), length - 1)


class SeededRandomSource(RandomSource):
    """Deterministic source backed by a private random.Random instance."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def next(self) -> float:
        return self._rng.random()


class SystemRandomSource(RandomSource):
    """Unseeded source using the operating system's entropy pool."""

    def __init__(self) -> None:
        self._rng = random.SystemRandom()

    def next(self) -> float:
        return self._rng.random()


def make_random_source(seed: Optional[int] = None) -> RandomSource:
    """Seeded source when a seed is given, system entropy otherwise."""
    if seed is None:
        return SystemRandomSource()
    return SeededRandomSource(seed)
