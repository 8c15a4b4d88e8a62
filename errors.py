"""
errors.py
=========
Exception taxonomy for the game-session core.

Callers branch on the exception type, never on message text:

  CatalogLoadError    : the city catalog could not be fetched or parsed.
  RouteGenerationError: the catalog cannot produce a valid 5-city route.
  ValidationError     : a persisted record or generated route breaks an
                        invariant. Recovery is discard-and-regenerate.
  InvalidActionError  : a gameplay action is not allowed in the current
                        state. The state is left untouched.
  StorageError        : the durable store failed to read or write.

Running out of attempts is NOT an error; it is the game_over phase.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class GameError(Exception):
    """Base class for every error raised by the game core."""


class CatalogLoadError(GameError):
    """The catalog provider failed (I/O, timeout, malformed JSON or records)."""

    def __init__(self, message: str, problems: Optional[Iterable[str]] = None) -> None:
        super().__init__(message)
        self.problems: List[str] = list(problems or [])


class RouteGenerationError(GameError):
    """The catalog is structurally unable to yield a valid route."""


class ValidationError(GameError):
    """A record or route violates the session invariants."""

    def __init__(self, message: str, errors: Optional[Iterable[str]] = None) -> None:
        self.errors: List[str] = list(errors or [])
        detail = "; ".join(self.errors)
        super().__init__(f"{message}: {detail}" if detail else message)


class InvalidActionError(GameError):
    """A gameplay action was rejected without mutating the session."""

    def __init__(self, action: str, reason: str) -> None:
        super().__init__(f"{action}: {reason}")
        self.action = action
        self.reason = reason


class StorageError(GameError):
    """The durable store could not complete a read, write or delete."""
